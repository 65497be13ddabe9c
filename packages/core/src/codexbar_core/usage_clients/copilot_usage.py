"""
GitHub Copilot usage client.

Authenticates with the token of the GitHub CLI (``gh auth token``) and
reads the quota snapshots of the internal Copilot user endpoint.
"""

from typing import Any

import httpx

from ..config import Settings
from ..credentials import CommandTokenStore
from ..models import AccountInfo, ProviderUsage, UsageWindow
from .base import BaseUsageClient, as_number, format_number, percent_of


class CopilotUsageClient(BaseUsageClient):
    """Client for ``GET https://api.github.com/copilot_internal/user``."""

    provider_id = "copilot"
    display_name = "GitHub Copilot"
    no_credentials_message = "No GitHub token found"

    USER_URL = "https://api.github.com/copilot_internal/user"

    def __init__(self, settings: Settings | None = None):
        super().__init__(settings)
        self.store = CommandTokenStore(self.settings.copilot_token_command)

    async def load_credentials(self) -> str:
        return await self.store.load(self.no_credentials_message)

    async def fetch_usage(
        self,
        credentials: str,
        client: httpx.AsyncClient,
        usage: ProviderUsage,
    ) -> None:
        data = await self.request_json(
            client,
            "GET",
            self.USER_URL,
            headers={
                "Authorization": f"token {credentials}",
                "Accept": "application/json",
            },
        )

        usage.account = AccountInfo(
            plan=data.get("copilot_plan") or data.get("access_type_sku") or "unknown"
        )
        reset_date = data.get("quota_reset_date_utc") or data.get("quota_reset_date")

        snapshots = data.get("quota_snapshots")
        if not isinstance(snapshots, dict):
            return

        usage.primary = _snapshot_window(snapshots.get("premium_interactions"), "Premium", reset_date)
        usage.secondary = _snapshot_window(snapshots.get("chat"), "Chat", reset_date)


def _snapshot_window(snapshot: Any, name: str, reset_date: str | None) -> UsageWindow | None:
    if not isinstance(snapshot, dict):
        return None

    if snapshot.get("unlimited"):
        return UsageWindow(percent_used=0, label=f"{name} (Unlimited)")

    entitlement = as_number(snapshot.get("entitlement"))
    used = entitlement - as_number(snapshot.get("quota_remaining"))
    label = f"{name} ({format_number(entitlement)})" if name == "Premium" else name
    return UsageWindow(
        percent_used=percent_of(used, entitlement),
        resets_at=reset_date,
        label=label,
    )
