"""
Kimi Code usage client.

The Kimi CLI keeps a flat OAuth record in
``~/.kimi/credentials/kimi-code.json`` (expiry in Unix seconds). Tokens
are refreshed against the Kimi auth server with a form-encoded body and
the CLI's public client id. Usage data is only served to paid plans.
"""

from typing import Any

import httpx

from ..config import Settings
from ..credentials import JSONFileStore, OAuthCredentials
from ..exceptions import NoCredentialsError
from ..models import ProviderUsage, UsageWindow
from ..token_refresh import TokenRefresher
from .base import BaseUsageClient, as_number, format_number, percent_of


class KimiCredentialStore(JSONFileStore):
    """Flat OAuth record written by the Kimi CLI."""

    async def load(self) -> OAuthCredentials:
        document = await self.read()
        if not document.get("access_token"):
            raise NoCredentialsError("No credentials found", context={"path": str(self.path)})

        expires_at = document.get("expires_at")
        return OAuthCredentials(
            access_token=document["access_token"],
            refresh_token=document.get("refresh_token"),
            expires_at=as_number(expires_at) if expires_at is not None else None,
            extra={
                key: document[key]
                for key in ("scope", "token_type")
                if key in document
            },
        )

    async def save(self, credentials: OAuthCredentials) -> None:
        document = {
            "access_token": credentials.access_token,
            "refresh_token": credentials.refresh_token,
            "expires_at": credentials.expires_at,
            "scope": credentials.extra.get("scope"),
            "token_type": credentials.extra.get("token_type"),
        }
        await self.write(document, indent=4)


class KimiUsageClient(BaseUsageClient):
    """
    Client for the Kimi Code usage API.

    Endpoints:
    - GET https://api.kimi.com/coding/v1/usages - Weekly usage and rolling limits
    - POST https://auth.kimi.com/api/oauth/token - Refresh token exchange
    """

    provider_id = "kimi"
    display_name = "Kimi Code"

    USAGE_URL = "https://api.kimi.com/coding/v1/usages"
    TOKEN_URL = "https://auth.kimi.com/api/oauth/token"
    CLIENT_ID = "17e5f671-d194-4dfb-9706-5516cb48c098"

    status_messages = {403: "Usage requires paid plan"}

    def __init__(self, settings: Settings | None = None):
        super().__init__(settings)
        self.store = KimiCredentialStore(self.settings.kimi_credentials_path)
        self.refresher = TokenRefresher(
            self.provider_id,
            self.TOKEN_URL,
            self.store.save,
            client_id=self.CLIENT_ID,
            form_encoded=True,
            margin_seconds=self.settings.refresh_margin_seconds,
        )

    async def load_credentials(self) -> OAuthCredentials:
        return await self.store.load()

    async def prepare_credentials(
        self,
        credentials: OAuthCredentials,
        client: httpx.AsyncClient,
    ) -> OAuthCredentials:
        return await self.refresher.ensure_fresh(credentials, client)

    async def fetch_usage(
        self,
        credentials: OAuthCredentials,
        client: httpx.AsyncClient,
        usage: ProviderUsage,
    ) -> None:
        data = await self.request_json(
            client,
            "GET",
            self.USAGE_URL,
            headers={"Authorization": f"Bearer {credentials.access_token}"},
        )

        summary = data.get("usage")
        if isinstance(summary, dict):
            usage.primary = UsageWindow(
                percent_used=_detail_percent(summary),
                label=summary.get("name") or "Weekly",
            )

        limits = data.get("limits")
        if not isinstance(limits, list):
            return

        for item in limits:
            if not isinstance(item, dict) or not isinstance(item.get("detail"), dict):
                continue
            detail = item["detail"]
            window = UsageWindow(
                percent_used=_detail_percent(detail),
                label=_limit_label(detail, item.get("window")),
            )
            if not usage.add_window(window):
                break


def _detail_percent(detail: dict[str, Any]) -> int:
    limit = as_number(detail.get("limit"))
    if detail.get("used") is not None:
        used = as_number(detail.get("used"))
    else:
        used = limit - as_number(detail.get("remaining"))
    return percent_of(used, limit)


def _limit_label(detail: dict[str, Any], window: Any) -> str:
    label = detail.get("name") or "Limit"
    if not isinstance(window, dict):
        return label

    duration = as_number(window.get("duration"))
    unit = str(window.get("timeUnit") or "")
    if not duration:
        return label
    if "MINUTE" in unit and duration >= 60:
        return f"{format_number(duration / 60)}h limit"
    if "HOUR" in unit:
        return f"{format_number(duration)}h limit"
    if "DAY" in unit:
        return f"{format_number(duration)}d limit"
    return label
