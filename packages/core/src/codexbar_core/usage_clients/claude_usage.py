"""
Claude Code usage client.

Reads the OAuth record Claude Code keeps in ``~/.claude/.credentials.json``,
refreshes it when it is about to expire and queries the OAuth usage
endpoint for the 5-hour session and 7-day weekly windows.
"""

from typing import Any

import httpx

from ..config import Settings
from ..credentials import JSONFileStore, OAuthCredentials
from ..exceptions import NoCredentialsError
from ..models import AccountInfo, ProviderUsage, UsageWindow
from ..token_refresh import TokenRefresher
from .base import BaseUsageClient, as_number, round_half_up

OAUTH_KEY = "claudeAiOauth"

# Token endpoint fields that Claude Code does not store in its record
UNSTORED_FIELDS = ("scope", "token_type")


class ClaudeCredentialStore(JSONFileStore):
    """``claudeAiOauth`` entry of the Claude Code credentials file."""

    async def load(self) -> OAuthCredentials:
        document = await self.read()
        oauth = document.get(OAUTH_KEY)
        if not isinstance(oauth, dict) or not oauth.get("accessToken"):
            raise NoCredentialsError("No credentials found", context={"path": str(self.path)})

        expires_at_ms = oauth.get("expiresAt")
        extra = {
            key: value
            for key, value in oauth.items()
            if key not in ("accessToken", "refreshToken", "expiresAt")
        }
        return OAuthCredentials(
            access_token=oauth["accessToken"],
            refresh_token=oauth.get("refreshToken"),
            expires_at=as_number(expires_at_ms) / 1000 if expires_at_ms is not None else None,
            extra=extra,
        )

    async def save(self, credentials: OAuthCredentials) -> None:
        # Re-read so sibling top-level entries written by Claude Code survive
        try:
            document = await self.read()
        except NoCredentialsError:
            document = {}

        oauth = dict(document.get(OAUTH_KEY) or {})
        oauth.update(
            (key, value)
            for key, value in credentials.extra.items()
            if key not in UNSTORED_FIELDS or key in oauth
        )
        oauth["accessToken"] = credentials.access_token
        oauth["refreshToken"] = credentials.refresh_token
        oauth["expiresAt"] = int((credentials.expires_at or 0) * 1000)
        document[OAUTH_KEY] = oauth
        await self.write(document, indent=2)


class ClaudeUsageClient(BaseUsageClient):
    """
    Client for the Claude OAuth usage API.

    Endpoints:
    - GET /api/oauth/usage - Session and weekly utilization
    - POST /v1/oauth/token - Refresh token exchange
    """

    provider_id = "claude"
    display_name = "Claude Code"

    USAGE_URL = "https://api.anthropic.com/api/oauth/usage"
    TOKEN_URL = "https://platform.claude.com/v1/oauth/token"
    ANTHROPIC_BETA = "oauth-2025-04-20"

    def __init__(self, settings: Settings | None = None):
        super().__init__(settings)
        self.store = ClaudeCredentialStore(self.settings.claude_credentials_path)
        self.refresher = TokenRefresher(
            self.provider_id,
            self.TOKEN_URL,
            self.store.save,
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
        usage.account = AccountInfo(plan=credentials.extra.get("subscriptionType") or "unknown")

        data = await self.request_json(
            client,
            "GET",
            self.USAGE_URL,
            headers={
                "Authorization": f"Bearer {credentials.access_token}",
                "anthropic-beta": self.ANTHROPIC_BETA,
            },
        )

        usage.primary = _parse_window(data.get("five_hour"), "Session (5h)")
        usage.secondary = _parse_window(data.get("seven_day"), "Weekly (7d)")


def _parse_window(raw: Any, label: str) -> UsageWindow | None:
    if not isinstance(raw, dict):
        return None
    return UsageWindow(
        percent_used=max(0, round_half_up(as_number(raw.get("utilization")))),
        resets_at=raw.get("resets_at"),
        label=label,
    )
