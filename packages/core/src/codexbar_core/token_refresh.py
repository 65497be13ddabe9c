"""
OAuth access token refresh.

A stored token is either FRESH (usable) or STALE (expires within the
safety margin). A stale token goes through REFRESHING and ends either
REFRESHED, with the new record already persisted, or REFRESH_FAILED,
with the stored record untouched. There is no retry.
"""

import time
from enum import Enum
from typing import Any, Awaitable, Callable

import httpx

from .credentials import OAuthCredentials
from .exceptions import TokenRefreshError
from .logging import get_logger

logger = get_logger(__name__)

DEFAULT_REFRESH_MARGIN = 60


class TokenState(str, Enum):
    """Refresh lifecycle state."""
    FRESH = "fresh"
    STALE = "stale"
    REFRESHING = "refreshing"
    REFRESHED = "refreshed"
    REFRESH_FAILED = "refresh_failed"


Persist = Callable[[OAuthCredentials], Awaitable[None]]


class TokenRefresher:
    """
    Exchanges refresh tokens against one provider's token endpoint.

    Args:
        provider: Provider id, used for logging
        token_url: OAuth token endpoint
        persist: Coroutine that writes the full refreshed record to its store
        client_id: OAuth client id, sent when the provider requires it
        form_encoded: Send an x-www-form-urlencoded body instead of JSON
        margin_seconds: Tokens expiring within this margin count as stale
    """

    def __init__(
        self,
        provider: str,
        token_url: str,
        persist: Persist,
        *,
        client_id: str | None = None,
        form_encoded: bool = False,
        margin_seconds: int = DEFAULT_REFRESH_MARGIN,
        clock: Callable[[], float] = time.time,
    ):
        self.provider = provider
        self.token_url = token_url
        self._persist = persist
        self.client_id = client_id
        self.form_encoded = form_encoded
        self.margin_seconds = margin_seconds
        self._clock = clock
        self.state = TokenState.FRESH

    def classify(self, credentials: OAuthCredentials) -> TokenState:
        """Decide whether the stored token can be used as is."""
        if credentials.expires_at is None:
            return TokenState.FRESH
        if self._clock() > credentials.expires_at - self.margin_seconds:
            return TokenState.STALE
        return TokenState.FRESH

    def _request_body(self, refresh_token: str) -> dict[str, Any]:
        body = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        if self.client_id:
            body["client_id"] = self.client_id
        return body

    async def ensure_fresh(
        self,
        credentials: OAuthCredentials,
        client: httpx.AsyncClient,
    ) -> OAuthCredentials:
        """
        Return credentials whose access token is usable.

        A stale token is refreshed and persisted before the new record is
        returned.

        Raises:
            TokenRefreshError: The exchange or the write-back failed
        """
        self.state = self.classify(credentials)
        if self.state == TokenState.FRESH:
            return credentials

        if not credentials.refresh_token:
            self.state = TokenState.REFRESH_FAILED
            raise TokenRefreshError("Token refresh failed: no refresh token stored")

        self.state = TokenState.REFRESHING
        logger.info("Refreshing access token", provider=self.provider)

        body = self._request_body(credentials.refresh_token)
        try:
            if self.form_encoded:
                response = await client.post(self.token_url, data=body)
            else:
                response = await client.post(self.token_url, json=body)
        except httpx.HTTPError as e:
            self.state = TokenState.REFRESH_FAILED
            logger.warning("Token refresh connection error", provider=self.provider, error=str(e))
            raise TokenRefreshError(f"Token refresh failed: {e}", cause=e) from e

        if not response.is_success:
            self.state = TokenState.REFRESH_FAILED
            logger.warning(
                "Token refresh rejected",
                provider=self.provider,
                status_code=response.status_code,
            )
            raise TokenRefreshError(
                f"Token refresh failed: {response.status_code}",
                context={"status_code": response.status_code},
            )

        try:
            data = response.json()
            access_token = data["access_token"]
            expires_in = float(data.get("expires_in") or 0)
        except (ValueError, KeyError, TypeError) as e:
            self.state = TokenState.REFRESH_FAILED
            raise TokenRefreshError(f"Token refresh failed: malformed response ({e})", cause=e) from e

        extra = {
            key: data[key]
            for key in ("scope", "token_type")
            if data.get(key) is not None
        }
        updated = credentials.refreshed(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            expires_at=self._clock() + expires_in,
            **extra,
        )

        try:
            await self._persist(updated)
        except OSError as e:
            self.state = TokenState.REFRESH_FAILED
            logger.warning("Could not persist refreshed token", provider=self.provider, error=str(e))
            raise TokenRefreshError(f"Token refresh failed: {e}", cause=e) from e

        self.state = TokenState.REFRESHED
        logger.info("Access token refreshed", provider=self.provider, expires_in=expires_in)
        return updated
