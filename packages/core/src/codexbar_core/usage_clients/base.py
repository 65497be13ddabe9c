"""
Base usage client interface.

Every provider follows the same fetch algorithm:

1. Load credentials. Nothing found means "not available", with no network I/O.
2. Mark the provider available.
3. Refresh the access token if the provider's credentials expire.
4. Request usage and map the payload into at most two UsageWindows.

Expected failures raise a CodexBarError subclass inside the provider and
are turned into ``ProviderUsage.error`` here, keeping any account info
collected before the failure. A payload field of an unexpected type is
reported the same way.
"""

import math
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import Settings, get_settings
from ..exceptions import CodexBarError, NoCredentialsError, TransportError, UsageAPIError
from ..logging import get_logger
from ..models import ProviderUsage

logger = get_logger(__name__)


def as_number(value: Any, default: float = 0.0) -> float:
    """Coerce a payload value to float, tolerating nulls and strings."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up."""
    return math.floor(value + 0.5)


def percent_of(used: float, total: float) -> int:
    """
    Integer utilization of ``used`` against ``total``.

    A non-positive total yields 0. Values are floored at 0 but not capped
    at 100, so overage stays visible.
    """
    if total <= 0:
        return 0
    return max(0, round_half_up(used / total * 100))


def epoch_to_iso(seconds: float | None) -> str | None:
    """Convert Unix seconds to an ISO-8601 UTC timestamp."""
    if seconds is None:
        return None
    try:
        moment = datetime.fromtimestamp(float(seconds), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_number(value: float) -> str:
    """Render 5.0 as "5" and 2.5 as "2.5"."""
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


class BaseUsageClient(ABC):
    """Abstract base class for provider usage clients."""

    provider_id: str = ""
    display_name: str = ""
    no_credentials_message: str = "No credentials found"

    # Status codes with a provider-specific meaning
    status_messages: dict[int, str] = {}

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    @abstractmethod
    async def load_credentials(self) -> Any:
        """
        Load this provider's credential record.

        Raises:
            NoCredentialsError: Nothing usable was found
        """
        ...

    async def prepare_credentials(self, credentials: Any, client: httpx.AsyncClient) -> Any:
        """Make credentials ready for use. Providers with expiring tokens refresh here."""
        return credentials

    @abstractmethod
    async def fetch_usage(
        self,
        credentials: Any,
        client: httpx.AsyncClient,
        usage: ProviderUsage,
    ) -> None:
        """
        Fill ``usage`` with windows and account info.

        Implementations set ``usage.account`` as soon as it is known so that
        it survives a later failure.
        """
        ...

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.http_timeout,
            headers={"User-Agent": self.settings.user_agent},
        )

    async def fetch(self, client: httpx.AsyncClient | None = None) -> ProviderUsage:
        """
        Fetch normalized usage for this provider.

        Expected failures never raise; they end up in the ``error`` field.

        Args:
            client: Optional shared HTTP client for connection reuse
        """
        if client is None:
            async with self._new_client() as own_client:
                return await self.fetch(own_client)

        usage = ProviderUsage(id=self.provider_id, name=self.display_name)

        try:
            credentials = await self.load_credentials()
        except NoCredentialsError as e:
            logger.debug("No credentials", provider=self.provider_id, reason=e.message)
            usage.error = self.no_credentials_message
            return usage

        usage.available = True

        try:
            credentials = await self.prepare_credentials(credentials, client)
            await self.fetch_usage(credentials, client, usage)
        except CodexBarError as e:
            logger.warning(
                "Provider fetch failed",
                provider=self.provider_id,
                error_code=e.error_code,
                error=e.message,
            )
            usage.error = e.message
        except ValidationError as e:
            logger.warning(
                "Provider payload rejected",
                provider=self.provider_id,
                errors=e.error_count(),
                error=str(e),
            )
            usage.error = "fetch failed: unexpected response shape"

        return usage

    async def request_json(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Issue an authenticated request and decode the JSON body.

        Raises:
            UsageAPIError: Non-2xx response
            TransportError: Connection failure or undecodable body
        """
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"fetch failed: {str(e) or type(e).__name__}", cause=e) from e

        if not response.is_success:
            logger.debug(
                "Usage API error",
                provider=self.provider_id,
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise UsageAPIError(
                response.status_code,
                self.status_messages.get(response.status_code),
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"fetch failed: invalid JSON ({e})", cause=e) from e

        if not isinstance(data, dict):
            raise TransportError("fetch failed: unexpected response shape")
        return data
