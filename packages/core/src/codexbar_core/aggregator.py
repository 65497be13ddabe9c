"""
Concurrent usage aggregation.

All requested providers are fetched at once over a shared HTTP client.
The gather waits for every fetch to settle; a fault in one provider is
turned into a synthetic failed entry and never cancels the others.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable

import httpx

from .config import Settings, get_settings
from .logging import get_logger
from .models import ProviderUsage, UsageReport
from .usage_clients import USAGE_CLIENTS, BaseUsageClient

logger = get_logger(__name__)

ActiveProviderLookup = Callable[[], Awaitable[str | None]]


def unknown_failure(error: BaseException) -> ProviderUsage:
    """Synthetic entry for a fault that escaped a provider's own handling."""
    return ProviderUsage(
        id="unknown",
        name="Unknown",
        available=False,
        error=str(error) or type(error).__name__,
    )


class UsageAggregator:
    """
    Runs provider usage clients concurrently.

    Args:
        settings: Application settings
        clients: Provider id to client mapping; defaults to every known provider
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clients: dict[str, BaseUsageClient] | None = None,
    ):
        self.settings = settings or get_settings()
        if clients is None:
            clients = {
                provider_id: client_cls(self.settings)
                for provider_id, client_cls in USAGE_CLIENTS.items()
            }
        self.clients = clients

    @property
    def provider_ids(self) -> list[str]:
        return list(self.clients)

    async def collect(
        self,
        provider_ids: Iterable[str],
        http_client: httpx.AsyncClient | None = None,
    ) -> list[ProviderUsage]:
        """
        Fetch the given providers concurrently.

        Returns:
            One result per requested id, in request order

        Raises:
            KeyError: An id has no registered client
        """
        provider_ids = list(provider_ids)
        requested = [self.clients[provider_id] for provider_id in provider_ids]
        if not requested:
            return []

        if http_client is None:
            async with httpx.AsyncClient(
                timeout=self.settings.http_timeout,
                headers={"User-Agent": self.settings.user_agent},
            ) as own_client:
                return await self.collect(provider_ids, own_client)

        results = await asyncio.gather(
            *(client.fetch(http_client) for client in requested),
            return_exceptions=True,
        )

        usages: list[ProviderUsage] = []
        for client, result in zip(requested, results):
            if isinstance(result, ProviderUsage):
                usages.append(result)
            elif isinstance(result, Exception):
                logger.error(
                    "Provider fetch crashed",
                    provider=client.provider_id,
                    error=str(result),
                    exc_info=result,
                )
                usages.append(unknown_failure(result))
            else:
                raise result
        return usages

    async def build_report(
        self,
        provider_ids: Iterable[str],
        active_provider: ActiveProviderLookup | None = None,
    ) -> UsageReport:
        """
        Assemble the aggregate report.

        Args:
            provider_ids: Providers to fetch, in output order
            active_provider: Optional coroutine function returning the
                             provider active in the focused window
        """
        report = UsageReport()
        report.providers = await self.collect(provider_ids)
        if active_provider is not None:
            report.active_provider = await active_provider()
        return report
