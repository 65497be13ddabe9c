"""
Cursor usage client.

The Cursor editor stores its session in the VS Code style ``state.vscdb``
SQLite database. The access token found there authorizes the dashboard
API, which reports the current billing cycle's spend in cents.
"""

import httpx

from ..config import Settings
from ..credentials import SQLiteKeyValueStore
from ..logging import get_logger
from ..models import AccountInfo, CostInfo, ProviderUsage, UsageWindow
from .base import BaseUsageClient, as_number, epoch_to_iso, percent_of

logger = get_logger(__name__)

ACCESS_TOKEN_KEY = "cursorAuth/accessToken"
EMAIL_KEY = "cursorAuth/cachedEmail"
MEMBERSHIP_KEY = "cursorAuth/stripeMembershipType"


class CursorUsageClient(BaseUsageClient):
    """
    Client for the Cursor dashboard API.

    Endpoints:
    - GET /auth/full_stripe_profile - Membership type
    - POST /aiserver.v1.DashboardService/GetCurrentPeriodUsage - Billing cycle spend
    """

    provider_id = "cursor"
    display_name = "Cursor"
    no_credentials_message = "No Cursor auth token found"

    BASE_URL = "https://api2.cursor.sh"
    PROFILE_PATH = "/auth/full_stripe_profile"
    USAGE_PATH = "/aiserver.v1.DashboardService/GetCurrentPeriodUsage"

    def __init__(self, settings: Settings | None = None):
        super().__init__(settings)
        self.store = SQLiteKeyValueStore(self.settings.cursor_state_db)

    async def load_credentials(self) -> str:
        return await self.store.require(ACCESS_TOKEN_KEY, self.no_credentials_message)

    async def fetch_plan(self, token: str, client: httpx.AsyncClient) -> str | None:
        """Membership type from the Stripe profile. Failures are ignored."""
        try:
            response = await client.get(
                f"{self.BASE_URL}{self.PROFILE_PATH}",
                headers={"Authorization": f"Bearer {token}"},
            )
            if response.is_success:
                profile = response.json()
                if isinstance(profile, dict):
                    return profile.get("membershipType")
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Cursor profile lookup failed", error=str(e))
        return None

    async def fetch_usage(
        self,
        credentials: str,
        client: httpx.AsyncClient,
        usage: ProviderUsage,
    ) -> None:
        token = credentials
        email = await self.store.get(EMAIL_KEY)
        plan = await self.fetch_plan(token, client) or await self.store.get(MEMBERSHIP_KEY)
        usage.account = AccountInfo(email=email, plan=plan)

        data = await self.request_json(
            client,
            "POST",
            f"{self.BASE_URL}{self.USAGE_PATH}",
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "Connect-Protocol-Version": "1",
            },
            json={},
        )

        plan_usage = data.get("planUsage") if isinstance(data.get("planUsage"), dict) else {}
        spend_limit = (
            data.get("spendLimitUsage") if isinstance(data.get("spendLimitUsage"), dict) else {}
        )

        individual_limit = as_number(spend_limit.get("individualLimit"))
        limit_label = f"${individual_limit / 100:.0f} limit" if individual_limit > 0 else None
        plan_label = " · ".join(part for part in (plan, limit_label) if part)
        usage.account = AccountInfo(email=email, plan=plan_label or plan)

        resets_at = None
        if data.get("billingCycleEnd"):
            resets_at = epoch_to_iso(as_number(data["billingCycleEnd"]) / 1000)

        plan_limit = as_number(plan_usage.get("limit"))
        if plan_limit > 0:
            limit_dollars = plan_limit / 100
            used_dollars = as_number(plan_usage.get("totalSpend")) / 100
            usage.primary = UsageWindow(
                percent_used=percent_of(used_dollars, limit_dollars),
                resets_at=resets_at,
                label=f"Plan (${used_dollars:.2f} / ${limit_dollars:.2f})",
            )
            usage.cost = CostInfo(period_usd=round(used_dollars, 2), period_label="Billing cycle")

        if individual_limit > 0:
            limit_dollars = individual_limit / 100
            used_dollars = limit_dollars - as_number(spend_limit.get("individualRemaining")) / 100
            usage.secondary = UsageWindow(
                percent_used=percent_of(used_dollars, limit_dollars),
                resets_at=resets_at,
                label=f"Limit (${used_dollars:.2f} / ${limit_dollars:.2f})",
            )
