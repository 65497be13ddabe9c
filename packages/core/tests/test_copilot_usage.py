"""Tests for the GitHub Copilot quota client."""

import sys

import httpx
import pytest

from codexbar_core.usage_clients import CopilotUsageClient

USER_PAYLOAD = {
    "copilot_plan": "individual",
    "access_type_sku": "plus_monthly_subscriber",
    "quota_reset_date_utc": "2026-11-01T00:00:00Z",
    "quota_snapshots": {
        "premium_interactions": {
            "entitlement": 300,
            "quota_remaining": 225,
            "unlimited": False,
        },
        "chat": {"entitlement": 0, "quota_remaining": 0, "unlimited": True},
    },
}


@pytest.fixture
def gh_settings(settings):
    return settings.model_copy(
        update={"copilot_token_command": [sys.executable, "-c", "print('gho_abc')"]}
    )


@pytest.mark.asyncio
class TestCopilotUsageClient:
    """Tests for CopilotUsageClient.fetch()."""

    async def test_token_helper_failure(self, settings, mock_client):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=USER_PAYLOAD)

        async with mock_client(handler) as client:
            usage = await CopilotUsageClient(settings).fetch(client)

        assert not usage.available
        assert usage.error == "No GitHub token found"
        assert seen == []

    async def test_premium_and_unlimited_chat(self, gh_settings, mock_client):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=USER_PAYLOAD)

        async with mock_client(handler) as client:
            usage = await CopilotUsageClient(gh_settings).fetch(client)

        assert usage.error is None
        assert usage.account.plan == "individual"
        assert usage.primary.percent_used == 25
        assert usage.primary.label == "Premium (300)"
        assert usage.primary.resets_at == "2026-11-01T00:00:00Z"
        assert usage.secondary.percent_used == 0
        assert usage.secondary.label == "Chat (Unlimited)"
        assert usage.secondary.resets_at is None
        assert seen[0].headers["Authorization"] == "token gho_abc"

    async def test_limited_chat_and_sku_plan(self, gh_settings, mock_client):
        payload = {
            "access_type_sku": "free_limited_copilot",
            "quota_reset_date": "2026-11-01",
            "quota_snapshots": {
                "chat": {"entitlement": 50, "quota_remaining": 10, "unlimited": False},
            },
        }

        async with mock_client(lambda request: httpx.Response(200, json=payload)) as client:
            usage = await CopilotUsageClient(gh_settings).fetch(client)

        assert usage.account.plan == "free_limited_copilot"
        assert usage.primary is None
        assert usage.secondary.label == "Chat"
        assert usage.secondary.percent_used == 80
        assert usage.secondary.resets_at == "2026-11-01"

    async def test_missing_snapshots(self, gh_settings, mock_client):
        async with mock_client(lambda request: httpx.Response(200, json={})) as client:
            usage = await CopilotUsageClient(gh_settings).fetch(client)

        assert usage.available
        assert usage.error is None
        assert usage.account.plan == "unknown"
        assert usage.primary is None
        assert usage.secondary is None

    async def test_api_error(self, gh_settings, mock_client):
        async with mock_client(lambda request: httpx.Response(404)) as client:
            usage = await CopilotUsageClient(gh_settings).fetch(client)

        assert usage.available
        assert usage.error == "API 404"

    async def test_zero_entitlement_reports_zero_percent(self, gh_settings, mock_client):
        payload = {
            "copilot_plan": "individual",
            "quota_snapshots": {
                "premium_interactions": {
                    "entitlement": 0,
                    "quota_remaining": -4,
                    "unlimited": False,
                },
            },
        }

        async with mock_client(lambda request: httpx.Response(200, json=payload)) as client:
            usage = await CopilotUsageClient(gh_settings).fetch(client)

        assert usage.error is None
        assert usage.primary.percent_used == 0
        assert usage.primary.label == "Premium (0)"

    async def test_non_string_plan_is_reported(self, gh_settings, mock_client):
        payload = {"copilot_plan": 42}

        async with mock_client(lambda request: httpx.Response(200, json=payload)) as client:
            usage = await CopilotUsageClient(gh_settings).fetch(client)

        assert usage.id == "copilot"
        assert usage.available
        assert usage.error == "fetch failed: unexpected response shape"
