"""
Codex usage client.

Codex has no usage endpoint reachable with the stored credentials.
Instead, the CLI appends ``token_count`` events with the current rate
limits to its session logs, partitioned by date:

    ~/.codex/sessions/YYYY/MM/DD/rollout-*.jsonl

The newest such event within the last few days is the usage snapshot.
"""

import base64
import json
from datetime import date, timedelta
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
import httpx

from ..credentials import JSONFileStore
from ..exceptions import NoCredentialsError, NoUsageDataError
from ..logging import get_logger
from ..models import AccountInfo, ProviderUsage, UsageWindow
from .base import BaseUsageClient, as_number, epoch_to_iso, format_number, round_half_up

logger = get_logger(__name__)

AUTH_CLAIMS_KEY = "https://api.openai.com/auth"


def decode_jwt_claims(token: str) -> dict[str, Any]:
    """Decode the payload segment of a JWT without verifying it."""
    payload = token.split(".")[1]
    payload += "=" * (-len(payload) % 4)
    claims = json.loads(base64.urlsafe_b64decode(payload))
    if not isinstance(claims, dict):
        raise ValueError("JWT payload is not an object")
    return claims


def extract_rate_limits(line: str) -> dict[str, Any] | None:
    """Return the rate limits carried by one session log line, if any."""
    try:
        event = json.loads(line)
    except ValueError:
        return None
    if not isinstance(event, dict):
        return None

    payload = event.get("payload")
    if not isinstance(payload, dict) or payload.get("type") != "token_count":
        return None

    rate_limits = payload.get("rate_limits")
    return rate_limits if isinstance(rate_limits, dict) else None


class CodexUsageClient(BaseUsageClient):
    """Reads Codex rate limits from the local session log store."""

    provider_id = "codex"
    display_name = "Codex"

    async def load_credentials(self) -> dict[str, Any]:
        document = await JSONFileStore(self.settings.codex_auth_path).read()
        if not document:
            raise NoCredentialsError("No credentials found")
        return document

    def account_from_auth(self, auth: dict[str, Any]) -> AccountInfo:
        """Best-effort email and plan from the stored id token."""
        try:
            claims = decode_jwt_claims(auth["tokens"]["id_token"])
        except (KeyError, TypeError, IndexError, ValueError):
            return AccountInfo()

        auth_info = claims.get(AUTH_CLAIMS_KEY)
        plan = auth_info.get("chatgpt_plan_type") if isinstance(auth_info, dict) else None
        return AccountInfo(email=claims.get("email"), plan=plan)

    async def session_files(self, today: date | None = None) -> list[Path]:
        """Session logs of the most recent days, newest first."""
        today = today or date.today()
        files: list[Path] = []

        for offset in range(self.settings.codex_session_days):
            day = today - timedelta(days=offset)
            day_dir = self.settings.codex_sessions_dir / f"{day.year:04d}" / f"{day.month:02d}" / f"{day.day:02d}"
            try:
                entries = await aiofiles.os.listdir(day_dir)
            except OSError:
                continue
            files.extend(day_dir / name for name in entries if name.endswith(".jsonl"))

        files.sort(reverse=True)
        return files

    async def latest_rate_limits(self, path: Path) -> dict[str, Any] | None:
        """Scan one log from its last line backwards for a rate limit event."""
        try:
            async with aiofiles.open(path, "r", encoding="utf-8", errors="replace") as f:
                content = await f.read()
        except OSError as e:
            logger.debug("Session log unreadable", path=str(path), error=str(e))
            return None

        for line in reversed(content.strip().splitlines()):
            rate_limits = extract_rate_limits(line)
            if rate_limits is not None:
                return rate_limits
        return None

    async def find_rate_limits(self) -> dict[str, Any] | None:
        for path in await self.session_files():
            rate_limits = await self.latest_rate_limits(path)
            if rate_limits is not None:
                logger.debug("Found Codex rate limits", path=str(path))
                return rate_limits
        return None

    async def fetch_usage(
        self,
        credentials: dict[str, Any],
        client: httpx.AsyncClient,
        usage: ProviderUsage,
    ) -> None:
        usage.account = self.account_from_auth(credentials)

        rate_limits = await self.find_rate_limits()
        if rate_limits is None:
            raise NoUsageDataError("No recent session data")

        usage.primary = _parse_window(rate_limits.get("primary"), _session_label)
        usage.secondary = _parse_window(rate_limits.get("secondary"), _weekly_label)


def _session_label(window_minutes: float) -> str:
    return f"Session ({format_number(window_minutes / 60)}h)"


def _weekly_label(window_minutes: float) -> str:
    return f"Weekly ({round_half_up(window_minutes / 60 / 24)}d)"


def _parse_window(raw: Any, label_for) -> UsageWindow | None:
    if not isinstance(raw, dict):
        return None
    return UsageWindow(
        percent_used=max(0, round_half_up(as_number(raw.get("used_percent")))),
        resets_at=epoch_to_iso(raw.get("resets_at")),
        label=label_for(as_number(raw.get("window_minutes"))),
    )
