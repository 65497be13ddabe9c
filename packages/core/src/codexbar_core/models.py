"""
Normalized usage schemas shared by every provider.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UsageWindow(BaseModel):
    """A quota period with its utilization and reset time."""
    percent_used: int = Field(ge=0)
    resets_at: str | None = None
    label: str = Field(min_length=1)


class AccountInfo(BaseModel):
    """Best-effort account details."""
    email: str | None = None
    plan: str | None = None


class CostInfo(BaseModel):
    """Spend reported by providers that bill in currency."""
    session_usd: float | None = None
    period_usd: float | None = None
    period_label: str | None = None


class ProviderUsage(BaseModel):
    """Usage result for one provider in one invocation."""

    model_config = ConfigDict(validate_assignment=True)

    id: str
    name: str
    available: bool = False
    error: str | None = None
    primary: UsageWindow | None = None
    secondary: UsageWindow | None = None
    cost: CostInfo | None = None
    account: AccountInfo | None = None

    @model_validator(mode="after")
    def _unavailable_has_no_windows(self) -> "ProviderUsage":
        if not self.available and (self.primary is not None or self.secondary is not None):
            raise ValueError("an unavailable provider cannot report usage windows")
        return self

    def add_window(self, window: UsageWindow) -> bool:
        """Fill the first free slot. Returns False when both are taken."""
        if self.primary is None:
            self.primary = window
        elif self.secondary is None:
            self.secondary = window
        else:
            return False
        return True


class FocusedWindow(BaseModel):
    """The window that currently has keyboard focus."""
    app_id: str = ""
    title: str = ""
    pid: int | None = None


class UsageReport(BaseModel):
    """Aggregate output of one invocation."""
    providers: list[ProviderUsage] = Field(default_factory=list)
    active_provider: str | None = None
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    )

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
