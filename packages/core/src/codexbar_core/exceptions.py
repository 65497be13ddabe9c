"""
Custom exceptions for codexbar.

Every expected failure of a provider fetch has its own class so the
usage clients can turn it into the ``error`` field of a ProviderUsage.
The ``message`` of each exception is the exact text shown to the user.
"""

from typing import Any


class CodexBarError(Exception):
    """Base exception for all codexbar errors."""

    error_code: str = "CODEXBAR_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}
        self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for structured output."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# Credential Errors
class NoCredentialsError(CodexBarError):
    """No usable credential record was found for a provider."""
    error_code = "NO_CREDENTIALS"


class TokenRefreshError(CodexBarError):
    """Exchanging a refresh token for a new access token failed."""
    error_code = "TOKEN_REFRESH_FAILED"


# Usage API Errors
class UsageAPIError(CodexBarError):
    """Usage endpoint answered with a non-2xx status."""
    error_code = "API_ERROR"

    def __init__(self, status_code: int, message: str | None = None, **kwargs: Any):
        super().__init__(message or f"API {status_code}", **kwargs)
        self.status_code = status_code
        self.context.setdefault("status_code", status_code)


class TransportError(CodexBarError):
    """Network, DNS, timeout or decoding failure of the usage call."""
    error_code = "TRANSPORT_ERROR"


class NoUsageDataError(CodexBarError):
    """Authentication worked but no usage record could be found."""
    error_code = "NO_USAGE_DATA"
