"""Tests for the error hierarchy."""

from codexbar_core.exceptions import CodexBarError, NoCredentialsError, UsageAPIError


class TestExceptions:
    """Tests for error codes and structured output."""

    def test_to_dict(self):
        error = NoCredentialsError("No credentials found", context={"path": "/tmp/x"})
        assert error.to_dict() == {
            "error": "NO_CREDENTIALS",
            "message": "No credentials found",
            "context": {"path": "/tmp/x"},
        }

    def test_api_error_default_message(self):
        error = UsageAPIError(502)
        assert error.message == "API 502"
        assert error.status_code == 502
        assert error.context == {"status_code": 502}
        assert isinstance(error, CodexBarError)

    def test_api_error_domain_message(self):
        assert UsageAPIError(403, "Usage requires paid plan").message == "Usage requires paid plan"

    def test_cause_is_chained(self):
        cause = OSError("denied")
        assert CodexBarError("wrapped", cause=cause).__cause__ is cause
