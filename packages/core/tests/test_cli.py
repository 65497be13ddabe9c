"""Tests for the codexbar command line entry point."""

import json
import logging
from datetime import date

import pytest
import structlog

from codexbar_core.cli import build_parser, main, selected_providers
from codexbar_core.config import get_settings, reload_settings


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point every credential location into tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CODEXBAR_CLAUDE_CREDENTIALS_PATH", str(tmp_path / "claude.json"))
    monkeypatch.setenv("CODEXBAR_CODEX_AUTH_PATH", str(tmp_path / "codex" / "auth.json"))
    monkeypatch.setenv("CODEXBAR_CODEX_SESSIONS_DIR", str(tmp_path / "codex" / "sessions"))
    monkeypatch.setenv("CODEXBAR_CURSOR_STATE_DB", str(tmp_path / "state.vscdb"))
    monkeypatch.setenv("CODEXBAR_KIMI_CREDENTIALS_PATH", str(tmp_path / "kimi.json"))
    monkeypatch.setenv("CODEXBAR_COPILOT_TOKEN_COMMAND", '["codexbar-no-such-helper-binary"]')
    reload_settings()
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield tmp_path
    root_logger.handlers, root_logger.level = handlers, level
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    get_settings.cache_clear()


class TestArgumentParsing:
    """Tests for provider selection."""

    def test_all_selects_every_provider_in_order(self):
        args = build_parser().parse_args(["--all"])
        assert selected_providers(args) == ["claude", "codex", "cursor", "copilot", "kimi"]

    def test_single_provider(self):
        args = build_parser().parse_args(["--provider", "kimi"])
        assert selected_providers(args) == ["kimi"]

    def test_nothing_selected(self):
        assert selected_providers(build_parser().parse_args([])) == []

    def test_unknown_provider_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--provider", "gemini"])


class TestMain:
    """Tests for the report written to stdout."""

    def test_missing_credentials_report(self, cli_env, capsys):
        assert main(["--provider", "claude"]) == 0

        report = json.loads(capsys.readouterr().out)

        assert report["providers"] == [
            {
                "id": "claude",
                "name": "Claude Code",
                "available": False,
                "error": "No credentials found",
            }
        ]
        assert "active_provider" not in report
        assert report["timestamp"]

    def test_empty_selection_reports_no_providers(self, cli_env, capsys):
        assert main([]) == 0
        assert json.loads(capsys.readouterr().out)["providers"] == []

    def test_codex_from_session_logs(self, cli_env, capsys):
        (cli_env / "codex").mkdir()
        (cli_env / "codex" / "auth.json").write_text(json.dumps({"OPENAI_API_KEY": None}))
        today = date.today()
        day_dir = (
            cli_env / "codex" / "sessions"
            / f"{today.year:04d}" / f"{today.month:02d}" / f"{today.day:02d}"
        )
        day_dir.mkdir(parents=True)
        event = {
            "payload": {
                "type": "token_count",
                "rate_limits": {"primary": {"used_percent": 12, "window_minutes": 300}},
            }
        }
        (day_dir / "rollout-1.jsonl").write_text(json.dumps(event) + "\n")

        assert main(["--provider", "codex", "--log-format", "json"]) == 0

        captured = capsys.readouterr()
        provider = json.loads(captured.out)["providers"][0]
        assert provider["available"] is True
        assert provider["primary"] == {"percent_used": 12, "label": "Session (5h)"}
        assert "secondary" not in provider
