"""Shared fixtures for codexbar core tests."""

import json
import sys
from pathlib import Path

import httpx
import pytest

from codexbar_core.config import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with every credential location inside tmp_path."""
    return Settings(
        _env_file=None,
        claude_credentials_path=tmp_path / ".claude" / ".credentials.json",
        codex_auth_path=tmp_path / ".codex" / "auth.json",
        codex_sessions_dir=tmp_path / ".codex" / "sessions",
        cursor_state_db=tmp_path / "Cursor" / "state.vscdb",
        kimi_credentials_path=tmp_path / ".kimi" / "credentials" / "kimi-code.json",
        copilot_token_command=[sys.executable, "-c", "import sys; sys.exit(1)"],
        proc_root=tmp_path / "proc",
    )


@pytest.fixture
def write_json():
    """Write a JSON document, creating parent directories."""

    def _write(path: Path, data: dict) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def mock_client():
    """Factory for HTTP clients whose requests are answered by a handler."""

    def _client(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _client
