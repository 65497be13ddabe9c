"""Tests for the focused window lookup."""

import json
import sys

import pytest

from codexbar_detect.focused_window import get_focused_window, parse_focused_window


class TestParseFocusedWindow:
    """Tests for parsing window manager output."""

    def test_window_object(self):
        window = parse_focused_window(
            json.dumps({"id": 7, "app_id": "kitty", "title": "~", "pid": 4242})
        )
        assert window.app_id == "kitty"
        assert window.title == "~"
        assert window.pid == 4242

    @pytest.mark.parametrize("output", ["", "  \n", "null", "{broken", "[1, 2]"])
    def test_unusable_output(self, output):
        assert parse_focused_window(output) is None

    def test_missing_fields(self):
        window = parse_focused_window(json.dumps({"app_id": None, "pid": -1}))
        assert window.app_id == ""
        assert window.pid is None

    def test_non_string_fields_are_ignored(self):
        window = parse_focused_window(
            json.dumps({"app_id": 12, "title": ["a"], "pid": True})
        )
        assert window.app_id == ""
        assert window.title == ""
        assert window.pid is None


@pytest.mark.asyncio
class TestGetFocusedWindow:
    """Tests for running the window manager command."""

    async def test_reads_command_output(self):
        payload = json.dumps({"app_id": "foot", "title": "shell", "pid": 10})
        window = await get_focused_window([sys.executable, "-c", f"print({payload!r})"])
        assert window.app_id == "foot"
        assert window.pid == 10

    async def test_missing_tool(self):
        assert await get_focused_window(["codexbar-no-such-window-manager"]) is None

    async def test_failing_command(self):
        assert await get_focused_window([sys.executable, "-c", "raise SystemExit(1)"]) is None
