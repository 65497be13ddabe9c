"""Tests for tmux client to pane expansion."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from libtmux import exc

from codexbar_tmux import TmuxPaneExpander, is_multiplexer


def make_server(clients: list[str], sessions: dict[str, list]) -> MagicMock:
    server = MagicMock()
    server.cmd.return_value = SimpleNamespace(stdout=clients, stderr=[])

    def filter_sessions(session_name):
        if session_name not in sessions:
            return []
        return [SimpleNamespace(panes=[SimpleNamespace(pane_pid=p) for p in sessions[session_name]])]

    server.sessions.filter.side_effect = filter_sessions
    return server


class TestIsMultiplexer:
    """Tests for tmux client recognition."""

    def test_tmux(self):
        assert is_multiplexer("tmux")
        assert is_multiplexer("tmux\n")

    def test_other_processes(self):
        assert not is_multiplexer("tmux-server")
        assert not is_multiplexer("bash")


class TestTmuxPaneExpander:
    """Tests for TmuxPaneExpander."""

    def test_client_session_panes(self):
        server = make_server(
            ["111 work", "222 play"],
            {"work": ["500", "501", "502"], "play": ["600"]},
        )
        expander = TmuxPaneExpander(server=server)

        assert expander.expand(111) == [500, 501, 502]
        server.cmd.assert_called_with("list-clients", "-F", "#{client_pid} #{session_name}")

    def test_session_name_with_spaces(self):
        server = make_server(["111 my session"], {"my session": ["700"]})
        assert TmuxPaneExpander(server=server).expand(111) == [700]

    def test_unknown_client(self):
        server = make_server(["111 work"], {"work": ["500"]})
        assert TmuxPaneExpander(server=server).expand(999) == []

    def test_vanished_session(self):
        server = make_server(["111 work"], {})
        assert TmuxPaneExpander(server=server).expand(111) == []

    def test_unparseable_pane_pid_skipped(self):
        server = make_server(["111 work"], {"work": [None, "501"]})
        assert TmuxPaneExpander(server=server).expand(111) == [501]

    def test_tmux_error(self):
        server = MagicMock()
        server.cmd.side_effect = exc.LibTmuxException("no server running")
        assert TmuxPaneExpander(server=server).expand(111) == []

    def test_tmux_binary_missing(self):
        server = MagicMock()
        server.cmd.side_effect = FileNotFoundError("tmux")
        assert TmuxPaneExpander(server=server).expand(111) == []

    @pytest.mark.asyncio
    async def test_pane_pids_async(self):
        server = make_server(["111 work"], {"work": ["500"]})
        assert await TmuxPaneExpander(server=server).pane_pids(111) == [500]
