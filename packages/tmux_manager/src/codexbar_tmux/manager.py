"""
Tmux pane expansion for active-provider detection.

Processes running inside tmux panes are children of the tmux server, not
of the tmux client that lives in the focused terminal. Given the pid of
such a client, this module finds the session the client is attached to
and returns the pids of every pane in that session, across all windows.

Every failure (no server, unknown client, vanished session) yields an
empty result.
"""

import asyncio

import libtmux
from libtmux import exc

from codexbar_core.logging import get_logger

logger = get_logger(__name__)

MULTIPLEXER_NAME = "tmux"


def is_multiplexer(command_name: str) -> bool:
    """Check whether a process command name is the tmux client."""
    return command_name.strip().lower() == MULTIPLEXER_NAME


class TmuxPaneExpander:
    """
    Resolves a tmux client pid to the pane pids of its session.

    Args:
        server: Optional libtmux server (a default server is created lazily)
    """

    def __init__(self, server: libtmux.Server | None = None):
        self._server = server

    @property
    def server(self) -> libtmux.Server:
        """Get tmux server."""
        if self._server is None:
            self._server = libtmux.Server()
        return self._server

    def session_for_client(self, client_pid: int) -> str | None:
        """Name of the session the given client is attached to."""
        result = self.server.cmd("list-clients", "-F", "#{client_pid} #{session_name}")
        for line in result.stdout:
            pid, _, session_name = line.strip().partition(" ")
            if pid == str(client_pid) and session_name:
                return session_name
        return None

    def session_pane_pids(self, session_name: str) -> list[int]:
        """Pids of all panes in a session, in every window."""
        sessions = self.server.sessions.filter(session_name=session_name)
        if not sessions:
            return []

        pids: list[int] = []
        for pane in sessions[0].panes:
            try:
                pids.append(int(pane.pane_pid))
            except (TypeError, ValueError):
                continue
        return pids

    def expand(self, client_pid: int) -> list[int]:
        """Pane pids reachable from a tmux client, or an empty list."""
        try:
            session_name = self.session_for_client(client_pid)
            if session_name is None:
                logger.debug("No tmux session for client", client_pid=client_pid)
                return []
            pids = self.session_pane_pids(session_name)
        except (exc.LibTmuxException, OSError) as e:
            logger.debug("Tmux expansion failed", client_pid=client_pid, error=str(e))
            return []

        logger.debug("Expanded tmux client", client_pid=client_pid, session=session_name, panes=len(pids))
        return pids

    async def pane_pids(self, client_pid: int) -> list[int]:
        """Async wrapper around expand(); tmux is queried in a worker thread."""
        return await asyncio.to_thread(self.expand, client_pid)
