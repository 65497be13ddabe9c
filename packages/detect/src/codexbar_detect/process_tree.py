"""
Live process tree inspection through procfs.

The children of a process are the union of the ``children`` lists of all
its threads (``/proc/<pid>/task/<tid>/children``): a child forked by any
thread belongs to the process. Processes come and go while the tree is
read, so every lookup degrades to "nothing found" instead of raising.
"""

from collections.abc import Awaitable, Callable
from pathlib import Path

import aiofiles
import aiofiles.os

from codexbar_core.logging import get_logger
from codexbar_tmux import is_multiplexer

logger = get_logger(__name__)

DEFAULT_MAX_DEPTH = 4

PaneResolver = Callable[[int], Awaitable[list[int]]]


class ProcessTreeWalker:
    """
    Bounded depth-first walk over the descendants of a process.

    Args:
        proc_root: Mount point of procfs
        max_depth: Default number of levels below the root to visit
        pane_resolver: Coroutine mapping a tmux client pid to the pids of
                       its session's panes; those panes are walked as if
                       they were children of the client
    """

    def __init__(
        self,
        proc_root: Path = Path("/proc"),
        max_depth: int = DEFAULT_MAX_DEPTH,
        pane_resolver: PaneResolver | None = None,
    ):
        self.proc_root = Path(proc_root)
        self.max_depth = max_depth
        self.pane_resolver = pane_resolver

    async def _read_text(self, path: Path) -> str | None:
        try:
            async with aiofiles.open(path, "r", encoding="utf-8", errors="replace") as f:
                return await f.read()
        except OSError:
            return None

    async def child_pids(self, pid: int) -> list[int]:
        """Distinct child pids of a process, across all of its threads."""
        task_dir = self.proc_root / str(pid) / "task"
        try:
            thread_ids = await aiofiles.os.listdir(task_dir)
        except OSError:
            return []

        children: set[int] = set()
        for tid in thread_ids:
            content = await self._read_text(task_dir / tid / "children")
            if not content:
                continue
            children.update(int(token) for token in content.split() if token.isdigit())
        return sorted(children)

    async def command_name(self, pid: int) -> str | None:
        """Short executable name (``comm``) of a process, if it still exists."""
        content = await self._read_text(self.proc_root / str(pid) / "comm")
        if content is None:
            return None
        return content.strip() or None

    async def descendant_names(self, root_pid: int, max_depth: int | None = None) -> list[str]:
        """
        Command names of the descendants of ``root_pid``.

        Names come out depth-first. The root itself is not included; its
        children are level 1 and nothing below ``max_depth`` is visited.
        A process that vanishes mid-walk contributes nothing further.
        """
        depth = self.max_depth if max_depth is None else max_depth
        if depth <= 0:
            return []

        names: list[str] = []
        visited = {root_pid}
        # Worklist of (pid, levels still allowed below that pid)
        stack = [(pid, depth - 1) for pid in reversed(await self.child_pids(root_pid))]

        while stack:
            pid, remaining = stack.pop()
            if pid in visited:
                continue
            visited.add(pid)

            name = await self.command_name(pid)
            if name is None:
                continue
            names.append(name)

            if self.pane_resolver is not None and is_multiplexer(name):
                panes = await self.pane_resolver(pid)
                stack.extend((pane_pid, depth - 1) for pane_pid in reversed(panes))

            if remaining > 0:
                children = await self.child_pids(pid)
                stack.extend((child, remaining - 1) for child in reversed(children))

        logger.debug("Walked process tree", root_pid=root_pid, depth=depth, names=len(names))
        return names
