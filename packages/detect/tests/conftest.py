"""Shared fixtures for detection tests."""

from pathlib import Path

import pytest


class FakeProc:
    """Minimal procfs layout: comm plus per-thread children lists."""

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def add(self, pid: int, comm: str | None, children=(), threads: dict | None = None):
        proc_dir = self.root / str(pid)
        (proc_dir / "task").mkdir(parents=True, exist_ok=True)
        if comm is not None:
            (proc_dir / "comm").write_text(comm + "\n")

        threads = threads if threads is not None else {pid: children}
        for tid, tid_children in threads.items():
            task_dir = proc_dir / "task" / str(tid)
            task_dir.mkdir(exist_ok=True)
            (task_dir / "children").write_text("".join(f"{c} " for c in tid_children))
        return self


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    return FakeProc(tmp_path / "proc")
