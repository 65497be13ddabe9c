"""
Focused window lookup through the window manager's IPC command.

The default command is ``niri msg --json focused-window``, which prints a
JSON object with ``app_id``, ``title`` and ``pid``, or ``null``.
"""

import asyncio
import json

from codexbar_core.logging import get_logger
from codexbar_core.models import FocusedWindow

logger = get_logger(__name__)

DEFAULT_COMMAND = ["niri", "msg", "--json", "focused-window"]


def parse_focused_window(output: str) -> FocusedWindow | None:
    """Parse the window manager's JSON output. Anything unusable is None."""
    output = output.strip()
    if not output or output == "null":
        return None

    try:
        data = json.loads(output)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    app_id = data.get("app_id")
    title = data.get("title")
    pid = data.get("pid")
    return FocusedWindow(
        app_id=app_id if isinstance(app_id, str) else "",
        title=title if isinstance(title, str) else "",
        pid=pid if isinstance(pid, int) and not isinstance(pid, bool) and pid > 0 else None,
    )


async def get_focused_window(command: list[str] | None = None) -> FocusedWindow | None:
    """
    Ask the window manager for the focused window.

    A missing tool, a non-zero exit and empty output all mean "no window".
    """
    argv = command or DEFAULT_COMMAND
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
    except OSError as e:
        logger.debug("Focused window lookup unavailable", command=argv[0], error=str(e))
        return None

    if process.returncode != 0:
        logger.debug(
            "Focused window lookup failed",
            command=argv[0],
            returncode=process.returncode,
            stderr=stderr.decode(errors="replace").strip(),
        )
        return None

    return parse_focused_window(stdout.decode(errors="replace"))
