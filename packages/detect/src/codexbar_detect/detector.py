"""
Active provider detection.

Combines the focused window lookup, the process tree walk (with tmux
pane expansion) and the classifier. Detection is best effort: every
failure ends in "no provider".
"""

from codexbar_core.config import Settings, get_settings
from codexbar_core.logging import get_logger
from codexbar_core.models import FocusedWindow
from codexbar_tmux import TmuxPaneExpander

from .classifier import classify, is_terminal
from .focused_window import get_focused_window
from .process_tree import ProcessTreeWalker

logger = get_logger(__name__)


class ActiveProviderDetector:
    """
    Finds the provider in use in the focused window.

    Args:
        settings: Application settings
        walker: Optional process tree walker (built from settings by default)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        walker: ProcessTreeWalker | None = None,
    ):
        self.settings = settings or get_settings()
        if walker is None:
            walker = ProcessTreeWalker(
                proc_root=self.settings.proc_root,
                max_depth=self.settings.process_walk_depth,
                pane_resolver=TmuxPaneExpander().pane_pids,
            )
        self.walker = walker

    async def focused_window(self) -> FocusedWindow | None:
        return await get_focused_window(self.settings.focused_window_command)

    async def classify_window(self, window: FocusedWindow) -> str | None:
        """Classify a known window, walking its process tree when needed."""
        names: list[str] = []
        if window.pid is not None and is_terminal(window.app_id):
            names = await self.walker.descendant_names(window.pid)

        provider = classify(window.app_id, names)
        logger.debug(
            "Classified focused window",
            app_id=window.app_id,
            pid=window.pid,
            process_names=names,
            provider=provider,
        )
        return provider

    async def detect(self) -> str | None:
        """Provider id active in the focused window, or None."""
        window = await self.focused_window()
        if window is None:
            return None
        return await self.classify_window(window)
