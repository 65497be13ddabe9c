"""
Codexbar Tmux Package - Multiplexer awareness for window detection.

This package maps a tmux client running in a terminal to the panes of
the session it shows:
- Client to session resolution
- Session pane listing across windows
"""

from .manager import (
    MULTIPLEXER_NAME,
    TmuxPaneExpander,
    is_multiplexer,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "TmuxPaneExpander",
    "MULTIPLEXER_NAME",
    "is_multiplexer",
]
