"""
Codexbar Detect Package - Which provider is in the focused window.

Provides:
- Focused window lookup through the window manager
- Bounded process tree walking over procfs
- Classification of windows and processes into providers
"""

from .classifier import (
    PROCESS_TO_PROVIDER,
    TERMINAL_APP_IDS,
    classify,
    is_terminal,
)
from .detector import ActiveProviderDetector
from .focused_window import get_focused_window, parse_focused_window
from .process_tree import DEFAULT_MAX_DEPTH, ProcessTreeWalker

__all__ = [
    # Classification
    "classify",
    "is_terminal",
    "PROCESS_TO_PROVIDER",
    "TERMINAL_APP_IDS",
    # Inspection
    "ProcessTreeWalker",
    "DEFAULT_MAX_DEPTH",
    "get_focused_window",
    "parse_focused_window",
    # Detection
    "ActiveProviderDetector",
]
