"""
Active-provider classification.

Rules, first match wins:
1. The app id names a provider that is its own application (Cursor).
2. The app id is an editor with a provider integration (VS Code -> Copilot).
3. The app id is a terminal emulator and one of its descendant processes
   is a provider CLI.
"""

from collections.abc import Sequence

# Substring of the app id -> provider
SINGLE_APP_PROVIDERS: dict[str, str] = {
    "cursor": "cursor",
}

EDITOR_APP_IDS = ("code", "code-oss")
EDITOR_APP_MARKERS = ("vscode",)
EDITOR_PROVIDER = "copilot"

TERMINAL_APP_IDS = (
    "com.mitchellh.ghostty",
    "kitty",
    "alacritty",
    "foot",
    "org.wezfurlong.wezterm",
    "org.gnome.terminal",
    "com.raggesilver.blackbox",
)

# Process command name -> provider
PROCESS_TO_PROVIDER: dict[str, str] = {
    "claude": "claude",
    "codex": "codex",
    "kimi": "kimi",
}


def is_terminal(app_id: str) -> bool:
    """Case-insensitive substring match against known terminal emulators."""
    app_id = app_id.lower()
    return any(terminal in app_id for terminal in TERMINAL_APP_IDS)


def classify(app_id: str | None, descendant_names: Sequence[str] | None = None) -> str | None:
    """
    Map a focused window to the provider in use.

    Args:
        app_id: Application identifier of the focused window
        descendant_names: Command names of the window process's descendants

    Returns:
        Provider id, or None when no provider is recognized
    """
    app_id = (app_id or "").lower()

    for marker, provider in SINGLE_APP_PROVIDERS.items():
        if marker in app_id:
            return provider

    if app_id in EDITOR_APP_IDS or any(marker in app_id for marker in EDITOR_APP_MARKERS):
        return EDITOR_PROVIDER

    if is_terminal(app_id) and descendant_names:
        for name in descendant_names:
            provider = PROCESS_TO_PROVIDER.get(name.lower())
            if provider:
                return provider

    return None
