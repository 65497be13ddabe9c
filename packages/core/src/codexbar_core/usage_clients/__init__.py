"""
Usage Clients Package - Fetches usage data from AI coding assistants.

Provides one client per provider:
- Claude Code (OAuth usage API)
- Codex (local session logs)
- Cursor (dashboard API)
- GitHub Copilot (internal user API)
- Kimi Code (usage API)
"""

from .base import BaseUsageClient, percent_of
from .claude_usage import ClaudeUsageClient
from .codex_usage import CodexUsageClient
from .copilot_usage import CopilotUsageClient
from .cursor_usage import CursorUsageClient
from .kimi_usage import KimiUsageClient

# Request order for "all providers"
USAGE_CLIENTS: dict[str, type[BaseUsageClient]] = {
    ClaudeUsageClient.provider_id: ClaudeUsageClient,
    CodexUsageClient.provider_id: CodexUsageClient,
    CursorUsageClient.provider_id: CursorUsageClient,
    CopilotUsageClient.provider_id: CopilotUsageClient,
    KimiUsageClient.provider_id: KimiUsageClient,
}

__all__ = [
    # Base
    "BaseUsageClient",
    "percent_of",
    "USAGE_CLIENTS",
    # Clients
    "ClaudeUsageClient",
    "CodexUsageClient",
    "CopilotUsageClient",
    "CursorUsageClient",
    "KimiUsageClient",
]
