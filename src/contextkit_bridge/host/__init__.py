from .base import Host, NoticeLevel
from .mcp import McpHost
from .status import IDLE_TEXT, IDLE_TOOLTIP, StatusReporter
from .terminal import TerminalHost

__all__ = [
    "IDLE_TEXT",
    "IDLE_TOOLTIP",
    "Host",
    "McpHost",
    "NoticeLevel",
    "StatusReporter",
    "TerminalHost",
]
