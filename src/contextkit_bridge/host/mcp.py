from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .base import NoticeLevel

if TYPE_CHECKING:
    from fastmcp.server.context import Context

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.WARNING: logging.WARNING,
    NoticeLevel.ERROR: logging.ERROR,
}


@dataclass
class McpHost:
    """Host for one MCP tool call.

    Workspace folders come from the client's MCP Roots. Notices, output-log lines and
    published content are collected for the tool response. The MCP client cannot
    answer prompts mid-call, so prompts are declined and the caller reports the
    remediation as ``recommended_action`` instead.
    """

    ctx: Context | None = None
    notices: list[dict[str, str]] = field(default_factory=list)
    output: list[str] = field(default_factory=list)
    published: str | None = None
    declined_prompts: list[str] = field(default_factory=list)

    async def workspace_folders(self) -> list[str]:
        if self.ctx is None:
            return []
        try:
            roots = await self.ctx.list_roots()
        except Exception as exc:
            logger.debug("MCP Roots unavailable: %s", exc)
            return []
        return [str(root.uri) for root in roots]

    async def notify(self, level: NoticeLevel, message: str) -> None:
        logger.log(_LOG_LEVELS[level], "%s", message)
        self.notices.append({"level": level.value, "message": message})

    async def prompt(self, message: str, *actions: str) -> str | None:
        self.declined_prompts.append(message)
        return None

    def log(self, line: str) -> None:
        self.output.append(line)

    def clear_log(self) -> None:
        self.output.clear()

    def show_log(self) -> None:
        pass

    async def publish(self, content: str, *, language: str, beside: bool) -> None:
        self.published = content

    def response_extras(self) -> dict[str, Any]:
        extras: dict[str, Any] = {}
        if self.notices:
            extras["notices"] = list(self.notices)
        return extras
