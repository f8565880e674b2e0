import logging
import os

import click

from .base import NoticeLevel

logger = logging.getLogger(__name__)

_COLORS = {
    NoticeLevel.INFO: "green",
    NoticeLevel.WARNING: "yellow",
    NoticeLevel.ERROR: "red",
}


class TerminalHost:
    """Host backed by the terminal: notices on stderr, results on stdout."""

    def __init__(
        self,
        workspace: str | None = None,
        *,
        assume_yes: bool = False,
        interactive: bool = True,
        verbose: bool = False,
    ) -> None:
        self.workspace = workspace
        self.assume_yes = assume_yes
        self.interactive = interactive
        self.verbose = verbose
        self._log_lines: list[str] = []
        self._log_visible = verbose

    async def workspace_folders(self) -> list[str]:
        return [self.workspace or os.getcwd()]

    async def notify(self, level: NoticeLevel, message: str) -> None:
        click.echo(click.style(message, fg=_COLORS[level]), err=True)

    async def prompt(self, message: str, *actions: str) -> str | None:
        if not actions:
            return None
        if self.assume_yes:
            return actions[0]
        if not self.interactive:
            return None
        if click.confirm(f"{message} [{actions[0]}]", default=False, err=True):
            return actions[0]
        return None

    def log(self, line: str) -> None:
        self._log_lines.append(line)
        if self._log_visible:
            click.echo(line, err=True)
        else:
            logger.debug("%s", line)

    def clear_log(self) -> None:
        self._log_lines.clear()

    def show_log(self) -> None:
        if not self._log_visible:
            for line in self._log_lines:
                click.echo(line, err=True)
            self._log_visible = True

    async def publish(self, content: str, *, language: str, beside: bool) -> None:
        click.echo(content)
