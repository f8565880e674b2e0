from collections.abc import Awaitable, Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class CommandInvocation:
    """One external program run: executable, discrete argument tokens and cwd.

    Arguments are never joined into a shell string.
    """

    program: str
    arguments: tuple[str, ...]
    working_directory: str

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.arguments]


@dataclass(frozen=True)
class CommandSuccess:
    stdout: str
    stderr: str = ""

    ok = True


@dataclass(frozen=True)
class CommandFailure:
    """Non-zero exit, launch failure (no exit code) or timeout."""

    exit_code: int | None
    stderr: str
    stdout: str = ""
    timed_out: bool = False

    ok = False

    @property
    def launched(self) -> bool:
        return self.exit_code is not None or self.timed_out

    @property
    def message(self) -> str:
        text = self.stderr.strip()
        if text:
            return text
        if self.exit_code is not None:
            return f"Exit code {self.exit_code}"
        return "Process could not be started"


CommandResult = CommandSuccess | CommandFailure

CommandRunner = Callable[..., Awaitable[CommandResult]]
