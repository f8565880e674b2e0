import logging
import shlex
from collections.abc import Sequence

from ..config import BridgeConfig, validate_cli_path
from ..host.base import Host
from ..observability import log_event, redact_value
from ..runner import process
from ..runner.classify import classify_failure
from ..runner.errors import ExternalCLIError
from ..runner.types import CommandFailure, CommandInvocation, CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class ContextKitClient:
    """Builds and runs contextkit commands for one host.

    Echoes each command to the host's output log, like an editor output channel,
    and turns raw process failures into classified ExternalCLIError.
    """

    def __init__(
        self,
        config: BridgeConfig,
        host: Host,
        *,
        runner: CommandRunner | None = None,
    ) -> None:
        self._config = config
        self._host = host
        self._runner = runner

    def build_invocation(self, args: Sequence[str], cwd: str) -> CommandInvocation:
        """Validate the configured executable and freeze the argument vector.

        Raises:
            InvalidCLIPathError: Before any process exists.
        """
        program = validate_cli_path(self._config.cli_path)
        return CommandInvocation(program=program, arguments=tuple(args), working_directory=cwd)

    async def run(self, args: Sequence[str], cwd: str) -> CommandResult:
        invocation = self.build_invocation(args, cwd)
        self._host.log(f"Running: {shlex.join(invocation.argv)}")

        runner = self._runner or process.run_command
        result = await runner(invocation, timeout=self._config.timeout_seconds)

        if isinstance(result, CommandFailure):
            self._host.log(f"Error: {result.message}")
            log_event(
                {
                    "kind": "command_error",
                    "subcommand": args[0] if args else "",
                    "exit_code": result.exit_code,
                    "timed_out": result.timed_out,
                    "stderr": redact_value(result.stderr, 500),
                }
            )
        else:
            if result.stderr.strip():
                self._host.log(f"stderr: {result.stderr.rstrip()}")
            log_event(
                {
                    "kind": "command_complete",
                    "subcommand": args[0] if args else "",
                    "stdout_len": len(result.stdout),
                }
            )
        return result

    async def run_checked(self, args: Sequence[str], cwd: str) -> str:
        """Run a command and return its stdout.

        Raises:
            ExternalCLIError: Classified failure (or InvalidCLIPathError).
        """
        result = await self.run(args, cwd)
        if isinstance(result, CommandFailure):
            raise ExternalCLIError(
                kind=classify_failure(result),
                message=result.message,
                command=[self._config.cli_path, *args],
                failure=result,
            )
        return result.stdout

    async def doctor(self, cwd: str, *, as_json: bool = False) -> str:
        args = ["doctor", "--json"] if as_json else ["doctor"]
        return await self.run_checked(args, cwd)

    async def init(self, cwd: str) -> str:
        return await self.run_checked(["init"], cwd)

    async def add_source(self, cwd: str, path: str) -> str:
        return await self.run_checked(["source", "add", path], cwd)

    async def index(self, cwd: str) -> str:
        return await self.run_checked(["index"], cwd)
