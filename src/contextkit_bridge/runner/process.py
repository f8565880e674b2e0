import asyncio
import logging
import os

import psutil

from ..observability import log_trace_event
from .types import CommandFailure, CommandInvocation, CommandResult, CommandSuccess

logger = logging.getLogger(__name__)


def _child_env() -> dict[str, str]:
    env = os.environ.copy()
    env["LANG"] = "C.UTF-8"
    env["LC_ALL"] = "C.UTF-8"
    return env


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def kill_process_tree(pid: int) -> None:
    try:
        parent = psutil.Process(pid)
    except psutil.Error:
        return

    for child in parent.children(recursive=True):
        try:
            child.kill()
        except psutil.Error:
            pass
    try:
        parent.kill()
    except psutil.Error:
        pass


async def run_command(
    invocation: CommandInvocation,
    *,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run an external program and capture its output.

    The argument vector is handed to the OS as discrete tokens (exec, never a shell).
    Both pipes are drained concurrently while the child runs, so multi-megabyte
    output cannot fill a pipe buffer and stall the child.

    Args:
        invocation: Program, arguments and working directory.
        timeout: Optional bound in seconds. None waits for exit indefinitely.
        env: Child environment. Defaults to the current environment with a UTF-8 locale.

    Returns:
        CommandSuccess on exit code 0. CommandFailure otherwise; ``exit_code`` is None
        when the program could not be started.
    """
    argv = invocation.argv
    log_trace_event(
        {
            "kind": "cli_request",
            "cli": invocation.program,
            "command": argv,
            "cwd": invocation.working_directory,
            "timeout_s": timeout,
        }
    )

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=invocation.working_directory,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env if env is not None else _child_env(),
        )
    except OSError as exc:
        # FileNotFoundError, PermissionError, NotADirectoryError (bad cwd) ...
        logger.debug("Failed to launch %s: %s", invocation.program, exc)
        log_trace_event(
            {
                "kind": "cli_error",
                "cli": invocation.program,
                "command": argv,
                "error_type": type(exc).__name__,
                "error": str(exc),
            }
        )
        return CommandFailure(exit_code=None, stderr=str(exc))

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        kill_process_tree(proc.pid)
        await proc.wait()
        logger.warning("%s timed out after %ss", invocation.program, timeout)
        log_trace_event(
            {
                "kind": "cli_error",
                "cli": invocation.program,
                "command": argv,
                "error_type": "TimeoutError",
                "timeout_s": timeout,
            }
        )
        return CommandFailure(
            exit_code=None,
            stderr=f"{invocation.program} timed out after {timeout}s",
            timed_out=True,
        )

    stdout = _decode(stdout_bytes)
    stderr = _decode(stderr_bytes)
    returncode = proc.returncode

    if returncode != 0:
        log_trace_event(
            {
                "kind": "cli_error",
                "cli": invocation.program,
                "command": argv,
                "returncode": returncode,
                "stdout": stdout,
                "stderr": stderr,
            }
        )
        return CommandFailure(exit_code=returncode, stderr=stderr, stdout=stdout)

    log_trace_event(
        {
            "kind": "cli_response",
            "cli": invocation.program,
            "command": argv,
            "returncode": returncode,
            "stdout": stdout,
            "stderr": stderr,
        }
    )
    return CommandSuccess(stdout=stdout, stderr=stderr)
