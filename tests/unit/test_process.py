import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from contextkit_bridge.runner.classify import classify_failure
from contextkit_bridge.runner.errors import FailureKind
from contextkit_bridge.runner.process import kill_process_tree, run_command
from contextkit_bridge.runner.types import CommandFailure, CommandInvocation, CommandSuccess

ECHO_ARGV1 = "import sys; sys.stdout.write(sys.argv[1])"


def _python(cwd: Path, *args: str) -> CommandInvocation:
    return CommandInvocation(
        program=sys.executable, arguments=tuple(args), working_directory=str(cwd)
    )


class TestRunCommand:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "query",
        [
            "auth flow; rm -rf ~",
            "a && b || c",
            "$(whoami) `id` $HOME",
            "x | tee /tmp/pwned",
            "quotes \"double\" and 'single'",
            "  leading and trailing spaces  ",
        ],
    )
    async def test_shell_metacharacters_reach_program_unaltered(
        self, tmp_path: Path, query: str
    ) -> None:
        result = await run_command(_python(tmp_path, "-c", ECHO_ARGV1, query))

        assert isinstance(result, CommandSuccess)
        assert result.stdout == query

    @pytest.mark.asyncio
    async def test_runs_in_working_directory(self, tmp_path: Path) -> None:
        result = await run_command(
            _python(tmp_path, "-c", "import os, sys; sys.stdout.write(os.getcwd())")
        )

        assert isinstance(result, CommandSuccess)
        assert Path(result.stdout).resolve() == tmp_path.resolve()

    @pytest.mark.asyncio
    async def test_nonzero_exit_returns_failure_with_stderr(self, tmp_path: Path) -> None:
        result = await run_command(
            _python(tmp_path, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)")
        )

        assert isinstance(result, CommandFailure)
        assert result.exit_code == 3
        assert result.stderr == "boom"
        assert result.message == "boom"

    @pytest.mark.asyncio
    async def test_nonzero_exit_without_stderr_falls_back_to_exit_code(
        self, tmp_path: Path
    ) -> None:
        result = await run_command(_python(tmp_path, "-c", "import sys; sys.exit(4)"))

        assert isinstance(result, CommandFailure)
        assert result.message == "Exit code 4"

    @pytest.mark.asyncio
    async def test_missing_program_is_failure_without_exit_code(self, tmp_path: Path) -> None:
        invocation = CommandInvocation(
            program="contextkit-definitely-not-installed",
            arguments=("doctor",),
            working_directory=str(tmp_path),
        )

        result = await run_command(invocation)

        assert isinstance(result, CommandFailure)
        assert result.exit_code is None
        assert not result.launched
        assert result.stderr
        assert classify_failure(result) is FailureKind.TOOL_NOT_FOUND

    @pytest.mark.asyncio
    async def test_multi_megabyte_output_does_not_deadlock(self, tmp_path: Path) -> None:
        script = (
            "import sys\n"
            "sys.stderr.write('e' * (1024 * 1024))\n"
            "sys.stdout.write('x' * (5 * 1024 * 1024))\n"
        )

        result = await run_command(_python(tmp_path, "-c", script), timeout=60)

        assert isinstance(result, CommandSuccess)
        assert len(result.stdout) == 5 * 1024 * 1024
        assert len(result.stderr) == 1024 * 1024

    @pytest.mark.asyncio
    async def test_timeout_kills_process_and_reports_failure(self, tmp_path: Path) -> None:
        with patch(
            "contextkit_bridge.runner.process.kill_process_tree", wraps=kill_process_tree
        ) as mock_kill:
            result = await run_command(
                _python(tmp_path, "-c", "import time; time.sleep(30)"), timeout=0.5
            )

        assert isinstance(result, CommandFailure)
        assert result.timed_out
        assert "timed out" in result.message
        mock_kill.assert_called_once()
        assert classify_failure(result) is FailureKind.UNKNOWN

    @pytest.mark.asyncio
    async def test_no_shell_is_involved(self, tmp_path: Path) -> None:
        with patch(
            "contextkit_bridge.runner.process.asyncio.create_subprocess_shell"
        ) as mock_shell:
            result = await run_command(_python(tmp_path, "-c", ECHO_ARGV1, "ok"))

        assert isinstance(result, CommandSuccess)
        mock_shell.assert_not_called()
