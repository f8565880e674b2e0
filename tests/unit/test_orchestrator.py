import asyncio
from pathlib import Path

import pytest
from fakes import NOT_READY_PAYLOAD, READY_PAYLOAD, FakeHost, ScriptedRunner, failure

from contextkit_bridge.clients.contextkit import ContextKitClient
from contextkit_bridge.config import BridgeConfig
from contextkit_bridge.host.status import StatusReporter
from contextkit_bridge.index.orchestrator import (
    IndexState,
    IndexStatus,
    detect_source_path,
    ensure_indexed,
)
from contextkit_bridge.index.readiness import parse_readiness
from contextkit_bridge.index.session import IndexingSession
from contextkit_bridge.runner.errors import FailureKind
from contextkit_bridge.runner.types import CommandInvocation, CommandResult, CommandSuccess

FULL_RUN = [
    IndexState.IDLE,
    IndexState.CHECKING,
    IndexState.INITIALIZING,
    IndexState.ADDING_SOURCE,
    IndexState.INDEXING,
    IndexState.DONE,
]


class Harness:
    def __init__(self, root: Path, runner: ScriptedRunner) -> None:
        self.root = root
        self.runner = runner
        self.host = FakeHost([str(root)])
        self.client = ContextKitClient(BridgeConfig(), self.host, runner=runner)
        self.session = IndexingSession()
        self.status = StatusReporter()

    async def run(self, *, force: bool = False):
        return await ensure_indexed(
            str(self.root),
            client=self.client,
            session=self.session,
            host=self.host,
            status=self.status,
            force=force,
        )


def _not_ready_runner() -> ScriptedRunner:
    return ScriptedRunner(
        {
            ("doctor", "--json"): CommandSuccess(stdout=NOT_READY_PAYLOAD),
            ("index",): CommandSuccess(stdout="Indexed 42 files\n"),
        }
    )


class TestDetectSourcePath:
    def test_prefers_src_directory(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        assert detect_source_path(str(tmp_path)) == "./src"

    def test_falls_back_to_root(self, tmp_path: Path) -> None:
        assert detect_source_path(str(tmp_path)) == "."

    def test_src_file_is_not_a_source_dir(self, tmp_path: Path) -> None:
        (tmp_path / "src").write_text("not a directory")
        assert detect_source_path(str(tmp_path)) == "."


class TestEnsureIndexed:
    @pytest.mark.asyncio
    async def test_uninitialized_workspace_with_src(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        harness = Harness(tmp_path, _not_ready_runner())

        outcome = await harness.run()

        assert outcome.status is IndexStatus.DONE
        assert outcome.states == FULL_RUN
        assert outcome.source_path == "./src"
        assert outcome.message == "ContextKit: Indexing complete!"
        assert harness.runner.commands == [
            ["doctor", "--json"],
            ["init"],
            ["source", "add", "./src"],
            ["index"],
        ]
        assert all(c.working_directory == str(tmp_path) for c in harness.runner.calls)

    @pytest.mark.asyncio
    async def test_uninitialized_workspace_without_src(self, tmp_path: Path) -> None:
        harness = Harness(tmp_path, _not_ready_runner())

        outcome = await harness.run()

        assert outcome.ok
        assert ["source", "add", "."] in harness.runner.commands

    @pytest.mark.asyncio
    async def test_progress_goes_to_output_log(self, tmp_path: Path) -> None:
        harness = Harness(tmp_path, _not_ready_runner())

        await harness.run()

        assert harness.host.log_shown >= 1
        assert harness.host.lines[0] == "Starting workspace indexing..."
        assert "Initializing ContextKit..." in harness.host.lines
        assert "Indexing files..." in harness.host.lines
        assert "Indexed 42 files" in harness.host.lines

    @pytest.mark.asyncio
    async def test_ready_workspace_only_checks(self, tmp_path: Path) -> None:
        runner = ScriptedRunner({("doctor", "--json"): CommandSuccess(stdout=READY_PAYLOAD)})
        harness = Harness(tmp_path, runner)

        outcome = await harness.run()

        assert outcome.status is IndexStatus.DONE
        assert outcome.states == [IndexState.IDLE, IndexState.CHECKING, IndexState.DONE]
        assert outcome.message == "ContextKit: Workspace already indexed"
        assert runner.commands == [["doctor", "--json"]]

    @pytest.mark.asyncio
    async def test_force_reindexes_ready_workspace(self, tmp_path: Path) -> None:
        runner = ScriptedRunner({("doctor", "--json"): CommandSuccess(stdout=READY_PAYLOAD)})
        harness = Harness(tmp_path, runner)

        outcome = await harness.run(force=True)

        assert outcome.ok
        assert runner.commands == [["doctor", "--json"], ["index"]]
        assert outcome.states == [
            IndexState.IDLE,
            IndexState.CHECKING,
            IndexState.INDEXING,
            IndexState.DONE,
        ]

    @pytest.mark.asyncio
    async def test_supplied_report_skips_doctor(self, tmp_path: Path) -> None:
        harness = Harness(tmp_path, _not_ready_runner())

        outcome = await ensure_indexed(
            str(tmp_path),
            client=harness.client,
            session=harness.session,
            host=harness.host,
            status=harness.status,
            report=parse_readiness(NOT_READY_PAYLOAD),
        )

        assert outcome.states == FULL_RUN
        assert harness.runner.commands == [["init"], ["source", "add", "."], ["index"]]

    @pytest.mark.asyncio
    async def test_failed_check_is_treated_as_not_ready(self, tmp_path: Path) -> None:
        runner = ScriptedRunner({("doctor", "--json"): CommandSuccess(stdout="garbage")})
        harness = Harness(tmp_path, runner)

        outcome = await harness.run()

        assert outcome.ok
        assert [c[0] for c in runner.commands] == ["doctor", "init", "source", "index"]

    @pytest.mark.asyncio
    async def test_init_failure_stops_the_run(self, tmp_path: Path) -> None:
        runner = _not_ready_runner()
        runner.responses[("init",)] = failure("error: permission denied writing .contextkit")
        harness = Harness(tmp_path, runner)

        outcome = await harness.run()

        assert outcome.status is IndexStatus.FAILED
        assert outcome.states[-1] is IndexState.FAILED
        assert IndexState.ADDING_SOURCE not in outcome.states
        assert runner.commands == [["doctor", "--json"], ["init"]]
        assert outcome.message == (
            "ContextKit indexing failed: error: permission denied writing .contextkit"
        )
        assert outcome.to_dict()["failure_kind"] == FailureKind.UNKNOWN.value
        assert harness.session.active is False
        assert harness.status.is_idle

    @pytest.mark.asyncio
    async def test_missing_tool_fails_with_classified_error(self, tmp_path: Path) -> None:
        runner = ScriptedRunner(default=failure("No such file or directory", exit_code=None))
        harness = Harness(tmp_path, runner)

        outcome = await harness.run()

        assert outcome.status is IndexStatus.FAILED
        assert outcome.error is not None
        assert outcome.error.kind is FailureKind.TOOL_NOT_FOUND

    @pytest.mark.asyncio
    async def test_status_shows_indexing_then_returns_to_idle(self, tmp_path: Path) -> None:
        harness = Harness(tmp_path, _not_ready_runner())

        await harness.run()

        assert "Indexing..." in harness.status.history
        assert harness.status.is_idle

    @pytest.mark.asyncio
    async def test_concurrent_run_is_rejected(self, tmp_path: Path) -> None:
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_index(invocation: CommandInvocation) -> CommandResult:
            started.set()
            await release.wait()
            return CommandSuccess(stdout="done")

        runner = _not_ready_runner()
        runner.responses[("index",)] = slow_index
        harness = Harness(tmp_path, runner)

        first = asyncio.create_task(harness.run())
        await started.wait()
        calls_before = len(runner.calls)

        second = await harness.run()

        assert second.status is IndexStatus.ALREADY_RUNNING
        assert second.message == "ContextKit: Indexing already in progress"
        assert second.states == []
        assert len(runner.calls) == calls_before

        release.set()
        assert (await first).ok
        assert harness.session.active is False

    @pytest.mark.asyncio
    async def test_session_is_reusable_after_failure(self, tmp_path: Path) -> None:
        runner = ScriptedRunner(default=failure("boom"))
        harness = Harness(tmp_path, runner)

        assert (await harness.run()).status is IndexStatus.FAILED

        runner.default = CommandSuccess(stdout="")
        runner.responses[("doctor", "--json")] = CommandSuccess(stdout=READY_PAYLOAD)
        assert (await harness.run()).ok
