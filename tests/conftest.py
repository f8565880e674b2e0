from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest
from fakes import FakeHost, ScriptedRunner

from contextkit_bridge.bridge import Bridge
from contextkit_bridge.config import BridgeConfig
from contextkit_bridge.workflows.context import WorkflowContext


@pytest.fixture
def runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture
def host(tmp_path: Path) -> FakeHost:
    return FakeHost(folders=[str(tmp_path)])


@pytest.fixture
def config() -> BridgeConfig:
    return BridgeConfig()


@pytest.fixture
def bridge(config: BridgeConfig, runner: ScriptedRunner) -> Bridge:
    return Bridge(config, runner=runner)


@pytest.fixture
def ctx(bridge: Bridge, host: FakeHost) -> WorkflowContext:
    return bridge.context(host)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in [
        "CONTEXTKIT_CLI_PATH",
        "CONTEXTKIT_DEFAULT_BUDGET",
        "CONTEXTKIT_AUTO_INDEX",
        "CONTEXTKIT_SHOW_NOTIFICATIONS",
        "CONTEXTKIT_BASE_DIR",
        "CONTEXTKIT_TIMEOUT_SECONDS",
    ]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def isolated_log_paths(tmp_path: Path) -> Generator[Path, None, None]:
    """Keep event and trace logs out of the real state directory."""
    log_dir = tmp_path / "_logs"
    with (
        patch("contextkit_bridge.config.settings.LOG_PATH", log_dir / "events.log"),
        patch("contextkit_bridge.config.settings.TRACE_PATH", log_dir / "trace.log"),
    ):
        yield log_dir
