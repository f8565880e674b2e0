from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from contextkit_bridge.host.base import NoticeLevel
from contextkit_bridge.host.mcp import McpHost
from contextkit_bridge.host.status import HISTORY_LIMIT, IDLE_TEXT, StatusReporter
from contextkit_bridge.host.terminal import TerminalHost


class TestStatusReporter:
    def test_busy_restores_idle_on_error(self) -> None:
        status = StatusReporter()

        with pytest.raises(ValueError):
            with status.busy("Finding context..."):
                assert status.text == "Finding context..."
                raise ValueError("boom")

        assert status.text == IDLE_TEXT
        assert list(status.history) == ["Finding context...", IDLE_TEXT]

    def test_history_is_bounded(self) -> None:
        status = StatusReporter()

        for i in range(HISTORY_LIMIT * 3):
            with status.busy(f"step {i}"):
                pass

        assert len(status.history) == HISTORY_LIMIT
        assert status.history[-1] == IDLE_TEXT
        assert status.history[-2] == f"step {HISTORY_LIMIT * 3 - 1}"

    def test_visibility(self) -> None:
        status = StatusReporter()
        status.show()
        assert status.visible
        status.hide()
        assert not status.visible


class TestMcpHost:
    @pytest.mark.asyncio
    async def test_folders_from_roots(self) -> None:
        root = MagicMock()
        root.uri = "file:///work/app"
        ctx = MagicMock()
        ctx.list_roots = AsyncMock(return_value=[root])

        assert await McpHost(ctx).workspace_folders() == ["file:///work/app"]

    @pytest.mark.asyncio
    async def test_roots_failure_means_no_folders(self) -> None:
        ctx = MagicMock()
        ctx.list_roots = AsyncMock(side_effect=RuntimeError("roots not supported"))

        assert await McpHost(ctx).workspace_folders() == []

    @pytest.mark.asyncio
    async def test_prompts_are_declined_and_notices_collected(self) -> None:
        host = McpHost()

        assert await host.prompt("Initialize now?", "Initialize") is None
        await host.notify(NoticeLevel.WARNING, "careful")

        assert host.declined_prompts == ["Initialize now?"]
        assert host.response_extras() == {
            "notices": [{"level": "warning", "message": "careful"}]
        }

    def test_no_extras_without_notices(self) -> None:
        assert McpHost().response_extras() == {}


class TestTerminalHost:
    @pytest.mark.asyncio
    async def test_assume_yes_picks_first_action(self) -> None:
        host = TerminalHost(assume_yes=True, interactive=False)
        assert await host.prompt("Initialize now?", "Initialize") == "Initialize"

    @pytest.mark.asyncio
    async def test_non_interactive_declines(self) -> None:
        host = TerminalHost(interactive=False)
        with patch("contextkit_bridge.host.terminal.click.confirm") as mock_confirm:
            assert await host.prompt("Initialize now?", "Initialize") is None
        mock_confirm.assert_not_called()

    @pytest.mark.asyncio
    async def test_interactive_confirm(self) -> None:
        host = TerminalHost(interactive=True)
        with patch("contextkit_bridge.host.terminal.click.confirm", return_value=True):
            assert await host.prompt("Initialize now?", "Initialize") == "Initialize"

    @pytest.mark.asyncio
    async def test_defaults_to_current_directory(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert await TerminalHost().workspace_folders() == [str(tmp_path)]

    def test_show_log_flushes_buffered_lines(self, capsys: pytest.CaptureFixture[str]) -> None:
        host = TerminalHost()
        host.log("Running: contextkit index")
        assert capsys.readouterr().err == ""

        host.show_log()
        assert "Running: contextkit index" in capsys.readouterr().err

        host.log("Indexing files...")
        assert "Indexing files..." in capsys.readouterr().err
