"""Tests for SyncWorker."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import notices
from rsync_watch.config.models import ServiceConfig
from rsync_watch.core.commands import SyncCommandBuilder
from rsync_watch.core.exceptions import CommandFailedError, FailurePatternDetected, OutputOverflowError
from rsync_watch.core.runner import CommandRunner
from rsync_watch.core.state import ServiceState
from rsync_watch.core.worker import SyncWorker

HOST = "10.0.0.5"


@pytest.fixture
def mock_runner():
    runner = MagicMock(spec=CommandRunner)
    runner.run = AsyncMock()
    return runner


def make_worker(service, settings, output, runner):
    return SyncWorker(
        service_name="web",
        service=service,
        settings=settings,
        output=output,
        runner=runner,
    )


def run_commands(runner) -> list:
    return [call.args[0] for call in runner.run.call_args_list]


class TestSyncWorker:
    """Test the order and failure handling of sync steps."""

    @pytest.mark.asyncio
    async def test_runs_initial_then_watch(
        self, service_config, settings_config, mock_output, mock_runner, service_status
    ):
        worker = make_worker(service_config, settings_config, mock_output, mock_runner)
        builder = SyncCommandBuilder(settings_config, service_config, HOST)

        await worker.run(HOST, service_status)

        assert run_commands(mock_runner) == [
            builder.initial_sync_command(),
            builder.watch_command(),
        ]
        assert notices(mock_output) == [
            "Initial sync started",
            "Initial sync finished",
            "Incremental sync started",
        ]
        assert service_status.state == ServiceState.WATCHING
        assert service_status.failures == 0

    @pytest.mark.asyncio
    async def test_runs_remote_command(self, settings_config, mock_output, mock_runner, service_status):
        service = ServiceConfig(
            context=Path("/src/app"),
            volume_name="/app",
            rsync_ssh_port=2222,
            remote_command="python3 -m http.server 5001",
        )
        worker = make_worker(service, settings_config, mock_output, mock_runner)
        builder = SyncCommandBuilder(settings_config, service, HOST)

        await worker.run(HOST, service_status)

        assert run_commands(mock_runner) == builder.all_commands()

    @pytest.mark.asyncio
    async def test_initial_sync_failure_stops_worker(
        self, service_config, settings_config, mock_output, mock_runner, service_status
    ):
        mock_runner.run.side_effect = CommandFailedError("rsync ...", 12)
        worker = make_worker(service_config, settings_config, mock_output, mock_runner)

        await worker.run(HOST, service_status)

        assert mock_runner.run.call_count == 1
        assert notices(mock_output) == ["Initial sync started"]
        assert service_status.failures == 1
        assert service_status.last_error == "Command exited with status 12"
        assert service_status.state == ServiceState.INITIAL_SYNC

    @pytest.mark.asyncio
    async def test_watch_failure_recorded(
        self, service_config, settings_config, mock_output, mock_runner, service_status
    ):
        mock_runner.run.side_effect = [None, FailurePatternDetected("fswatch ...", "rsync error: boom")]
        worker = make_worker(service_config, settings_config, mock_output, mock_runner)

        await worker.run(HOST, service_status)

        assert mock_runner.run.call_count == 2
        assert service_status.failures == 1
        assert "rsync error: boom" in service_status.last_error

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(
        self, service_config, settings_config, mock_output, mock_runner, service_status
    ):
        mock_runner.run.side_effect = OSError("cannot spawn shell")
        worker = make_worker(service_config, settings_config, mock_output, mock_runner)

        with pytest.raises(OSError):
            await worker.run(HOST, service_status)

    @pytest.mark.asyncio
    async def test_output_overflow_recorded(
        self, service_config, settings_config, mock_output, mock_runner, service_status
    ):
        mock_runner.run.side_effect = [None, OutputOverflowError("fswatch ...", 1024)]
        worker = make_worker(service_config, settings_config, mock_output, mock_runner)

        await worker.run(HOST, service_status)

        assert service_status.failures == 1
        assert service_status.last_error == "Output line longer than 1024 bytes"
