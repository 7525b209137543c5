"""Sync worker: initial sync, remote command, then incremental sync on change."""

import structlog

from rsync_watch.config.models import ServiceConfig, SettingsConfig
from rsync_watch.core.commands import SyncCommandBuilder
from rsync_watch.core.exceptions import SyncCommandError
from rsync_watch.core.output import ServiceOutput
from rsync_watch.core.runner import CommandRunner
from rsync_watch.core.state import ServiceState, ServiceStatus
from rsync_watch.security.validation import sanitize_log_input

logger = structlog.get_logger(__name__)


class SyncWorker:
    """Runs the sync pipeline of one service against one host."""

    def __init__(
        self,
        service_name: str,
        service: ServiceConfig,
        settings: SettingsConfig,
        output: ServiceOutput,
        runner: CommandRunner,
    ) -> None:
        self.service_name = service_name
        self.service = service
        self.settings = settings
        self.output = output
        self.runner = runner
        self._logger = logger.bind(service=service_name)

    async def run(self, host: str, status: ServiceStatus) -> None:
        """Run the pipeline until a step fails or the watch command ends.

        A failed step ends the worker normally; the supervisor decides
        what happens next.

        Args:
            host: Address of the rsync server
            status: Status record updated as the pipeline progresses
        """
        builder = SyncCommandBuilder(self.settings, self.service, host)

        try:
            status.transition(ServiceState.INITIAL_SYNC)
            self.output.notice("Initial sync started")
            await self.runner.run(builder.initial_sync_command())
            self.output.notice("Initial sync finished")

            remote_command = builder.remote_command_line()
            if remote_command:
                self._logger.info("Starting remote command", host=host)
                await self.runner.run(remote_command)

            status.transition(ServiceState.WATCHING)
            self.output.notice("Incremental sync started")
            await self.runner.run(builder.watch_command())

            self._logger.info("Watch command ended", host=host)

        except SyncCommandError as e:
            status.record_failure(e.message)
            self._logger.warning(
                "Sync step failed",
                host=host,
                error=sanitize_log_input(e.message),
            )
