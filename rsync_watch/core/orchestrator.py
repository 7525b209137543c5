"""Runs the supervisors of all selected services concurrently."""

import asyncio
from typing import List

import structlog

from rsync_watch.core.state import ServiceStatus
from rsync_watch.core.supervisor import ServiceSupervisor
from rsync_watch.security.validation import sanitize_log_input

logger = structlog.get_logger(__name__)


class SyncOrchestrator:
    """Owns one supervisor per service and runs them side by side."""

    def __init__(self, supervisors: List[ServiceSupervisor]) -> None:
        self.supervisors = supervisors
        self._logger = logger.bind(services=[s.service_name for s in supervisors])

    async def run(self) -> List[ServiceStatus]:
        """Run every supervisor until all of them have stopped.

        A supervisor that crashes is logged and does not take the others
        down. Cancelling this coroutine cancels every supervisor.

        Returns:
            Final status of each service
        """
        self._logger.info("Starting supervisors", count=len(self.supervisors))

        tasks = [
            asyncio.create_task(supervisor.run(), name=f"supervisor-{supervisor.service_name}")
            for supervisor in self.supervisors
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for supervisor, result in zip(self.supervisors, results):
            if isinstance(result, BaseException) and not isinstance(result, asyncio.CancelledError):
                supervisor.status.record_failure(f"Supervisor crashed: {result}")
                self._logger.error(
                    "Supervisor crashed",
                    service=supervisor.service_name,
                    error=sanitize_log_input(str(result)),
                    exc_info=result,
                )

        return self.statuses()

    def stop(self) -> None:
        """Ask every supervisor to stop."""
        for supervisor in self.supervisors:
            supervisor.stop()

    def statuses(self) -> List[ServiceStatus]:
        return [supervisor.status for supervisor in self.supervisors]
