"""Per-service supervision loop.

A supervisor waits for the rsync server of its service, starts a sync
worker and keeps probing the server while the worker runs. When the server
stops answering, or the worker ends, the worker is torn down together with
its subprocesses and a new cycle begins.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Protocol

import structlog

from rsync_watch.config.models import ServiceConfig, SettingsConfig
from rsync_watch.core.exceptions import HostResolutionError
from rsync_watch.core.hosts import HostResolver
from rsync_watch.core.network import interruptible_sleep, port_open
from rsync_watch.core.output import ServiceOutput
from rsync_watch.core.state import ServiceState, ServiceStatus
from rsync_watch.security.validation import sanitize_log_input

logger = structlog.get_logger(__name__)

Probe = Callable[[str, int, float], Awaitable[bool]]

WORKER_EXITED = "worker_exited"
UNREACHABLE = "unreachable"
STOPPED = "stopped"


class Worker(Protocol):
    async def run(self, host: str, status: ServiceStatus) -> None:
        ...


class ServiceSupervisor:
    """Keeps the sync worker of one service running while its server is reachable."""

    def __init__(
        self,
        service_name: str,
        service: ServiceConfig,
        settings: SettingsConfig,
        output: ServiceOutput,
        resolver: HostResolver,
        worker: Worker,
        probe: Probe = port_open,
        max_cycles: Optional[int] = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            service_name: Name of the service
            service: Service configuration
            settings: Shared settings (intervals, timeouts)
            output: Console output of the service
            resolver: Resolver for the rsync server address
            worker: Worker running the sync pipeline
            probe: Reachability check, ``probe(host, port, timeout)``
            max_cycles: Stop after this many worker starts (unbounded if None)
        """
        self.service_name = service_name
        self.service = service
        self.settings = settings
        self.output = output
        self.resolver = resolver
        self.worker = worker
        self.probe = probe
        self.max_cycles = max_cycles

        self.status = ServiceStatus(service_name=service_name)
        self._stop_event = asyncio.Event()
        self._logger = logger.bind(service=service_name, port=service.rsync_ssh_port)

    @property
    def port(self) -> int:
        return self.service.rsync_ssh_port

    def stop(self) -> None:
        """Ask the loop to end at its next checkpoint."""
        self._stop_event.set()

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    async def run(self) -> ServiceStatus:
        """Run supervision cycles until stopped.

        Returns:
            Final status of the service
        """
        self._logger.info("Supervisor started")
        try:
            while not self.stopping:
                if self.max_cycles is not None and self.status.cycles >= self.max_cycles:
                    break

                host = await self._wait_for_server()
                if host is None:
                    break

                await self._run_cycle(host)

                if self.stopping:
                    break
                self.status.transition(ServiceState.RESTARTING)
                if await interruptible_sleep(self.settings.restart_delay, self._stop_event):
                    break
        finally:
            self.status.transition(ServiceState.STOPPED)
            self._logger.info(
                "Supervisor stopped",
                cycles=self.status.cycles,
                failures=self.status.failures,
            )
        return self.status

    async def _wait_for_server(self) -> Optional[str]:
        """Poll until the rsync server answers.

        Returns:
            The reachable host, or None if stopped while waiting
        """
        self.status.transition(ServiceState.WAITING)
        self.output.notice("Waiting for rsync server")

        while not self.stopping:
            try:
                host = await self.resolver.resolve()
            except HostResolutionError as e:
                self._logger.warning("Host resolution failed", error=sanitize_log_input(str(e)))
            else:
                if await self.probe(host, self.port, self.settings.connect_timeout):
                    self.status.host = host
                    self._logger.info("Rsync server reachable", host=host)
                    return host

            if await interruptible_sleep(self.settings.poll_interval, self._stop_event):
                break

        return None

    async def _run_cycle(self, host: str) -> str:
        """Start a worker and watch it until it must be torn down.

        Returns:
            Why the cycle ended
        """
        self.status.cycles += 1
        worker_task = asyncio.create_task(
            self.worker.run(host, self.status),
            name=f"sync-worker-{self.service_name}",
        )

        try:
            reason = await self._watch(host, worker_task)
        finally:
            await self._teardown(worker_task)

        self._check_worker_result(worker_task)

        if reason == UNREACHABLE:
            self.status.unreachable_events += 1
            self.output.notice("Rsync server unreachable")
            self._logger.warning("Rsync server unreachable", host=host)
        elif reason == WORKER_EXITED:
            self.output.notice("Sync worker stopped - restarting")

        return reason

    async def _watch(self, host: str, worker_task: asyncio.Task) -> str:
        """Probe the server while the worker runs."""
        while not worker_task.done():
            if self.stopping:
                return STOPPED
            if not await self.probe(host, self.port, self.settings.connect_timeout):
                return UNREACHABLE
            await asyncio.wait({worker_task}, timeout=self.settings.poll_interval)
        return WORKER_EXITED

    async def _teardown(self, worker_task: asyncio.Task) -> None:
        """Cancel the worker if it is still running and wait for it to finish."""
        if not worker_task.done():
            worker_task.cancel()
        await asyncio.wait({worker_task})

    def _check_worker_result(self, worker_task: asyncio.Task) -> None:
        if worker_task.cancelled():
            return
        error = worker_task.exception()
        if error is not None:
            self.status.record_failure(f"Worker crashed: {error}")
            self._logger.error(
                "Sync worker crashed",
                error=sanitize_log_input(str(error)),
                exc_info=error,
            )
