"""Component factory for building supervisors from configuration."""

from typing import List, Optional

import structlog
from rich.console import Console

from rsync_watch.config.loader import ConfigurationError
from rsync_watch.config.models import RsyncWatchConfig, ServiceConfig, SettingsConfig
from rsync_watch.core.hosts import HostResolver, create_host_resolver
from rsync_watch.core.orchestrator import SyncOrchestrator
from rsync_watch.core.output import ColorCycle, ServiceOutput
from rsync_watch.core.runner import CommandRunner
from rsync_watch.core.supervisor import ServiceSupervisor
from rsync_watch.core.worker import SyncWorker
from rsync_watch.security.validation import sanitize_log_input

logger = structlog.get_logger(__name__)


class ComponentFactory:
    """Factory for creating the sync components of each service."""

    @staticmethod
    def select_services(
        config: RsyncWatchConfig,
        service_names: Optional[List[str]] = None,
    ) -> List[str]:
        """Resolve which services to run.

        Args:
            config: Full configuration
            service_names: Requested service names (all services if empty)

        Returns:
            Service names in configuration order

        Raises:
            ConfigurationError: If a requested service is not configured
        """
        if not service_names:
            return list(config.services.keys())

        unknown = [name for name in service_names if name not in config.services]
        if unknown:
            raise ConfigurationError(
                f"Unknown services: {', '.join(sanitize_log_input(n) for n in unknown)}. "
                f"Configured services: {', '.join(config.services.keys())}"
            )

        return [name for name in config.services if name in service_names]

    @staticmethod
    def create_supervisor(
        service_name: str,
        service: ServiceConfig,
        settings: SettingsConfig,
        console: Console,
        color: str,
        resolver: Optional[HostResolver] = None,
        max_cycles: Optional[int] = None,
    ) -> ServiceSupervisor:
        """Create the supervisor, worker and runner of one service.

        Args:
            service_name: Name of the service
            service: Service configuration
            settings: Shared settings
            console: Console service lines are printed to
            color: Color of the service prefix
            resolver: Host resolver (created from settings if not given)
            max_cycles: Optional limit of supervision cycles

        Returns:
            Configured supervisor
        """
        output = ServiceOutput(console, service_name, color)
        runner = CommandRunner(output, settings.compiled_error_pattern())
        worker = SyncWorker(
            service_name=service_name,
            service=service,
            settings=settings,
            output=output,
            runner=runner,
        )

        return ServiceSupervisor(
            service_name=service_name,
            service=service,
            settings=settings,
            output=output,
            resolver=resolver or create_host_resolver(settings),
            worker=worker,
            max_cycles=max_cycles,
        )

    @staticmethod
    def create_orchestrator(
        config: RsyncWatchConfig,
        console: Console,
        service_names: Optional[List[str]] = None,
        color_cycle: Optional[ColorCycle] = None,
        max_cycles: Optional[int] = None,
    ) -> SyncOrchestrator:
        """Create an orchestrator running the selected services.

        Args:
            config: Full configuration
            console: Console service lines are printed to
            service_names: Services to run (all if empty)
            color_cycle: Source of service colors
            max_cycles: Optional limit of supervision cycles per service

        Returns:
            Configured orchestrator
        """
        selected = ComponentFactory.select_services(config, service_names)
        colors = color_cycle or ColorCycle()
        resolver = create_host_resolver(config.settings)

        supervisors = []
        for name in selected:
            supervisors.append(
                ComponentFactory.create_supervisor(
                    service_name=name,
                    service=config.services[name],
                    settings=config.settings,
                    console=console,
                    color=colors.next(),
                    resolver=resolver,
                    max_cycles=max_cycles,
                )
            )
            logger.debug("Created supervisor", service=name)

        return SyncOrchestrator(supervisors)
