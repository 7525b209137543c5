"""Supervision core: probes, commands, workers and supervisors."""

from .commands import SyncCommandBuilder, check_tools_available, required_tools
from .exceptions import (
    CommandFailedError,
    FailurePatternDetected,
    HostResolutionError,
    OutputOverflowError,
    RsyncWatchError,
    SyncCommandError,
)
from .hosts import DockerMachineResolver, StaticHostResolver, create_host_resolver
from .network import port_open, wait_for_port
from .orchestrator import SyncOrchestrator
from .runner import CommandRunner
from .state import ServiceState, ServiceStatus
from .supervisor import ServiceSupervisor
from .worker import SyncWorker

__all__ = [
    "CommandFailedError",
    "CommandRunner",
    "DockerMachineResolver",
    "FailurePatternDetected",
    "HostResolutionError",
    "OutputOverflowError",
    "RsyncWatchError",
    "ServiceState",
    "ServiceStatus",
    "ServiceSupervisor",
    "StaticHostResolver",
    "SyncCommandBuilder",
    "SyncCommandError",
    "SyncOrchestrator",
    "SyncWorker",
    "check_tools_available",
    "create_host_resolver",
    "port_open",
    "required_tools",
    "wait_for_port",
]
