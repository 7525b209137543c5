"""Resolution of the remote host that publishes the rsync servers."""

import asyncio
from typing import Protocol

import structlog

from rsync_watch.config.models import SettingsConfig
from rsync_watch.core.exceptions import HostResolutionError
from rsync_watch.security.validation import sanitize_log_input, validate_hostname

logger = structlog.get_logger(__name__)


class HostResolver(Protocol):
    """Anything that can tell where the rsync servers live."""

    async def resolve(self) -> str:
        ...


class StaticHostResolver:
    """Resolver for a fixed host name or address."""

    def __init__(self, host: str) -> None:
        self.host = host

    async def resolve(self) -> str:
        return self.host

    def __repr__(self) -> str:
        return f"StaticHostResolver({self.host!r})"


class DockerMachineResolver:
    """Resolver asking docker-machine for the IP address of a machine."""

    def __init__(self, machine_name: str = "default", executable: str = "docker-machine") -> None:
        self.machine_name = machine_name
        self.executable = executable

    async def resolve(self) -> str:
        """Run ``docker-machine ip <name>``.

        Returns:
            IP address of the machine

        Raises:
            HostResolutionError: If docker-machine is missing, fails, or prints no address
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                "ip",
                self.machine_name,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise HostResolutionError(
                f"{self.executable} is not installed", machine_name=self.machine_name
            ) from e

        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip() or f"exit status {process.returncode}"
            raise HostResolutionError(
                f"{self.executable} ip {self.machine_name} failed: {sanitize_log_input(message)}",
                machine_name=self.machine_name,
            )

        address = stdout.decode(errors="replace").strip()
        if not validate_hostname(address):
            raise HostResolutionError(
                f"{self.executable} ip {self.machine_name} returned no usable address",
                machine_name=self.machine_name,
            )

        logger.debug("Resolved docker-machine address", machine=self.machine_name, address=address)
        return address

    def __repr__(self) -> str:
        return f"DockerMachineResolver({self.machine_name!r})"


def create_host_resolver(settings: SettingsConfig) -> HostResolver:
    """Pick the resolver matching the settings."""
    if settings.host:
        return StaticHostResolver(settings.host)
    return DockerMachineResolver(settings.docker_machine_name)
