"""Shell command lines for the rsync, ssh and fswatch pipeline of a service."""

import shlex
import shutil
from typing import Iterable, List, Optional

from rsync_watch.config.models import ServiceConfig, SettingsConfig

REQUIRED_TOOLS = ["rsync", "ssh", "fswatch", "xargs"]


class SyncCommandBuilder:
    """Builds the commands that keep one service in sync with its remote volume.

    Every value coming from configuration is quoted, so excludes and paths
    containing spaces or shell metacharacters reach the tools unchanged.
    """

    def __init__(self, settings: SettingsConfig, service: ServiceConfig, host: str) -> None:
        """Initialize the command builder.

        Args:
            settings: Shared settings (key path, remote user)
            service: Service being synchronized
            host: Resolved address of the rsync server
        """
        self.settings = settings
        self.service = service
        self.host = host

    @property
    def ssh_command(self) -> str:
        """ssh invocation used as rsync's remote shell."""
        return shlex.join([
            "ssh",
            "-o", "UserKnownHostsFile=/dev/null",
            "-o", "StrictHostKeyChecking=no",
            "-i", str(self.settings.rsa_key_path),
            "-p", str(self.service.rsync_ssh_port),
        ])

    @property
    def remote_login(self) -> str:
        return f"{self.settings.remote_user}@{self.host}"

    @property
    def remote_target(self) -> str:
        return f"{self.remote_login}:{self.service.volume_name}"

    @property
    def source(self) -> str:
        # Trailing slash: sync the directory contents, not the directory itself
        return f"{str(self.service.context).rstrip('/')}/"

    def rsync_options(self) -> List[str]:
        """Configured rsync options followed by one --exclude per pattern."""
        options = list(self.service.rsync_options)
        for pattern in self.service.exclude:
            options.extend(["--exclude", pattern])
        return options

    def fswatch_excludes(self) -> List[str]:
        excludes: List[str] = []
        for pattern in self.service.exclude:
            excludes.extend(["-e", pattern])
        return excludes

    def rsync_command(self) -> str:
        """rsync of the whole context into the remote volume."""
        return shlex.join([
            "rsync",
            *self.rsync_options(),
            "-e", self.ssh_command,
            self.source,
            self.remote_target,
        ])

    def initial_sync_command(self) -> str:
        return self.rsync_command()

    def watch_command(self) -> str:
        """fswatch pipeline running one rsync per batch of file changes."""
        fswatch = shlex.join([
            "fswatch", "-0", "-o",
            *self.fswatch_excludes(),
            str(self.service.context),
        ])
        return f"{fswatch} | xargs -0 -I {{}} {self.rsync_command()}"

    def remote_command_line(self) -> Optional[str]:
        """Detached command started on the remote host, if one is configured."""
        if not self.service.remote_command:
            return None
        return (
            f"{self.ssh_command} {shlex.quote(self.remote_login)} "
            f"{shlex.quote(self.service.remote_command)} >/dev/null 2>&1 &"
        )

    def all_commands(self) -> List[str]:
        """Commands in the order a worker runs them."""
        commands = [self.initial_sync_command()]
        remote = self.remote_command_line()
        if remote:
            commands.append(remote)
        commands.append(self.watch_command())
        return commands


def required_tools(settings: SettingsConfig) -> List[str]:
    """Executables needed for the given settings."""
    tools = list(REQUIRED_TOOLS)
    if not settings.host:
        tools.append("docker-machine")
    return tools


def check_tools_available(tools: Iterable[str]) -> List[str]:
    """Find which executables are missing from PATH.

    Args:
        tools: Executable names

    Returns:
        Names of the executables that could not be found
    """
    return [tool for tool in tools if shutil.which(tool) is None]
