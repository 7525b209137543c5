"""Output formatters for CLI commands."""

from typing import Dict, List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rsync_watch.config.models import RsyncWatchConfig
from rsync_watch.core.state import ServiceState, ServiceStatus
from rsync_watch.security.validation import sanitize_log_input

STATE_STYLES = {
    ServiceState.WAITING: "yellow",
    ServiceState.INITIAL_SYNC: "blue",
    ServiceState.WATCHING: "green",
    ServiceState.RESTARTING: "magenta",
    ServiceState.STOPPED: "dim",
}


class StatusFormatter:
    """Formats service statuses for display."""

    def __init__(self, console: Console):
        self.console = console

    def format_status_table(self, statuses: List[ServiceStatus]) -> None:
        """Display the status of every service."""
        if not statuses:
            self.console.print("[yellow]No services were run[/yellow]")
            return

        table = Table(title="Service Status")
        table.add_column("Service", style="cyan")
        table.add_column("State")
        table.add_column("Host", style="white")
        table.add_column("Cycles", style="green", justify="right")
        table.add_column("Failures", style="red", justify="right")
        table.add_column("Unreachable", style="yellow", justify="right")
        table.add_column("Last Error", style="red")

        for status in statuses:
            summary = status.get_summary()
            style = STATE_STYLES.get(status.state, "white")
            table.add_row(
                escape(sanitize_log_input(summary["service"])),
                f"[{style}]{summary['state']}[/{style}]",
                escape(summary["host"]),
                str(summary["cycles"]),
                str(summary["failures"]),
                str(summary["unreachable"]),
                escape(sanitize_log_input(summary["last_error"])),
            )

        self.console.print(table)


class ConfigFormatter:
    """Formats configuration information for display."""

    def __init__(self, console: Console):
        self.console = console

    def format_config_summary(self, config: RsyncWatchConfig) -> None:
        """Display settings and a table of services."""
        settings = config.settings

        table = Table(title="Settings")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        if settings.host:
            table.add_row("Remote Host", escape(settings.host))
        else:
            table.add_row("Docker Machine", escape(settings.docker_machine_name))
        table.add_row("Remote User", escape(settings.remote_user))
        table.add_row("RSA Key", escape(str(settings.rsa_key_path)))
        table.add_row("Poll Interval", f"{settings.poll_interval}s")
        table.add_row("Error Pattern", escape(settings.error_pattern))
        self.console.print(table)

        services = Table(title="Services")
        services.add_column("Service", style="cyan")
        services.add_column("Context", style="white")
        services.add_column("Volume", style="magenta")
        services.add_column("Port", style="green", justify="right")
        services.add_column("Excludes", style="yellow")

        for name, service in config.services.items():
            services.add_row(
                escape(sanitize_log_input(name)),
                escape(str(service.context)),
                escape(service.volume_name),
                str(service.rsync_ssh_port),
                escape(", ".join(service.exclude)) or "-",
            )

        self.console.print(services)

    def format_validation_warnings(self, warnings: List[str]) -> None:
        """Display configuration warnings."""
        if not warnings:
            return

        self.console.print("[yellow]Warnings:[/yellow]")
        for i, warning in enumerate(warnings, 1):
            self.console.print(f"  {i}. {escape(sanitize_log_input(warning))}")


class PlanFormatter:
    """Formats the commands each service would run."""

    def __init__(self, console: Console):
        self.console = console

    def format_plan(self, commands: Dict[str, List[str]]) -> None:
        """Display commands grouped by service."""
        for service_name, service_commands in commands.items():
            self.console.print(f"[bold cyan]Service: {escape(service_name)}[/bold cyan]")
            for i, command in enumerate(service_commands, 1):
                self.console.print(f"  [dim]{i}.[/dim] {escape(command)}", soft_wrap=True)
            self.console.print()
