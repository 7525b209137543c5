"""Main CLI application using modular components."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape

from rsync_watch.cli.factory import ComponentFactory
from rsync_watch.cli.formatters import ConfigFormatter, PlanFormatter, StatusFormatter
from rsync_watch.config.base_models import LogFormat, LogLevel
from rsync_watch.config.loader import (
    ConfigLoader,
    ConfigurationError,
    find_config_file,
    validate_service_paths,
    validate_service_ports,
)
from rsync_watch.config.models import RsyncWatchConfig
from rsync_watch.core.commands import SyncCommandBuilder, check_tools_available, required_tools
from rsync_watch.core.exceptions import HostResolutionError
from rsync_watch.core.hosts import create_host_resolver
from rsync_watch.security.validation import (
    sanitize_log_input,
    validate_cli_string_input,
    validate_file_path,
    validate_hostname,
)

# Initialize rich console for output
console = Console()
logger = structlog.get_logger(__name__)

EXIT_INTERRUPTED = 130

# Create Typer app
app = typer.Typer(
    name="rsync-watch",
    help="Keep local directories synchronized into remote containers with rsync.",
    rich_markup_mode="rich",
    add_completion=False,
)


def setup_logging(log_level: str = "INFO", log_format: str = "text") -> None:
    """Setup structured logging.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: Log format (json or text).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level.upper(),
        force=True,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format.lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def abort(message: str) -> NoReturn:
    """Print a critical error and exit."""
    console.print(f"[red]{escape(f'[CRITICAL] {message}, aborting')}[/red]")
    raise typer.Exit(1)


def load_configuration(config_file: Optional[Path] = None) -> RsyncWatchConfig:
    """Load and validate configuration.

    Args:
        config_file: Optional path to config file

    Returns:
        Validated configuration

    Raises:
        typer.Exit: If configuration loading fails
    """
    if config_file is None:
        config_file = find_config_file()
        if config_file is None:
            abort("Missing config file")

    if not validate_file_path(str(config_file)):
        abort(f"Invalid or unsafe configuration file path: {sanitize_log_input(str(config_file))}")

    try:
        config = ConfigLoader().load_config(config_file)
    except ConfigurationError as e:
        abort(sanitize_log_input(str(e)))

    console.print(f"[green]✓[/green] Loaded configuration from {escape(str(config_file))}")
    return config


def check_service_names(services: Optional[List[str]]) -> None:
    """Abort on --service values that cannot be service names."""
    for name in services or []:
        if not validate_cli_string_input(name, max_length=100):
            abort(f"Invalid service name: {sanitize_log_input(name)}")


@app.command()
def run(
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", "--file", "-f", help="Path to the YAML configuration file"
    ),
    services: Optional[List[str]] = typer.Option(
        None, "--service", "-s", help="Service to synchronize (repeatable, default: all)"
    ),
    log_level: Optional[LogLevel] = typer.Option(
        None, "--log-level", "-l", help="Log level (overrides the configuration)"
    ),
    log_format: Optional[LogFormat] = typer.Option(
        None, "--log-format", help="Log format (overrides the configuration)"
    ),
) -> None:
    """Synchronize services and restart them whenever their rsync server goes away."""
    check_service_names(services)
    config = load_configuration(config_file)

    setup_logging(
        (log_level or config.settings.log_level).value,
        (log_format or config.settings.log_format).value,
    )

    missing = check_tools_available(required_tools(config.settings))
    if missing:
        abort(f"Required tools not found in PATH: {', '.join(missing)}")

    try:
        orchestrator = ComponentFactory.create_orchestrator(config, console, services)
    except ConfigurationError as e:
        abort(sanitize_log_input(str(e)))

    exit_code = 0
    try:
        asyncio.run(orchestrator.run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted, stopping all services[/yellow]")
        exit_code = EXIT_INTERRUPTED

    StatusFormatter(console).format_status_table(orchestrator.statuses())

    if exit_code:
        raise typer.Exit(exit_code)


@app.command()
def validate(
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", "--file", "-f", help="Path to the YAML configuration file"
    ),
) -> None:
    """Validate configuration file."""
    console.print("[blue]Validating configuration...[/blue]")

    config = load_configuration(config_file)
    formatter = ConfigFormatter(console)
    formatter.format_config_summary(config)

    warnings = validate_service_paths(config) + validate_service_ports(config)
    missing = check_tools_available(required_tools(config.settings))
    if missing:
        warnings.append(f"Required tools not found in PATH: {', '.join(missing)}")
    formatter.format_validation_warnings(warnings)

    console.print("[green]✓ Configuration is valid[/green]")


@app.command()
def plan(
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", "--file", "-f", help="Path to the YAML configuration file"
    ),
    services: Optional[List[str]] = typer.Option(
        None, "--service", "-s", help="Service to show (repeatable, default: all)"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="Remote host to show in commands instead of resolving it"
    ),
) -> None:
    """Show the commands each service would run without running them."""
    check_service_names(services)
    config = load_configuration(config_file)

    try:
        selected = ComponentFactory.select_services(config, services)
    except ConfigurationError as e:
        abort(sanitize_log_input(str(e)))

    if host is not None and not validate_hostname(host):
        abort(f"Invalid host: {sanitize_log_input(host)}")

    if host is None:
        try:
            host = asyncio.run(create_host_resolver(config.settings).resolve())
        except HostResolutionError as e:
            console.print(f"[yellow]Could not resolve remote host: {escape(sanitize_log_input(str(e)))}[/yellow]")
            host = "<host>"

    commands = {
        name: SyncCommandBuilder(config.settings, config.services[name], host).all_commands()
        for name in selected
    }
    PlanFormatter(console).format_plan(commands)


if __name__ == "__main__":
    app()
