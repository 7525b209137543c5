"""Shared pytest fixtures for rsync-watch tests."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from rsync_watch.config.models import ServiceConfig, SettingsConfig
from rsync_watch.core.output import ServiceOutput
from rsync_watch.core.state import ServiceStatus

TEST_CONFIG_CONTENT = """
settings:
  rsa_key_path: ./keys/id_rsa
  docker_machine_name: dev

services:
  web:
    context: ./app
    volume_name: /app
    rsync_ssh_port: 2222
    exclude:
      - node_modules
      - "*.log"
  worker:
    context: ./worker
    volume_name: /worker
    rsync_ssh_port: 2223
"""


@pytest.fixture
def settings_config():
    """Create test settings with fast polling."""
    return SettingsConfig(
        rsa_key_path=Path("/keys/id_rsa"),
        poll_interval=0.01,
        connect_timeout=0.05,
        restart_delay=0,
    )


@pytest.fixture
def service_config():
    """Create a test service configuration."""
    return ServiceConfig(
        context=Path("/src/app"),
        volume_name="/app",
        rsync_ssh_port=2222,
        exclude=["node_modules", "*.log"],
    )


@pytest.fixture
def mock_output():
    """Create a mock service output."""
    output = MagicMock(spec=ServiceOutput)
    output.service_name = "web"
    output.color = "green"
    return output


@pytest.fixture
def service_status():
    """Create a fresh service status."""
    return ServiceStatus(service_name="web")


@pytest.fixture
def config_file(tmp_path):
    """Create a temporary configuration file."""
    config_path = tmp_path / "rsync.yml"
    config_path.write_text(TEST_CONFIG_CONTENT)
    return config_path


def notices(output) -> list:
    """Notices printed through a mock output."""
    return [call.args[0] for call in output.notice.call_args_list]


def lines(output) -> list:
    """Lines printed through a mock output."""
    return [call.args[0] for call in output.line.call_args_list]
