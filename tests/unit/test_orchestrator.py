"""Tests for SyncOrchestrator and ComponentFactory."""

import asyncio
import io
import random

import pytest
from rich.console import Console

from rsync_watch.cli.factory import ComponentFactory
from rsync_watch.config.loader import ConfigurationError, load_config_from_dict
from rsync_watch.core.hosts import DockerMachineResolver, StaticHostResolver
from rsync_watch.core.orchestrator import SyncOrchestrator
from rsync_watch.core.output import ColorCycle
from rsync_watch.core.state import ServiceState, ServiceStatus


@pytest.fixture
def config(tmp_path):
    return load_config_from_dict(
        {
            "settings": {"rsa_key_path": "/keys/id_rsa", "host": "10.0.0.5"},
            "services": {
                "web": {"context": "./app", "volume_name": "/app", "rsync_ssh_port": 2222},
                "api": {"context": "./api", "volume_name": "/api", "rsync_ssh_port": 2223},
                "db": {"context": "./db", "volume_name": "/db", "rsync_ssh_port": 2224},
            },
        },
        config_dir=tmp_path,
    )


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200)


class FakeSupervisor:
    """Supervisor stand-in with a scripted run."""

    def __init__(self, name: str, error: Exception = None):
        self.service_name = name
        self.status = ServiceStatus(service_name=name)
        self.error = error
        self.stopped = False

    async def run(self) -> ServiceStatus:
        if self.error is not None:
            raise self.error
        self.status.cycles = 1
        self.status.transition(ServiceState.STOPPED)
        return self.status

    def stop(self) -> None:
        self.stopped = True


class TestSyncOrchestrator:
    """Test running supervisors side by side."""

    @pytest.mark.asyncio
    async def test_runs_all_supervisors(self):
        supervisors = [FakeSupervisor("web"), FakeSupervisor("api")]
        orchestrator = SyncOrchestrator(supervisors)

        statuses = await orchestrator.run()

        assert [s.service_name for s in statuses] == ["web", "api"]
        assert all(s.cycles == 1 for s in statuses)

    @pytest.mark.asyncio
    async def test_crashed_supervisor_does_not_stop_others(self):
        supervisors = [FakeSupervisor("web", error=RuntimeError("boom")), FakeSupervisor("api")]
        orchestrator = SyncOrchestrator(supervisors)

        statuses = await orchestrator.run()

        assert statuses[0].failures == 1
        assert statuses[0].last_error == "Supervisor crashed: boom"
        assert statuses[1].cycles == 1

    def test_stop_reaches_every_supervisor(self):
        supervisors = [FakeSupervisor("web"), FakeSupervisor("api")]
        SyncOrchestrator(supervisors).stop()
        assert all(s.stopped for s in supervisors)


class TestComponentFactory:
    """Test building supervisors from configuration."""

    def test_select_all_services(self, config):
        assert ComponentFactory.select_services(config) == ["web", "api", "db"]

    def test_select_keeps_config_order(self, config):
        assert ComponentFactory.select_services(config, ["db", "web"]) == ["web", "db"]

    def test_select_unknown_service(self, config):
        with pytest.raises(ConfigurationError, match="Unknown services: cache"):
            ComponentFactory.select_services(config, ["web", "cache"])

    def test_create_orchestrator(self, config, console):
        colors = ColorCycle(rng=random.Random(1))
        orchestrator = ComponentFactory.create_orchestrator(
            config, console, ["web", "api"], color_cycle=colors
        )

        assert [s.service_name for s in orchestrator.supervisors] == ["web", "api"]
        output_colors = [s.output.color for s in orchestrator.supervisors]
        assert len(set(output_colors)) == 2
        assert all(isinstance(s.resolver, StaticHostResolver) for s in orchestrator.supervisors)
        assert orchestrator.supervisors[0].service.rsync_ssh_port == 2222

    def test_docker_machine_resolver_without_host(self, console, tmp_path):
        config = load_config_from_dict(
            {
                "settings": {"rsa_key_path": "/keys/id_rsa", "docker_machine_name": "dev"},
                "services": {"web": {"context": "./app", "volume_name": "/app", "rsync_ssh_port": 2222}},
            },
            config_dir=tmp_path,
        )

        orchestrator = ComponentFactory.create_orchestrator(config, console)

        resolver = orchestrator.supervisors[0].resolver
        assert isinstance(resolver, DockerMachineResolver)
        assert resolver.machine_name == "dev"

    @pytest.mark.asyncio
    async def test_unreachable_service_keeps_waiting(self, console, tmp_path):
        """A service whose server never answers stays in the waiting state."""
        config = load_config_from_dict(
            {
                "settings": {"rsa_key_path": "/keys/id_rsa", "host": "127.0.0.1", "poll_interval": 0.01},
                "services": {"web": {"context": str(tmp_path), "volume_name": "/app", "rsync_ssh_port": 1}},
            }
        )
        orchestrator = ComponentFactory.create_orchestrator(config, console)

        task = asyncio.create_task(orchestrator.run())
        await asyncio.sleep(0.1)
        orchestrator.stop()
        statuses = await asyncio.wait_for(task, timeout=5)

        assert statuses[0].cycles == 0
        assert "Waiting for rsync server" in console.file.getvalue()
