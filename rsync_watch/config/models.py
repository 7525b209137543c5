"""Configuration models for rsync-watch."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator

from rsync_watch.security.validation import (
    validate_cli_string_input,
    validate_exclude_pattern,
    validate_file_path,
    validate_hostname,
    validate_remote_path,
)

from .base_models import LogFormat, LogLevel

DEFAULT_RSYNC_OPTIONS = ["-ravz", "--delete"]


class SettingsConfig(BaseModel):
    """Settings shared by every synchronized service."""

    rsa_key_path: Path = Field(
        ...,
        description="Private key used by ssh to log into the rsync server"
    )
    docker_machine_name: str = Field(
        "default",
        description="docker-machine whose IP address hosts the rsync servers",
        min_length=1
    )
    host: str | None = Field(
        None,
        description="Static remote host; skips docker-machine resolution when set"
    )
    remote_user: str = Field(
        "root",
        description="User the rsync server accepts",
        min_length=1
    )
    poll_interval: float = Field(
        1.0,
        description="Seconds between reachability probes",
        gt=0
    )
    connect_timeout: float = Field(
        1.0,
        description="Timeout for a single TCP reachability probe in seconds",
        gt=0
    )
    restart_delay: float = Field(
        1.0,
        description="Pause between two supervision cycles in seconds",
        ge=0
    )
    error_pattern: str = Field(
        "error",
        description="Regular expression that marks a sync output line as a failure"
    )
    log_level: LogLevel = Field(
        LogLevel.INFO,
        description="Logging level"
    )
    log_format: LogFormat = Field(
        LogFormat.TEXT,
        description="Log output format"
    )

    @field_validator("rsa_key_path")
    @classmethod
    def validate_key_path(cls, v: Path) -> Path:
        """Reject unusable key paths and expand the home directory."""
        if not validate_file_path(str(v)):
            raise ValueError(f"Invalid rsa_key_path: {v}")
        return v.expanduser()

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str | None) -> str | None:
        """Validate static host format."""
        if v is None:
            return v
        v = v.strip()
        if not validate_hostname(v):
            raise ValueError(f"Invalid host: {v}")
        return v

    @field_validator("error_pattern")
    @classmethod
    def validate_error_pattern(cls, v: str) -> str:
        """Make sure the failure pattern is a valid regular expression."""
        if not v:
            raise ValueError("error_pattern cannot be empty")
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"error_pattern is not a valid regular expression: {e}") from e
        return v

    def compiled_error_pattern(self) -> re.Pattern[str]:
        """Return the compiled failure pattern."""
        return re.compile(self.error_pattern)


class ServiceConfig(BaseModel):
    """A local directory mirrored into a remote volume."""

    context: Path = Field(
        ...,
        description="Local source directory (relative to the config file)"
    )
    volume_name: str = Field(
        ...,
        description="Destination path on the remote host"
    )
    rsync_ssh_port: int = Field(
        ...,
        description="Port of the ssh server used by rsync",
        ge=1,
        le=65535
    )
    exclude: List[str] = Field(
        default_factory=list,
        description="Patterns excluded from both rsync and fswatch"
    )
    remote_command: str | None = Field(
        None,
        description="Command started in the background on the remote host after the initial sync"
    )
    rsync_options: List[str] = Field(
        default_factory=lambda: list(DEFAULT_RSYNC_OPTIONS),
        description="Options passed to every rsync invocation"
    )

    @field_validator("context")
    @classmethod
    def validate_context(cls, v: Path) -> Path:
        """Validate the local context path."""
        if not validate_file_path(str(v)):
            raise ValueError(f"Invalid context path: {v}")
        return v.expanduser()

    @field_validator("volume_name")
    @classmethod
    def validate_volume_name(cls, v: str) -> str:
        """Validate the remote destination path."""
        if not validate_remote_path(v):
            raise ValueError(f"Invalid volume_name: {v!r}")
        return v

    @field_validator("exclude")
    @classmethod
    def validate_excludes(cls, v: List[str]) -> List[str]:
        """Validate exclude patterns."""
        for pattern in v:
            if not validate_exclude_pattern(pattern):
                raise ValueError(f"Invalid exclude pattern: {pattern!r}")
        return v

    @field_validator("remote_command")
    @classmethod
    def validate_remote_command(cls, v: str | None) -> str | None:
        """Treat blank remote commands as unset."""
        if v is not None and not v.strip():
            return None
        return v


class RsyncWatchConfig(BaseModel):
    """Main rsync-watch configuration."""

    settings: SettingsConfig = Field(
        ...,
        description="Settings shared by all services"
    )
    services: Dict[str, ServiceConfig] = Field(
        ...,
        description="Services to synchronize, keyed by name",
        min_length=1
    )
    config_dir: Path | None = Field(
        None,
        description="Directory relative service contexts are resolved against",
        exclude=True
    )

    @model_validator(mode='after')
    def resolve_service_contexts(self) -> 'RsyncWatchConfig':
        """Make every service context absolute."""
        base_dir = self.config_dir or Path.cwd()
        for service in self.services.values():
            if not service.context.is_absolute():
                service.context = Path(os.path.abspath(base_dir / service.context))
        return self

    @model_validator(mode='after')
    def validate_service_names(self) -> 'RsyncWatchConfig':
        """Service names are printed as output prefixes and must be simple."""
        for name in self.services:
            if not validate_cli_string_input(name, max_length=100):
                raise ValueError(f"Invalid service name: {name!r}")
        return self
