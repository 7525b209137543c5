"""Runtime status tracking for supervised services."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ServiceState(str, Enum):
    """Phases of a supervision cycle."""
    WAITING = "waiting"
    INITIAL_SYNC = "initial_sync"
    WATCHING = "watching"
    RESTARTING = "restarting"
    STOPPED = "stopped"


class ServiceStatus(BaseModel):
    """Status of one supervised service."""

    service_name: str
    state: ServiceState = ServiceState.WAITING
    host: Optional[str] = None

    cycles: int = 0
    failures: int = 0
    unreachable_events: int = 0
    last_error: Optional[str] = None

    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_state_change: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def transition(self, state: ServiceState) -> None:
        """Move to a new state and record when it happened."""
        if state != self.state:
            self.state = state
            self.last_state_change = datetime.now(timezone.utc)

    def record_failure(self, message: str) -> None:
        """Record a failed sync step."""
        self.failures += 1
        self.last_error = message

    def get_summary(self) -> Dict[str, Any]:
        """Get a flat summary for display."""
        return {
            "service": self.service_name,
            "state": self.state.value,
            "host": self.host or "-",
            "cycles": self.cycles,
            "failures": self.failures,
            "unreachable": self.unreachable_events,
            "last_error": self.last_error or "",
        }
