"""Exception classes for sync workers and supervisors."""

from typing import Optional


class RsyncWatchError(Exception):
    """Base exception for rsync-watch runtime errors."""
    pass


class SyncCommandError(RsyncWatchError):
    """Base exception for a failed sync subprocess."""

    def __init__(self, message: str, command: str) -> None:
        """Initialize sync command error.

        Args:
            message: Error message
            command: Shell command that failed
        """
        super().__init__(message)
        self.message = message
        self.command = command

    def __str__(self) -> str:
        """String representation of the error."""
        command_preview = self.command[:200]
        if len(self.command) > 200:
            command_preview += "..."
        return f"{self.message} | Command: {command_preview}"


class CommandFailedError(SyncCommandError):
    """Raised when a sync subprocess exits with a non-zero status."""

    def __init__(self, command: str, returncode: int) -> None:
        super().__init__(f"Command exited with status {returncode}", command)
        self.returncode = returncode


class FailurePatternDetected(SyncCommandError):
    """Raised when a line of subprocess output matches the error pattern."""

    def __init__(self, command: str, line: str) -> None:
        super().__init__(f"Error detected in output: {line}", command)
        self.line = line


class HostResolutionError(RsyncWatchError):
    """Raised when the remote host address cannot be determined."""

    def __init__(self, message: str, machine_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.machine_name = machine_name


class OutputOverflowError(SyncCommandError):
    """Raised when a subprocess prints a line longer than the stream limit."""

    def __init__(self, command: str, limit: int) -> None:
        super().__init__(f"Output line longer than {limit} bytes", command)
        self.limit = limit
