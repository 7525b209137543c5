"""Streaming execution of sync commands with failure pattern detection."""

import asyncio
import os
import re
import signal
from typing import Optional

import structlog

from rsync_watch.core.exceptions import (
    CommandFailedError,
    FailurePatternDetected,
    OutputOverflowError,
)
from rsync_watch.core.output import ServiceOutput
from rsync_watch.security.validation import sanitize_log_input, strip_terminal_codes

logger = structlog.get_logger(__name__)

# rsync -v prints one line per file; allow long paths
STREAM_LIMIT = 1024 * 1024


class CommandRunner:
    """Runs shell commands for one service and watches their output.

    Each command runs in its own process group so that a pipeline such as
    ``fswatch | xargs rsync`` is torn down as a whole.
    """

    def __init__(
        self,
        output: ServiceOutput,
        error_pattern: re.Pattern[str],
        stream_limit: int = STREAM_LIMIT,
    ) -> None:
        """Initialize command runner.

        Args:
            output: Console output of the service
            error_pattern: Pattern marking an output line as a failure
            stream_limit: Longest output line accepted, in bytes
        """
        self.output = output
        self.error_pattern = error_pattern
        self.stream_limit = stream_limit
        self._logger = logger.bind(service=output.service_name)

    async def run(self, command: str) -> None:
        """Run a command to completion, streaming its merged output.

        Whatever ends the run early (a failure line, cancellation, an
        output error) kills the command's process group before returning.

        Args:
            command: Shell command line

        Raises:
            FailurePatternDetected: If an output line matches the error pattern
            OutputOverflowError: If an output line exceeds the stream limit
            CommandFailedError: If the command exits with a non-zero status
        """
        self._logger.debug("Starting command", command=sanitize_log_input(command))

        process = await asyncio.create_subprocess_shell(
            command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            start_new_session=True,
            limit=self.stream_limit,
        )

        try:
            try:
                failure_line = await self._stream_output(process)
            except ValueError as e:
                # StreamReader gives up on lines longer than its limit
                raise OutputOverflowError(command, self.stream_limit) from e

            if failure_line is not None:
                self.output.notice("Error detected - restarting")
                raise FailurePatternDetected(command, failure_line)

            returncode = await process.wait()
        except BaseException as e:
            self._kill(process)
            await asyncio.shield(process.wait())
            self._logger.debug(
                "Command torn down",
                pid=process.pid,
                reason=type(e).__name__,
            )
            raise

        if returncode != 0:
            self._logger.warning(
                "Command failed",
                returncode=returncode,
                command=sanitize_log_input(command),
            )
            raise CommandFailedError(command, returncode)

    async def _stream_output(self, process: asyncio.subprocess.Process) -> Optional[str]:
        """Forward output lines until EOF or the first failure line.

        Returns:
            The first line matching the error pattern, or None at EOF
        """
        assert process.stdout is not None
        async for raw_line in process.stdout:
            line = strip_terminal_codes(raw_line.decode(errors="replace"))
            if self.error_pattern.search(line):
                self._logger.warning("Failure pattern detected", line=sanitize_log_input(line))
                self.output.line(line)
                return line
            self.output.line(line)
        return None

    def _kill(self, process: asyncio.subprocess.Process) -> None:
        """Kill the process group of a command.

        The group can outlive the shell that leads it, so it is signalled
        even when the shell itself has already exited.
        """
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        except PermissionError:
            if process.returncode is None:
                process.kill()
