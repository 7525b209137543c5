"""TCP reachability probes for rsync servers."""

import asyncio
from contextlib import suppress
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


async def port_open(host: str, port: int, timeout: float = 1.0) -> bool:
    """Check whether a TCP port accepts connections.

    Args:
        host: Host name or IP address
        port: TCP port
        timeout: Seconds to wait for the connection

    Returns:
        True if the connection succeeded, False otherwise
    """
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
    except (OSError, asyncio.TimeoutError) as e:
        logger.debug("Port probe failed", host=host, port=port, error=str(e))
        return False

    writer.close()
    with suppress(OSError):
        await writer.wait_closed()
    return True


async def interruptible_sleep(seconds: float, stop_event: Optional[asyncio.Event] = None) -> bool:
    """Sleep, waking early when the stop event is set.

    Returns:
        True if the stop event fired during the sleep
    """
    if stop_event is None:
        await asyncio.sleep(seconds)
        return False

    try:
        await asyncio.wait_for(stop_event.wait(), seconds)
    except asyncio.TimeoutError:
        return False
    return True


async def wait_for_port(
    host: str,
    port: int,
    interval: float = 1.0,
    timeout: float = 1.0,
    stop_event: Optional[asyncio.Event] = None,
) -> bool:
    """Poll a port until it accepts connections.

    Args:
        host: Host name or IP address
        port: TCP port
        interval: Seconds between probes
        timeout: Timeout of a single probe
        stop_event: Optional event that aborts the wait

    Returns:
        True once the port is open, False if the wait was stopped
    """
    while not await port_open(host, port, timeout):
        if await interruptible_sleep(interval, stop_event):
            return False
    return True
