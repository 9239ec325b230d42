from __future__ import annotations

import asyncio
import logging
import socket

from .models import PortOutcome
from .targets import join_host_port, split_host_port

log = logging.getLogger(__name__)

# Everything a single connect attempt can throw at us. All of it means "not open".
_CONNECT_ERRORS = (OSError, ValueError, OverflowError)


def attempt(address: str, timeout_s: float) -> bool:
    """
    One TCP connect to "host:port", bounded by timeout_s.
    True only if the handshake completed in time; never raises.
    """
    if timeout_s <= 0:
        return False
    try:
        host, port = split_host_port(address)
    except ValueError:
        log.debug("unparseable address %r", address)
        return False

    try:
        with socket.create_connection((host, port), timeout=timeout_s):
            return True
    except _CONNECT_ERRORS as e:
        log.debug("%s not open: %s", address, str(e) or type(e).__name__)
        return False


async def attempt_async(address: str, timeout_s: float) -> bool:
    """Coroutine flavour of attempt(); same contract."""
    if timeout_s <= 0:
        return False
    try:
        host, port = split_host_port(address)
    except ValueError:
        log.debug("unparseable address %r", address)
        return False

    try:
        _reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout_s
        )
    except (asyncio.TimeoutError,) + _CONNECT_ERRORS as e:
        log.debug("%s not open: %s", address, str(e) or type(e).__name__)
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        # peer reset during close; the handshake already succeeded
        pass
    return True


def probe_port(host: str, port: int, timeout_s: float) -> PortOutcome:
    return PortOutcome(port=port, is_open=attempt(join_host_port(host, port), timeout_s))


async def probe_port_async(host: str, port: int, timeout_s: float) -> PortOutcome:
    is_open = await attempt_async(join_host_port(host, port), timeout_s)
    return PortOutcome(port=port, is_open=is_open)
