from __future__ import annotations

import asyncio
import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional

from .models import PortOutcome, ScanConfig, ScanResult
from .probe import probe_port, probe_port_async

log = logging.getLogger(__name__)

ENGINES = ("threads", "asyncio")

# progress(scanned, total, open_count)
ProgressFn = Callable[[int, int, int], None]


def _outcome(fut, port: int) -> PortOutcome:
    try:
        return fut.result()
    except Exception:
        # probes are not supposed to raise; one that does still only costs its own port
        log.warning("Probe for port %d failed unexpectedly", port, exc_info=True)
        return PortOutcome(port=port, is_open=False)


def _finish(config: ScanConfig, open_ports: List[int], scanned: int, start: float) -> ScanResult:
    result = ScanResult(
        host=config.host,
        open_ports=tuple(sorted(open_ports)),
        elapsed_s=time.perf_counter() - start,
        scanned=scanned,
    )
    log.info(
        "Scan of %s finished: %d open / %d scanned in %.3fs",
        config.host, len(result.open_ports), scanned, result.elapsed_s,
    )
    return result


def _log_start(config: ScanConfig, engine: str) -> None:
    log.info(
        "Scanning %s ports %d-%d (%d ports, concurrency=%d, timeout=%.3fs, engine=%s)",
        config.host, config.start_port, config.end_port, config.total,
        config.concurrency, config.timeout_s, engine,
    )


def _scan_threads(config: ScanConfig, progress: Optional[ProgressFn]) -> ScanResult:
    """
    Bounded-futures scanner: never more than `concurrency` probes submitted at once,
    refilled in port order as each one completes.
    """
    start_all = time.perf_counter()
    total = config.total
    _log_start(config, "threads")
    if total == 0:
        return _finish(config, [], 0, start_all)

    jobs = iter(config.ports)
    open_ports: List[int] = []
    scanned = 0
    max_pending = min(config.concurrency, total)

    def record(outcome: PortOutcome) -> None:
        nonlocal scanned
        scanned += 1
        if outcome.is_open:
            log.debug("%s:%d open", config.host, outcome.port)
            open_ports.append(outcome.port)
        if progress is not None:
            progress(scanned, total, len(open_ports))

    with ThreadPoolExecutor(max_workers=max_pending, thread_name_prefix="probe") as pool:
        pending: Dict[Future, int] = {}

        def submit_next() -> bool:
            nonlocal max_pending
            try:
                port = next(jobs)
            except StopIteration:
                return False
            try:
                fut = pool.submit(probe_port, config.host, port, config.timeout_s)
            except RuntimeError as e:
                # out of OS threads: this port counts as not open, and the
                # in-flight limit drops to the workers that did start
                max_pending = max(len(pending), 1)
                log.warning(
                    "Could not start a probe for port %d (%s); in-flight limit lowered to %d",
                    port, e, max_pending,
                )
                record(PortOutcome(port=port, is_open=False))
                return True
            pending[fut] = port
            return True

        # Prime the queue
        while len(pending) < max_pending and submit_next():
            pass

        while pending:
            done, _ = wait(pending, return_when=FIRST_COMPLETED)
            for fut in done:
                record(_outcome(fut, pending.pop(fut)))

            # Refill queue
            while len(pending) < max_pending and submit_next():
                pass

    return _finish(config, open_ports, scanned, start_all)


async def scan_async(config: ScanConfig, progress: Optional[ProgressFn] = None) -> ScanResult:
    """Event-loop engine: same governor as the thread engine, one task per in-flight probe."""
    start_all = time.perf_counter()
    total = config.total
    _log_start(config, "asyncio")
    if total == 0:
        return _finish(config, [], 0, start_all)

    jobs = iter(config.ports)
    open_ports: List[int] = []
    scanned = 0
    max_pending = min(config.concurrency, total)
    pending: Dict[asyncio.Task, int] = {}

    def submit_next() -> bool:
        try:
            port = next(jobs)
        except StopIteration:
            return False
        task = asyncio.ensure_future(probe_port_async(config.host, port, config.timeout_s))
        pending[task] = port
        return True

    while len(pending) < max_pending and submit_next():
        pass

    while pending:
        done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            outcome = _outcome(task, pending.pop(task))
            scanned += 1
            if outcome.is_open:
                log.debug("%s:%d open", config.host, outcome.port)
                open_ports.append(outcome.port)
            if progress is not None:
                progress(scanned, total, len(open_ports))

        while len(pending) < max_pending and submit_next():
            pass

    return _finish(config, open_ports, scanned, start_all)


def scan(
    config: ScanConfig,
    engine: str = "threads",
    progress: Optional[ProgressFn] = None,
) -> ScanResult:
    if engine == "threads":
        return _scan_threads(config, progress)
    if engine == "asyncio":
        return asyncio.run(scan_async(config, progress))
    raise ValueError(f"Unknown engine: {engine!r} (expected one of {', '.join(ENGINES)})")
