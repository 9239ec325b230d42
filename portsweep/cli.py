from __future__ import annotations

import argparse
import sys
import time

from .logger import LEVELS, setup_logging
from .models import ScanConfig
from .output import SAVE_FORMATS, format_progress, print_results, save_results
from .ports import MAX_PORT, MIN_PORT, parse_port_range, validate_port
from .scanner import ENGINES, scan
from .targets import normalize_host

DEFAULT_HOST = "127.0.0.1"
DEFAULT_START = 1
DEFAULT_END = 65535
DEFAULT_CONCURRENCY = 500
DEFAULT_TIMEOUT = 0.2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="portsweep", description="Concurrent TCP connect port scanner")
    p.add_argument("-i", "--ip", default=DEFAULT_HOST, help=f"Target IP or hostname (default: {DEFAULT_HOST})")
    p.add_argument("-s", "--start", type=int, default=DEFAULT_START, help=f"First port (default: {DEFAULT_START})")
    p.add_argument("-e", "--end", type=int, default=DEFAULT_END, help=f"Last port, inclusive (default: {DEFAULT_END})")
    p.add_argument("-p", "--ports", help="Port spec: 80 or 1-1024 (overrides --start/--end)")
    p.add_argument("-c", "--concurrency", type=int, default=DEFAULT_CONCURRENCY,
                   help=f"Max connection attempts in flight (default: {DEFAULT_CONCURRENCY})")
    p.add_argument("-t", "--timeout", type=float, default=DEFAULT_TIMEOUT,
                   help=f"Connect timeout seconds (default: {DEFAULT_TIMEOUT})")
    p.add_argument("--engine", choices=ENGINES, default="threads", help="Concurrency engine (default: threads)")
    p.add_argument("--format", choices=SAVE_FORMATS, help="Save results to file")
    p.add_argument("--out-dir", default="SCANS", help="Output directory for saved files")
    p.add_argument("--progress-every", type=int, default=5000,
                   help="Progress update interval, 0 disables (default: 5000)")
    p.add_argument("--log-level", choices=LEVELS, default="WARNING", help="Log level (default: WARNING)")
    p.add_argument("--log-file", help="Also write logs to this file")
    return p


def config_from_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> ScanConfig:
    try:
        host = normalize_host(args.ip)
        if args.ports:
            start, end = parse_port_range(args.ports)
        else:
            start, end = args.start, args.end
    except ValueError as e:
        parser.error(str(e))

    for name, port in (("--start", start), ("--end", end)):
        try:
            validate_port(port)
        except ValueError:
            parser.error(f"{name} must be between {MIN_PORT} and {MAX_PORT}")
    if args.concurrency < 1:
        parser.error("--concurrency must be >= 1")
    if args.timeout <= 0:
        parser.error("--timeout must be > 0")

    return ScanConfig(
        host=host,
        start_port=start,
        end_port=end,
        concurrency=args.concurrency,
        timeout_s=args.timeout,
    )


def _progress_printer(every: int):
    start = time.perf_counter()

    def progress(scanned: int, total: int, open_count: int) -> None:
        if scanned % every == 0 or scanned == total:
            line = format_progress(scanned, total, open_count, time.perf_counter() - start)
            print(f"\r{line}", end="", file=sys.stderr, flush=True)
            if scanned == total:
                print(file=sys.stderr)  # newline after progress

    return progress


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    config = config_from_args(parser, args)

    print(f"Scanning {config.host}", file=sys.stderr)
    progress = _progress_printer(args.progress_every) if args.progress_every > 0 else None
    result = scan(config, engine=args.engine, progress=progress)

    print_results(result)

    if args.format:
        path = save_results(result, fmt=args.format, out_dir=args.out_dir)
        print(f"Saved results to {path}", file=sys.stderr)

    return 0
