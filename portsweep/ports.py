from __future__ import annotations

from typing import Tuple

MIN_PORT = 0
MAX_PORT = 65535


def validate_port(port: int) -> int:
    if port < MIN_PORT or port > MAX_PORT:
        raise ValueError(f"Invalid port: {port}")
    return port


def parse_port_range(spec: str) -> Tuple[int, int]:
    """
    Parses a contiguous port specification into (start, end).
    Supports:
    - Single port: "80"
    - Range: "1-1024"
    """
    spec = spec.strip()
    if not spec:
        raise ValueError("Empty port spec")

    if "-" in spec:
        start_s, end_s = spec.split("-", 1)
        try:
            start = int(start_s)
            end = int(end_s)
        except ValueError:
            raise ValueError(f"Invalid port range: {spec}") from None
        validate_port(start)
        validate_port(end)
        return start, end

    try:
        p = int(spec)
    except ValueError:
        raise ValueError(f"Invalid port: {spec}") from None
    validate_port(p)
    return p, p
