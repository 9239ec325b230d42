from __future__ import annotations

from typing import Tuple


def normalize_host(host: str) -> str:
    """
    Supports:
      - IPv4: "172.20.0.10"
      - IPv6, bare or bracketed: "::1", "[::1]"
      - Hostname: "webapp" (resolved later, at connect time)
    """
    host = (host or "").strip()
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1].strip()
    if not host:
        raise ValueError("Empty target")
    if any(c.isspace() for c in host):
        raise ValueError(f"Invalid target: {host!r}")
    return host


def join_host_port(host: str, port: int) -> str:
    if ":" in host:  # IPv6 literal
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def split_host_port(address: str) -> Tuple[str, int]:
    """
    Inverse of join_host_port. Raises ValueError on anything malformed.
    """
    address = address.strip()
    if address.startswith("["):
        end = address.find("]")
        if end < 0 or address[end + 1:end + 2] != ":":
            raise ValueError(f"Invalid address: {address!r}")
        host, port_s = address[1:end], address[end + 2:]
    else:
        host, sep, port_s = address.rpartition(":")
        if not sep or ":" in host:
            raise ValueError(f"Invalid address: {address!r}")

    if not host or not port_s.isdigit():
        raise ValueError(f"Invalid address: {address!r}")
    port = int(port_s)
    if port > 65535:
        raise ValueError(f"Invalid port: {port}")
    return host, port
