from __future__ import annotations

import csv
import json
import os
from datetime import datetime

from .models import ScanResult

SAVE_FORMATS = ("txt", "csv", "json")


def format_report(result: ScanResult) -> str:
    lines = [f"Open ports ({len(result.open_ports)} found):"]
    lines.extend(f"  {port}" for port in result.open_ports)
    lines.append(f"Execution Time: {result.elapsed_s:.3f}s")
    return "\n".join(lines)


def format_progress(scanned: int, total: int, open_count: int, elapsed_s: float) -> str:
    rate = scanned / elapsed_s if elapsed_s > 0 else 0.0
    return f"[*] Scanned {scanned}/{total} | open={open_count} | {rate:.0f} scans/s"


def print_results(result: ScanResult) -> None:
    print(format_report(result))


def save_results(result: ScanResult, fmt: str, out_dir: str = "SCANS") -> str:
    if fmt not in SAVE_FORMATS:
        raise ValueError(f"Unsupported format: {fmt}")

    os.makedirs(out_dir, exist_ok=True)
    ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    path = os.path.join(out_dir, f"{ts}_port_scan.{fmt}")

    if fmt == "txt":
        with open(path, "w", encoding="utf-8") as f:
            f.write(format_report(result) + "\n")

    elif fmt == "csv":
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["host", "port"])
            for port in result.open_ports:
                w.writerow([result.host, port])

    else:
        payload = {
            "host": result.host,
            "open_ports": list(result.open_ports),
            "elapsed_s": round(result.elapsed_s, 4),
            "scanned": result.scanned,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    return path
