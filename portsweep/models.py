from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ScanConfig:
    host: str
    start_port: int
    end_port: int
    concurrency: int
    timeout_s: float

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1 (got {self.concurrency})")

    @property
    def ports(self) -> range:
        # empty when start_port > end_port
        return range(self.start_port, self.end_port + 1)

    @property
    def total(self) -> int:
        return len(self.ports)


@dataclass(frozen=True)
class PortOutcome:
    port: int
    is_open: bool


@dataclass(frozen=True)
class ScanResult:
    host: str
    open_ports: Tuple[int, ...]
    elapsed_s: float
    scanned: int = 0
