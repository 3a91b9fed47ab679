# src/chemcore/utils/benchmarking.py

import time
from dataclasses import dataclass, field
from statistics import mean, median
from typing import List


@dataclass
class Timer:
    """Context manager for timing code blocks."""

    name: str
    start_time: float = field(default=0.0)
    end_time: float = field(default=0.0)

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        self.end_time = 0.0
        return self

    def __exit__(self, *args) -> None:
        self.end_time = time.perf_counter()

    def elapsed(self) -> float:
        """Get elapsed time in seconds."""
        if self.end_time == 0.0:
            return time.perf_counter() - self.start_time
        return self.end_time - self.start_time


@dataclass
class ThroughputStats:
    """Per-item timings and success counts for a batch run."""

    name: str
    times: List[float] = field(default_factory=list)
    succeeded: int = 0
    failed: int = 0
    total_time: float = 0.0

    def add_item(self, elapsed: float, ok: bool = True) -> None:
        self.times.append(elapsed)
        if ok:
            self.succeeded += 1
        else:
            self.failed += 1

    @property
    def count(self) -> int:
        return self.succeeded + self.failed

    @property
    def items_per_second(self) -> float:
        return self.count / self.total_time if self.total_time > 0 else 0.0

    def __str__(self) -> str:
        if not self.times:
            return f"{self.name}: No timing data"
        return (
            f"{self.name}: {self.count} items ({self.failed} failed) in "
            f"{self.total_time:.2f}s, {self.items_per_second:.1f} items/s, "
            f"avg {mean(self.times) * 1000:.2f}ms, median {median(self.times) * 1000:.2f}ms"
        )
