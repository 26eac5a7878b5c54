"""
Profiling utilities for background inventory jobs.

Measures wall-clock time and peak resident memory of a block of work (an
import or export run) so that job outcomes can report how expensive they were.

Usage:
    from inventory_store.utils.profiler import measure_block

    with measure_block("import:parts.csv") as stats:
        import_csv(store, "parts.csv")

    print(stats.duration_seconds, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

import psutil


@dataclass
class OperationStats:
    """
    Container for measurements of one profiled operation.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    peak_rss_bytes: Optional[int] = field(default=None)
    extra: dict[str, Any] = field(default_factory=dict)


@contextlib.contextmanager
def measure_block(
    label: str, sample_interval_ms: int = 50
) -> Generator[OperationStats, None, None]:
    """
    Context manager measuring duration and peak RSS of a block of code.

    Parameters
    ----------
    label : str
        Human-friendly label for the measured block.
    sample_interval_ms : int
        Interval in milliseconds between RSS samples.

    Notes
    -----
    RSS is sampled on a daemon thread for the whole block, so short spikes in
    the middle of a long import are captured, not just start/end snapshots.
    """
    stats = OperationStats(label=label)
    process = psutil.Process()
    peak_rss = process.memory_info().rss
    stop_sampling = threading.Event()

    def _sample_memory() -> None:
        nonlocal peak_rss
        while not stop_sampling.is_set():
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
            except psutil.Error:
                break
            stop_sampling.wait(timeout=sample_interval_ms / 1000.0)

    sampler = threading.Thread(target=_sample_memory, daemon=True)
    sampler.start()

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts
        stop_sampling.set()
        sampler.join(timeout=1.0)
        stats.peak_rss_bytes = peak_rss if peak_rss > 0 else None


__all__ = ["OperationStats", "measure_block"]
