"""Per-thread statistics and periodic throughput reporting."""

from __future__ import annotations

import contextlib
import locale
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


@dataclass
class Statics:
    """Counters a worker thread updates and a reporter samples."""

    counter: int = 0
    counter1: int = 0
    counter2: int = 0
    counter3: int = 0
    lat: float = 0.0
    lat1: float = 0.0

    def increment(self) -> None:
        self.counter += 1

    def increment_gap_1(self, d: int) -> None:
        self.counter1 += d

    def set_lat(self, l: float) -> None:
        self.lat = l


def format_value(value: float, precision: int = 4) -> str:
    """Fixed-point text with the current locale's digit grouping."""
    return locale.format_string(f"%.{precision}f", value, grouping=True)


def report_thpt(
    statics: Sequence[Statics],
    epochs: int,
    log_file: str | Path | None = None,
    interval: float = 1.0,
) -> float:
    """Log the throughput of all counters once per interval for some epochs.

    When ``log_file`` is given, each epoch's main throughput is written to it,
    one line per epoch.
    """
    previous = [(0, 0) for _ in statics]
    opener = open(log_file, "w") if log_file else contextlib.nullcontext()
    with opener as out:
        start = time.perf_counter()
        for epoch in range(epochs):
            time.sleep(interval)
            total = total1 = 0
            current = []
            for stat, (old, old1) in zip(statics, previous):
                counter, counter1 = stat.counter, stat.counter1
                total += counter - old
                total1 += counter1 - old1
                current.append((counter, counter1))
            previous = current

            elapsed = max(time.perf_counter() - start, 1e-9)
            rate = total / elapsed
            rate1 = total1 / elapsed
            start = time.perf_counter()

            lat = statics[0].lat if statics else 0.0
            logger.info(
                "epoch @ %d: thpt: %s reqs/sec;second: %s reqs/sec; lat: %s us",
                epoch, format_value(rate, 0), format_value(rate1, 0), lat,
            )
            if out is not None:
                out.write(format_value(rate, 0) + "\n")
    return 0.0