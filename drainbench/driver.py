from __future__ import annotations
import asyncio
import csv
import os
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from drainbench.config import ConfigError, RunConfig
from drainbench.monitor import POLL_INTERVAL, BufferMonitor, Sample
from drainbench.producer import Producer
from drainbench.sink import DEFAULT_HIGH_WATER_MARK, FileSink

DEFAULT_DATA_FILE = "test.data"


@dataclass
class RunResult:
    config: RunConfig
    started_at: float
    writes_finished_at: float
    closed_at: float
    writes: int = 0
    drain_waits: int = 0
    bytes_written: int = 0
    sample_count: int = 0
    peak_pending: int = 0
    samples: List[Sample] = field(default_factory=list)

    @property
    def total_ms(self) -> int:
        return round((self.closed_at - self.started_at) * 1000)

    @property
    def lag_ms(self) -> int:
        return round((self.closed_at - self.writes_finished_at) * 1000)

    def to_dict(self) -> Dict[str, Any]:
        d = self.config.describe()
        d.update({
            "total_ms": self.total_ms,
            "lag_ms": self.lag_ms,
        })
        return d

    def to_row(self) -> Dict[str, Any]:
        return {
            "chunk_size": self.config.chunk_size,
            "total_size": self.config.total_size,
            "pacing": self.config.pacing,
            "delay_ms": self.config.delay_ms,
            "writes": self.writes,
            "drain_waits": self.drain_waits,
            "bytes_written": self.bytes_written,
            "samples": self.sample_count,
            "peak_pending": self.peak_pending,
            "total_ms": self.total_ms,
            "lag_ms": self.lag_ms,
        }


# ----------------------------- Single run -----------------------------

async def run_benchmark(
    config: RunConfig,
    path: str = DEFAULT_DATA_FILE,
    high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
    interval: float = POLL_INTERVAL,
    record_samples: bool = False,
) -> Optional[RunResult]:
    """
    Execute one benchmark run and print its summary.

    Returns None when the configuration is rejected; nothing is written to
    disk in that case. I/O errors are not handled and propagate.
    """
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")
    if high_water_mark < 0:
        raise ValueError(f"high_water_mark must not be negative, got {high_water_mark}")

    try:
        config.validate()
    except ConfigError as e:
        print(f"Skipping run {config.describe()}: {e}", file=sys.stderr)
        return None

    sink = await FileSink.open(path, high_water_mark=high_water_mark)
    producer = Producer(sink, config)
    monitor = BufferMonitor(sink, interval=interval, report=config.report, record=record_samples)

    started_at = time.monotonic()
    writes_finished_at, _ = await asyncio.gather(producer.run(), monitor.run())
    await sink.wait_closed()
    closed_at = time.monotonic()

    os.remove(path)

    result = RunResult(
        config=config,
        started_at=started_at,
        writes_finished_at=writes_finished_at,
        closed_at=closed_at,
        writes=producer.writes,
        drain_waits=producer.drain_waits,
        bytes_written=sink.bytes_written,
        sample_count=monitor.sample_count,
        peak_pending=monitor.peak_pending,
        samples=monitor.samples,
    )
    print(result.to_dict())
    return result


async def run_all(configs: Iterable[RunConfig], **kwargs) -> List[RunResult]:
    """Run configurations one after another; rejected ones are skipped."""
    results = []
    for config in configs:
        result = await run_benchmark(config, **kwargs)
        if result is not None:
            results.append(result)
    return results


# ----------------------------- Reporting -----------------------------

def print_metrics(results: List[RunResult]) -> None:
    """Display a table of all completed runs."""
    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    print(f"Completed runs: {len(results)}")

    for i, r in enumerate(results, 1):
        c = r.config
        pacing = f"delay {c.delay_ms}ms" if c.pacing == "delay" else c.pacing
        print(f"  Run {i}: chunk={c.chunk_size}B total={c.total_size}B pacing={pacing}, "
              f"{r.writes} writes, {r.drain_waits} drain waits, "
              f"total {r.total_ms}ms, lag {r.lag_ms}ms, peak pending {r.peak_pending}B")

    print("=" * 60)


CSV_FIELDS = [
    "chunk_size",
    "total_size",
    "pacing",
    "delay_ms",
    "writes",
    "drain_waits",
    "bytes_written",
    "samples",
    "peak_pending",
    "total_ms",
    "lag_ms",
]


def write_to_csv(results: List[RunResult], filepath: str) -> None:
    if not results:
        print("No results to write!")
        return

    parent = os.path.dirname(filepath)
    if parent:
        os.makedirs(parent, exist_ok=True)

    with open(filepath, "w", newline="", encoding="utf-8") as file:
        writer = csv.DictWriter(file, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for r in results:
            writer.writerow(r.to_row())

    print(f"Successfully wrote {len(results)} records to {filepath}")
