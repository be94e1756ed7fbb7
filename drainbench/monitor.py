from __future__ import annotations
import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

POLL_INTERVAL = 0.1  # seconds


@dataclass
class Sample:
    pending_bytes: int
    ts: float  # wall clock, seconds since the epoch

    @property
    def iso(self) -> str:
        dt = datetime.fromtimestamp(self.ts, tz=timezone.utc)
        return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ----------------------------- Buffer monitoring -----------------------------

class BufferMonitor:
    """Periodic sampling of a sink's pending byte count until the sink closes.

    Only reads ``sink.pending`` and waits on ``sink.closed``; it never
    influences the writer. Samples are printed when ``report`` is set and kept
    in ``samples`` when ``record`` is set.
    """

    def __init__(
        self,
        sink,
        interval: float = POLL_INTERVAL,
        report: bool = False,
        record: bool = False,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.sink = sink
        self.interval = interval
        self.report = report
        self.record = record
        self.samples: List[Sample] = []
        self.sample_count = 0
        self.peak_pending = 0

    def _sample_once(self) -> Sample:
        s = Sample(pending_bytes=self.sink.pending, ts=time.time())
        self.sample_count += 1
        self.peak_pending = max(self.peak_pending, s.pending_bytes)
        if self.report:
            print(s.pending_bytes, s.iso)
        if self.record:
            self.samples.append(s)
        return s

    async def run(self) -> int:
        """Sample until completion and return the number of samples taken."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval
        while True:
            timeout = max(0.0, next_tick - loop.time())
            done, _ = await asyncio.wait({self.sink.closed}, timeout=timeout)
            if done:
                break
            self._sample_once()
            # skip ticks missed while the loop was busy, no catch-up bursts
            now = loop.time()
            while next_tick <= now:
                next_tick += self.interval
        # re-raise a failed sink
        self.sink.closed.result()
        return self.sample_count
