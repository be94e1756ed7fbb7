from __future__ import annotations
import asyncio
import time

from drainbench.config import RunConfig


class Producer:
    """
    Writes the synthetic payload for one run into a sink.

    The payload is ``config.chunk_count`` zero-filled chunks of
    ``config.chunk_size`` bytes, each freshly allocated. After every write the
    configured pacing policy is applied:

    - ``none``: no pause, the whole payload is handed to the sink at once
    - ``drain``: when the sink reports backpressure, wait for its drain signal
    - ``delay``: sleep ``config.delay_ms`` after every write
    """

    def __init__(self, sink, config: RunConfig):
        self.sink = sink
        self.config = config
        self.writes = 0
        self.drain_waits = 0
        self.writes_finished_at = None

    async def _pace(self, ok: bool):
        if self.config.pacing == "drain":
            if not ok:
                self.drain_waits += 1
                await self.sink.wait_drain()
        elif self.config.pacing == "delay":
            await asyncio.sleep(self.config.delay_ms / 1000.0)

    async def run(self) -> float:
        """Write every chunk, end the sink and return the finish timestamp."""
        for _ in range(self.config.chunk_count):
            ok = self.sink.write(bytes(self.config.chunk_size))
            self.writes += 1
            await self._pace(ok)
        self.sink.end()
        self.writes_finished_at = time.monotonic()
        return self.writes_finished_at
