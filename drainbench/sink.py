"""
Buffered asynchronous file sink.

Writes are accepted immediately into an in-memory buffer and flushed to disk by
a background task that hands each batch to the event loop's default executor.
``write()`` reports backpressure the same way a buffered stream does: it
returns ``False`` once the buffered byte count reaches the high-water mark.
"""

from __future__ import annotations
import asyncio
import contextlib
from collections import deque
from typing import Deque, Optional

DEFAULT_HIGH_WATER_MARK = 16 * 1024
FLUSH_BATCH_BYTES = 1024 * 1024


class SinkClosedError(RuntimeError):
    """Raised when writing to a sink that was already ended."""


class FileSink:
    def __init__(self, path: str, high_water_mark: int = DEFAULT_HIGH_WATER_MARK):
        if high_water_mark < 0:
            raise ValueError(f"high_water_mark must not be negative, got {high_water_mark}")
        self.path = path
        self.high_water_mark = high_water_mark
        self._loop = asyncio.get_running_loop()
        self._file = None
        self._task: Optional[asyncio.Task] = None
        self._buffer: Deque[bytes] = deque()
        self._pending = 0
        self._ending = False
        self._need_drain = False
        self._error: Optional[BaseException] = None
        self._wakeup = asyncio.Event()
        self._drained = asyncio.Event()
        self._drained.set()
        # Completion notification; resolved exactly once.
        self.closed: asyncio.Future = self._loop.create_future()
        self.bytes_written = 0
        self.drain_count = 0

    @classmethod
    async def open(cls, path: str, high_water_mark: int = DEFAULT_HIGH_WATER_MARK) -> "FileSink":
        """Open (and truncate) ``path`` and start the background flusher."""
        sink = cls(path, high_water_mark)
        sink._file = await sink._loop.run_in_executor(None, open, path, "wb")
        sink._task = asyncio.create_task(sink._flush_loop())
        return sink

    @property
    def pending(self) -> int:
        """Bytes accepted by ``write()`` that are not yet written to the file."""
        return self._pending

    @property
    def ending(self) -> bool:
        return self._ending

    def write(self, data: bytes) -> bool:
        if self._error is not None:
            raise self._error
        if self._ending:
            raise SinkClosedError(f"write after end on {self.path}")
        self._buffer.append(data)
        self._pending += len(data)
        self._wakeup.set()

        ok = self._pending < self.high_water_mark
        if not ok:
            self._need_drain = True
            self._drained.clear()
        return ok

    async def wait_drain(self) -> None:
        """Suspend until the buffer drops back to or below the high-water mark."""
        await self._drained.wait()
        if self._error is not None:
            raise self._error

    def end(self) -> None:
        """Signal end-of-input. The file is closed once the buffer is flushed."""
        self._ending = True
        self._wakeup.set()

    async def wait_closed(self) -> None:
        await asyncio.shield(self.closed)

    # ----------------------------- Flushing -----------------------------

    def _take_batch(self) -> bytes:
        chunks = []
        size = 0
        while self._buffer and size < FLUSH_BATCH_BYTES:
            chunk = self._buffer.popleft()
            chunks.append(chunk)
            size += len(chunk)
        if len(chunks) == 1:
            return chunks[0]
        return b"".join(chunks)

    async def _flush_loop(self):
        try:
            while True:
                if not self._buffer:
                    if self._ending:
                        break
                    self._wakeup.clear()
                    await self._wakeup.wait()
                    continue

                batch = self._take_batch()
                await self._loop.run_in_executor(None, self._file.write, batch)
                self._pending -= len(batch)
                self.bytes_written += len(batch)

                if self._need_drain and self._pending <= self.high_water_mark:
                    self._need_drain = False
                    self.drain_count += 1
                    self._drained.set()

            await self._loop.run_in_executor(None, self._file.close)
        except Exception as e:
            self._fail(e)
            return
        self.closed.set_result(None)

    def _fail(self, exc: BaseException):
        self._error = exc
        # Wake a producer blocked on drain so it sees the error.
        self._drained.set()
        with contextlib.suppress(OSError):
            self._file.close()
        if not self.closed.done():
            self.closed.set_exception(exc)
