import asyncio

import pytest


class FakeSink:
    """In-memory stand-in for FileSink that records every call in order.

    ``write`` reports backpressure once ``pending`` reaches the high-water mark;
    ``wait_drain`` empties the buffer.
    """

    def __init__(self, high_water_mark=8192):
        self.high_water_mark = high_water_mark
        self.pending = 0
        self.events = []
        self.chunks = []
        self.closed = asyncio.get_running_loop().create_future()

    def write(self, data):
        self.events.append("write")
        self.chunks.append(data)
        self.pending += len(data)
        return self.pending < self.high_water_mark

    async def wait_drain(self):
        self.events.append("wait")
        await asyncio.sleep(0)
        self.pending = 0

    def end(self):
        self.events.append("end")


@pytest.fixture
def fake_sink_factory():
    return FakeSink
