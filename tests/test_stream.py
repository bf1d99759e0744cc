from __future__ import annotations

import asyncio

import pytest

from erc20pump.services.stream import LogStream
from erc20pump.utils.errors import StreamClosed


class TestLogStream:
    def test_delivers_in_order(self, make_log):
        records = [make_log(block_number=n, tx=n) for n in range(1, 4)]

        async def scenario():
            stream = LogStream(5)
            for r in records:
                await stream.put(r)
            await stream.close()
            return [r async for r in stream]

        assert asyncio.run(scenario()) == records

    def test_close_only_once(self):
        async def scenario():
            stream = LogStream(1)
            return await stream.close(), await stream.close(), stream.closed

        assert asyncio.run(scenario()) == (True, False, True)

    def test_get_after_drain_returns_none(self, make_log):
        async def scenario():
            stream = LogStream(2)
            await stream.put(make_log())
            await stream.close()
            first = await stream.get()
            return first, await stream.get(), await stream.get()

        first, second, third = asyncio.run(scenario())
        assert first is not None
        assert second is None
        assert third is None

    def test_put_waits_while_full(self, make_log):
        async def scenario():
            stream = LogStream(1)
            await stream.put(make_log(tx=1))
            pending = asyncio.create_task(stream.put(make_log(tx=2)))
            await asyncio.sleep(0.05)
            blocked = not pending.done()
            first = await stream.get()
            await asyncio.wait_for(pending, 1)
            return blocked, first, stream.qsize()

        blocked, first, size = asyncio.run(scenario())
        assert blocked is True
        assert first == make_log(tx=1)
        assert size == 1

    def test_put_after_close_raises(self, make_log):
        async def scenario():
            stream = LogStream(1)
            await stream.close()
            await stream.put(make_log())

        with pytest.raises(StreamClosed):
            asyncio.run(scenario())

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            LogStream(0)
