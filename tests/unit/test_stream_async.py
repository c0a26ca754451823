import asyncio
import json

import pytest

from brain_stream import BrainStreamError, CancelToken, DeltaEvent, aconsume


def _block(obj: dict) -> bytes:
    return f"data: {json.dumps(obj)}\n\n".encode()


DELTA_HI = {"type": "delta", "content": "Hi"}
FINAL = {
    "type": "final",
    "payload": {"agent": "Brain", "content": "Hi", "next_actions": ["a", "b"]},
}


class FakeAsyncReader:
    """Lector async mínimo que registra si fue cerrado."""

    def __init__(self, chunks, *, on_read=None):
        self._chunks = list(chunks)
        self._on_read = on_read
        self.reads = 0
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        await asyncio.sleep(0)
        if not self._chunks:
            raise StopAsyncIteration
        self.reads += 1
        if self._on_read is not None:
            self._on_read(self.reads)
        return self._chunks.pop(0)

    async def aclose(self):
        self.closed = True


@pytest.mark.asyncio
async def test_aconsume_dispatches_in_order_and_closes_reader():
    wire = _block(DELTA_HI) + _block(FINAL)
    reader = FakeAsyncReader([wire[:7], wire[7:40], wire[40:]])
    events = []

    await aconsume(reader, events.append)

    assert [e.type for e in events] == ["delta", "final"]
    assert reader.closed


@pytest.mark.asyncio
async def test_aconsume_flushes_trailing_block():
    reader = FakeAsyncReader([b'data: {"type":"delta","content":"end"}'])
    events = []

    await aconsume(reader, events.append)

    assert events == [DeltaEvent(content="end")]


@pytest.mark.asyncio
async def test_aconsume_at_most_one_final():
    reader = FakeAsyncReader([_block(FINAL), _block(FINAL)])
    events = []

    await aconsume(reader, events.append)

    assert len(events) == 1


@pytest.mark.asyncio
async def test_aconsume_cancel_token_stops_reading():
    token = CancelToken()
    reader = FakeAsyncReader(
        [_block(DELTA_HI), _block(DELTA_HI), _block(FINAL)],
        on_read=lambda n: token.cancel() if n == 2 else None,
    )
    events = []

    await aconsume(reader, events.append, token)

    assert events == [DeltaEvent(content="Hi")]
    assert reader.reads == 2
    assert reader.closed


@pytest.mark.asyncio
async def test_aconsume_task_cancellation_closes_reader():
    started = asyncio.Event()

    class SlowReader(FakeAsyncReader):
        async def __anext__(self):
            started.set()
            await asyncio.sleep(3600)
            raise StopAsyncIteration

    reader = SlowReader([])
    events = []
    task = asyncio.create_task(aconsume(reader, events.append))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert events == []
    assert reader.closed


@pytest.mark.asyncio
async def test_aconsume_async_generator_source():
    async def source():
        yield _block(DELTA_HI)[:5]
        yield _block(DELTA_HI)[5:]

    events = []
    await aconsume(source(), events.append)

    assert events == [DeltaEvent(content="Hi")]


@pytest.mark.asyncio
async def test_aconsume_missing_stream_is_fatal():
    with pytest.raises(BrainStreamError):
        await aconsume(None, lambda e: None)
