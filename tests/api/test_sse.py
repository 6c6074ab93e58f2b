"""
Tests for the Server-Sent Events adapter.
"""
import asyncio
import json

import pytest

from src.api import sse
from src.api.sse import format_sse_event, stream_events


def test_format_sse_event():
    frame = format_sse_event("stage", {"stageId": "init", "progress": 0})

    assert frame == 'event: stage\ndata: {"stageId": "init", "progress": 0}\n\n'
    assert json.loads(frame.split("data: ")[1]) == {"stageId": "init", "progress": 0}


@pytest.mark.asyncio
class TestStreamEvents:

    async def test_yields_every_event_in_order(self):
        async def run(emit):
            await emit("stage", {"n": 1})
            await emit("complete", {"n": 2})

        chunks = [chunk async for chunk in stream_events(run)]

        assert chunks == [
            format_sse_event("stage", {"n": 1}),
            format_sse_event("complete", {"n": 2}),
        ]

    async def test_run_failure_still_closes_stream(self):
        async def run(emit):
            await emit("stage", {"n": 1})
            raise RuntimeError("boom")

        chunks = [chunk async for chunk in stream_events(run)]

        assert chunks == [format_sse_event("stage", {"n": 1})]

    async def test_disconnect_lets_run_finish(self):
        finished = asyncio.Event()

        async def run(emit):
            await emit("stage", {"n": 1})
            await asyncio.sleep(0.01)
            await emit("complete", {"n": 2})
            finished.set()

        stream = stream_events(run)
        first = await stream.__anext__()
        await stream.aclose()

        assert first.startswith("event: stage")
        await asyncio.wait_for(finished.wait(), timeout=1)
        await asyncio.sleep(0.01)
        assert not sse._detached_runs
