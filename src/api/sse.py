"""
Server-Sent Events adapter.

Bridges the orchestrator's `emit(event_type, payload)` sink to the string
chunks a StreamingResponse consumes.
"""
import asyncio
import json
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, Set
from loguru import logger

from src.core.stream_orchestrator import Emit

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}

# Pipelines whose client went away keep running until they persist
_detached_runs: Set[asyncio.Task] = set()


def format_sse_event(event_type: str, payload: Dict[str, Any]) -> str:
    return f"event: {event_type}\ndata: {json.dumps(payload)}\n\n"


async def stream_events(run: Callable[[Emit], Awaitable[None]]) -> AsyncIterator[str]:
    """
    Run `run(emit)` in a task and yield each emitted event as an SSE frame.

    The generator ends when the run returns. If the client disconnects first
    the run is left to finish in the background.
    """
    queue: asyncio.Queue[Optional[str]] = asyncio.Queue()

    async def emit(event_type: str, payload: Dict[str, Any]) -> None:
        await queue.put(format_sse_event(event_type, payload))

    async def producer() -> None:
        try:
            await run(emit)
        finally:
            await queue.put(None)

    task = asyncio.create_task(producer())
    finished = False
    try:
        while True:
            chunk = await queue.get()
            if chunk is None:
                finished = True
                break
            yield chunk
    finally:
        if not finished and not task.done():
            logger.info("SSE client disconnected, letting the pipeline finish")
            _detached_runs.add(task)
            task.add_done_callback(_detached_runs.discard)
