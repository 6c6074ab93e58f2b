"""
Chat Streaming Endpoint

One chat turn, streamed as Server-Sent Events while the pipeline runs.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from loguru import logger

from src.api.dependencies import attach_session_cookie, get_orchestrator, resolve_session_id
from src.api.models.chat import ChatStreamRequest
from src.api.sse import SSE_HEADERS, stream_events
from src.core.stream_orchestrator import StreamOrchestrator, validate_message
from src.session_store import SessionInitializationError

router = APIRouter(prefix="/api/chat", tags=["Chat"])


@router.post("/stream")
async def chat_stream(
    body: ChatStreamRequest,
    request: Request,
    orchestrator: StreamOrchestrator = Depends(get_orchestrator)
):
    """
    Process a chat message with streaming progress.

    Event sequence:
        stage (init, intent, signals, knowledge, response, page, complete; active then complete)
        persona_vectors (optional, once)
        page (optional, once)
        complete (exactly once on success) or error (terminal)

    Returns:
        400 JSON for an invalid message, 500 JSON when the session cannot be
        loaded, otherwise a text/event-stream response.
    """
    error = validate_message(body.message)
    if error:
        return JSONResponse(status_code=400, content={"error": error})

    session_id = resolve_session_id(request)

    try:
        ctx = await orchestrator.prepare(
            session_id,
            body.message,
            interaction_context=body.context,
            interaction_source=body.interaction_source,
        )
    except SessionInitializationError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})

    logger.info(f"Opening chat stream for session {session_id}")

    response = StreamingResponse(
        stream_events(lambda emit: orchestrator.run(ctx, emit)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
    attach_session_cookie(response, session_id)
    return response
