"""
Session Reset Endpoint
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.api.dependencies import clear_session_cookie, get_session_store, read_session_id
from src.session_store import SessionStore
from src.utils.observability import log_business_event

router = APIRouter(prefix="/api", tags=["Session"])


@router.delete("/session")
async def reset_session(request: Request, store: SessionStore = Depends(get_session_store)):
    """Forget the visitor: persona, history, signals and tracked queries."""
    session_id = read_session_id(request)
    if session_id:
        await store.clear_session(session_id)
        log_business_event("session_reset", session_id)

    response = JSONResponse(content={"success": True})
    clear_session_cookie(response)
    return response
