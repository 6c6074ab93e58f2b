"""
Presentation Endpoint

Builds the personalized slide deck from the current session's tracked queries.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger

from src.agents.presentation_agent import PresentationAgent
from src.api.dependencies import get_presentation_agent, get_session_store, read_session_id
from src.models.presentation import PresentationMetadata, PresentationResponse
from src.services.session_tracker import SessionTracker
from src.session_store import SessionStore

router = APIRouter(prefix="/api", tags=["Presentation"])

NO_SESSION_DATA = "No session data available. Please interact with BevGenie first."


@router.post("/presentation")
async def generate_presentation(
    request: Request,
    store: SessionStore = Depends(get_session_store),
    agent: PresentationAgent = Depends(get_presentation_agent)
):
    session_id = read_session_id(request)
    if not session_id:
        return JSONResponse(status_code=400, content={"error": NO_SESSION_DATA})

    try:
        session = await store.get_session(session_id)
    except Exception as e:
        logger.error(f"Failed to load session {session_id} for presentation: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to initialize session"})

    if not session.tracked_queries:
        return JSONResponse(status_code=400, content={"error": NO_SESSION_DATA})

    data = SessionTracker.from_session(session).get_presentation_data()
    logger.info(
        f"Generating presentation for session {session_id}: "
        f"{data.session.queries_asked} queries over {data.session.duration}"
    )

    try:
        slides = await agent.generate(data)
    except Exception as e:
        logger.error(f"Presentation generation failed for session {session_id}: {e}")
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error"})

    response = PresentationResponse(
        slides=slides,
        metadata=PresentationMetadata(
            queries_count=len(data.actual_questions),
            duration=data.session.duration,
            roi_savings=data.roi.cost_saved,
        ),
    )
    return JSONResponse(content=response.to_payload())
