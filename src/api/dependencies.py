"""
FastAPI Dependencies

Accessors for the collaborators created in the lifespan, plus the session
cookie helpers.
"""
import uuid
from typing import Optional

from fastapi import Request, Response

from src.agents.page_generator import PageGenerator
from src.agents.presentation_agent import PresentationAgent
from src.config import get_settings
from src.core.stream_orchestrator import StreamOrchestrator
from src.session_store import SessionStore


def get_orchestrator(request: Request) -> StreamOrchestrator:
    return request.app.state.orchestrator


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_page_generator(request: Request) -> PageGenerator:
    return request.app.state.page_generator


def get_presentation_agent(request: Request) -> PresentationAgent:
    return request.app.state.presentation_agent


def read_session_id(request: Request) -> Optional[str]:
    """Session id from the cookie, None for a first-time visitor."""
    return request.cookies.get(get_settings().session_cookie_name) or None


def resolve_session_id(request: Request) -> str:
    """Existing session id, or a new one for a visitor without a cookie."""
    return read_session_id(request) or uuid.uuid4().hex


def attach_session_cookie(response: Response, session_id: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_cookie_max_age_seconds,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(get_settings().session_cookie_name)
