"""
API Routes

Modular route definitions for the BevGenie API.
"""
from src.api.routes.health import router as health_router
from src.api.routes.chat import router as chat_router
from src.api.routes.pages import router as pages_router
from src.api.routes.presentation import router as presentation_router
from src.api.routes.session import router as session_router

__all__ = [
    "health_router",
    "chat_router",
    "pages_router",
    "presentation_router",
    "session_router",
]
