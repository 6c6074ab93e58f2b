"""
FastAPI Application

Main entry point for the BevGenie API.
Handles application lifecycle and router mounting.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from src.agents.page_generator import PageGenerator
from src.agents.presentation_agent import PresentationAgent
from src.agents.response_agent import ResponseSynthesizer
from src.api.routes import (
    chat_router,
    health_router,
    pages_router,
    presentation_router,
    session_router,
)
from src.config import get_settings
from src.core.stream_orchestrator import StreamOrchestrator
from src.repositories import KnowledgeRepository, db_manager
from src.services.knowledge_retriever import KnowledgeRetriever
from src.session_store import InMemorySessionStore, MongoSessionStore, SessionStore
from src.utils.llm_client import LanguageModel
from src.utils.observability import configure_logging


async def build_session_store() -> tuple[SessionStore, KnowledgeRepository | None]:
    """Create the configured session store and, with MongoDB, the knowledge repository."""
    settings = get_settings()
    if settings.session_backend == "memory":
        logger.warning("Using in-memory session store; sessions are lost on restart")
        return InMemorySessionStore(), None

    await db_manager.connect()
    await db_manager.create_indexes()
    database = db_manager.database
    return MongoSessionStore(database), KnowledgeRepository(database)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle: startup and shutdown events.

    Startup:
    - Configure logging
    - Connect the session store (MongoDB or in-memory)
    - Build the language model, retriever, agents and orchestrator

    Shutdown:
    - Disconnect from MongoDB
    """
    configure_logging()
    settings = get_settings()
    logger.info(f"Starting BevGenie API server ({settings.environment})...")

    session_store, knowledge_repository = await build_session_store()

    language_model = LanguageModel()
    page_generator = PageGenerator(language_model)
    orchestrator = StreamOrchestrator(
        session_store=session_store,
        knowledge_retriever=KnowledgeRetriever(language_model, knowledge_repository),
        response_synthesizer=ResponseSynthesizer(language_model),
        page_generator=page_generator,
    )

    # Store in app state for access in routes
    app.state.session_store = session_store
    app.state.language_model = language_model
    app.state.page_generator = page_generator
    app.state.presentation_agent = PresentationAgent(language_model)
    app.state.orchestrator = orchestrator

    logger.info("API server ready")

    yield

    logger.info("Shutting down API server...")
    if settings.session_backend == "mongodb":
        await db_manager.disconnect()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="BevGenie API",
    description="Streaming chat with persona detection and generated marketing pages",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies get the same {"error": ...} shape as other 400s."""
    errors = [
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "; ".join(errors) or "Invalid request"})


# Mount routers
app.include_router(health_router)
app.include_router(chat_router)
app.include_router(pages_router)
app.include_router(presentation_router)
app.include_router(session_router)
