"""
Health and Readiness Endpoints

Kubernetes-compatible health probes for load balancers and orchestration.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

router = APIRouter(tags=["Health"])

# API version - single source of truth
API_VERSION = "1.0.0"


@router.get("/health")
async def health_check():
    """
    Liveness probe.
    Returns 200 whenever the process is serving requests.
    """
    return {
        "status": "healthy",
        "service": "bevgenie-api",
        "version": API_VERSION
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness probe: the session store must answer a ping.

    Returns 200 if ready, 503 if not ready.
    """
    try:
        store = request.app.state.session_store
        await store.ping()
        return {
            "status": "ready",
            "session_store": type(store).__name__,
        }

    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "reason": str(e)
            }
        )


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "BevGenie API",
        "version": API_VERSION,
        "endpoints": {
            "health": "/health",
            "ready": "/ready",
            "chat_stream": "/api/chat/stream (POST, text/event-stream)",
            "generate_page": "/api/pages/generate (POST)",
            "presentation": "/api/presentation (POST)",
            "reset_session": "/api/session (DELETE)"
        }
    }
