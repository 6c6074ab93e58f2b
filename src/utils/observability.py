"""
Structured Logging & Observability

Every log line the pipeline writes goes through loguru. The helpers below
bind a fixed set of fields so stage timings, model calls and session events
can be filtered and aggregated once the logs are shipped as JSON.
"""
import sys
from loguru import logger
from typing import Any
from src.config import get_settings

DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)


def configure_logging():
    """
    Replace loguru's default handler with the configured one.

    Colorized lines for local development; one JSON object per record
    (`serialize=True`) when structured logging is enabled.
    """
    settings = get_settings()
    logger.remove()

    if settings.enable_structured_logging:
        logger.add(sys.stderr, format="{message}", level=settings.log_level, serialize=True)
    else:
        logger.add(sys.stderr, format=DEV_FORMAT, level=settings.log_level, colorize=True)

    logger.info(
        f"Logging configured: level={settings.log_level}, "
        f"structured={settings.enable_structured_logging}, environment={settings.environment}"
    )


def log_stage_execution(
    stage: str,
    session_id: str,
    status: str,
    duration_ms: float | None = None,
    **context: Any
):
    """
    One record per finished pipeline stage.

    `complete` logs at INFO; `degraded` (a contained collaborator failure)
    and anything else at WARNING.

    Example:
        >>> log_stage_execution("intent", "5f0c...", "complete", 0.4, intent="roi_inquiry")
    """
    fields = {"stage": stage, "session_id": session_id, "status": status, **context}
    if duration_ms is not None:
        fields["duration_ms"] = round(duration_ms, 2)

    logger.bind(**fields).log("INFO" if status == "complete" else "WARNING", f"Stage {stage} | {status}")


def log_llm_call(
    purpose: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
    duration_ms: float,
    success: bool = True,
    error: str | None = None
):
    """
    One record per model round-trip.

    Args:
        purpose: "chat_reply", "page_spec", "presentation" or "embedding"
        model: Model identifier, e.g. "openai:gpt-4o"
        input_tokens: Prompt tokens reported by the provider (0 when unknown)
        output_tokens: Completion tokens reported by the provider
        duration_ms: Wall time including the timeout wrapper
        success: False when the call raised or timed out
        error: Categorized error text for failed calls
    """
    total = input_tokens + output_tokens
    fields = {
        "event_type": "llm_call",
        "purpose": purpose,
        "model": model,
        "tokens": {"input": input_tokens, "output": output_tokens, "total": total},
        "duration_ms": round(duration_ms, 2),
        "success": success,
    }
    if error:
        fields["error"] = error

    logger.bind(**fields).log(
        "INFO" if success else "ERROR",
        f"LLM Call: {model} | {purpose} | {total} tokens | {duration_ms:.0f}ms"
    )


def log_business_event(event_type: str, session_id: str, **details: Any):
    """Audit-worthy session events: signal recorded, page generated or failed, session reset."""
    logger.bind(event_type=event_type, session_id=session_id, **details).success(f"Business Event: {event_type}")
