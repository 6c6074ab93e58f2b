"""
Request bodies for the chat endpoints.
"""
from typing import Any, Dict, Optional
from pydantic import Field

from src.models.base import CamelModel


class ChatStreamRequest(CamelModel):
    """
    Body of POST /api/chat/stream.

    `message` is deliberately untyped so an empty or non-string message gets
    the endpoint's own 400 response instead of a schema error.
    """
    message: Any = None
    context: Optional[Dict[str, Any]] = Field(
        None, description="Interaction context, e.g. {originalQuery, context} for a clicked page element"
    )
    interaction_source: Optional[str] = Field(None, description="Where the message came from (chat, page_click, ...)")
