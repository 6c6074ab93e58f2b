import datetime as dt
from enum import StrEnum
from pydantic import BaseModel, Field
from src.models.base import MongoBaseModel


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class GenerationMode(StrEnum):
    FRESH = "fresh"
    RETURNING = "returning"
    DATA_CONNECTED = "data_connected"


class ConversationMessage(MongoBaseModel):
    """
    The Atomic Interaction Model.
    Append-only: never mutated after creation.
    """
    session_id: str
    role: MessageRole
    content: str
    generation_mode: GenerationMode = GenerationMode.FRESH
    timestamp: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.UTC),
        description="The exact moment the message was sent or received."
    )


class ChatTurn(BaseModel):
    """A role/content pair as handed to the language model."""
    role: MessageRole
    content: str

    @classmethod
    def from_message(cls, message: ConversationMessage) -> "ChatTurn":
        return cls(role=message.role, content=message.content)
