"""
Base Session Store Interface

Abstract, session-id-keyed persistence for personas, conversation history,
signal audit records and tracked queries.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from src.models.message import ConversationMessage, GenerationMode, MessageRole
from src.models.persona import PainPointType, PersonaScores
from src.models.session import PersonaSignalRecord, Session, UserQuery


class SessionInitializationError(Exception):
    """The session could not be loaded or created at request start."""
    pass


class SessionStore(ABC):
    """
    Abstract session store.

    Implementations must provide:
    - Load-or-create of the session record
    - Persona replacement (last write wins)
    - Append-only conversation history
    - Signal audit records
    - Tracked queries for the presentation deck
    - Explicit reset, the only way a persona is cleared
    """

    @abstractmethod
    async def get_session(self, session_id: str) -> Session:
        """
        Load the session, creating a fresh one with an all-zero persona.

        Args:
            session_id: Opaque id from the session cookie

        Returns:
            The session record
        """
        pass

    @abstractmethod
    async def update_persona(self, session_id: str, persona: PersonaScores) -> None:
        """Replace the stored persona."""
        pass

    @abstractmethod
    async def add_conversation_message(
        self,
        session_id: str,
        role: MessageRole,
        content: str,
        mode: GenerationMode = GenerationMode.FRESH
    ) -> ConversationMessage:
        """
        Append one message to the history.
        Storing a user message increments the session's message_count.
        """
        pass

    @abstractmethod
    async def get_conversation_history(self, session_id: str, limit: int = 20) -> List[ConversationMessage]:
        """Last `limit` messages, oldest first."""
        pass

    @abstractmethod
    async def record_persona_signal(
        self,
        session_id: str,
        signal_type: str,
        evidence: str,
        strength: float,
        pain_points: Optional[List[PainPointType]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> PersonaSignalRecord:
        """Write one signal audit record."""
        pass

    @abstractmethod
    async def track_query(self, session_id: str, query: UserQuery) -> None:
        """Append a tracked query to the session."""
        pass

    @abstractmethod
    async def clear_session(self, session_id: str) -> None:
        """Drop persona, history, signals and tracked queries for the session."""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """True when the backing store is reachable."""
        pass
