"""
In-Memory Session Store

Dict-backed store for development and tests.
Uses an asyncio.Lock so interleaved coroutines see consistent records.
"""
import asyncio
import datetime as dt
from typing import Any, Dict, List, Optional

from src.config import get_settings
from src.models.message import ConversationMessage, GenerationMode, MessageRole
from src.models.persona import PainPointType, PersonaScores
from src.models.session import PersonaSignalRecord, Session, UserQuery
from src.session_store.base import SessionStore


class InMemorySessionStore(SessionStore):
    """
    In-memory session store implementation.

    Data is lost on restart. Records are copied on the way in and out so
    callers never share mutable state with the store.
    """

    def __init__(self, max_tracked_queries: int | None = None):
        self.max_tracked_queries = max_tracked_queries or get_settings().max_tracked_queries
        self._sessions: Dict[str, Session] = {}
        self._messages: Dict[str, List[ConversationMessage]] = {}
        self._signals: Dict[str, List[PersonaSignalRecord]] = {}
        self._lock = asyncio.Lock()

    def _get_or_create(self, session_id: str) -> Session:
        if session_id not in self._sessions:
            self._sessions[session_id] = Session(session_id=session_id)
        return self._sessions[session_id]

    async def get_session(self, session_id: str) -> Session:
        async with self._lock:
            return self._get_or_create(session_id).model_copy(deep=True)

    async def update_persona(self, session_id: str, persona: PersonaScores) -> None:
        async with self._lock:
            session = self._get_or_create(session_id)
            session.persona = persona.model_copy(deep=True)
            session.last_interaction_at = dt.datetime.now(dt.UTC)
            session.updated_at = session.last_interaction_at

    async def add_conversation_message(
        self,
        session_id: str,
        role: MessageRole,
        content: str,
        mode: GenerationMode = GenerationMode.FRESH
    ) -> ConversationMessage:
        async with self._lock:
            session = self._get_or_create(session_id)
            message = ConversationMessage(
                session_id=session_id,
                role=role,
                content=content,
                generation_mode=mode,
            )
            self._messages.setdefault(session_id, []).append(message)
            if role == MessageRole.USER:
                session.message_count += 1
            return message.model_copy()

    async def get_conversation_history(self, session_id: str, limit: int = 20) -> List[ConversationMessage]:
        async with self._lock:
            messages = self._messages.get(session_id, [])
            return [m.model_copy() for m in messages[-limit:]] if limit > 0 else []

    async def record_persona_signal(
        self,
        session_id: str,
        signal_type: str,
        evidence: str,
        strength: float,
        pain_points: Optional[List[PainPointType]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> PersonaSignalRecord:
        record = PersonaSignalRecord(
            session_id=session_id,
            signal_type=signal_type,
            evidence=evidence,
            strength=strength,
            pain_points=pain_points,
            metadata=metadata or {},
        )
        async with self._lock:
            self._signals.setdefault(session_id, []).append(record)
        return record

    async def get_persona_signals(self, session_id: str) -> List[PersonaSignalRecord]:
        async with self._lock:
            return list(self._signals.get(session_id, []))

    async def track_query(self, session_id: str, query: UserQuery) -> None:
        async with self._lock:
            session = self._get_or_create(session_id)
            session.tracked_queries.append(query.model_copy())
            del session.tracked_queries[:-self.max_tracked_queries]

    async def clear_session(self, session_id: str) -> None:
        async with self._lock:
            self._sessions.pop(session_id, None)
            self._messages.pop(session_id, None)
            self._signals.pop(session_id, None)

    async def ping(self) -> bool:
        return True
