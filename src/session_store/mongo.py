"""
MongoDB Session Store

Production store built on the motor repositories.
"""
from typing import Any, Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from src.models.message import ConversationMessage, GenerationMode, MessageRole
from src.models.persona import PainPointType, PersonaScores
from src.models.session import PersonaSignalRecord, Session, UserQuery
from src.repositories import ConversationRepository, PersonaSignalRepository, SessionRepository
from src.session_store.base import SessionStore
from src.utils.observability import logger


class MongoSessionStore(SessionStore):
    """
    Session store over three collections: sessions, conversation_messages
    and persona_signals.

    Usage:
        >>> await db_manager.connect()
        >>> store = MongoSessionStore(db_manager.database)
    """

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database
        self.sessions = SessionRepository(database)
        self.conversations = ConversationRepository(database)
        self.signals = PersonaSignalRepository(database)

    async def get_session(self, session_id: str) -> Session:
        return await self.sessions.get_or_create(session_id)

    async def update_persona(self, session_id: str, persona: PersonaScores) -> None:
        matched = await self.sessions.save_persona(session_id, persona)
        if not matched:
            # Session vanished mid-request (e.g. a concurrent reset); recreate it
            await self.sessions.get_or_create(session_id)
            await self.sessions.save_persona(session_id, persona)

    async def add_conversation_message(
        self,
        session_id: str,
        role: MessageRole,
        content: str,
        mode: GenerationMode = GenerationMode.FRESH
    ) -> ConversationMessage:
        message = await self.conversations.add_message(ConversationMessage(
            session_id=session_id,
            role=role,
            content=content,
            generation_mode=mode,
        ))
        if role == MessageRole.USER:
            await self.sessions.increment_message_count(session_id)
        return message

    async def get_conversation_history(self, session_id: str, limit: int = 20) -> List[ConversationMessage]:
        if limit <= 0:
            return []
        return await self.conversations.get_recent(session_id, limit=limit)

    async def record_persona_signal(
        self,
        session_id: str,
        signal_type: str,
        evidence: str,
        strength: float,
        pain_points: Optional[List[PainPointType]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> PersonaSignalRecord:
        return await self.signals.record(PersonaSignalRecord(
            session_id=session_id,
            signal_type=signal_type,
            evidence=evidence,
            strength=strength,
            pain_points=pain_points,
            metadata=metadata or {},
        ))

    async def track_query(self, session_id: str, query: UserQuery) -> None:
        await self.sessions.push_query(session_id, query)

    async def clear_session(self, session_id: str) -> None:
        await self.conversations.delete_for_session(session_id)
        await self.signals.delete_for_session(session_id)
        await self.sessions.delete_for_session(session_id)
        logger.info(f"Cleared session {session_id}")

    async def ping(self) -> bool:
        await self.database.command("ping")
        return True
