"""
Session Repository
Session-record persistence keyed by the cookie session id.
"""
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
import datetime as dt

from ..config import settings
from .base import BaseRepository
from ..models.persona import PersonaScores
from ..models.session import Session, UserQuery
from ..utils.observability import logger


class SessionRepository(BaseRepository[Session]):
    """
    Repository for the central session record.
    Persona writes replace the whole persona sub-document (last write wins).
    """

    def __init__(self, database: AsyncIOMotorDatabase):
        super().__init__(database, "sessions", Session)

    async def get_by_session_id(self, session_id: str) -> Optional[Session]:
        return await self.find_one({"session_id": session_id})

    async def get_or_create(self, session_id: str) -> Session:
        """
        Get the session or create a fresh one with an all-zero persona.
        Idempotent operation for request initialization.
        """
        existing = await self.get_by_session_id(session_id)

        if existing:
            return existing

        session = await self.create(Session(session_id=session_id))
        logger.info(f"Created new session: {session_id}", extra={"session_id": session_id})
        return session

    async def save_persona(self, session_id: str, persona: PersonaScores) -> bool:
        return await self.update_fields(
            {"session_id": session_id},
            {"$set": {
                "persona": persona.model_dump(mode="json"),
                "last_interaction_at": dt.datetime.now(dt.UTC).isoformat(),
            }}
        )

    async def increment_message_count(self, session_id: str) -> bool:
        return await self.update_fields({"session_id": session_id}, {"$inc": {"message_count": 1}})

    async def push_query(self, session_id: str, query: UserQuery) -> bool:
        return await self.update_fields(
            {"session_id": session_id},
            {"$push": {"tracked_queries": {
                "$each": [query.model_dump(mode="json")],
                "$slice": -settings.max_tracked_queries,
            }}}
        )
