"""
Conversation Repository
Append-only conversation history per session.
"""
from typing import List
from motor.motor_asyncio import AsyncIOMotorDatabase

from .base import BaseRepository
from ..models.message import ConversationMessage


class ConversationRepository(BaseRepository[ConversationMessage]):

    def __init__(self, database: AsyncIOMotorDatabase):
        super().__init__(database, "conversation_messages", ConversationMessage)

    async def add_message(self, message: ConversationMessage) -> ConversationMessage:
        return await self.create(message)

    async def get_recent(self, session_id: str, limit: int = 20) -> List[ConversationMessage]:
        """
        Last `limit` messages of a session, oldest first.
        Ready to be handed to the language model.
        """
        newest_first = await self.find_many(
            {"session_id": session_id},
            limit=limit,
            sort=[("timestamp", -1)]
        )
        return list(reversed(newest_first))
