"""
Persona Signal Repository
Audit trail of every signal detected for a session.
"""
from motor.motor_asyncio import AsyncIOMotorDatabase

from .base import BaseRepository
from ..models.session import PersonaSignalRecord


class PersonaSignalRepository(BaseRepository[PersonaSignalRecord]):

    def __init__(self, database: AsyncIOMotorDatabase):
        super().__init__(database, "persona_signals", PersonaSignalRecord)

    async def record(self, signal: PersonaSignalRecord) -> PersonaSignalRecord:
        return await self.create(signal)
