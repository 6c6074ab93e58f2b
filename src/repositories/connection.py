"""
MongoDB Connection Management
One process-wide Motor client shared by every session-store repository.
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from typing import Any, Dict, List, Optional, Tuple
from ..config import settings
from ..utils.observability import logger

# collection -> [(keys, index options)]
INDEXES: Dict[str, List[Tuple[Any, Dict[str, Any]]]] = {
    # One record per cookie session id
    "sessions": [
        ("session_id", {"unique": True, "name": "idx_session_id_unique"}),
        ("last_interaction_at", {"name": "idx_last_interaction"}),
    ],
    # History is always read newest-first per session
    "conversation_messages": [
        ([("session_id", 1), ("timestamp", -1)], {"name": "idx_session_messages"}),
    ],
    "persona_signals": [
        ([("session_id", 1), ("created_at", -1)], {"name": "idx_session_signals"}),
    ],
    # The vector index lives in Atlas Search, see setup_mongodb.py
    "knowledge_documents": [
        ("source_type", {"name": "idx_source_type", "sparse": True}),
    ],
}


class DatabaseManager:
    """
    Singleton owner of the Motor client.

    Motor connects lazily, so `connect()` never blocks on the server; the
    first query (or `ping()`) does.
    """

    _instance: Optional["DatabaseManager"] = None
    _client: Optional[AsyncIOMotorClient] = None
    _database: Optional[AsyncIOMotorDatabase] = None

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def connect(self) -> None:
        """Create the client if there is none. Safe to call repeatedly."""
        if self._client is not None:
            return

        logger.info(
            f"Connecting to MongoDB database '{settings.mongodb_database}'",
            extra={"max_pool_size": settings.mongodb_max_pool_size, "environment": settings.environment}
        )
        self._client = AsyncIOMotorClient(
            settings.mongodb_uri,
            maxPoolSize=settings.mongodb_max_pool_size,
            minPoolSize=settings.mongodb_min_pool_size,
            serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        )
        self._database = self._client[settings.mongodb_database]

    async def disconnect(self) -> None:
        if self._client is None:
            return

        self._client.close()
        self._client = None
        self._database = None
        logger.info("MongoDB connection closed")

    async def ping(self) -> bool:
        """Round-trip to the server; raises if unreachable."""
        await self.client.admin.command("ping")
        return True

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._database is None:
            raise RuntimeError("Database not connected. Call await db_manager.connect() first.")
        return self._database

    @property
    def client(self) -> AsyncIOMotorClient:
        if self._client is None:
            raise RuntimeError("Database client not connected. Call await db_manager.connect() first.")
        return self._client

    async def create_indexes(self) -> None:
        """Ensure every index in INDEXES exists. Run once at startup."""
        db = self.database
        for collection, indexes in INDEXES.items():
            for keys, options in indexes:
                await db[collection].create_index(keys, **options)
        logger.info(f"MongoDB indexes ensured on {len(INDEXES)} collections")


db_manager = DatabaseManager()


async def get_database() -> AsyncIOMotorDatabase:
    """Connected database for code outside the app lifespan."""
    return db_manager.database
