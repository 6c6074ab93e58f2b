"""
Generic Repository Base Class
Typed async access to one MongoDB collection of session-scoped records.
"""
from typing import Generic, TypeVar, Type, Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
import datetime as dt

from ..models.base import MongoBaseModel
from ..utils.observability import logger

T = TypeVar("T", bound=MongoBaseModel)


class BaseRepository(Generic[T]):
    """
    Async repository over a collection whose documents carry a `session_id`.

    Documents are written in JSON mode, so enums are stored as their values and
    datetimes as ISO-8601 strings; `_to_model` reverses both on the way out.

    Usage:
        class SessionRepository(BaseRepository[Session]):
            def __init__(self, database: AsyncIOMotorDatabase):
                super().__init__(database, "sessions", Session)
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        collection_name: str,
        model_class: Type[T]
    ):
        self.database = database
        self.collection: AsyncIOMotorCollection = database[collection_name]
        self.model_class = model_class
        self.collection_name = collection_name

    def _to_document(self, record: T) -> Dict[str, Any]:
        return record.model_dump(mode="json", by_alias=True, exclude={"id"}, exclude_none=True)

    def _to_model(self, doc: Dict[str, Any]) -> T:
        """Validate a raw document, ignoring fields the model does not declare."""
        known = self.model_class.model_fields.keys()
        cleaned = {k: v for k, v in doc.items() if k in known}
        if "_id" in doc:
            cleaned["_id"] = str(doc["_id"])
        return self.model_class.model_validate(cleaned)

    async def create(self, record: T) -> T:
        """
        Insert a record and stamp it with its new `_id`.

        Raises:
            pymongo.errors.DuplicateKeyError: If a unique index rejects the record
        """
        now = dt.datetime.now(dt.UTC)
        record.created_at = now
        record.updated_at = now

        result = await self.collection.insert_one(self._to_document(record))
        record.id = str(result.inserted_id)

        logger.debug(
            f"Inserted into {self.collection_name}",
            extra={"document_id": record.id}
        )
        return record

    async def find_one(self, filter_dict: Dict[str, Any]) -> Optional[T]:
        doc = await self.collection.find_one(filter_dict)
        return self._to_model(doc) if doc else None

    async def find_many(
        self,
        filter_dict: Dict[str, Any],
        limit: int = 100,
        sort: Optional[List[tuple]] = None
    ) -> List[T]:
        """
        Records matching the filter.

        Args:
            filter_dict: MongoDB query filter
            limit: Maximum number of records
            sort: (field, direction) pairs applied before the limit
        """
        cursor = self.collection.find(filter_dict)
        if sort:
            cursor = cursor.sort(sort)
        docs = await cursor.limit(limit).to_list(length=limit)
        return [self._to_model(doc) for doc in docs]

    async def update_fields(self, filter_dict: Dict[str, Any], update: Dict[str, Any]) -> bool:
        """
        Apply update operators ($set, $inc, $push, ...) to the first match,
        refreshing `updated_at`.

        Returns:
            True if a document matched
        """
        stamped = {**update, "$set": {**update.get("$set", {}), "updated_at": dt.datetime.now(dt.UTC).isoformat()}}
        result = await self.collection.update_one(filter_dict, stamped)
        return result.matched_count > 0

    async def delete_many(self, filter_dict: Dict[str, Any]) -> int:
        result = await self.collection.delete_many(filter_dict)
        if result.deleted_count:
            logger.debug(
                f"Deleted {result.deleted_count} documents from {self.collection_name}",
                extra={"filter": str(filter_dict)}
            )
        return result.deleted_count

    async def delete_for_session(self, session_id: str) -> int:
        """Remove everything this collection holds for one session."""
        return await self.delete_many({"session_id": session_id})
