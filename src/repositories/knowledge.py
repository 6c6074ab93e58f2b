"""
Knowledge Repository
Knowledge documents and Atlas vector search over their embeddings.
"""
from typing import Any, Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from .base import BaseRepository
from ..config import settings
from ..models.knowledge import KnowledgeDocument, KnowledgeRecord
from ..utils.observability import logger

# Fields returned by vector search; the embedding itself never leaves the database
_PROJECTED_FIELDS = ("content", "source_type", "source_url", "persona_tags", "pain_point_tags", "tags")


class KnowledgeRepository(BaseRepository[KnowledgeRecord]):
    """
    Repository for the knowledge base.

    Similarity search requires an Atlas Vector Search index on `embedding`
    (cosine, settings.embedding_dimensions) with `source_type`, `tags` and
    `pain_point_tags` declared as filter fields.
    """

    def __init__(self, database: AsyncIOMotorDatabase, index_name: str | None = None):
        super().__init__(database, "knowledge_documents", KnowledgeRecord)
        self.index_name = index_name or settings.knowledge_vector_index

    async def add_document(
        self,
        content: str,
        embedding: List[float],
        source_type: Optional[str] = None,
        source_url: Optional[str] = None,
        persona_tags: Optional[List[str]] = None,
        pain_point_tags: Optional[List[str]] = None,
        tags: Optional[List[str]] = None
    ) -> KnowledgeRecord:
        """Ingest one document with its precomputed embedding."""
        record = KnowledgeRecord(
            content=content,
            embedding=embedding,
            source_type=source_type,
            source_url=source_url,
            persona_tags=persona_tags or [],
            pain_point_tags=pain_point_tags or [],
            tags=tags or [],
        )
        created = await self.create(record)
        logger.info(f"Added knowledge document {created.id}", extra={"source_type": source_type})
        return created

    async def vector_search(
        self,
        embedding: List[float],
        top_k: int,
        filters: Optional[Dict[str, Any]] = None
    ) -> List[KnowledgeDocument]:
        """
        Nearest documents to `embedding`, most similar first.

        Args:
            embedding: Query vector
            top_k: Maximum number of documents
            filters: Optional pre-filter on indexed filter fields
        """
        search: Dict[str, Any] = {
            "index": self.index_name,
            "path": "embedding",
            "queryVector": embedding,
            "numCandidates": max(top_k * 10, 50),
            "limit": top_k,
        }
        if filters:
            search["filter"] = filters

        pipeline = [
            {"$vectorSearch": search},
            {"$project": {
                **{field: 1 for field in _PROJECTED_FIELDS},
                "score": {"$meta": "vectorSearchScore"},
            }},
        ]

        documents = []
        async for doc in self.collection.aggregate(pipeline):
            documents.append(KnowledgeDocument(
                id=str(doc["_id"]),
                content=doc.get("content", ""),
                source_type=doc.get("source_type"),
                source_url=doc.get("source_url"),
                persona_tags=doc.get("persona_tags") or [],
                pain_point_tags=doc.get("pain_point_tags") or [],
                tags=doc.get("tags") or [],
                similarity_score=max(0.0, min(1.0, float(doc.get("score", 0.0)))),
            ))
        return documents
