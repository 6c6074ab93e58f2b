"""
MongoDB Atlas Setup Script
Tests connection, creates the collections' indexes and the knowledge vector
index, and optionally seeds the knowledge base from a JSON Lines file.

Usage:
    python setup_mongodb.py
    python setup_mongodb.py knowledge.jsonl

Each seed line is an object with `content` and optional `source_type`,
`source_url`, `persona_tags`, `pain_point_tags` and `tags`.
"""
import asyncio
import json
import sys
from pymongo.errors import OperationFailure
from pymongo.operations import SearchIndexModel

from src.config import settings
from src.repositories import KnowledgeRepository, db_manager
from src.utils.llm_client import LanguageModel

COLLECTIONS = ("sessions", "conversation_messages", "persona_signals", "knowledge_documents")


def vector_index_model() -> SearchIndexModel:
    return SearchIndexModel(
        name=settings.knowledge_vector_index,
        type="vectorSearch",
        definition={
            "fields": [
                {
                    "type": "vector",
                    "path": "embedding",
                    "numDimensions": settings.embedding_dimensions,
                    "similarity": "cosine",
                },
                {"type": "filter", "path": "source_type"},
                {"type": "filter", "path": "tags"},
                {"type": "filter", "path": "pain_point_tags"},
            ]
        },
    )


async def ensure_vector_index(db) -> None:
    collection = db.knowledge_documents
    existing = [index["name"] async for index in collection.list_search_indexes()]
    if settings.knowledge_vector_index in existing:
        print(f"   Vector index '{settings.knowledge_vector_index}' already exists")
        return
    await collection.create_search_index(vector_index_model())
    print(f"   Vector index '{settings.knowledge_vector_index}' requested (Atlas builds it asynchronously)")


async def seed_knowledge(db, path: str) -> int:
    repository = KnowledgeRepository(db)
    language_model = LanguageModel()
    count = 0
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            if not line.strip():
                continue
            doc = json.loads(line)
            embedding = await language_model.embed(doc["content"])
            await repository.add_document(
                content=doc["content"],
                embedding=embedding,
                source_type=doc.get("source_type"),
                source_url=doc.get("source_url"),
                persona_tags=doc.get("persona_tags"),
                pain_point_tags=doc.get("pain_point_tags"),
                tags=doc.get("tags"),
            )
            count += 1
    return count


async def setup_mongodb(seed_path: str | None = None):
    """Initialize MongoDB Atlas database with collections and indexes."""
    print("🔄 Connecting to MongoDB Atlas...")
    print(f"   Database: {settings.mongodb_database}")
    print()

    try:
        await db_manager.connect()
        await db_manager.ping()
        print("✅ Connection successful!")
        print()

        db = db_manager.database

        existing_collections = await db.list_collection_names()
        print(f"📦 Existing collections: {existing_collections or 'None'}")
        for name in COLLECTIONS:
            if name not in existing_collections:
                await db.create_collection(name)
        print()

        print("🔨 Creating indexes...")
        await db_manager.create_indexes()
        print("✅ Indexes created successfully!")
        print()

        print("📊 Verifying indexes:")
        total = 0
        for name in COLLECTIONS:
            indexes = await db[name].index_information()
            total += len(indexes)
            print(f"   {name}: {len(indexes)} indexes")
            for idx_name in indexes:
                print(f"      - {idx_name}")
        print()

        print("🧭 Knowledge vector search:")
        try:
            await ensure_vector_index(db)
        except OperationFailure as e:
            # Local mongod has no Atlas Search; retrieval then finds nothing
            print(f"   ⚠️  Vector index not created: {e}")
        print()

        if seed_path:
            print(f"🌱 Seeding knowledge from {seed_path}...")
            seeded = await seed_knowledge(db, seed_path)
            print(f"✅ Seeded {seeded} documents")
            print()

        print("🎉 MongoDB setup complete!")
        print()
        print("📝 Summary:")
        print(f"   ✅ Database: {settings.mongodb_database}")
        print(f"   ✅ Collections: {', '.join(COLLECTIONS)}")
        print(f"   ✅ Indexes: {total} total")
        print()

    except Exception as e:
        print(f"❌ Error: {e}")
        print()
        print("💡 Troubleshooting:")
        print("   1. Verify your IP is whitelisted in Atlas Network Access")
        print("   2. Check that the username and password are correct")
        print("   3. Ensure the cluster is running (not paused)")
        raise

    finally:
        await db_manager.disconnect()
        print("👋 Disconnected from MongoDB")


if __name__ == "__main__":
    asyncio.run(setup_mongodb(sys.argv[1] if len(sys.argv) > 1 else None))
