"""
Tests for the MongoDB setup script's vector index and knowledge seeding.
"""
import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import setup_mongodb
from src.config import settings


def test_vector_index_definition():
    model = setup_mongodb.vector_index_model()

    definition = model.document["definition"]
    vector = definition["fields"][0]
    assert model.document["name"] == settings.knowledge_vector_index
    assert vector["path"] == "embedding"
    assert vector["numDimensions"] == settings.embedding_dimensions
    assert {"type": "filter", "path": "pain_point_tags"} in definition["fields"]


@pytest.mark.asyncio
async def test_seed_knowledge(tmp_path, fake_llm):
    seed_file = tmp_path / "knowledge.jsonl"
    seed_file.write_text(
        json.dumps({"content": "Depletion dashboards by region", "tags": ["sales"]}) + "\n\n"
        + json.dumps({"content": "Compliance audit trail", "pain_point_tags": ["compliance_risk"]}) + "\n"
    )
    repository = MagicMock()
    repository.add_document = AsyncMock()

    with patch.object(setup_mongodb, "KnowledgeRepository", return_value=repository), \
            patch.object(setup_mongodb, "LanguageModel", return_value=fake_llm):
        count = await setup_mongodb.seed_knowledge(MagicMock(), str(seed_file))

    assert count == 2
    assert fake_llm.embed_calls == ["Depletion dashboards by region", "Compliance audit trail"]
    second = repository.add_document.call_args_list[1].kwargs
    assert second["pain_point_tags"] == ["compliance_risk"]
    assert second["embedding"] == fake_llm.embedding
