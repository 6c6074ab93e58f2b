"""
Knowledge Retriever
Similarity search over the knowledge base, ranked for the current visitor.

Retrieval is best-effort: every public method logs failures and degrades to
an empty result instead of raising.
"""
from typing import Any, Dict, List, Optional
from loguru import logger

from src.config import get_settings
from src.models.knowledge import KnowledgeDocument
from src.models.persona import PersonaScores
from src.repositories.knowledge import KnowledgeRepository
from src.utils.llm_client import LanguageModel

# Added to the similarity of documents tagged with a detected pain point
PAIN_POINT_BOOST = 0.1


class KnowledgeRetriever:
    """
    Embeds the visitor's message and searches the knowledge repository.

    A retriever without a repository (the in-memory development setup)
    simply finds nothing.
    """

    def __init__(
        self,
        language_model: LanguageModel,
        repository: Optional[KnowledgeRepository] = None,
        min_similarity: float | None = None
    ):
        self.language_model = language_model
        self.repository = repository
        self.min_similarity = (
            min_similarity if min_similarity is not None else get_settings().knowledge_min_similarity
        )

    async def get_knowledge_documents(
        self,
        message: str,
        filters: Optional[Dict[str, Any]] = None,
        top_k: int = 5
    ) -> List[KnowledgeDocument]:
        """
        Documents most similar to the message, best first.

        Args:
            message: Visitor message
            filters: Optional pre-filter (e.g. {"source_type": "case_study"})
            top_k: Maximum number of documents

        Returns:
            Documents at or above the minimum similarity; [] on any failure
        """
        if self.repository is None or not message or top_k <= 0:
            return []

        try:
            embedding = await self.language_model.embed(message)
            documents = await self.repository.vector_search(embedding, top_k=top_k, filters=filters)
        except Exception as e:
            logger.warning(f"Knowledge search failed, continuing without context: {e}")
            return []

        relevant = [doc for doc in documents if doc.similarity_score >= self.min_similarity]
        relevant.sort(key=lambda doc: doc.similarity_score, reverse=True)
        return relevant[:top_k]

    def rank_for_persona(
        self,
        documents: List[KnowledgeDocument],
        persona: Optional[PersonaScores],
        top_k: int
    ) -> List[KnowledgeDocument]:
        """Boost documents addressing the visitor's pain points and keep the best top_k."""
        pain_points = {p.value for p in persona.pain_points_detected} if persona else set()

        def score(doc: KnowledgeDocument) -> float:
            boost = PAIN_POINT_BOOST if pain_points.intersection(doc.pain_point_tags) else 0.0
            return min(1.0, doc.similarity_score + boost)

        return sorted(documents, key=score, reverse=True)[:top_k]

    async def get_context_for_llm(
        self,
        message: str,
        persona: Optional[PersonaScores] = None,
        top_k: int = 5
    ) -> Optional[str]:
        """
        Knowledge context string for model prompts.

        Fetches twice the requested number of candidates so the persona boost
        has room to reorder them.

        Returns:
            The joined document contents, or None when nothing relevant was found
        """
        try:
            candidates = await self.get_knowledge_documents(message, top_k=top_k * 2)
            documents = self.rank_for_persona(candidates, persona, top_k)
        except Exception as e:
            logger.warning(f"Knowledge ranking failed, continuing without context: {e}")
            return None

        if not documents:
            return None

        logger.debug(f"Knowledge context built from {len(documents)} documents")
        return "\n\n".join(doc.content.strip() for doc in documents if doc.content.strip()) or None
