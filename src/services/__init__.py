"""Services package."""
from src.services.knowledge_retriever import KnowledgeRetriever
from src.services.session_tracker import SessionTracker, categorize_problem

__all__ = [
    "KnowledgeRetriever",
    "SessionTracker",
    "categorize_problem",
]
