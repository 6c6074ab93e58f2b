"""
Repositories Layer
Data persistence and query operations for the BevGenie API.
"""
from .connection import db_manager, get_database, DatabaseManager
from .base import BaseRepository
from .sessions import SessionRepository
from .conversations import ConversationRepository
from .signals import PersonaSignalRepository
from .knowledge import KnowledgeRepository

__all__ = [
    "db_manager",
    "get_database",
    "DatabaseManager",
    "BaseRepository",
    "SessionRepository",
    "ConversationRepository",
    "PersonaSignalRepository",
    "KnowledgeRepository",
]
