"""
Session Store

Session-id-keyed persistence for the streaming pipeline:
- Abstract store interface
- In-memory store for development and tests
- MongoDB store for production
"""

from src.session_store.base import SessionStore, SessionInitializationError
from src.session_store.memory import InMemorySessionStore
from src.session_store.mongo import MongoSessionStore

__all__ = [
    "SessionStore",
    "SessionInitializationError",
    "InMemorySessionStore",
    "MongoSessionStore",
]
