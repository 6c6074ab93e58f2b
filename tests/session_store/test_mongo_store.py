"""
MongoDB Session Store Tests
The repositories are replaced with AsyncMocks; these tests cover the
store's own coordination logic.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from src.models.message import ConversationMessage, MessageRole
from src.models.persona import PersonaScores
from src.models.session import Session, UserQuery
from src.session_store import MongoSessionStore


pytestmark = pytest.mark.asyncio


@pytest.fixture
def store():
    database = MagicMock()
    database.command = AsyncMock(return_value={"ok": 1.0})
    mongo_store = MongoSessionStore(database)
    mongo_store.sessions = AsyncMock()
    mongo_store.conversations = AsyncMock()
    mongo_store.signals = AsyncMock()
    return mongo_store


class TestMongoSessionStore:

    async def test_get_session_delegates_to_get_or_create(self, store):
        store.sessions.get_or_create.return_value = Session(session_id="s1")

        session = await store.get_session("s1")

        assert session.session_id == "s1"
        store.sessions.get_or_create.assert_awaited_once_with("s1")

    async def test_update_persona_recreates_vanished_session(self, store):
        store.sessions.save_persona.side_effect = [False, True]
        persona = PersonaScores(supplier_score=0.2)

        await store.update_persona("s1", persona)

        store.sessions.get_or_create.assert_awaited_once_with("s1")
        assert store.sessions.save_persona.await_count == 2

    async def test_update_persona_existing_session(self, store):
        store.sessions.save_persona.return_value = True

        await store.update_persona("s1", PersonaScores())

        store.sessions.get_or_create.assert_not_awaited()

    async def test_user_message_increments_count(self, store):
        store.conversations.add_message.side_effect = lambda message: message

        await store.add_conversation_message("s1", MessageRole.USER, "Hi")
        await store.add_conversation_message("s1", MessageRole.ASSISTANT, "Hello")

        store.sessions.increment_message_count.assert_awaited_once_with("s1")
        stored = store.conversations.add_message.call_args_list[0].args[0]
        assert isinstance(stored, ConversationMessage)
        assert stored.content == "Hi"

    async def test_history_zero_limit_skips_query(self, store):
        assert await store.get_conversation_history("s1", limit=0) == []
        store.conversations.get_recent.assert_not_awaited()

    async def test_track_query(self, store):
        query = UserQuery(query="How fast is onboarding?")

        await store.track_query("s1", query)

        store.sessions.push_query.assert_awaited_once_with("s1", query)

    async def test_clear_session_removes_all_collections(self, store):
        await store.clear_session("s1")

        store.conversations.delete_for_session.assert_awaited_once_with("s1")
        store.signals.delete_for_session.assert_awaited_once_with("s1")
        store.sessions.delete_for_session.assert_awaited_once_with("s1")

    async def test_ping(self, store):
        assert await store.ping() is True
        store.database.command.assert_awaited_once_with("ping")

    async def test_ping_propagates_failure(self, store):
        store.database.command.side_effect = ConnectionError("down")

        with pytest.raises(ConnectionError):
            await store.ping()
