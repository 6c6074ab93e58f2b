"""
In-Memory Session Store Tests
"""
import asyncio
import pytest

from src.models.message import GenerationMode, MessageRole
from src.models.persona import PainPointType, PersonaScores
from src.models.session import UserQuery
from src.session_store import InMemorySessionStore


pytestmark = pytest.mark.asyncio


class TestSessions:

    async def test_new_session_has_zero_persona(self, memory_store):
        session = await memory_store.get_session("s1")

        assert session.session_id == "s1"
        assert session.persona == PersonaScores()
        assert session.message_count == 0
        assert session.tracked_queries == []

    async def test_get_session_returns_copies(self, memory_store):
        session = await memory_store.get_session("s1")
        session.persona.supplier_score = 0.9

        again = await memory_store.get_session("s1")

        assert again.persona.supplier_score == 0.0

    async def test_update_persona_last_write_wins(self, memory_store):
        await memory_store.update_persona("s1", PersonaScores(supplier_score=0.3))
        await memory_store.update_persona("s1", PersonaScores(distributor_score=0.5))

        session = await memory_store.get_session("s1")

        assert session.persona.supplier_score == 0.0
        assert session.persona.distributor_score == 0.5

    async def test_sessions_are_isolated(self, memory_store):
        await memory_store.update_persona("s1", PersonaScores(craft_score=0.7))

        other = await memory_store.get_session("s2")

        assert other.persona.craft_score == 0.0


class TestConversationHistory:

    async def test_user_messages_increment_count(self, memory_store):
        await memory_store.add_conversation_message("s1", MessageRole.USER, "Hi")
        await memory_store.add_conversation_message("s1", MessageRole.ASSISTANT, "Hello!")

        session = await memory_store.get_session("s1")

        assert session.message_count == 1

    async def test_history_is_oldest_first_and_limited(self, memory_store):
        for i in range(5):
            await memory_store.add_conversation_message("s1", MessageRole.USER, f"m{i}")

        history = await memory_store.get_conversation_history("s1", limit=3)

        assert [m.content for m in history] == ["m2", "m3", "m4"]

    async def test_zero_limit(self, memory_store):
        await memory_store.add_conversation_message("s1", MessageRole.USER, "Hi")

        assert await memory_store.get_conversation_history("s1", limit=0) == []

    async def test_generation_mode_is_stored(self, memory_store):
        message = await memory_store.add_conversation_message(
            "s1", MessageRole.ASSISTANT, "Welcome back", GenerationMode.RETURNING
        )

        assert message.generation_mode == GenerationMode.RETURNING

    async def test_concurrent_appends_are_all_kept(self, memory_store):
        await asyncio.gather(*[
            memory_store.add_conversation_message("s1", MessageRole.USER, f"m{i}")
            for i in range(20)
        ])

        session = await memory_store.get_session("s1")
        history = await memory_store.get_conversation_history("s1", limit=50)

        assert session.message_count == 20
        assert len(history) == 20


class TestSignalsAndQueries:

    async def test_record_signal(self, memory_store):
        record = await memory_store.record_persona_signal(
            "s1",
            "pain_point_mention",
            "we lose track of reps",
            0.3,
            pain_points=[PainPointType.EXECUTION_BLIND_SPOT],
        )

        signals = await memory_store.get_persona_signals("s1")

        assert signals == [record]
        assert record.pain_points == [PainPointType.EXECUTION_BLIND_SPOT]

    async def test_track_query(self, memory_store):
        await memory_store.track_query("s1", UserQuery(query="Show me depletion data"))

        session = await memory_store.get_session("s1")

        assert [q.query for q in session.tracked_queries] == ["Show me depletion data"]

    async def test_tracked_queries_keep_newest(self):
        store = InMemorySessionStore(max_tracked_queries=2)
        for text in ["first", "second", "third"]:
            await store.track_query("s1", UserQuery(query=text))

        session = await store.get_session("s1")

        assert [q.query for q in session.tracked_queries] == ["second", "third"]

    async def test_clear_session_drops_everything(self, memory_store):
        await memory_store.update_persona("s1", PersonaScores(supplier_score=0.6))
        await memory_store.add_conversation_message("s1", MessageRole.USER, "Hi")
        await memory_store.record_persona_signal("s1", "pain_point_mention", "x", 0.3)
        await memory_store.track_query("s1", UserQuery(query="Hi"))

        await memory_store.clear_session("s1")

        session = await memory_store.get_session("s1")
        assert session.persona == PersonaScores()
        assert session.message_count == 0
        assert session.tracked_queries == []
        assert await memory_store.get_conversation_history("s1") == []
        assert await memory_store.get_persona_signals("s1") == []

    async def test_ping(self):
        assert await InMemorySessionStore().ping() is True
