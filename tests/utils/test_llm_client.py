"""
Tests for the language model client: error categorization, history
conversion and the completion / embedding wrappers.
"""
import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, Mock
from pydantic_ai.messages import ModelRequest, ModelResponse

from src.models.message import ChatTurn, MessageRole
from src.utils.llm_client import (
    LanguageModel,
    LLMCriticalError,
    LLMError,
    categorize_llm_error,
    to_model_history,
)


def _agent_returning(output="Hello there", error=None):
    result = Mock()
    result.output = output
    result.usage.return_value = Mock(input_tokens=12, output_tokens=5)
    agent = MagicMock()
    agent.run = AsyncMock(side_effect=error, return_value=result)
    return agent


class TestCategorizeLLMError:

    @pytest.mark.parametrize("error,expected", [
        (asyncio.TimeoutError(), LLMError),
        (Exception("Request timed out"), LLMError),
        (Exception("Rate limit exceeded"), LLMError),
        (Exception("500 Internal Server Error"), LLMError),
        (Exception("Authentication failed: Invalid API key"), LLMCriticalError),
        (Exception("Error code: 401"), LLMCriticalError),
        (Exception("Invalid request: Missing required field"), LLMCriticalError),
    ])
    def test_categories(self, error, expected):
        assert isinstance(categorize_llm_error(error), expected)

    def test_already_categorized_passes_through(self):
        error = LLMCriticalError("bad key")

        assert categorize_llm_error(error) is error


class TestToModelHistory:

    def test_roles_map_to_requests_and_responses(self):
        history = to_model_history([
            ChatTurn(role=MessageRole.USER, content="Hi"),
            ChatTurn(role=MessageRole.ASSISTANT, content="Hello! How can I help?"),
        ])

        assert isinstance(history[0], ModelRequest)
        assert isinstance(history[1], ModelResponse)
        assert history[1].parts[0].content == "Hello! How can I help?"


@pytest.mark.asyncio
class TestLanguageModel:

    async def test_complete_passes_history_and_settings(self):
        lm = LanguageModel(chat_model="test", timeout_seconds=5)
        agent = _agent_returning("Sure, here is how.")
        lm._agents["test"] = agent

        reply = await lm.complete(
            "system",
            [
                ChatTurn(role=MessageRole.USER, content="first"),
                ChatTurn(role=MessageRole.ASSISTANT, content="answer"),
                ChatTurn(role=MessageRole.USER, content="second"),
            ],
            max_tokens=300,
            temperature=0.7,
        )

        assert reply == "Sure, here is how."
        args, kwargs = agent.run.call_args
        assert args[0] == "second"
        assert kwargs["deps"] == "system"
        assert len(kwargs["message_history"]) == 2
        assert kwargs["model_settings"] == {"max_tokens": 300, "temperature": 0.7}

    async def test_complete_requires_trailing_user_turn(self):
        lm = LanguageModel(chat_model="test")

        with pytest.raises(ValueError):
            await lm.complete("system", [ChatTurn(role=MessageRole.ASSISTANT, content="hi")], 300, 0.7)

    async def test_complete_text_uses_page_model(self):
        lm = LanguageModel(page_model="page-test")
        agent = _agent_returning('{"type": "solution_brief"}')
        lm._agents["page-test"] = agent

        text = await lm.complete_text("system", "build a page", max_tokens=4000, temperature=0.5)

        assert text == '{"type": "solution_brief"}'
        assert agent.run.call_args.kwargs["message_history"] is None

    async def test_provider_errors_are_categorized(self):
        lm = LanguageModel(chat_model="test")
        lm._agents["test"] = _agent_returning(error=Exception("Authentication failed"))

        with pytest.raises(LLMCriticalError):
            await lm.complete("system", [ChatTurn(role=MessageRole.USER, content="hi")], 300, 0.7)

    async def test_timeout_becomes_llm_error(self):
        lm = LanguageModel(chat_model="test", timeout_seconds=0.01)

        async def slow_run(*args, **kwargs):
            await asyncio.sleep(1)

        agent = MagicMock()
        agent.run = slow_run
        lm._agents["test"] = agent

        with pytest.raises(LLMError):
            await lm.complete("system", [ChatTurn(role=MessageRole.USER, content="hi")], 300, 0.7)

    async def test_embed(self):
        client = MagicMock()
        response = Mock()
        response.data = [Mock(embedding=[0.01] * 1536)]
        response.usage = Mock(prompt_tokens=3)
        client.embeddings.create = AsyncMock(return_value=response)
        lm = LanguageModel(openai_client=client)

        vector = await lm.embed("distributor visibility")

        assert len(vector) == 1536
        assert client.embeddings.create.call_args.kwargs["dimensions"] == 1536

    async def test_embed_dimension_mismatch(self):
        client = MagicMock()
        response = Mock()
        response.data = [Mock(embedding=[0.01] * 10)]
        client.embeddings.create = AsyncMock(return_value=response)
        lm = LanguageModel(openai_client=client)

        with pytest.raises(ValueError):
            await lm.embed("distributor visibility")
