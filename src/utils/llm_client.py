"""
Language Model Client
The single seam between the pipeline and the model provider.

Chat and page generation run through pydantic-ai Agents; embeddings go
straight to the OpenAI SDK. Every call is bounded by a timeout and logged
through log_llm_call.
"""
import asyncio
import os
import time
from typing import Dict, List, Sequence
from loguru import logger
from openai import AsyncOpenAI
from pydantic_ai import Agent, RunContext
from pydantic_ai.messages import ModelMessage, ModelRequest, ModelResponse, TextPart, UserPromptPart

from src.config import get_settings
from src.models.message import ChatTurn, MessageRole
from src.utils.observability import log_llm_call


class LLMError(Exception):
    """Recoverable model failure (timeout, rate limit, server error)."""
    pass


class LLMCriticalError(Exception):
    """Non-recoverable errors (auth failure, invalid request, etc.)."""
    pass


def categorize_llm_error(error: Exception) -> Exception:
    """Map a provider exception onto LLMError / LLMCriticalError."""
    if isinstance(error, (LLMError, LLMCriticalError)):
        return error

    error_msg = str(error).lower()

    if isinstance(error, asyncio.TimeoutError) or "timeout" in error_msg or "timed out" in error_msg:
        return LLMError(f"Model call timed out: {error}")

    if "authentication" in error_msg or "api key" in error_msg or "401" in error_msg:
        return LLMCriticalError(f"Authentication failed: {error}")

    if "invalid" in error_msg and "request" in error_msg:
        return LLMCriticalError(f"Invalid request: {error}")

    return LLMError(str(error) or type(error).__name__)


def to_model_history(turns: Sequence[ChatTurn]) -> List[ModelMessage]:
    """Convert role/content pairs into pydantic-ai message history."""
    history: List[ModelMessage] = []
    for turn in turns:
        if turn.role == MessageRole.USER:
            history.append(ModelRequest(parts=[UserPromptPart(content=turn.content)]))
        else:
            history.append(ModelResponse(parts=[TextPart(content=turn.content)]))
    return history


def _usage_tokens(result) -> tuple[int, int]:
    try:
        usage = result.usage()
    except Exception:
        return 0, 0
    input_tokens = getattr(usage, "input_tokens", None) or getattr(usage, "request_tokens", None) or 0
    output_tokens = getattr(usage, "output_tokens", None) or getattr(usage, "response_tokens", None) or 0
    return int(input_tokens), int(output_tokens)


class LanguageModel:
    """
    Text completion and embedding capability used by the pipeline.

    Usage:
        >>> lm = LanguageModel()
        >>> reply = await lm.complete(system_prompt, [ChatTurn(role="user", content="Hi")], 300, 0.7)
        >>> vector = await lm.embed("distributor visibility")
    """

    def __init__(
        self,
        chat_model: str | None = None,
        page_model: str | None = None,
        timeout_seconds: float | None = None,
        openai_client: AsyncOpenAI | None = None
    ):
        settings = get_settings()
        self.chat_model = chat_model or settings.chat_model
        self.page_model = page_model or settings.page_model
        self.embedding_model = settings.embedding_model
        self.embedding_dimensions = settings.embedding_dimensions
        self.timeout_seconds = timeout_seconds or settings.llm_timeout_seconds

        # pydantic-ai's OpenAI provider reads the key from the environment
        os.environ.setdefault("OPENAI_API_KEY", settings.openai_api_key)

        self._openai_client = openai_client
        self._agents: Dict[str, Agent] = {}

    def _agent_for(self, model: str) -> Agent:
        """Agents are built on first use so construction needs no network or key."""
        if model not in self._agents:
            agent: Agent[str, str] = Agent(model, deps_type=str, output_type=str)

            @agent.instructions
            def system_prompt(ctx: RunContext[str]) -> str:
                # Re-evaluated on every run, including runs with message history
                return ctx.deps

            self._agents[model] = agent
        return self._agents[model]

    @property
    def openai_client(self) -> AsyncOpenAI:
        if self._openai_client is None:
            self._openai_client = AsyncOpenAI(api_key=get_settings().openai_api_key)
        return self._openai_client

    async def _run(
        self,
        model: str,
        purpose: str,
        system_prompt: str,
        user_prompt: str,
        history: List[ModelMessage],
        max_tokens: int,
        temperature: float
    ) -> str:
        agent = self._agent_for(model)
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                agent.run(
                    user_prompt,
                    deps=system_prompt,
                    message_history=history or None,
                    model_settings={"max_tokens": max_tokens, "temperature": temperature},
                ),
                timeout=self.timeout_seconds,
            )
        except Exception as e:
            error = categorize_llm_error(e)
            log_llm_call(
                purpose=purpose,
                model=model,
                input_tokens=0,
                output_tokens=0,
                duration_ms=(time.perf_counter() - start) * 1000,
                success=False,
                error=str(error),
            )
            raise error from e

        input_tokens, output_tokens = _usage_tokens(result)
        log_llm_call(
            purpose=purpose,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            duration_ms=(time.perf_counter() - start) * 1000,
        )
        return result.output or ""

    async def complete(
        self,
        system_prompt: str,
        messages: Sequence[ChatTurn],
        max_tokens: int,
        temperature: float
    ) -> str:
        """
        Conversational completion.

        Args:
            system_prompt: Persona-personalized instructions
            messages: Prior turns followed by the new user message
            max_tokens: Reply token budget
            temperature: Sampling temperature

        Raises:
            LLMError: Recoverable failure, including timeout
            LLMCriticalError: Auth or invalid request
        """
        if not messages or messages[-1].role != MessageRole.USER:
            raise ValueError("messages must end with the user's turn")

        return await self._run(
            model=self.chat_model,
            purpose="chat_reply",
            system_prompt=system_prompt,
            user_prompt=messages[-1].content,
            history=to_model_history(messages[:-1]),
            max_tokens=max_tokens,
            temperature=temperature,
        )

    async def complete_text(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        purpose: str = "page_spec",
        model: str | None = None
    ) -> str:
        """Single-shot completion used for structured JSON output."""
        settings = get_settings()
        return await self._run(
            model=model or self.page_model,
            purpose=purpose,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            history=[],
            max_tokens=max_tokens or settings.page_max_tokens,
            temperature=temperature if temperature is not None else settings.page_temperature,
        )

    async def embed(self, text: str) -> List[float]:
        """
        Embed text for similarity search.

        Raises:
            ValueError: If the returned vector has the wrong dimension
            LLMError / LLMCriticalError: On provider failure
        """
        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self.openai_client.embeddings.create(
                    model=self.embedding_model,
                    input=text,
                    dimensions=self.embedding_dimensions,
                ),
                timeout=self.timeout_seconds,
            )
        except Exception as e:
            error = categorize_llm_error(e)
            logger.error(f"Failed to generate embedding: {error}")
            raise error from e

        embedding = response.data[0].embedding
        if len(embedding) != self.embedding_dimensions:
            raise ValueError(
                f"Embedding dimension mismatch: expected {self.embedding_dimensions}, got {len(embedding)}"
            )

        usage = getattr(response, "usage", None)
        log_llm_call(
            purpose="embedding",
            model=self.embedding_model,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=0,
            duration_ms=(time.perf_counter() - start) * 1000,
        )
        return embedding
