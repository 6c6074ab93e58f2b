from typing import List, Optional
from loguru import logger

from src.agents.prompts import build_response_system_prompt
from src.config import get_settings
from src.models.message import ChatTurn, MessageRole
from src.models.persona import PersonaScores
from src.utils.llm_client import LanguageModel, LLMError


class ResponseSynthesizer:
    """
    Produces BevGenie's conversational reply for one turn.
    Failures propagate; the orchestrator decides on the fallback.
    """

    def __init__(
        self,
        language_model: LanguageModel,
        max_tokens: int | None = None,
        temperature: float | None = None,
        history_window: int | None = None
    ):
        settings = get_settings()
        self.language_model = language_model
        self.max_tokens = max_tokens or settings.response_max_tokens
        self.temperature = temperature if temperature is not None else settings.response_temperature
        self.history_window = history_window or settings.history_window_size

    def build_messages(self, history: List[ChatTurn], message: str) -> List[ChatTurn]:
        recent = history[-self.history_window:] if self.history_window else []
        return [*recent, ChatTurn(role=MessageRole.USER, content=message)]

    async def synthesize(
        self,
        message: str,
        persona: PersonaScores,
        history: List[ChatTurn],
        knowledge_context: Optional[str] = None
    ) -> str:
        system_prompt = build_response_system_prompt(persona, knowledge_context)
        messages = self.build_messages(history, message)

        logger.debug(f"Synthesizing reply with {len(messages)} turns, knowledge={'yes' if knowledge_context else 'no'}")

        reply = await self.language_model.complete(
            system_prompt=system_prompt,
            messages=messages,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        reply = reply.strip()
        if not reply:
            raise LLMError("Model returned an empty reply")
        return reply
