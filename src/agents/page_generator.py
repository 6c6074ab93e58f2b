"""
Page Specification Generator
Turns a PageGenerationRequest into a validated BevGeniePage.

Each attempt is a pure function of (request, attempt, prior_errors). A
validation failure feeds its errors into the next attempt; a thrown error
retries without feedback. At most MAX_RETRIES retries follow the first
attempt.
"""
import asyncio
import hashlib
import json
import re
import time
from typing import Any, Dict, List
from loguru import logger

from src.agents.persona_detection import primary_persona_label
from src.agents.page_prompts import build_page_system_prompt, build_page_user_prompt
from src.config import get_settings
from src.core.page_validation import validate_page_spec
from src.models.page import BevGeniePage, PageGenerationRequest, PageGenerationResult, PageType
from src.utils.llm_client import LanguageModel

MAX_RETRIES = 2


class PageParseError(Exception):
    """The model's output contained no parseable JSON object."""
    pass


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Return the first JSON object embedded in free text.
    Tolerates surrounding prose and markdown fences.
    """
    decoder = json.JSONDecoder()
    for match in re.finditer(r"\{", text or ""):
        try:
            candidate, _ = decoder.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        if isinstance(candidate, dict):
            return candidate
    raise PageParseError("Failed to parse page specification: no JSON object found in response")


def page_cache_key(user_message: str, page_type: PageType | str, persona_hash: str | None = None) -> str:
    """Stable key for caching pages generated for the same question and persona."""
    digest = hashlib.sha1(user_message[:100].encode("utf-8")).hexdigest()[:12]
    return f"page_{PageType(page_type).value}_{digest}_{persona_hash or 'default'}"


class PageGenerator:
    """
    LLM-backed page specification generator with bounded retries.

    Holds no per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        language_model: LanguageModel,
        max_tokens: int | None = None,
        temperature: float | None = None
    ):
        settings = get_settings()
        self.language_model = language_model
        self.max_tokens = max_tokens or settings.page_max_tokens
        self.temperature = temperature if temperature is not None else settings.page_temperature

    async def attempt(
        self,
        request: PageGenerationRequest,
        attempt: int,
        prior_errors: List[str]
    ) -> Dict[str, Any]:
        """One model call. Returns the parsed, not yet validated, object."""
        text = await self.language_model.complete_text(
            system_prompt=build_page_system_prompt(request.page_type, attempt),
            user_prompt=build_page_user_prompt(request, prior_errors),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return extract_json_object(text)

    async def generate(self, request: PageGenerationRequest) -> PageGenerationResult:
        start = time.perf_counter()
        prior_errors: List[str] = []
        error = "Max retries exceeded"

        def elapsed_ms() -> int:
            return int((time.perf_counter() - start) * 1000)

        for attempt in range(MAX_RETRIES + 1):
            try:
                raw = await self.attempt(request, attempt, prior_errors)
            except Exception as e:
                logger.warning(f"Page attempt {attempt + 1} failed: {e}")
                error = str(e) or type(e).__name__
                prior_errors = []
                continue

            try:
                validation_errors = validate_page_spec(raw)
            except Exception as e:
                logger.warning(f"Page attempt {attempt + 1} could not be validated: {e}")
                validation_errors = [f"Validation error: {e}"]
            if not validation_errors:
                page = BevGeniePage.model_validate(raw)
                if request.persona is not None:
                    page.persona = primary_persona_label(request.persona) or page.persona
                logger.success(f"Page generated: {page.type} ({len(page.sections)} sections, retries={attempt})")
                return PageGenerationResult(
                    success=True,
                    page=page,
                    retry_count=attempt,
                    generation_time=elapsed_ms(),
                )

            logger.warning(
                f"Page attempt {attempt + 1} failed validation",
                extra={"errors": validation_errors[:5]}
            )
            prior_errors = validation_errors
            error = f"Validation failed after {MAX_RETRIES} retries: {', '.join(validation_errors)}"

        logger.error(f"Page generation gave up after {MAX_RETRIES} retries: {error}")
        return PageGenerationResult(
            success=False,
            error=error,
            retry_count=MAX_RETRIES,
            generation_time=elapsed_ms(),
        )

    async def generate_batch(self, requests: List[PageGenerationRequest]) -> List[PageGenerationResult]:
        """Generate pages for many requests concurrently, preserving order."""
        return list(await asyncio.gather(*(self.generate(request) for request in requests)))

    async def generate_variants(
        self,
        request: PageGenerationRequest,
        variant_count: int = 2
    ) -> List[PageGenerationResult]:
        """Generate differently-angled variants of the same page for A/B testing."""
        variants = [
            request.model_copy(update={
                "user_message": f"{request.user_message} (Variant {i + 1}: Try a different approach to messaging)"
            })
            for i in range(variant_count)
        ]
        return await self.generate_batch(variants)
