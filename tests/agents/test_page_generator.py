"""
Tests for page specification generation with bounded retries.
"""
import copy
import json

import pytest

from src.agents.page_generator import (
    MAX_RETRIES,
    PageGenerator,
    PageParseError,
    extract_json_object,
    page_cache_key,
)
from src.models.page import PageGenerationRequest, PageType
from src.models.persona import PersonaScores
from src.utils.llm_client import LLMError


@pytest.fixture
def request_():
    return PageGenerationRequest(user_message="How can you help our sales team?", page_type=PageType.SOLUTION_BRIEF)


class TestExtractJsonObject:

    def test_plain_json(self):
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_markdown_fenced(self):
        text = 'Here you go:\n```json\n{"type": "hero", "nested": {"x": [1, 2]}}\n```\nEnjoy!'

        assert extract_json_object(text) == {"type": "hero", "nested": {"x": [1, 2]}}

    def test_skips_broken_braces(self):
        assert extract_json_object('use {curly} braces then {"ok": true}') == {"ok": True}

    def test_no_json_raises(self):
        with pytest.raises(PageParseError):
            extract_json_object("I could not build a page this time.")


class TestPageCacheKey:

    def test_same_inputs_same_key(self):
        assert page_cache_key("Show ROI", "roi_calculator") == page_cache_key("Show ROI", PageType.ROI_CALCULATOR)

    def test_persona_hash_in_key(self):
        key = page_cache_key("Show ROI", "roi_calculator", "abc123")

        assert key.startswith("page_roi_calculator_")
        assert key.endswith("_abc123")


@pytest.mark.asyncio
class TestPageGenerator:

    async def test_first_attempt_success(self, fake_llm, valid_page, request_):
        fake_llm.page_outputs = [json.dumps(valid_page)]

        result = await PageGenerator(fake_llm).generate(request_)

        assert result.success is True
        assert result.retry_count == 0
        assert result.page.title == valid_page["title"]
        assert result.generation_time >= 0
        assert len(fake_llm.complete_text_calls) == 1

    async def test_missing_sections_retried_with_feedback(self, fake_llm, valid_page, request_):
        broken = {key: value for key, value in valid_page.items() if key != "sections"}
        fake_llm.page_outputs = [json.dumps(broken), json.dumps(valid_page)]

        result = await PageGenerator(fake_llm).generate(request_)

        assert result.success is True
        assert result.retry_count == 1
        first_prompt = fake_llm.complete_text_calls[0]["user_prompt"]
        second_prompt = fake_llm.complete_text_calls[1]["user_prompt"]
        assert "Previous attempt had validation issues" not in first_prompt
        assert "Previous attempt had validation issues" in second_prompt
        assert "missing or empty sections" in second_prompt

    async def test_page_labelled_with_primary_persona(self, fake_llm, valid_page, request_):
        fake_llm.page_outputs = [json.dumps(valid_page)]
        request_.persona = PersonaScores(distributor_score=0.8, sales_focus_score=0.75)

        result = await PageGenerator(fake_llm).generate(request_)

        assert result.page.persona == "distributor_sales_focus"
        assert result.page.to_payload()["persona"] == "distributor_sales_focus"

    async def test_no_label_without_persona(self, fake_llm, valid_page, request_):
        fake_llm.page_outputs = [json.dumps(valid_page)]

        result = await PageGenerator(fake_llm).generate(request_)

        assert result.page.persona is None

    async def test_unhashable_section_type_is_retried(self, fake_llm, valid_page, request_):
        broken = copy.deepcopy(valid_page)
        broken["sections"][0]["type"] = ["hero"]
        fake_llm.page_outputs = [json.dumps(broken), json.dumps(valid_page)]

        result = await PageGenerator(fake_llm).generate(request_)

        assert result.success is True
        assert result.retry_count == 1
        assert "Unknown section type" in fake_llm.complete_text_calls[1]["user_prompt"]

    async def test_exception_retry_has_no_feedback(self, fake_llm, valid_page, request_):
        fake_llm.page_outputs = [LLMError("timeout"), json.dumps(valid_page)]

        result = await PageGenerator(fake_llm).generate(request_)

        assert result.success is True
        assert result.retry_count == 1
        assert "Previous attempt" not in fake_llm.complete_text_calls[1]["user_prompt"]

    async def test_feedback_dropped_after_exception(self, fake_llm, valid_page, request_):
        broken = dict(valid_page, sections=[])
        fake_llm.page_outputs = [json.dumps(broken), "no json here", json.dumps(valid_page)]

        result = await PageGenerator(fake_llm).generate(request_)

        assert result.success is True
        assert result.retry_count == 2
        assert "Previous attempt" in fake_llm.complete_text_calls[1]["user_prompt"]
        assert "Previous attempt" not in fake_llm.complete_text_calls[2]["user_prompt"]

    async def test_validation_never_passes(self, fake_llm, valid_page, request_):
        broken = dict(valid_page, sections=[])
        fake_llm.page_outputs = [json.dumps(broken)] * 5

        result = await PageGenerator(fake_llm).generate(request_)

        assert result.success is False
        assert result.page is None
        assert result.retry_count == MAX_RETRIES
        assert result.error.startswith(f"Validation failed after {MAX_RETRIES} retries")
        assert len(fake_llm.complete_text_calls) == MAX_RETRIES + 1

    async def test_model_always_fails(self, fake_llm, request_):
        fake_llm.page_outputs = [LLMError("rate limit")] * 5

        result = await PageGenerator(fake_llm).generate(request_)

        assert result.success is False
        assert result.error == "rate limit"
        assert result.retry_count == MAX_RETRIES
        assert len(fake_llm.complete_text_calls) == MAX_RETRIES + 1

    async def test_retry_prompt_has_retry_note(self, fake_llm, valid_page, request_):
        fake_llm.page_outputs = [LLMError("timeout"), json.dumps(valid_page)]

        await PageGenerator(fake_llm).generate(request_)

        assert "retry attempt" not in fake_llm.complete_text_calls[0]["system_prompt"]
        assert "retry attempt 1" in fake_llm.complete_text_calls[1]["system_prompt"]

    async def test_batch_preserves_order(self, fake_llm, valid_page, request_):
        other = dict(valid_page, title="Feature Tour for Beverage Teams")
        fake_llm.page_outputs = [json.dumps(valid_page), json.dumps(other)]

        results = await PageGenerator(fake_llm).generate_batch([request_, request_])

        assert [r.success for r in results] == [True, True]
        assert len(results) == 2

    async def test_variants_change_the_message(self, fake_llm, valid_page, request_):
        fake_llm.page_outputs = [json.dumps(valid_page)] * 3

        results = await PageGenerator(fake_llm).generate_variants(request_, variant_count=3)

        assert len(results) == 3
        prompts = [call["user_prompt"] for call in fake_llm.complete_text_calls]
        assert any("Variant 1" in prompt for prompt in prompts)
        assert any("Variant 3" in prompt for prompt in prompts)
