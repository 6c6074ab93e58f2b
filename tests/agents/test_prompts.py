"""
Tests for conversational and page prompt construction.
"""
from unittest.mock import patch

from src.agents.page_prompts import build_page_system_prompt, build_page_user_prompt
from src.agents.prompts import (
    BASE_SYSTEM_PROMPT,
    PAIN_POINT_PROMPTS,
    build_response_system_prompt,
    format_knowledge_context,
)
from src.config import get_settings
from src.models.knowledge import KnowledgeDocument
from src.models.message import ChatTurn, MessageRole
from src.models.page import PageGenerationRequest, PageType
from src.models.persona import PainPointType, PersonaScores


class TestResponsePrompt:

    def test_base_prompt_without_knowledge(self, blank_persona):
        prompt = build_response_system_prompt(blank_persona, None)

        assert prompt.startswith(BASE_SYSTEM_PROMPT)
        assert "Background Context" not in prompt
        assert "beverage industry professional" in prompt

    def test_knowledge_block_added(self, blank_persona):
        prompt = build_response_system_prompt(blank_persona, "Depletions rose 12% in Texas.")

        assert "## Background Context:\nDepletions rose 12% in Texas." in prompt

    def test_empty_knowledge_ignored(self):
        assert format_knowledge_context("") == ""
        assert format_knowledge_context(None) == ""

    def test_top_pain_point_fragment_appended(self):
        persona = PersonaScores(
            pain_points_detected=[PainPointType.ROI_JUSTIFICATION],
            pain_points_confidence={"roi_justification": 0.4},
        )

        prompt = build_response_system_prompt(persona, None)

        assert prompt.endswith(PAIN_POINT_PROMPTS[PainPointType.ROI_JUSTIFICATION])

    def test_focus_guidance(self):
        prompt = build_response_system_prompt(PersonaScores(sales_focus_score=0.6), None)

        assert "rep productivity" in prompt


class TestPagePrompts:

    def test_system_prompt_names_page_type(self):
        prompt = build_page_system_prompt(PageType.CASE_STUDY)

        assert "Page Type: case_study" in prompt
        assert "retry attempt" not in prompt

    def test_system_prompt_retry_note(self):
        assert "This is retry attempt 2" in build_page_system_prompt(PageType.CASE_STUDY, attempt=2)

    def test_user_prompt_includes_errors_on_retry(self):
        request = PageGenerationRequest(user_message="Show me territory gaps")

        prompt = build_page_user_prompt(request, ["Missing headline", "Too few sections"])

        assert "[Previous attempt had validation issues: Missing headline, Too few sections." in prompt

    def test_user_prompt_without_errors(self):
        prompt = build_page_user_prompt(PageGenerationRequest(user_message="Show me territory gaps"))

        assert "Previous attempt" not in prompt
        assert 'User\'s Question/Topic: "Show me territory gaps"' in prompt

    def test_user_prompt_context_blocks(self):
        request = PageGenerationRequest(
            user_message="Tell me more",
            persona_description="The user is as a distributor.",
            knowledge_context=[f"Insight {i}" for i in range(8)],
            knowledge_documents=[KnowledgeDocument(content="Case study text", similarity_score=0.87)],
            conversation_history=[
                ChatTurn(role=MessageRole.USER, content=f"question {i}") for i in range(5)
            ],
            page_context={"originalQuery": "territory gaps", "context": "Smart Alerts"},
            interaction_source="page_click",
        )

        prompt = build_page_user_prompt(request)

        assert 'User Clicked On: "Smart Alerts"' in prompt
        assert "User Profile/Persona: The user is as a distributor." in prompt
        assert "[DOCUMENT 1] Relevance: 87%" in prompt
        assert "[Industry Insight 5]: Insight 4" in prompt
        assert "[Industry Insight 6]" not in prompt
        assert "question 1" not in prompt
        assert "User: question 4" in prompt

    def test_zero_context_turns_drops_history(self):
        request = PageGenerationRequest(
            user_message="Tell me more",
            conversation_history=[ChatTurn(role=MessageRole.USER, content="earlier question")],
        )
        no_turns = get_settings().model_copy(update={"page_context_turns": 0})

        with patch("src.agents.page_prompts.get_settings", return_value=no_turns):
            prompt = build_page_user_prompt(request)

        assert "CONVERSATION CONTEXT" not in prompt
        assert "earlier question" not in prompt
