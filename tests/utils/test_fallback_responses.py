"""
Tests for fallback content used when the model is unavailable.
"""
from src.models.page import PageType
from src.utils.fallback_responses import (
    FALLBACK_CHAT_REPLY,
    FALLBACK_PAGE_CONTENT,
    get_fallback_page_content,
    get_fallback_reply,
)


class TestFallbackResponses:

    def test_chat_reply_is_fixed_apology(self):
        assert get_fallback_reply() == (
            "I apologize, but I'm having trouble processing your message. Could you try again?"
        )
        assert get_fallback_reply() == FALLBACK_CHAT_REPLY

    def test_every_page_type_has_content(self):
        for page_type in PageType:
            assert get_fallback_page_content(page_type) == FALLBACK_PAGE_CONTENT[page_type]

    def test_accepts_string_page_type(self):
        assert get_fallback_page_content("comparison") == FALLBACK_PAGE_CONTENT[PageType.COMPARISON]

    def test_unknown_page_type_uses_solution_brief(self):
        assert get_fallback_page_content("landing_page") == FALLBACK_PAGE_CONTENT[PageType.SOLUTION_BRIEF]
