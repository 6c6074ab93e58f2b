import os

# Settings are read at import time; tests never talk to real services
os.environ.setdefault("OPENAI_API_KEY", "sk-test-key")
os.environ.setdefault("SESSION_BACKEND", "memory")

import copy
import pytest

from src.models.persona import PersonaScores
from src.session_store import InMemorySessionStore


VALID_PAGE = {
    "type": "solution_brief",
    "title": "Sales Execution Intelligence for Distributors",
    "description": "See how BevGenie gives your sales team real-time visibility into every account.",
    "sections": [
        {
            "type": "hero",
            "headline": "Close the Gap Between Plan and Shelf",
            "subheadline": "Real-time execution data for every rep and every account.",
            "ctaButton": {"text": "Book a demo", "action": "demo"},
        },
        {
            "type": "feature_grid",
            "title": "Built for Beverage Sales",
            "features": [
                {"icon": "map", "title": "Territory Insights", "description": "Spot under-served accounts in seconds."},
                {"icon": "chart", "title": "Depletion Tracking", "description": "Follow depletions by SKU and region."},
                {"icon": "bell", "title": "Smart Alerts", "description": "Get notified when placements slip."},
            ],
        },
        {
            "type": "metrics",
            "title": "Results",
            "metrics": [
                {"value": "23%", "label": "More placements"},
                {"value": 4, "label": "Hours saved per rep each week"},
            ],
        },
        {
            "type": "cta",
            "title": "Ready to see it with your data?",
            "buttons": [{"text": "Schedule a demo", "action": "demo", "primary": True}],
        },
    ],
}


class FakeLanguageModel:
    """
    Scripted stand-in for LanguageModel.

    Each queue is consumed in order; an Exception instance in a queue is
    raised instead of returned. Empty queues fall back to the defaults.
    """

    def __init__(self, replies=None, page_outputs=None, embedding=None):
        self.replies = list(replies or [])
        self.page_outputs = list(page_outputs or [])
        self.embedding = embedding or [0.1] * 8
        self.default_reply = "BevGenie can help your team see every account."
        self.default_page_output = ""
        self.complete_calls = []
        self.complete_text_calls = []
        self.embed_calls = []

    @staticmethod
    def _next(queue, default):
        item = queue.pop(0) if queue else default
        if isinstance(item, Exception):
            raise item
        return item

    async def complete(self, system_prompt, messages, max_tokens, temperature):
        self.complete_calls.append({
            "system_prompt": system_prompt,
            "messages": list(messages),
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        return self._next(self.replies, self.default_reply)

    async def complete_text(
        self,
        system_prompt,
        user_prompt,
        max_tokens=None,
        temperature=None,
        purpose="page_spec",
        model=None
    ):
        self.complete_text_calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "purpose": purpose,
            "model": model,
        })
        return self._next(self.page_outputs, self.default_page_output)

    async def embed(self, text):
        self.embed_calls.append(text)
        return self._next([], self.embedding)


@pytest.fixture
def valid_page():
    """A page dict that passes validation."""
    return copy.deepcopy(VALID_PAGE)


@pytest.fixture
def fake_llm():
    return FakeLanguageModel()


@pytest.fixture
def memory_store():
    return InMemorySessionStore()


@pytest.fixture
def blank_persona():
    return PersonaScores()
