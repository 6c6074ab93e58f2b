import json

import pytest
from fastapi.testclient import TestClient

from src.agents.page_generator import PageGenerator
from src.agents.presentation_agent import PresentationAgent
from src.agents.response_agent import ResponseSynthesizer
from src.api.main import app
from src.core.stream_orchestrator import StreamOrchestrator
from src.services.knowledge_retriever import KnowledgeRetriever


def parse_sse(body: str):
    """Split a text/event-stream body into (event, payload) pairs."""
    events = []
    for frame in body.strip().split("\n\n"):
        event, data = None, None
        for line in frame.splitlines():
            if line.startswith("event: "):
                event = line[len("event: "):]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: "):])
        if event:
            events.append((event, data))
    return events


@pytest.fixture
def client(fake_llm, memory_store):
    """
    Test client with the collaborators wired by hand.
    The lifespan is not entered, so nothing connects to MongoDB or OpenAI.
    """
    page_generator = PageGenerator(fake_llm)
    app.state.session_store = memory_store
    app.state.language_model = fake_llm
    app.state.page_generator = page_generator
    app.state.presentation_agent = PresentationAgent(fake_llm)
    app.state.orchestrator = StreamOrchestrator(
        session_store=memory_store,
        knowledge_retriever=KnowledgeRetriever(fake_llm),
        response_synthesizer=ResponseSynthesizer(fake_llm),
        page_generator=page_generator,
        stage_delay_seconds=0,
    )
    return TestClient(app)


@pytest.fixture
def sse():
    return parse_sse
