"""
Shared fixtures: a scripted fake gateway, settings without real secrets and
a TestClient wired to an in-memory store.
"""
import pytest
from fastapi.testclient import TestClient

from clausecraft.config import Settings
from clausecraft.llm_gateway import LLMGateway
from clausecraft.main import create_app
from clausecraft.store import MemStore

ANALYSIS_JSON = (
    '{"summary": "Balanced NDA with one aggressive clause.", "overall_risk": "High", '
    '"risks": [{"severity": "HIGH", "clause_text": "Either party may terminate at any time.", '
    '"category": "termination", "explanation": "No notice period.", '
    '"recommendation": "Add a 30-day notice period."}], '
    '"recommendations": ["Add a notice period.", "Cap liability."]}'
)


class FakeGateway(LLMGateway):
    """
    Returns queued replies in order. A queued exception instance is raised
    instead of returned. Every call is recorded.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def complete(self, prompt, max_tokens, temperature):
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens, "temperature": temperature})
        if not self.replies:
            raise AssertionError("FakeGateway called more times than scripted")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        hf_access_token="hf_test_token",
        session_secret="test-secret",
        llm_backend="huggingface",
    )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def store():
    return MemStore()


@pytest.fixture
def app(settings, gateway, store):
    return create_app(settings=settings, gateway=gateway, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def logged_in(client):
    """Register a user; the client keeps the session cookie."""
    resp = client.post("/api/register", json={"email": "demo@example.com", "password": "demo123"})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def analysis_json():
    return ANALYSIS_JSON
