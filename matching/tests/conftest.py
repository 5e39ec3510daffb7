"""
Shared fixtures: an in-memory store, a scripted oracle and an HTTP client
wired to both through dependency overrides.
"""

from typing import Any, List, Optional

import pytest
from fastapi.testclient import TestClient

from errors import UpstreamError
from main import app
from matching.ai.oracle import get_oracle
from matching.logic.contracts import CVAnalysis
from models.models import OpportunityCreate
from store import MemoryStore, get_store


class FakeOracle:
    """Scripted stand-in for ReasoningOracle; records every call."""

    def __init__(self, reply: Any = None, error: Optional[Exception] = None):
        self.reply = {"matches": []} if reply is None else reply
        self.error = error
        self.calls: List[tuple] = []
        self.analysis = CVAnalysis(
            skills=["Python", "SQL"],
            experience_level="Bachelor's student",
            interests=["Data Science"],
            recommended_types=["Internships", "Fellowship"],
        )
        self.chat_reply = "Start with the Microsoft fellowship."

    def complete_json(self, system_prompt: str, user_prompt: str):
        self.calls.append(("complete_json", system_prompt, user_prompt))
        if self.error:
            raise self.error
        return self.reply

    def analyze_cv(self, cv_text: str) -> CVAnalysis:
        self.calls.append(("analyze_cv", cv_text))
        if self.error:
            raise self.error
        return self.analysis

    def chat(self, message: str, context: Any = None) -> str:
        self.calls.append(("chat", message, context))
        if self.error:
            raise self.error
        return self.chat_reply


def make_opportunity(**overrides) -> OpportunityCreate:
    data = dict(
        title="Software Engineering Internship",
        organization="Google",
        type="internship",
        location="Mountain View, CA",
        description="Build things.",
    )
    data.update(overrides)
    return OpportunityCreate(**data)


@pytest.fixture
def store():
    return MemoryStore(seed=[
        make_opportunity(title="Python Internship", organization="Acme", type="internship",
                         deadline="2026-03-01", salary="$8,000/month", requirements=["Python"]),
        make_opportunity(title="Research Grant", organization="Fulbright Commission", type="grant",
                         deadline="2026-01-15", salary=""),
        make_opportunity(title="Data Fellowship", organization="Microsoft", type="fellowship",
                         deadline="2026-02-01", salary="$6,000/month", is_remote=True),
    ])


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def client(store, oracle):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_oracle] = lambda: oracle
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def upstream_failure():
    return UpstreamError("Oracle call failed after 3 attempt(s): Request timed out.")
