"""
Shared test fixtures for the CreatorScout backend test suite.

Provides:
- settings / capability matrix builders (all providers off, all on, custom)
- fallback resolver and mocked LLM client
- destination / creator factories
- async FastAPI test client with the capability matrix pinned
"""

import os
from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure test env before any app imports
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.config import Settings
from app.services.capability_matrix import CapabilityMatrix, build_capability_matrix
from app.services.fallback_resolver import FallbackResolver
from app.services.recommendation.models import (
    CandidateDestination,
    CostEstimate,
    CreatorCommunity,
    CreatorRecord,
    UserPreferences,
)

TODAY = date(2025, 6, 1)

_CREDENTIAL_SUFFIXES = ("_key", "_secret", "_token")


def make_settings(**overrides) -> Settings:
    """Settings with every credential blank unless overridden. Init kwargs beat env vars."""
    blanks = {
        name: ""
        for name in Settings.model_fields
        if name.endswith(_CREDENTIAL_SUFFIXES)
    }
    return Settings(_env_file=None, **{**blanks, **overrides})


def make_matrix(**overrides) -> CapabilityMatrix:
    return build_capability_matrix(make_settings(**overrides))


# ---------------------------------------------------------------------------
# Capability matrix / resolver
# ---------------------------------------------------------------------------

@pytest.fixture
def empty_matrix() -> CapabilityMatrix:
    """No provider configured."""
    return make_matrix()


@pytest.fixture
def full_matrix() -> CapabilityMatrix:
    """Every provider configured."""
    keys = {
        name: "test-credential"
        for name in Settings.model_fields
        if name.endswith(_CREDENTIAL_SUFFIXES)
    }
    return make_matrix(**keys)


@pytest.fixture
def resolver(empty_matrix) -> FallbackResolver:
    return FallbackResolver(empty_matrix)


@pytest.fixture
def mock_llm():
    """LLM client stand-in: available, with complete() returning whatever a test sets."""
    llm = MagicMock()
    llm.available = True
    llm.complete = AsyncMock(return_value="{}")
    return llm


# ---------------------------------------------------------------------------
# Domain factories
# ---------------------------------------------------------------------------

@pytest.fixture
def preferences() -> UserPreferences:
    return UserPreferences(budget=3000, currency="USD", duration_days=7)


def active_creator(name: str, followers="15K", days_ago: int = 10, posts: int | None = 12) -> CreatorRecord:
    return CreatorRecord(
        name=name,
        platform="instagram",
        followers=followers,
        last_post_date=TODAY - timedelta(days=days_ago),
        posts_last_90_days=posts,
    )


def make_destination(
    name: str,
    total: float | None = 3000,
    taste: float | None = 0.8,
    creators: CreatorCommunity | None = None,
    **kwargs,
) -> CandidateDestination:
    cost = CostEstimate(total=total) if total is not None else None
    return CandidateDestination(
        name=name,
        country=kwargs.pop("country", ""),
        taste_affinity=taste,
        cost=cost,
        creators=creators,
        **kwargs,
    )


@pytest.fixture
def destination_factory():
    return make_destination


@pytest.fixture
def creator_factory():
    return active_creator


# ---------------------------------------------------------------------------
# FastAPI test client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(monkeypatch, empty_matrix):
    """Async client against the app, with the process-wide matrix pinned to all-disabled."""
    monkeypatch.setattr("app.services.capability_matrix._matrix", empty_matrix)

    from app.main import app
    from app.routers.questions import get_question_flow
    from app.services.llm_client import LLMClient
    from app.services.question_flow import QuestionFlow

    app.dependency_overrides[get_question_flow] = lambda: QuestionFlow(LLMClient(matrix=empty_matrix))

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
