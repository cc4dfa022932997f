"""Shared fixtures: in-memory database, stub Gemini model, test app."""

import asyncio
import random
from types import SimpleNamespace
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from coach.config import Settings
from coach.models.database import make_engine, make_session_factory
from coach.services.auth_service import BcryptCredentialVerifier
from coach.services.llm import GeminiBackend


class StubModel:
    """Stands in for genai.GenerativeModel; records prompts."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None, delay: float = 0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.prompts: List[str] = []

    async def generate_content_async(self, prompt: str):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.reply)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        use_gemini=False,
        database_url="sqlite://",
        jwt_secret="test-secret",
        free_daily_session_limit=2,
        ai_timeout_seconds=0.2,
    )


@pytest.fixture
def ai_settings() -> Settings:
    return Settings(use_gemini=True, gemini_api_key="test-key", ai_timeout_seconds=0.2)


@pytest.fixture
def make_backend(ai_settings):
    def _make(**kwargs) -> GeminiBackend:
        return GeminiBackend(ai_settings, model=StubModel(**kwargs))
    return _make


@pytest.fixture
def offline_backend(settings) -> GeminiBackend:
    return GeminiBackend(settings)


@pytest.fixture
def session_factory():
    return make_session_factory(make_engine("sqlite://"))


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(settings, session_factory):
    from main import create_app

    app = create_app(
        settings=settings,
        session_factory=session_factory,
        backend=GeminiBackend(settings),
        rng=random.Random(7),
        verifier=BcryptCredentialVerifier(rounds=4),
    )
    with TestClient(app) as test_client:
        yield test_client


def register(client: TestClient, email: str = "ada@example.com", password: str = "s3cret", **extra) -> dict:
    body = {"name": "Ada", "email": email, "password": password, **extra}
    resp = client.post("/api/auth/register", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
