"""
Shared fixtures: an in-memory database wired into the FastAPI app, a fake generation provider
and small base64 images.
"""

import base64
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from api.generation.routes import get_relay_service
from tryon import db
from tryon.models import Base
from tryon.providers.base import ContentPart, ProviderResponse
from tryon.relay import RelayService

FAKE_IMAGE_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"
FAKE_IMAGE_B64 = base64.b64encode(FAKE_IMAGE_BYTES).decode("ascii")
FAKE_PNG_DATA_URL = f"data:image/png;base64,{FAKE_IMAGE_B64}"


class FakeProvider:
    """Records every request and answers with a canned ProviderResponse (or raises)."""

    name = "fake"

    def __init__(self, response: Optional[ProviderResponse] = None, error: Optional[Exception] = None):
        self.response = response or ProviderResponse(
            status_code=200,
            parts=[ContentPart.image_bytes(mime_type="image/png", data="R0VOX0lNQUdF")],
        )
        self.error = error
        self.requests: List = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    async def submit_generation(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def png_data_url():
    return FAKE_PNG_DATA_URL


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def client(test_engine, fake_provider, monkeypatch):
    """TestClient with the database swapped for in-memory SQLite and the relay bound to FakeProvider."""
    TestingSession = sessionmaker(bind=test_engine, autoflush=False, expire_on_commit=False)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    # Startup runs init_db() and /health pings through the module-level engine
    monkeypatch.setattr(db, "engine", test_engine)
    app.dependency_overrides[db.get_db] = override_get_db
    app.dependency_overrides[get_relay_service] = lambda: RelayService(fake_provider)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
