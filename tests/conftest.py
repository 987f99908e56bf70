import pytest
from fastapi.testclient import TestClient

from app.main import app as fastapi_app
from app.services.openai_service import get_ai_service

from helpers import FakeVisionClient, build_pdf


@pytest.fixture
def letter_pdf() -> bytes:
    return build_pdf([(612, 792), (612, 792)])


@pytest.fixture
def fake_vision():
    return FakeVisionClient()


@pytest.fixture
def client(fake_vision):
    """TestClient whose vision model is the ``fake_vision`` fixture."""
    fastapi_app.dependency_overrides[get_ai_service] = lambda: fake_vision
    with TestClient(fastapi_app, raise_server_exceptions=False) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()
