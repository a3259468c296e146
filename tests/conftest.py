"""
Test configuration and fixtures for HealthLink.

- Mocked Claude client / invoker fixtures (no real API calls)
- Assistant service wired to a fake invoker
- TestClient with the assistant service dependency overridden
- Generated sample images
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.api.assistant import get_assistant_service
from app.main import app
from app.services.ai_schemas import ImageAttachment
from app.services.ai_service import HealthAssistantService
from app.services.model_invoker import ModelInvoker
from tests.fixtures.images import make_image_bytes
from tests.fixtures.mocks import (
    FakeInvoker,
    MockHealthAssistantService,
    create_mock_anthropic_client,
)


# =============================================================================
# AI Fixtures
# =============================================================================


@pytest.fixture
def mock_anthropic_client():
    """Mock AsyncAnthropic client; set messages.create.return_value per test."""
    return create_mock_anthropic_client()


@pytest.fixture
def model_invoker(mock_anthropic_client) -> ModelInvoker:
    return ModelInvoker(
        mock_anthropic_client, model="test-model", max_tokens=256, timeout=5.0
    )


@pytest.fixture
def fake_invoker() -> FakeInvoker:
    return FakeInvoker()


@pytest.fixture
def assistant_service(fake_invoker) -> HealthAssistantService:
    return HealthAssistantService(fake_invoker)


@pytest.fixture
def offline_service() -> HealthAssistantService:
    """Service whose Claude client failed to initialize."""
    return HealthAssistantService(ModelInvoker(None))


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def mock_assistant_service() -> MockHealthAssistantService:
    return MockHealthAssistantService()


@pytest.fixture
def client(mock_assistant_service) -> Generator[TestClient, None, None]:
    """TestClient with the assistant service replaced by a mock."""
    app.dependency_overrides[get_assistant_service] = lambda: mock_assistant_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def offline_client(offline_service) -> Generator[TestClient, None, None]:
    """TestClient backed by the real service with no Claude client."""
    app.dependency_overrides[get_assistant_service] = lambda: offline_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# Image Fixtures
# =============================================================================


@pytest.fixture
def sample_png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def sample_attachment(sample_png_bytes) -> ImageAttachment:
    return ImageAttachment(data=sample_png_bytes, media_type="image/png")


# =============================================================================
# pytest markers
# =============================================================================


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m not slow')"
    )
