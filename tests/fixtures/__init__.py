"""Test fixtures for HealthLink."""

from tests.fixtures.images import make_image_bytes
from tests.fixtures.mocks import (
    FakeInvoker,
    MockHealthAssistantService,
    create_mock_anthropic_client,
    create_mock_response,
)

__all__ = [
    "make_image_bytes",
    "FakeInvoker",
    "MockHealthAssistantService",
    "create_mock_anthropic_client",
    "create_mock_response",
]
