"""
Shared pytest fixtures and configuration for the DropVault test suite.

This module provides:
- Hypothesis configuration for property-based testing
- In-memory stores, a controllable clock and wired-up domain services
- Marker assignment by test location
"""

import pytest

# Hypothesis configuration
from hypothesis import HealthCheck, Phase, settings

from dropvault.domain.file_lifecycle.identifier_allocator import IdentifierAllocator
from dropvault.domain.file_lifecycle.reaper import ExpiryReaper
from dropvault.domain.file_lifecycle.services import FileLifecycleEngine
from dropvault.domain.identity import Owner
from tests.fixtures.domain_fixtures import FakeClock, create_policy_table
from tests.fixtures.mock_repositories import MockBlobStore, MockFileRecordRepository

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.load_profile("default")


class RecordingPublisher:
    """Event publisher double that keeps every published event."""

    def __init__(self):
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]


# =============================================================================
# Store and Service Fixtures
# =============================================================================

@pytest.fixture
def metadata_repo() -> MockFileRecordRepository:
    return MockFileRecordRepository()


@pytest.fixture
def blob_store() -> MockBlobStore:
    return MockBlobStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def policy_table():
    """PUBLIC = 1 MB / 7 days / 3 downloads; USER = 5 MB / 30 days / 100 downloads."""
    return create_policy_table()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def engine(metadata_repo, blob_store, policy_table, publisher, clock) -> FileLifecycleEngine:
    return FileLifecycleEngine(
        metadata_repo,
        blob_store,
        policy_table,
        allocator=IdentifierAllocator(metadata_repo),
        event_publisher=publisher,
        clock=clock,
    )


@pytest.fixture
def reaper(metadata_repo, blob_store, publisher, clock) -> ExpiryReaper:
    return ExpiryReaper(metadata_repo, blob_store, event_publisher=publisher, clock=clock)


@pytest.fixture
def alice() -> Owner:
    return Owner("user-1", "alice")


@pytest.fixture
def bob() -> Owner:
    return Owner("user-2", "bob")


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
