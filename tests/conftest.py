"""
Shared pytest fixtures and configuration for the ShareBox test suite.

This module provides:
- Hypothesis configuration for property-based testing
- Environment defaults so importing the app never needs SocketIO or a bucket
- Mock repository and service fixtures
"""

import os
import tempfile
from datetime import timedelta

import pytest

# Must be set before app_factory or celery_app are imported
os.environ.setdefault("SOCKETIO_ENABLED", "false")
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="sharebox-tests-"))
os.environ.pop("GCS_BUCKET_NAME", None)

# Hypothesis configuration
from hypothesis import HealthCheck, Phase, settings  # noqa: E402

from sharebox.application.access_service import ShareAccessService  # noqa: E402
from sharebox.application.event_publisher import EventPublisher  # noqa: E402
from sharebox.application.reaper_service import ExpiryReaper  # noqa: E402
from sharebox.application.text_room_service import TextRoomService  # noqa: E402
from sharebox.application.upload_service import UploadCoordinator  # noqa: E402
from sharebox.domain.sharing.policy import SecurityPolicy  # noqa: E402
from sharebox.domain.sharing.services import AccessGate  # noqa: E402
from sharebox.infrastructure.password_hasher import WerkzeugPasswordHasher  # noqa: E402
from tests.fixtures import (  # noqa: E402
    FIXED_NOW,
    MockBlobStore,
    MockProjectRepository,
    MockTextRoomRepository,
)

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

# Cheap hash so tests do not spend time in key stretching
FAST_HASH_METHOD = "pbkdf2:sha256:1000"


# =============================================================================
# Time-related Fixtures
# =============================================================================

@pytest.fixture
def fixed_now():
    """Provide a fixed timezone-aware datetime for deterministic testing."""
    return FIXED_NOW


# =============================================================================
# Mock Repository Fixtures
# =============================================================================

@pytest.fixture
def project_repository():
    """Provide an in-memory project repository."""
    return MockProjectRepository()


@pytest.fixture
def blob_store():
    """Provide an in-memory blob store."""
    return MockBlobStore()


@pytest.fixture
def room_repository():
    """Provide an in-memory text room repository."""
    return MockTextRoomRepository()


@pytest.fixture
def password_hasher():
    """Provide a real werkzeug hasher with a low iteration count."""
    return WerkzeugPasswordHasher(FAST_HASH_METHOD)


@pytest.fixture
def security_policy():
    """Provide a small policy: 3 files, 100 bytes each, 150 bytes per project."""
    return SecurityPolicy(max_files=3, max_file_size=100, max_project_size=150)


@pytest.fixture
def event_publisher():
    """Provide an EventPublisher whose events are collected in ``published``."""
    publisher = EventPublisher()
    publisher.published = []

    from sharebox.domain.events import DomainEvent

    publisher.subscribe(DomainEvent, publisher.published.append)
    return publisher


# =============================================================================
# Application Service Fixtures
# =============================================================================

@pytest.fixture
def upload_coordinator(project_repository, blob_store, password_hasher, security_policy,
                       event_publisher):
    return UploadCoordinator(
        project_repository,
        blob_store,
        password_hasher,
        security_policy,
        timedelta(days=7),
        event_publisher=event_publisher,
    )


@pytest.fixture
def access_gate(project_repository, password_hasher):
    return AccessGate(project_repository, password_hasher)


@pytest.fixture
def access_service(access_gate, project_repository, blob_store, event_publisher):
    return ShareAccessService(
        access_gate,
        project_repository,
        blob_store,
        event_publisher=event_publisher,
        signed_url_ttl=300,
    )


@pytest.fixture
def reaper(project_repository, blob_store, event_publisher):
    return ExpiryReaper(project_repository, blob_store, event_publisher=event_publisher)


@pytest.fixture
def text_room_service(room_repository, event_publisher):
    return TextRoomService(room_repository, event_publisher=event_publisher)


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
        "markers", "e2e: End-to-end tests (full workflows)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/e2e/* -> @pytest.mark.e2e
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path or "\\e2e\\" in test_path:
            item.add_marker(pytest.mark.e2e)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
