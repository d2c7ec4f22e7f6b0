"""
Test fixtures package.

Provides factory functions and mock implementations for testing.
"""

from .domain_fixtures import (
    FIXED_NOW,
    TEST_PASSWORD,
    create_project,
    create_project_with_files,
    create_shared_file,
    create_upload_item,
)
from .mock_repositories import (
    MockAttemptRepository,
    MockBlobStore,
    MockProjectRepository,
    MockTextRoomRepository,
)

__all__ = [
    "FIXED_NOW",
    "TEST_PASSWORD",
    "MockAttemptRepository",
    "MockBlobStore",
    "MockProjectRepository",
    "MockTextRoomRepository",
    "create_project",
    "create_project_with_files",
    "create_shared_file",
    "create_upload_item",
]
