"""
Property-based tests for share passwords and upload batch validation.
"""

from datetime import timedelta

import pytest
from hypothesis import given, settings

from sharebox.application.upload_service import UploadCoordinator
from sharebox.domain.errors import InvalidPasswordFormatError, ValidationError
from sharebox.domain.sharing.policy import SecurityPolicy
from sharebox.domain.sharing.value_objects import SharePassword
from sharebox.infrastructure.password_hasher import WerkzeugPasswordHasher
from tests.fixtures import MockBlobStore, MockProjectRepository

from .strategies import (
    passwords_with_foreign_character,
    upload_batches,
    valid_passwords,
    wrong_length_passwords,
)


class TestPasswordFormatProperties:
    """The format check accepts exactly 12 alphanumeric characters."""

    @given(valid_passwords)
    def test_alphanumeric_twelve_is_valid(self, value):
        assert SharePassword.is_valid(value)
        assert SharePassword(value).value == value

    @given(wrong_length_passwords)
    def test_wrong_length_is_rejected(self, value):
        assert not SharePassword.is_valid(value)
        with pytest.raises(InvalidPasswordFormatError):
            SharePassword(value)

    @given(passwords_with_foreign_character())
    def test_foreign_character_is_rejected(self, value):
        assert not SharePassword.is_valid(value)

    def test_generated_passwords_are_valid_and_distinct(self):
        generated = {SharePassword.generate().value for _ in range(200)}

        assert len(generated) == 200
        assert all(SharePassword.is_valid(value) for value in generated)


class TestHashProperties:
    """Hashes verify the original password and nothing else."""

    hasher = WerkzeugPasswordHasher("pbkdf2:sha256:1000")

    @settings(max_examples=25)
    @given(valid_passwords, valid_passwords)
    def test_only_the_original_verifies(self, original, other):
        password_hash = self.hasher.hash(SharePassword(original))

        assert self.hasher.verify(password_hash, SharePassword(original))
        assert self.hasher.verify(password_hash, SharePassword(other)) == (original == other)


class TestBatchValidationProperties:
    """A batch is accepted exactly when every limit holds."""

    policy = SecurityPolicy(max_files=3, max_file_size=100, max_project_size=150)

    def _coordinator(self):
        return UploadCoordinator(
            MockProjectRepository(),
            MockBlobStore(),
            WerkzeugPasswordHasher("pbkdf2:sha256:1000"),
            self.policy,
            timedelta(days=7),
        )

    @given(upload_batches())
    def test_accepted_iff_within_limits(self, items):
        sizes = [item.size for item in items]
        within_limits = (
            len(items) <= self.policy.max_files
            and all(0 < size <= self.policy.max_file_size for size in sizes)
            and sum(sizes) <= self.policy.max_project_size
        )

        try:
            validated = self._coordinator().validate(items)
        except ValidationError:
            assert not within_limits
        else:
            assert within_limits
            assert len(validated) == len(items)
