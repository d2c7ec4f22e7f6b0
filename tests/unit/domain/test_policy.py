"""
Unit tests for the upload SecurityPolicy predicates.
"""

import pytest

from sharebox.domain.sharing.policy import SecurityPolicy


@pytest.fixture
def policy():
    return SecurityPolicy(max_files=3, max_file_size=100, max_project_size=150)


class TestFileTypeRules:
    """Test the extension and MIME type denylists."""

    @pytest.mark.parametrize("name", ["setup.exe", "SETUP.EXE", "run.sh", "script.ps1", "app.JAR"])
    def test_blocked_extensions(self, policy, name):
        assert policy.is_file_allowed(name, "application/octet-stream") is False

    @pytest.mark.parametrize(
        "mime",
        ["application/x-msdownload", "text/javascript; charset=utf-8", "APPLICATION/JAVASCRIPT"],
    )
    def test_blocked_mime_types(self, policy, mime):
        assert policy.is_file_allowed("notes.txt", mime) is False

    def test_regular_file_allowed(self, policy):
        assert policy.is_file_allowed("report.pdf", "application/pdf") is True

    def test_missing_mime_type_allowed(self, policy):
        assert policy.is_file_allowed("report.pdf", "") is True

    def test_extension_of(self):
        assert SecurityPolicy.extension_of("archive.TAR.GZ") == ".gz"
        assert SecurityPolicy.extension_of("README") == ""


class TestSizeRules:
    """Test file size, project size and file count limits."""

    @pytest.mark.parametrize("size,allowed", [(0, False), (1, True), (100, True), (101, False)])
    def test_file_size_bounds(self, policy, size, allowed):
        assert policy.is_file_size_allowed(size) is allowed

    def test_project_size_is_inclusive(self, policy):
        assert policy.is_project_size_allowed(100, 50) is True
        assert policy.is_project_size_allowed(100, 51) is False

    @pytest.mark.parametrize("count,allowed", [(0, False), (1, True), (3, True), (4, False)])
    def test_file_count_bounds(self, policy, count, allowed):
        assert policy.is_file_count_allowed(count) is allowed


class TestPolicyValidation:
    """Test construction-time checks."""

    def test_project_smaller_than_file_rejected(self):
        with pytest.raises(ValueError):
            SecurityPolicy(max_file_size=100, max_project_size=50)

    def test_non_positive_limits_rejected(self):
        with pytest.raises(ValueError):
            SecurityPolicy(max_files=0)
