"""Tests for suspicious path detection."""

import pytest

from whothere.routes import SuspiciousCategory, detect_suspicious_paths
from whothere.routes.suspicious import is_malformed_path, suspicious_categories


class TestSuspiciousCategories:
    def test_path_traversal(self):
        assert SuspiciousCategory.SECURITY_SCAN in suspicious_categories("/../../../etc/passwd")

    def test_robots(self):
        assert suspicious_categories("/robots.txt") == (SuspiciousCategory.BOT_BEHAVIOR,)

    @pytest.mark.parametrize("path", [
        "/wp-admin/setup.php",
        "/.env",
        "/.git/config",
        "/backup.sql",
        "/search?q=<script>alert(1)</script>",
        "/items?id=1 UNION SELECT password",
        "/%2E%2E/secret",
    ])
    def test_security_scan(self, path):
        assert SuspiciousCategory.SECURITY_SCAN in suspicious_categories(path)

    @pytest.mark.parametrize("path", ["/users/undefined", "/items/null", "/x/[object Object]", "/price/NaN", "/500"])
    def test_error_prone(self, path):
        assert SuspiciousCategory.ERROR_PRONE in suspicious_categories(path)

    def test_not_exclusive(self):
        found = suspicious_categories("/admin//../.env")
        assert found == (SuspiciousCategory.SECURITY_SCAN, SuspiciousCategory.MALFORMED)

    def test_category_selection(self):
        assert suspicious_categories("/../etc/passwd", ["bot_behavior"]) == ()

    def test_clean_path(self):
        assert suspicious_categories("/api/users/42") == ()


class TestIsMalformedPath:
    @pytest.mark.parametrize("path", ["/a//b", "/a b", "/a\tb", "/a\x00", "/\ud800"])
    def test_malformed(self, path):
        assert is_malformed_path(path)

    def test_too_long(self):
        assert is_malformed_path("/a" * 20, max_length=10)

    def test_clean(self):
        assert not is_malformed_path("/api/users/42")


class TestDetectSuspiciousPaths:
    """Tests for detect_suspicious_paths function."""

    def test_report(self):
        paths = ["/home", "/../../../etc/passwd", "/robots.txt", "/api/users"]
        report = detect_suspicious_paths(paths)
        assert report.total_paths == 4
        assert report.suspicious_paths == 2
        assert report.suspicious_percentage == 50.0
        assert [d.path for d in report.details] == ["/../../../etc/passwd", "/robots.txt"]

    def test_percentage_rounded(self):
        report = detect_suspicious_paths(["/.env", "/a", "/b"])
        assert report.suspicious_percentage == 33.33

    def test_empty(self):
        report = detect_suspicious_paths([])
        assert report.total_paths == 0
        assert report.suspicious_percentage == 0.0
        assert report.details == []

    def test_non_strings_skipped(self):
        report = detect_suspicious_paths(["/.env", None, 7])
        assert report.total_paths == 1

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            detect_suspicious_paths(["/x"], categories=["spam"])
