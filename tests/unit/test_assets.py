"""
Unit tests for asset keys, content types and batch outcomes.

These are pure functions and plain dataclasses, so the tests need no
filesystem, bucket or HTTP client.
"""

import os

import pytest

from asset_gateway.core.assets import (
    BatchReport,
    FileOutcome,
    FileStatus,
    asset_key_for_file,
    asset_key_from_request_path,
    content_type_for,
    is_root_key,
    public_url_for_key,
    rewrite_legacy_url,
)


# ---------------------------------------------------------------------------
# Key Derivation Tests
# ---------------------------------------------------------------------------

class TestRequestPathKeys:
    """Tests for mapping request paths to bucket keys."""

    def test_strips_single_leading_slash(self):
        assert asset_key_from_request_path("/uploads/logo.png") == "uploads/logo.png"

    def test_strips_at_most_one_slash(self):
        """A double slash leaves one behind, which is still the root."""
        key = asset_key_from_request_path("//")
        assert key == "/"
        assert is_root_key(key)

    def test_root_path_gives_empty_key(self):
        key = asset_key_from_request_path("/")
        assert key == ""
        assert is_root_key(key)

    def test_path_without_slash_is_unchanged(self):
        assert asset_key_from_request_path("banner.svg") == "banner.svg"

    def test_regular_key_is_not_root(self):
        assert not is_root_key("uploads/a.png")


class TestFileKeys:
    """Tests for mapping local file paths to bucket keys."""

    def test_relative_path_becomes_key(self, tmp_path):
        path = tmp_path / "articles" / "2024" / "intro.md"
        assert asset_key_for_file(path, tmp_path) == "articles/2024/intro.md"

    def test_top_level_file(self, tmp_path):
        assert asset_key_for_file(tmp_path / "logo.png", tmp_path) == "logo.png"

    def test_platform_separators_are_normalized(self, tmp_path):
        path = os.path.join(str(tmp_path), "ads", "banner.png")
        assert "\\" not in asset_key_for_file(path, tmp_path)
        assert asset_key_for_file(path, tmp_path) == "ads/banner.png"

    def test_key_matches_request_path_for_same_asset(self, tmp_path):
        """The uploader and the proxy must agree on every key."""
        upload_key = asset_key_for_file(tmp_path / "uploads" / "a.png", tmp_path)
        assert asset_key_from_request_path("/uploads/a.png") == upload_key

    def test_rejects_path_outside_root(self, tmp_path):
        with pytest.raises(ValueError, match="not inside"):
            asset_key_for_file(tmp_path.parent / "elsewhere.png", tmp_path)

    def test_rejects_root_itself(self, tmp_path):
        with pytest.raises(ValueError):
            asset_key_for_file(tmp_path, tmp_path)


# ---------------------------------------------------------------------------
# Content Type Tests
# ---------------------------------------------------------------------------

class TestContentTypes:
    """Content type is a pure function of the extension."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("a.png", "image/png"),
            ("a.jpg", "image/jpeg"),
            ("a.jpeg", "image/jpeg"),
            ("a.gif", "image/gif"),
            ("a.webp", "image/webp"),
            ("a.svg", "image/svg+xml"),
            ("a.md", "text/markdown"),
        ],
    )
    def test_known_extensions(self, filename, expected):
        assert content_type_for(filename) == expected

    def test_extension_is_case_insensitive(self):
        assert content_type_for("PHOTO.JPG") == "image/jpeg"
        assert content_type_for("Readme.Md") == "text/markdown"

    def test_unknown_extension_is_binary(self):
        assert content_type_for("archive.zip") == "application/octet-stream"

    def test_missing_extension_is_binary(self):
        assert content_type_for("uploads/LICENSE") == "application/octet-stream"

    def test_only_last_extension_counts(self):
        assert content_type_for("logo.png.bak") == "application/octet-stream"


# ---------------------------------------------------------------------------
# Legacy URL Tests
# ---------------------------------------------------------------------------

class TestLegacyUrls:
    """Tests for pointing stored legacy URLs at the proxy."""

    def test_rewrites_legacy_upload_url(self):
        url = rewrite_legacy_url("/api/uploads/123-logo.png", "https://assets.example.com")
        assert url == "https://assets.example.com/uploads/123-logo.png"

    def test_trailing_slash_on_base_is_ignored(self):
        url = rewrite_legacy_url("/api/uploads/a.png", "https://assets.example.com/")
        assert url == "https://assets.example.com/uploads/a.png"

    def test_other_urls_are_unchanged(self):
        already = "https://assets.example.com/uploads/a.png"
        assert rewrite_legacy_url(already, "https://assets.example.com") == already
        assert rewrite_legacy_url("/static/a.png", "https://x") == "/static/a.png"

    def test_public_url_for_key(self):
        assert public_url_for_key("ads/b.png", "https://cdn.test") == "https://cdn.test/ads/b.png"


# ---------------------------------------------------------------------------
# Outcome Tests
# ---------------------------------------------------------------------------

class TestFileOutcome:
    """Tests for the per-file state machine."""

    def test_starts_pending(self):
        assert FileOutcome(name="a.txt").status is FileStatus.PENDING

    def test_fail_records_error(self):
        outcome = FileOutcome(name="a.txt")
        outcome.fail(PermissionError("denied"))

        assert outcome.status is FileStatus.FAILED
        assert outcome.error == "PermissionError: denied"

    def test_finished_outcome_cannot_change(self):
        """FAILED is terminal for the run; there is no retry state."""
        outcome = FileOutcome(name="a.txt")
        outcome.fail(OSError("boom"))

        with pytest.raises(ValueError, match="already finished"):
            outcome.succeed()


class TestBatchReport:
    """Tests for batch summaries."""

    def test_counts_by_status(self):
        report = BatchReport()
        for name, action in [("a", "succeed"), ("b", "fail"), ("c", "skip"), ("d", "succeed")]:
            outcome = FileOutcome(name=name)
            if action == "fail":
                outcome.fail(OSError("x"))
            else:
                getattr(outcome, action)()
            report.outcomes.append(outcome)

        assert report.succeeded == 2
        assert report.failed == 1
        assert report.skipped == 1
        assert report.failed_names == ["b"]
        assert not report.ok

    def test_empty_report_is_ok(self):
        assert BatchReport().ok
