"""Tests for trackable-path filtering and route filters."""

import re

import pytest

from whothere.exceptions import UnknownRouteCategoryError
from whothere.routes import (
    FilterOp,
    build_route_filters,
    filter_trackable_paths,
    is_trackable_path,
)
from whothere.routes.filtering import is_static_asset, utf8_length


class TestFilterTrackablePaths:
    """Tests for filter_trackable_paths function."""

    def test_static_assets_dropped(self):
        paths = ["/home", "/assets/app.css", "/api/users", "/favicon.ico"]
        assert filter_trackable_paths(paths) == ["/home", "/api/users"]

    def test_order_preserved(self):
        paths = ["/c", "/a", "/b"]
        assert filter_trackable_paths(paths) == ["/c", "/a", "/b"]

    def test_invalid_elements_dropped(self):
        paths = ["/ok", "", "no-slash", None, 42, "/x" * 1001]
        assert filter_trackable_paths(paths) == ["/ok"]

    def test_exclude_substring_and_regex(self):
        paths = ["/health", "/api/internal/stats", "/api/users"]
        result = filter_trackable_paths(
            paths,
            exclude_patterns=["/internal/", re.compile(r"^/health")],
        )
        assert result == ["/api/users"]

    def test_include_overrides_exclusions(self):
        paths = ["/static/landing.js", "/static/app.js"]
        result = filter_trackable_paths(paths, include_patterns=[re.compile(r"landing")])
        assert result == ["/static/landing.js"]

    def test_include_does_not_override_validity(self):
        assert filter_trackable_paths(["landing"], include_patterns=["landing"]) == []

    def test_static_assets_kept_when_disabled(self):
        paths = ["/assets/app.css", "/favicon.ico"]
        assert filter_trackable_paths(paths, exclude_static_assets=False) == paths

    def test_max_length_counts_bytes(self):
        path = "/" + "é" * 10  # 21 bytes
        assert utf8_length(path) == 21
        assert not is_trackable_path(path, max_length=20)
        assert is_trackable_path(path, max_length=21)


class TestStaticAssets:
    @pytest.mark.parametrize("path", [
        "/static/app.js",
        "/images/logo",
        "/robots.txt",
        "/sitemap.xml",
        "/bundle.min.js?v=3",
        "/fonts/inter.woff2",
    ])
    def test_static(self, path):
        assert is_static_asset(path)

    @pytest.mark.parametrize("path", ["/api/users", "/docs/robots.txt", "/jsonapi", "/css-guide"])
    def test_not_static(self, path):
        assert not is_static_asset(path)


class TestBuildRouteFilters:
    def test_include_and_exclude(self):
        filters = build_route_filters([
            ("include", "/api"),
            ("exclude", re.compile(r"/internal")),
        ])
        assert [f.op for f in filters] == [FilterOp.CONTAINS, FilterOp.NOT_MATCHES]
        assert filters[0].matches("/api/users")
        assert not filters[1].matches("/api/internal")

    def test_bare_pattern_is_include(self):
        filters = build_route_filters(["/api", re.compile(r"^/v\d")])
        assert [f.op for f in filters] == [FilterOp.CONTAINS, FilterOp.MATCHES]

    def test_category(self):
        (admin,) = build_route_filters([("category", "admin")])
        assert admin.op is FilterOp.MATCHES_ANY
        assert admin.matches("/admin/users")
        assert not admin.matches("/administrator")

    @pytest.mark.parametrize("name", ["nonsense", "other"])
    def test_unknown_category(self, name):
        with pytest.raises(UnknownRouteCategoryError):
            build_route_filters([("category", name)])

    def test_malformed_specs_skipped(self):
        filters = build_route_filters([("include",), ("frobnicate", "/x"), 42, ("exclude", "/y")])
        assert len(filters) == 1
        assert filters[0].op is FilterOp.NOT_CONTAINS
