"""Tests for path normalization, query analysis and grouping."""

import re

import pytest

from whothere.routes import analyze_query_parameters, group_similar_paths, normalize_dynamic_path
from whothere.routes.normalize import compile_patterns


class TestNormalizeDynamicPath:
    """Tests for normalize_dynamic_path function."""

    def test_numeric_id(self):
        assert normalize_dynamic_path("/users/123") == "/users/:id"

    def test_multiple_ids(self):
        assert normalize_dynamic_path("/posts/456/comments/789") == "/posts/:id/comments/:id"

    def test_uuid(self):
        path = "/api/v2/items/550e8400-e29b-41d4-a716-446655440000"
        assert normalize_dynamic_path(path) == "/api/v2/items/:id"

    def test_alphanumeric_with_digit(self):
        assert normalize_dynamic_path("/orders/ab12cd") == "/orders/:id"
        assert normalize_dynamic_path("/orders/pending") == "/orders/pending"

    def test_version_segments_kept(self):
        assert normalize_dynamic_path("/api/v1/users") == "/api/v1/users"
        assert normalize_dynamic_path("/api/v2.1/users") == "/api/v2.1/users"

    def test_file_placeholder(self):
        assert normalize_dynamic_path("/files/123.pdf") == "/files/:file"
        assert normalize_dynamic_path("/files/123.pdf", preserve_extensions=True) == "/files/:file.pdf"

    def test_plain_file_name_kept(self):
        assert normalize_dynamic_path("/files/document.pdf") == "/files/document.pdf"

    def test_query_dropped(self):
        assert normalize_dynamic_path("/users/123?tab=posts") == "/users/:id"

    def test_root_and_trailing_slash(self):
        assert normalize_dynamic_path("/") == "/"
        assert normalize_dynamic_path("/users/123/") == "/users/:id/"

    def test_max_segments(self):
        assert normalize_dynamic_path("/a/b/c/d", max_segments=2) == "/a/b"
        assert normalize_dynamic_path("/users/123/posts", max_segments=0) == "/"
        assert normalize_dynamic_path("a/b/c", max_segments=1) == "a"

    def test_custom_id_patterns(self):
        path = "/orders/ORD-AB-12345678"
        assert normalize_dynamic_path(path) == "/orders/:id"
        assert normalize_dynamic_path("/tags/release", id_patterns=[r"release"]) == "/tags/:id"
        assert normalize_dynamic_path("/tags/release", id_patterns=[re.compile(r"rel\w+")]) == "/tags/:id"

    def test_invalid_custom_pattern_skipped(self):
        assert normalize_dynamic_path("/users/123", id_patterns=["(unclosed"]) == "/users/:id"

    def test_alphanumeric_ids_off_keeps_route_words(self):
        paths = ["/oauth2/authorize", "/api/s3/buckets", "/auth/2fa"]
        assert [normalize_dynamic_path(p, alphanumeric_ids=False) for p in paths] == paths

    def test_alphanumeric_ids_off_still_replaces_numbers_and_uuids(self):
        path = "/users/123/files/550e8400-e29b-41d4-a716-446655440000"
        assert normalize_dynamic_path(path, alphanumeric_ids=False) == "/users/:id/files/:id"

    def test_alphanumeric_ids_off_with_custom_pattern(self):
        result = normalize_dynamic_path("/orders/ORD-AB-12345678/s3", alphanumeric_ids=False,
                                        id_patterns=[r"ORD-[A-Z]{2}-\d{8}"])
        assert result == "/orders/:id/s3"

    def test_deterministic(self):
        path = "/posts/456/comments/789"
        assert normalize_dynamic_path(path) == normalize_dynamic_path(path)

    def test_non_string_passthrough(self):
        assert normalize_dynamic_path(None) is None


class TestCompilePatterns:
    def test_mixed(self):
        compiled = compile_patterns([r"\d+", re.compile("x"), "(bad", 42])
        assert len(compiled) == 2


class TestAnalyzeQueryParameters:
    """Tests for analyze_query_parameters function."""

    def test_basic(self):
        result = analyze_query_parameters("/search?q=test&limit=10")
        assert result.has_query
        assert result.param_count == 2
        assert result.params == {"q": "test", "limit": ":number"}
        assert result.base_path == "/search"

    def test_no_query(self):
        result = analyze_query_parameters("/search")
        assert not result.has_query
        assert result.param_count == 0
        assert result.params == {}
        assert result.base_path == "/search"

    def test_empty_query(self):
        assert not analyze_query_parameters("/search?").has_query

    def test_uuid_and_long_values(self):
        result = analyze_query_parameters(
            "/x?id=550e8400-e29b-41d4-a716-446655440000&token=abcdefghijklmnopqrstuvwxyz"
        )
        assert result.params == {"id": ":uuid", "token": ":long_string"}

    def test_decoding(self):
        result = analyze_query_parameters("/search?q=hello+world&name=%C3%A9")
        assert result.params == {"q": "hello world", "name": "é"}

    def test_exclude_and_max_params(self):
        result = analyze_query_parameters(
            "/p?utm_source=x&a=1&b=2&c=3",
            exclude_params=["utm_source"],
            max_params=2,
        )
        assert list(result.params) == ["a", "b"]
        assert result.param_count == 2

    def test_repeated_param_last_wins(self):
        assert analyze_query_parameters("/p?a=x&a=y").params == {"a": "y"}

    def test_raw_values(self):
        result = analyze_query_parameters("/p?limit=10", normalize_values=False)
        assert result.params == {"limit": "10"}

    def test_fragment_ignored(self):
        assert analyze_query_parameters("/p?a=b#frag").params == {"a": "b"}


class TestGroupSimilarPaths:
    """Tests for group_similar_paths function."""

    PATHS = [
        "/users/1",
        "/users/2",
        "/users/3",
        "/posts/1",
        "/posts/2",
        "/about",
    ]

    def test_normalized(self):
        groups = group_similar_paths(self.PATHS)
        assert list(groups) == ["/users/:id", "/posts/:id", "/about"]
        assert groups["/users/:id"] == ["/users/1", "/users/2", "/users/3"]

    def test_min_group_size(self):
        groups = group_similar_paths(self.PATHS, min_group_size=2)
        assert list(groups) == ["/users/:id", "/posts/:id"]

    def test_max_groups(self):
        groups = group_similar_paths(self.PATHS, max_groups=1)
        assert list(groups) == ["/users/:id"]

    def test_exact(self):
        groups = group_similar_paths(["/a", "/b", "/a"], grouping_strategy="exact")
        assert groups == {"/a": ["/a", "/a"], "/b": ["/b"]}

    def test_pattern(self):
        paths = ["/admin/users/5", "/admin/settings", "/admin", "/", "/api/x"]
        groups = group_similar_paths(paths, grouping_strategy="pattern")
        assert groups["/admin/*"] == ["/admin/users/5", "/admin/settings"]
        assert groups["/admin"] == ["/admin"]
        assert groups["/"] == ["/"]

    def test_ties_keep_first_seen_order(self):
        groups = group_similar_paths(["/b", "/a"], grouping_strategy="exact")
        assert list(groups) == ["/b", "/a"]

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            group_similar_paths(self.PATHS, grouping_strategy="fuzzy")

    def test_normalize_options_forwarded(self):
        groups = group_similar_paths(["/a/b/c", "/a/b/d"], max_segments=2)
        assert groups == {"/a/b": ["/a/b/c", "/a/b/d"]}
