"""Tests for route classification."""

import pytest

from whothere.routes import RouteCategory, classify_route, evaluate_route, normalize_dynamic_path
from whothere.routes.models import SuspiciousCategory


class TestClassifyRoute:
    @pytest.mark.parametrize("path,category", [
        ("/admin/users", RouteCategory.ADMIN),
        ("/admin", RouteCategory.ADMIN),
        ("/api/v1/orders", RouteCategory.API),
        ("/auth/callback", RouteCategory.AUTH),
        ("/login", RouteCategory.AUTH),
        ("/account/logout", RouteCategory.AUTH),
        ("/users/123", RouteCategory.USER),
        ("/profile", RouteCategory.USER),
        ("/dashboard/stats", RouteCategory.DASHBOARD),
        ("/docs/getting-started", RouteCategory.DOCS),
        ("/documentation", RouteCategory.DOCS),
        ("/home", RouteCategory.OTHER),
        ("/administrator", RouteCategory.OTHER),
    ])
    def test_categories(self, path, category):
        assert classify_route(path).category is category

    def test_first_match_wins(self):
        assert classify_route("/admin/login").category is RouteCategory.ADMIN
        assert classify_route("/api/login").category is RouteCategory.API

    def test_case_sensitive(self):
        assert classify_route("/Admin").category is RouteCategory.OTHER

    def test_query_ignored(self):
        assert classify_route("/home?next=/admin").category is RouteCategory.OTHER

    def test_label(self):
        assert classify_route("/api/x").label == "API"
        assert classify_route(None).label == "Other"

    @pytest.mark.parametrize("path", [
        "/users/123",
        "/profile123",
        "/api/v2/items/550e8400-e29b-41d4-a716-446655440000",
        "/dashboard/7/widgets",
        "/login/42",
        "/posts/456/comments/789",
    ])
    def test_normalized_pattern_keeps_category(self, path):
        assert classify_route(normalize_dynamic_path(path)).category is classify_route(path).category


class TestEvaluateRoute:
    def test_trackable_api_route(self):
        decision = evaluate_route("/api/users/42")
        assert decision.trackable
        assert decision.pattern == "/api/users/:id"
        assert decision.category is RouteCategory.API
        assert not decision.is_suspicious

    def test_static_asset_not_trackable(self):
        decision = evaluate_route("/assets/app.css")
        assert not decision.trackable
        assert decision.pattern == "/assets/app.css"

    def test_suspicious(self):
        decision = evaluate_route("/../../../etc/passwd")
        assert SuspiciousCategory.SECURITY_SCAN in decision.suspicious_categories

    def test_non_string(self):
        decision = evaluate_route(None)
        assert not decision.trackable
        assert decision.pattern == ""
        assert decision.category is RouteCategory.OTHER
