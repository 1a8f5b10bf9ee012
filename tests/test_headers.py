"""Tests for the case-insensitive header set."""

from whothere.proxy import HeaderSet


class TestHeaderSet:
    def test_case_insensitive_lookup(self):
        headers = HeaderSet({"CF-Connecting-IP": "203.0.113.195"})
        assert headers["cf-connecting-ip"] == "203.0.113.195"
        assert headers["CF-CONNECTING-IP"] == "203.0.113.195"
        assert "Cf-Connecting-Ip" in headers

    def test_bytes_pairs_decoded(self):
        headers = HeaderSet([(b"x-real-ip", b"8.8.8.8"), (b"Host", b"example.com")])
        assert headers.value("X-Real-IP") == "8.8.8.8"
        assert headers.value("host") == "example.com"

    def test_repeated_forwarded_for_joined(self):
        headers = HeaderSet([
            ("X-Forwarded-For", "1.2.3.4"),
            ("x-forwarded-for", "5.6.7.8"),
        ])
        assert headers.forwarded_chain() == ["1.2.3.4", "5.6.7.8"]

    def test_list_values(self):
        headers = HeaderSet({
            "X-Forwarded-For": ["192.0.2.1", "10.0.0.1"],
            "X-Real-IP": ("1.1.1.1", "2.2.2.2"),
            "Accept": [],
        })
        assert headers.forwarded_chain() == ["192.0.2.1", "10.0.0.1"]
        assert headers.value("x-real-ip") == "2.2.2.2"
        assert "accept" not in headers

    def test_repeated_header_last_wins(self):
        headers = HeaderSet([("X-Real-IP", "1.1.1.1"), ("x-real-ip", "2.2.2.2")])
        assert headers.value("x-real-ip") == "2.2.2.2"

    def test_empty_value_treated_as_missing(self):
        headers = HeaderSet({"X-Real-IP": "   "})
        assert "x-real-ip" in headers
        assert headers.value("x-real-ip") is None

    def test_first_non_empty(self):
        headers = HeaderSet({"x-country": "DE", "x-country-code": ""})
        assert headers.first("x-country-code", "x-country") == "DE"

    def test_none_and_garbage_inputs(self):
        assert len(HeaderSet(None)) == 0
        assert len(HeaderSet(42)) == 0
        assert len(HeaderSet([("only-one",), ("a", "b")])) == 1

    def test_coerce_returns_same_instance(self):
        headers = HeaderSet({"a": "b"})
        assert HeaderSet.coerce(headers) is headers
        assert isinstance(HeaderSet.coerce({"a": "b"}), HeaderSet)

    def test_prefix_and_any(self):
        headers = HeaderSet({"CloudFront-Viewer-Country": "US"})
        assert headers.has_prefix("cloudfront-viewer-")
        assert headers.has_any(["cf-ray", "cloudfront-viewer-country"])
        assert not headers.has_any(["cf-ray"])
