"""
Tests for URL eligibility rules.
"""
import pytest

from mailshort_app.services.classifier import (
    has_template_token,
    is_already_short,
    normalize_short_domain,
    should_process,
)

DOMAIN = "https://s.example"


class TestShouldProcess:
    """Test the combined eligibility check"""

    @pytest.mark.parametrize("url", [
        "https://example.com/x",
        "http://example.com/",
        "HTTPS://EXAMPLE.COM/path?q=1",
    ])
    def test_plain_http_urls_are_processed(self, url):
        assert should_process(url, DOMAIN) is True

    @pytest.mark.parametrize("url", [
        "mailto:someone@example.com",
        "tel:+15551234",
        "#top",
        "/relative/path",
        "ftp://example.com/file",
        "",
    ])
    def test_non_http_urls_are_skipped(self, url):
        assert should_process(url, DOMAIN) is False

    def test_already_short_url_is_skipped(self):
        assert should_process("https://s.example/r/abcdEFGH", DOMAIN) is False

    def test_already_short_check_ignores_case(self):
        assert should_process("HTTPS://S.EXAMPLE/R/abcdEFGH", DOMAIN) is False

    def test_other_path_on_short_domain_is_processed(self):
        assert should_process("https://s.example/pricing", DOMAIN) is True

    def test_mustache_token_is_skipped(self):
        assert should_process("https://example.com/?u={{ user.id }}", DOMAIN) is False

    def test_unsubscribe_tag_is_skipped(self):
        assert should_process("https://example.com/{% unsubscribe_link %}", DOMAIN) is False


class TestHelpers:
    """Test individual classifier helpers"""

    def test_multiline_mustache_token(self):
        assert has_template_token("https://x.com/{{\nname\n}}") is True

    def test_single_brace_is_not_a_token(self):
        assert has_template_token("https://x.com/{id}") is False

    def test_unsubscribe_tag_case_insensitive(self):
        assert has_template_token("{%UNSUBSCRIBE_LINK%}") is True

    def test_is_already_short_requires_redirect_path(self):
        assert is_already_short("https://s.example/r/x", DOMAIN) is True
        assert is_already_short("https://s.example/x", DOMAIN) is False

    @pytest.mark.parametrize("value,expected", [
        ("s.example", "https://s.example"),
        ("https://s.example/", "https://s.example"),
        ("http://testserver/", "http://testserver"),
        ("  https://s.example//  ", "https://s.example"),
    ])
    def test_normalize_short_domain(self, value, expected):
        assert normalize_short_domain(value) == expected
