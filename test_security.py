"""Unit tests for security.py"""
import pytest

import security


class TestPasswordStrength:
    def test_accepts_strong(self):
        assert security.validate_strong_password("Abcdef1!") == (True, None)

    @pytest.mark.parametrize("password, message", [
        ("", "Password is required"),
        ("Ab1!", "Password must be 8-12 characters long"),
        ("Abcdefgh1!xyz", "Password must be 8-12 characters long"),
        ("abcdefg1!", "Password must contain at least one uppercase letter"),
        ("ABCDEFG1!", "Password must contain at least one lowercase letter"),
        ("Abcdefgh!", "Password must contain at least one number"),
        ("Abcdefgh1", "Password must contain at least one special character"),
    ])
    def test_rejects(self, password, message):
        ok, msg = security.validate_strong_password(password)
        assert not ok
        assert msg == message


class TestEscapeHtml:
    def test_escapes_all(self):
        assert security.escape_html("<a href=\"x\">Tom & Jerry's</a>") == (
            "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&#039;s&lt;/a&gt;"
        )


class TestCsrf:
    def test_issue_and_verify(self):
        token = security.issue_csrf_token("anon:1")
        assert security.verify_csrf_token("anon:1", token)
        assert not security.verify_csrf_token("anon:1", token + "x")
        assert not security.verify_csrf_token("anon:2", token)

    def test_no_token_stored(self):
        assert not security.verify_csrf_token("anon:1", "anything")
        assert not security.verify_csrf_token("anon:1", None)

    def test_non_ascii_token_rejected(self):
        security.issue_csrf_token("anon:1")
        assert not security.verify_csrf_token("anon:1", "\xe9")

    def test_tokens_are_unique(self):
        assert security.generate_csrf_token() != security.generate_csrf_token()

    def test_add_to_headers(self):
        assert security.add_csrf_to_headers("anon:1", {"Accept": "json"}) == {"Accept": "json"}
        token = security.issue_csrf_token("anon:1")
        headers = security.add_csrf_to_headers("anon:1", {"Accept": "json"})
        assert headers == {"Accept": "json", security.CSRF_HEADER: token}
