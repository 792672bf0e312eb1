import re
import hmac
import secrets

import db

CSRF_KEY = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"

WEAK_PASSWORDS = {"password", "123456", "qwerty", "admin", "welcome"}
_SPECIAL_CHARS = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]""")


def validate_strong_password(password):
    """Check a new password: 8-12 chars with upper, lower, digit and special char.

    Returns (is_valid, message); message is None when the password is accepted.
    """
    if not password:
        return False, "Password is required"
    if len(password) < 8 or len(password) > 12:
        return False, "Password must be 8-12 characters long"
    if not re.search(r"[A-Z]", password):
        return False, "Password must contain at least one uppercase letter"
    if not re.search(r"[a-z]", password):
        return False, "Password must contain at least one lowercase letter"
    if not re.search(r"[0-9]", password):
        return False, "Password must contain at least one number"
    if not _SPECIAL_CHARS.search(password):
        return False, "Password must contain at least one special character"
    if password.lower() in WEAK_PASSWORDS:
        return False, "This password is too common and easily guessed"
    return True, None


def escape_html(text):
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )


# --- CSRF ---

def generate_csrf_token():
    return secrets.token_urlsafe(18)


def store_csrf_token(owner, token):
    db.kv_set(owner, CSRF_KEY, token)


def get_csrf_token(owner):
    return db.kv_get(owner, CSRF_KEY)


def issue_csrf_token(owner):
    token = generate_csrf_token()
    store_csrf_token(owner, token)
    return token


def add_csrf_to_headers(owner, headers=None):
    headers = dict(headers or {})
    token = get_csrf_token(owner)
    if token:
        headers[CSRF_HEADER] = token
    return headers


def verify_csrf_token(owner, token):
    expected = get_csrf_token(owner)
    if not expected or not token:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), str(token).encode("utf-8"))
