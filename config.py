import os

from dotenv import load_dotenv
load_dotenv()

import db

REQUIRED_KEYS = ["DEEPSEEK_API_KEY", "BREVO_API_KEY"]
OPTIONAL_KEYS = ["OPENAI_API_KEY"]
API_KEY_NAMES = REQUIRED_KEYS + OPTIONAL_KEYS

# Owner used for env overrides kept in the key-value store
SETTINGS_OWNER = "settings"

# Questions per month
QUIZ_LIMITS = {
    "free": 5,          # anonymous visitors
    "registered": 50,
    "premium": 1000,
}

MAX_VALUES = {
    "questions": 50,
    "text_length": 2000,
}

STRIPE_PRICE_IDS = {
    "premium": os.getenv("STRIPE_PREMIUM_PRICE_ID", "price_premium_monthly"),
}

DEEPSEEK_MODEL = os.getenv("DEEPSEEK_MODEL", "deepseek/deepseek-chat")
LLM_TIMEOUT_SEC = int(os.getenv("LLM_TIMEOUT_SEC", "60"))
BREVO_API_URL = os.getenv("BREVO_API_URL", "https://api.brevo.com/v3/smtp/email")
CONTACT_RECIPIENT_EMAIL = os.getenv("CONTACT_RECIPIENT_EMAIL", "contact@example.com")
CONTACT_RECIPIENT_NAME = "Website Contact"
APP_ORIGIN = os.getenv("APP_ORIGIN", "http://localhost:8000")
FORUM_ADMIN_EMAILS = [e.strip().lower() for e in os.getenv("FORUM_ADMIN_EMAILS", "").split(",") if e.strip()]


def get_env_var(name):
    """Look up a setting: process env, then the VITE_ prefixed name, then a stored override."""
    value = os.getenv(name) or os.getenv(f"VITE_{name}")
    if value:
        return value
    return db.kv_get(SETTINGS_OWNER, f"ENV_{name}") or ""


def set_env_override(name, value):
    if value:
        db.kv_set(SETTINGS_OWNER, f"ENV_{name}", value)
    else:
        db.kv_remove(SETTINGS_OWNER, f"ENV_{name}")


def get_all_api_keys():
    return {name: get_env_var(name) for name in API_KEY_NAMES}


def set_all_api_keys(keys):
    for name, value in keys.items():
        if name not in API_KEY_NAMES:
            raise ValueError(f"Unknown API key: {name}")
        set_env_override(name, value)


def api_keys_status():
    present = {name: bool(get_env_var(name)) for name in API_KEY_NAMES}
    return {
        "present": present,
        "missing_required": [k for k in REQUIRED_KEYS if not present[k]],
        "missing_optional": [k for k in OPTIONAL_KEYS if not present[k]],
    }


def check_api_configuration():
    """True only when every required key is configured."""
    return not api_keys_status()["missing_required"]
