import pytest

import config
import db

ENV_NAMES = config.API_KEY_NAMES + [
    "DEEPSEEK_API_KEY_MODERATION", "STRIPE_SECRET_KEY", "STRIPE_WEBHOOK_SECRET", "SERVICE_ROLE_KEY",
]


@pytest.fixture(autouse=True)
def use_temp_db(tmp_path, monkeypatch):
    """Use a temporary database for each test."""
    test_db = str(tmp_path / "test.db")
    monkeypatch.setattr(db, "DB_PATH", test_db)
    db.init_db()
    yield test_db


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keys from a developer's .env must not leak into tests."""
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(f"VITE_{name}", raising=False)
