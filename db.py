import sqlite3
import os
import json
import secrets
import uuid
import bcrypt

DB_PATH = os.getenv(
    "STEMQUIZ_DB_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "stemquiz.db"),
)

TOKEN_TTL_DAYS = 30

SUBSCRIPTION_FIELDS = (
    "tier", "question_count", "is_active", "stripe_customer_id",
    "stripe_subscription_id", "subscription_end_date",
)

def get_conn():
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn

def init_db():
    conn = get_conn()
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            display_name TEXT,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );
        CREATE TABLE IF NOT EXISTS auth_tokens (
            token TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT (datetime('now')),
            expires_at TEXT NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id)
        );
        CREATE TABLE IF NOT EXISTS profiles (
            id TEXT PRIMARY KEY,
            email TEXT,
            display_name TEXT,
            created_at TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        );
        CREATE TABLE IF NOT EXISTS user_subscriptions (
            user_id TEXT PRIMARY KEY,
            tier TEXT NOT NULL DEFAULT 'free',
            question_count INTEGER NOT NULL DEFAULT 0,
            is_active INTEGER NOT NULL DEFAULT 1,
            stripe_customer_id TEXT,
            stripe_subscription_id TEXT,
            subscription_end_date TEXT,
            created_at TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        );
        CREATE TABLE IF NOT EXISTS shared_quiz_attempts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            quiz_id TEXT NOT NULL,
            user_name TEXT NOT NULL,
            score REAL NOT NULL,
            completion_time INTEGER,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );
        CREATE INDEX IF NOT EXISTS idx_attempts_quiz
            ON shared_quiz_attempts (quiz_id, score);
        CREATE TABLE IF NOT EXISTS stripe_events (
            event_id TEXT PRIMARY KEY,
            event_type TEXT NOT NULL,
            received_at TEXT NOT NULL DEFAULT (datetime('now'))
        );
        CREATE TABLE IF NOT EXISTS kv_store (
            owner TEXT NOT NULL,
            key TEXT NOT NULL,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT (datetime('now')),
            PRIMARY KEY (owner, key)
        );
    """)
    conn.commit()
    conn.close()

# --- Users & auth ---

def _hash_password(password):
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

def create_user(email, password, display_name=None):
    user_id = str(uuid.uuid4())
    conn = get_conn()
    try:
        conn.execute(
            "INSERT INTO users (id, email, password_hash, display_name) VALUES (?, ?, ?, ?)",
            (user_id, email.strip().lower(), _hash_password(password), display_name)
        )
        conn.commit()
    except sqlite3.IntegrityError as exc:
        raise ValueError("Email already in use") from exc
    finally:
        conn.close()
    return user_id

def get_user(user_id):
    conn = get_conn()
    row = conn.execute(
        "SELECT id, email, display_name, created_at FROM users WHERE id = ?", (user_id,)
    ).fetchone()
    conn.close()
    return dict(row) if row else None

def get_user_by_email(email):
    conn = get_conn()
    row = conn.execute(
        "SELECT id, email, display_name, created_at FROM users WHERE email = ?",
        (email.strip().lower(),)
    ).fetchone()
    conn.close()
    return dict(row) if row else None

def verify_user_password(email, password):
    """Return the user dict when the password matches, else None."""
    conn = get_conn()
    row = conn.execute(
        "SELECT id, password_hash FROM users WHERE email = ?", (email.strip().lower(),)
    ).fetchone()
    conn.close()
    if not row:
        return None
    if not bcrypt.checkpw(password.encode("utf-8"), row["password_hash"].encode("utf-8")):
        return None
    return get_user(row["id"])

def issue_token(user_id):
    token = secrets.token_urlsafe(32)
    conn = get_conn()
    conn.execute(
        "INSERT INTO auth_tokens (token, user_id, expires_at) VALUES (?, ?, datetime('now', ?))",
        (token, user_id, f"+{TOKEN_TTL_DAYS} days")
    )
    conn.commit()
    conn.close()
    return token

def get_user_by_token(token):
    if not token:
        return None
    conn = get_conn()
    row = conn.execute(
        """SELECT u.id, u.email, u.display_name, u.created_at
           FROM auth_tokens t JOIN users u ON u.id = t.user_id
           WHERE t.token = ? AND t.expires_at > datetime('now')""",
        (token,)
    ).fetchone()
    conn.close()
    return dict(row) if row else None

def revoke_token(token):
    conn = get_conn()
    conn.execute("DELETE FROM auth_tokens WHERE token = ?", (token,))
    conn.commit()
    conn.close()

# --- Profiles ---

def upsert_profile(user_id, email, display_name):
    conn = get_conn()
    conn.execute(
        """INSERT INTO profiles (id, email, display_name) VALUES (?, ?, ?)
           ON CONFLICT(id) DO UPDATE SET
               email = excluded.email,
               display_name = excluded.display_name,
               updated_at = datetime('now')""",
        (user_id, email, display_name)
    )
    conn.commit()
    conn.close()

def get_profile(user_id):
    conn = get_conn()
    row = conn.execute("SELECT * FROM profiles WHERE id = ?", (user_id,)).fetchone()
    conn.close()
    return dict(row) if row else None

# --- Subscriptions ---

def get_subscription(user_id):
    conn = get_conn()
    row = conn.execute(
        "SELECT * FROM user_subscriptions WHERE user_id = ?", (user_id,)
    ).fetchone()
    conn.close()
    return dict(row) if row else None

def upsert_subscription(user_id, tier="free", question_count=0, is_active=True):
    conn = get_conn()
    conn.execute(
        """INSERT INTO user_subscriptions (user_id, tier, question_count, is_active)
           VALUES (?, ?, ?, ?)
           ON CONFLICT(user_id) DO UPDATE SET
               tier = excluded.tier,
               question_count = excluded.question_count,
               is_active = excluded.is_active,
               updated_at = datetime('now')""",
        (user_id, tier, question_count, 1 if is_active else 0)
    )
    conn.commit()
    conn.close()

def _update_subscription(where, key, fields):
    unknown = set(fields) - set(SUBSCRIPTION_FIELDS)
    if unknown:
        raise ValueError(f"Unknown subscription fields: {sorted(unknown)}")
    if not fields:
        return 0
    assignments = []
    values = []
    for name, value in fields.items():
        assignments.append(f"{name} = ?")
        if name == "is_active":
            value = 1 if value else 0
        values.append(value)
    assignments.append("updated_at = datetime('now')")
    values.append(key)
    conn = get_conn()
    cur = conn.execute(
        f"UPDATE user_subscriptions SET {', '.join(assignments)} WHERE {where} = ?", values
    )
    conn.commit()
    conn.close()
    return cur.rowcount

def update_subscription_by_user(user_id, **fields):
    return _update_subscription("user_id", user_id, fields)

def update_subscription_by_stripe_id(stripe_subscription_id, **fields):
    return _update_subscription("stripe_subscription_id", stripe_subscription_id, fields)

def increment_question_count(user_id, count):
    conn = get_conn()
    cur = conn.execute(
        """UPDATE user_subscriptions
           SET question_count = question_count + ?, updated_at = datetime('now')
           WHERE user_id = ?""",
        (count, user_id)
    )
    if cur.rowcount == 0:
        conn.execute(
            "INSERT INTO user_subscriptions (user_id, tier, question_count, is_active) VALUES (?, 'free', ?, 1)",
            (user_id, count)
        )
    conn.commit()
    conn.close()

def reset_question_count(user_id):
    update_subscription_by_user(user_id, question_count=0)

# --- Leaderboard ---

def add_leaderboard_entry(quiz_id, user_name, score, completion_time=None):
    conn = get_conn()
    cur = conn.execute(
        """INSERT INTO shared_quiz_attempts (quiz_id, user_name, score, completion_time)
           VALUES (?, ?, ?, ?)""",
        (quiz_id, user_name, score, completion_time)
    )
    entry_id = cur.lastrowid
    conn.commit()
    row = conn.execute("SELECT * FROM shared_quiz_attempts WHERE id = ?", (entry_id,)).fetchone()
    conn.close()
    return dict(row)

def get_leaderboard(quiz_id, limit=10):
    conn = get_conn()
    rows = conn.execute(
        """SELECT * FROM shared_quiz_attempts
           WHERE quiz_id = ?
           ORDER BY score DESC, completion_time IS NULL, completion_time ASC, id ASC
           LIMIT ?""",
        (quiz_id, limit)
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]

# --- Stripe events ---

def record_stripe_event(event_id, event_type):
    """Claim an event id. Returns False if it was already claimed."""
    conn = get_conn()
    try:
        conn.execute(
            "INSERT INTO stripe_events (event_id, event_type) VALUES (?, ?)",
            (event_id, event_type)
        )
        conn.commit()
        return True
    except sqlite3.IntegrityError:
        return False
    finally:
        conn.close()

def forget_stripe_event(event_id):
    conn = get_conn()
    conn.execute("DELETE FROM stripe_events WHERE event_id = ?", (event_id,))
    conn.commit()
    conn.close()

# --- Key-value store ---

def kv_get(owner, key, default=None):
    conn = get_conn()
    row = conn.execute(
        "SELECT value FROM kv_store WHERE owner = ? AND key = ?", (owner, key)
    ).fetchone()
    conn.close()
    if not row:
        return default
    return json.loads(row["value"])

def kv_set(owner, key, value):
    conn = get_conn()
    conn.execute(
        """INSERT INTO kv_store (owner, key, value) VALUES (?, ?, ?)
           ON CONFLICT(owner, key) DO UPDATE SET
               value = excluded.value,
               updated_at = datetime('now')""",
        (owner, key, json.dumps(value))
    )
    conn.commit()
    conn.close()

def kv_remove(owner, key):
    conn = get_conn()
    conn.execute("DELETE FROM kv_store WHERE owner = ? AND key = ?", (owner, key))
    conn.commit()
    conn.close()

# Initialize on import
init_db()
