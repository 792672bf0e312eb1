import time
import uuid
from datetime import datetime, timezone
from enum import Enum

import db

FORUM_OWNER = "forum"
POSTS_KEY = "forum_posts"
ROLE_KEY = "forum_role"


class PostType(str, Enum):
    NEWS = "news"
    REGULAR = "regular"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


def _now_ms():
    return int(time.time() * 1000)


def _welcome_post():
    return {
        "id": str(uuid.uuid4()),
        "title": "Welcome to the STEM News Forum",
        "content": "This is a place to read the latest STEM news and share your thoughts in the comments.",
        "author": "Admin",
        "authorRole": UserRole.ADMIN.value,
        "timestamp": _now_ms(),
        "likes": 0,
        "comments": [],
        "type": PostType.NEWS.value,
    }


def _load_posts():
    """Posts in insertion order. The forum starts with a welcome post."""
    posts = db.kv_get(FORUM_OWNER, POSTS_KEY)
    if posts is None:
        posts = [_welcome_post()]
        save_posts(posts)
    return posts


def get_posts():
    """All posts, newest first; later inserts win timestamp ties."""
    return sorted(reversed(_load_posts()), key=lambda p: p["timestamp"], reverse=True)


def save_posts(posts):
    db.kv_set(FORUM_OWNER, POSTS_KEY, posts)


def get_current_user(owner, username="User"):
    role = db.kv_get(owner, ROLE_KEY, UserRole.USER.value)
    return {"username": username, "role": role}


def set_user_role(owner, role, username="User"):
    role = UserRole(role)
    db.kv_set(owner, ROLE_KEY, role.value)
    return {"username": username, "role": role.value}


def add_post(owner, title, content, post_type=PostType.REGULAR, username="User"):
    post_type = PostType(post_type)
    if not title or not title.strip() or not content or not content.strip():
        raise ValueError("Title and content are required")
    user = get_current_user(owner, username)
    if post_type is PostType.NEWS and user["role"] != UserRole.ADMIN.value:
        raise PermissionError("Only admins can publish news")
    post = {
        "id": str(uuid.uuid4()),
        "title": title.strip(),
        "content": content.strip(),
        "author": user["username"],
        "authorRole": user["role"],
        "timestamp": _now_ms(),
        "likes": 0,
        "comments": [],
        "type": post_type.value,
    }
    posts = _load_posts()
    posts.append(post)
    save_posts(posts)
    return post


def _find_post(posts, post_id):
    for post in posts:
        if post["id"] == post_id:
            return post
    raise LookupError(f"Post {post_id} not found")


def add_comment(owner, post_id, content, username="User"):
    if not content or not content.strip():
        raise ValueError("Comment cannot be empty")
    posts = _load_posts()
    post = _find_post(posts, post_id)
    comment = {
        "id": str(uuid.uuid4()),
        "content": content.strip(),
        "author": get_current_user(owner, username)["username"],
        "timestamp": _now_ms(),
    }
    post["comments"].append(comment)
    save_posts(posts)
    return comment


def like_post(post_id):
    posts = _load_posts()
    post = _find_post(posts, post_id)
    post["likes"] += 1
    save_posts(posts)
    return post["likes"]


def format_date(timestamp):
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
