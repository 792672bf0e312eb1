"""Unit tests for forum.py"""
import pytest

import forum


class TestPosts:
    def test_seeded_welcome_post(self):
        posts = forum.get_posts()
        assert len(posts) == 1
        assert posts[0]["type"] == "news"
        assert forum.get_posts()[0]["id"] == posts[0]["id"]

    def test_add_regular_post_newest_first(self):
        forum.get_posts()
        post = forum.add_post("u1", " Black holes ", "Anything escape?", username="Sam")
        posts = forum.get_posts()
        assert posts[0]["id"] == post["id"]
        assert post["title"] == "Black holes"
        assert post["author"] == "Sam"
        assert post["authorRole"] == "user"

    def test_same_millisecond_newest_first(self, monkeypatch):
        monkeypatch.setattr(forum, "_now_ms", lambda: 1000)
        first = forum.add_post("u1", "First", "a")
        second = forum.add_post("u1", "Second", "b")
        assert [p["id"] for p in forum.get_posts()][:2] == [second["id"], first["id"]]

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            forum.add_post("u1", "", "content")
        with pytest.raises(ValueError):
            forum.add_post("u1", "title", "   ")

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            forum.add_post("u1", "t", "c", post_type="poll")

    def test_only_admin_posts_news(self):
        with pytest.raises(PermissionError):
            forum.add_post("u1", "News", "Big news", post_type="news")
        forum.set_user_role("u1", "admin")
        post = forum.add_post("u1", "News", "Big news", post_type=forum.PostType.NEWS)
        assert post["authorRole"] == "admin"


class TestInteractions:
    def test_comment_and_like(self):
        post = forum.add_post("u1", "Q", "Why is the sky blue?")
        comment = forum.add_comment("u2", post["id"], "Rayleigh scattering", username="Ana")
        assert comment["author"] == "Ana"
        assert forum.like_post(post["id"]) == 1
        assert forum.like_post(post["id"]) == 2
        saved = next(p for p in forum.get_posts() if p["id"] == post["id"])
        assert saved["comments"][0]["content"] == "Rayleigh scattering"
        assert saved["likes"] == 2

    def test_missing_post(self):
        with pytest.raises(LookupError):
            forum.like_post("missing")
        with pytest.raises(LookupError):
            forum.add_comment("u1", "missing", "hi")

    def test_empty_comment(self):
        post = forum.add_post("u1", "Q", "A")
        with pytest.raises(ValueError):
            forum.add_comment("u1", post["id"], "")


class TestRoles:
    def test_default_role(self):
        assert forum.get_current_user("u1") == {"username": "User", "role": "user"}

    def test_invalid_role(self):
        with pytest.raises(ValueError):
            forum.set_user_role("u1", "root")

    def test_format_date(self):
        assert forum.format_date(0) == "1970-01-01 00:00:00"
