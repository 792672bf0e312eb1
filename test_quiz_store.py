"""Unit tests for quiz_store.py"""
import pytest

import quiz_store

QUESTIONS = [
    {"id": "q1", "type": "multiple_choice", "options": ["a", "b", "c", "d"], "correctAnswer": 2},
    {"id": "q2", "type": "fill_in", "correctAnswer": "Oxygen"},
    {"id": "q3", "type": "fill_in", "correctAnswer": "glucose"},
]


class TestQuizDatabase:
    def test_save_and_get(self):
        quiz = quiz_store.save_quiz({"questions": QUESTIONS})
        assert quiz["id"]
        assert quiz["title"] == "Untitled quiz"
        assert quiz_store.get_quiz_by_id(quiz["id"])["questions"] == QUESTIONS
        assert quiz_store.get_quiz_by_id("missing") is None

    def test_resave_replaces(self):
        quiz_store.save_quiz({"id": "z", "title": "One", "questions": QUESTIONS})
        quiz_store.save_quiz({"id": "z", "title": "Two", "questions": QUESTIONS})
        assert quiz_store.get_quiz_by_id("z")["title"] == "Two"

    def test_other_owner_cannot_overwrite(self):
        quiz_store.save_quiz({"id": "z", "title": "Mine", "questions": QUESTIONS}, owner="u1")
        with pytest.raises(PermissionError):
            quiz_store.save_quiz({"id": "z", "title": "Hijacked", "questions": QUESTIONS}, owner="u2")
        assert quiz_store.get_quiz_by_id("z")["title"] == "Mine"
        quiz_store.save_quiz({"id": "z", "title": "Edited", "questions": QUESTIONS}, owner="u1")
        assert quiz_store.get_quiz_by_id("z")["title"] == "Edited"

    def test_owner_not_exposed(self):
        quiz = quiz_store.save_quiz({"questions": QUESTIONS, "ownerId": "spoofed"}, owner="u1")
        assert "ownerId" not in quiz
        assert "ownerId" not in quiz_store.get_quiz_by_id(quiz["id"])

    def test_needs_questions(self):
        with pytest.raises(ValueError):
            quiz_store.save_quiz({"title": "Empty"})

    def test_share_link(self):
        assert quiz_store.generate_shareable_link("abc", "https://app.test/") == "https://app.test/shared/abc"


class TestScoring:
    def test_score(self):
        result = quiz_store.score_attempt(QUESTIONS, ["2", " oxygen ", "starch"])
        assert result == {"correctAnswers": 2, "incorrectAnswers": 1, "score": 67}

    def test_missing_answers_are_wrong(self):
        assert quiz_store.score_attempt(QUESTIONS, [2])["correctAnswers"] == 1

    def test_empty_quiz(self):
        assert quiz_store.score_attempt([], [])["score"] == 0


class TestHistory:
    def test_empty_history_shape(self):
        assert quiz_store.load_quiz_history("anon:1") == {"attempts": [], "reviewList": [], "disputedQuestions": []}

    def test_attempts_newest_first(self):
        first = quiz_store.save_quiz_attempt("u1", {"questions": QUESTIONS, "userAnswers": [2, "oxygen", "glucose"]})
        second = quiz_store.save_quiz_attempt("u1", {"questions": QUESTIONS, "userAnswers": []})
        attempts = quiz_store.load_quiz_history("u1")["attempts"]
        assert [a["id"] for a in attempts] == [second["id"], first["id"]]
        assert first["result"]["score"] == 100
        assert second["result"]["score"] == 0

    def test_attempt_with_quiz_id_is_shared(self):
        quiz_store.save_quiz_attempt("u1", {"quizId": "z", "questions": QUESTIONS, "userAnswers": []})
        quiz_store.save_quiz_attempt("u2", {"questions": QUESTIONS, "userAnswers": []})
        assert len(quiz_store.get_quiz_attempts_by_quiz_id("z")) == 1
        assert len(quiz_store.get_quiz_attempts_from_database()) == 1

    def test_shared_attempt_has_no_user_id(self):
        attempt = quiz_store.save_quiz_attempt("u1", {"quizId": "z", "questions": QUESTIONS, "userAnswers": []})
        assert attempt["userId"] == "u1"
        shared = quiz_store.get_quiz_attempts_by_quiz_id("z")[0]
        assert shared["id"] == attempt["id"]
        assert "userId" not in shared
        assert quiz_store.load_quiz_history("u1")["attempts"][0]["userId"] == "u1"

    def test_owners_isolated_and_clear(self):
        quiz_store.save_quiz_attempt("u1", {"questions": QUESTIONS, "userAnswers": []})
        assert quiz_store.load_quiz_history("u2")["attempts"] == []
        quiz_store.clear_all_history("u1")
        assert quiz_store.load_quiz_history("u1")["attempts"] == []


class TestReviewList:
    def test_no_duplicates(self):
        quiz_store.add_to_review_list("u1", QUESTIONS[0])
        review = quiz_store.add_to_review_list("u1", dict(QUESTIONS[0]))
        assert len(review) == 1

    def test_remove_and_clear(self):
        quiz_store.add_to_review_list("u1", QUESTIONS[0])
        quiz_store.add_to_review_list("u1", QUESTIONS[1])
        assert [q["id"] for q in quiz_store.remove_from_review_list("u1", "q1")] == ["q2"]
        quiz_store.clear_review_list("u1")
        assert quiz_store.load_quiz_history("u1")["reviewList"] == []


class TestDisputes:
    def test_dispute_lifecycle(self):
        record = quiz_store.add_disputed_question("u1", QUESTIONS[1], "O2", "O2 is oxygen")
        assert record["status"] == quiz_store.DISPUTE_PENDING
        assert record["dateDisputed"]
        assert quiz_store.is_question_disputed("u1", "q2")
        quiz_store.remove_disputed_question("u1", "q2")
        assert not quiz_store.is_question_disputed("u1", "q2")

    def test_redispute_replaces(self):
        quiz_store.add_disputed_question("u1", QUESTIONS[1], "O2", "first")
        quiz_store.add_disputed_question("u1", QUESTIONS[1], "O2", "second")
        disputes = quiz_store.load_quiz_history("u1")["disputedQuestions"]
        assert [d["disputeReason"] for d in disputes] == ["second"]

    def test_reason_required(self):
        with pytest.raises(ValueError):
            quiz_store.add_disputed_question("u1", QUESTIONS[1], "O2", "  ")

    def test_clear(self):
        quiz_store.add_disputed_question("u1", QUESTIONS[0], 1, "reason")
        quiz_store.clear_disputed_questions("u1")
        assert not quiz_store.is_question_disputed("u1", "q1")
