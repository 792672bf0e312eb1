"""Quizzes, attempts and per-owner study history kept in the key-value store.

Shared quizzes and their attempts live under one global owner so a share link
works for anyone. History, the review list and disputed questions are kept per
owner (a user id, or an anonymous client id).
"""
import time
import uuid
import logging
from datetime import datetime, timezone

import db

logger = logging.getLogger(__name__)

QUIZ_DB_OWNER = "quiz_db"
DB_QUIZZES_KEY = "quiz_db_quizzes"
DB_ATTEMPTS_KEY = "quiz_db_attempts"
HISTORY_KEY = "quiz_history"

DISPUTE_PENDING = "pending"
DISPUTE_REVIEWED = "reviewed"


def _now_ms():
    return int(time.time() * 1000)


# --- Quiz database ---

def _public(quiz):
    return {k: v for k, v in quiz.items() if k != "ownerId"}

def save_quiz(quiz, owner=None):
    """Store a shared quiz. Only the owner who first saved an id may overwrite it."""
    if not quiz.get("questions"):
        raise ValueError("A quiz needs at least one question")
    quiz = dict(quiz)
    quiz["id"] = quiz.get("id") or str(uuid.uuid4())
    quiz["title"] = quiz.get("title") or "Untitled quiz"
    quiz["ownerId"] = owner
    quiz.setdefault("createdAt", _now_ms())
    stored = db.kv_get(QUIZ_DB_OWNER, DB_QUIZZES_KEY, [])
    for existing in stored:
        if existing["id"] == quiz["id"] and existing.get("ownerId") != owner:
            raise PermissionError("This quiz belongs to someone else")
    quizzes = [q for q in stored if q["id"] != quiz["id"]]
    quizzes.append(quiz)
    db.kv_set(QUIZ_DB_OWNER, DB_QUIZZES_KEY, quizzes)
    return _public(quiz)

def get_quiz_by_id(quiz_id):
    for quiz in db.kv_get(QUIZ_DB_OWNER, DB_QUIZZES_KEY, []):
        if quiz["id"] == quiz_id:
            return _public(quiz)
    return None

def save_attempt_to_database(attempt):
    """Shared attempts are visible to anyone with the quiz link, so no owner id is kept."""
    attempt = {k: v for k, v in attempt.items() if k != "userId"}
    attempts = db.kv_get(QUIZ_DB_OWNER, DB_ATTEMPTS_KEY, [])
    attempts.append(attempt)
    db.kv_set(QUIZ_DB_OWNER, DB_ATTEMPTS_KEY, attempts)

def get_quiz_attempts_from_database():
    return db.kv_get(QUIZ_DB_OWNER, DB_ATTEMPTS_KEY, [])

def get_quiz_attempts_by_quiz_id(quiz_id):
    return [a for a in get_quiz_attempts_from_database() if a.get("quizId") == quiz_id]

def generate_shareable_link(quiz_id, origin):
    return f"{origin.rstrip('/')}/shared/{quiz_id}"


# --- Scoring ---

def _is_correct(question, answer):
    if answer is None:
        return False
    expected = question.get("correctAnswer")
    if question.get("type") == "multiple_choice":
        try:
            return int(answer) == int(expected)
        except (TypeError, ValueError):
            return False
    return str(answer).strip().lower() == str(expected).strip().lower()

def score_attempt(questions, answers):
    answers = list(answers) + [None] * (len(questions) - len(answers))
    correct = sum(1 for q, a in zip(questions, answers) if _is_correct(q, a))
    total = len(questions)
    return {
        "correctAnswers": correct,
        "incorrectAnswers": total - correct,
        "score": round(correct / total * 100) if total else 0,
    }


# --- History ---

def _empty_history():
    return {"attempts": [], "reviewList": [], "disputedQuestions": []}

def load_quiz_history(owner):
    history = db.kv_get(owner, HISTORY_KEY) or _empty_history()
    for key, value in _empty_history().items():
        history.setdefault(key, value)
    return history

def save_quiz_history(owner, history):
    history = dict(history)
    history["userId"] = owner
    db.kv_set(owner, HISTORY_KEY, history)

def save_quiz_attempt(owner, attempt):
    """Record a finished attempt, newest first. Missing result fields are scored here."""
    attempt = dict(attempt)
    attempt["id"] = attempt.get("id") or str(uuid.uuid4())
    attempt.setdefault("date", _now_ms())
    attempt["userId"] = owner
    if "result" not in attempt:
        attempt["result"] = score_attempt(attempt.get("questions", []), attempt.get("userAnswers", []))
    history = load_quiz_history(owner)
    history["attempts"] = [attempt] + history["attempts"]
    save_quiz_history(owner, history)
    if attempt.get("quizId"):
        save_attempt_to_database(attempt)
    return attempt

def clear_all_history(owner):
    db.kv_remove(owner, HISTORY_KEY)


# --- Review list ---

def add_to_review_list(owner, question):
    history = load_quiz_history(owner)
    if not any(q.get("id") == question.get("id") for q in history["reviewList"]):
        history["reviewList"].append(question)
        save_quiz_history(owner, history)
    return history["reviewList"]

def remove_from_review_list(owner, question_id):
    history = load_quiz_history(owner)
    history["reviewList"] = [q for q in history["reviewList"] if q.get("id") != question_id]
    save_quiz_history(owner, history)
    return history["reviewList"]

def clear_review_list(owner):
    history = load_quiz_history(owner)
    history["reviewList"] = []
    save_quiz_history(owner, history)


# --- Disputed questions ---

def add_disputed_question(owner, question, user_answer, dispute_reason):
    if not dispute_reason or not dispute_reason.strip():
        raise ValueError("A dispute reason is required")
    record = {
        "questionId": question.get("id"),
        "question": question,
        "userAnswer": user_answer,
        "disputeReason": dispute_reason.strip(),
        "dateDisputed": datetime.now(tz=timezone.utc).isoformat(),
        "status": DISPUTE_PENDING,
    }
    history = load_quiz_history(owner)
    history["disputedQuestions"] = [
        d for d in history["disputedQuestions"] if d["questionId"] != record["questionId"]
    ] + [record]
    save_quiz_history(owner, history)
    logger.info("Question %s disputed by %s", record["questionId"], owner)
    return record

def remove_disputed_question(owner, question_id):
    history = load_quiz_history(owner)
    history["disputedQuestions"] = [
        d for d in history["disputedQuestions"] if d["questionId"] != question_id
    ]
    save_quiz_history(owner, history)

def clear_disputed_questions(owner):
    history = load_quiz_history(owner)
    history["disputedQuestions"] = []
    save_quiz_history(owner, history)

def is_question_disputed(owner, question_id):
    return any(d["questionId"] == question_id for d in load_quiz_history(owner)["disputedQuestions"])
