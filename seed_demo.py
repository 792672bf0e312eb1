"""Seed a demo account, a shared quiz and a leaderboard so screenshots look interesting."""
import sys, os, random

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from dotenv import load_dotenv
load_dotenv()

import db
import forum
import quiz_store
import subscriptions

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "Demo#Pass1"
QUIZ_ID = "demo-photosynthesis"

# Start from a clean slate for the demo quiz
conn = db.get_conn()
conn.execute("DELETE FROM shared_quiz_attempts WHERE quiz_id = ?", (QUIZ_ID,))
conn.commit()
conn.close()

user = db.get_user_by_email(DEMO_EMAIL)
if user:
    user_id = user["id"]
else:
    user_id = db.create_user(DEMO_EMAIL, DEMO_PASSWORD, "Demo Student")
subscriptions.provision_new_user(user_id)

QUESTIONS = [
    {"id": "q1", "type": "multiple_choice",
     "question": "Which organelle carries out photosynthesis?",
     "options": ["Mitochondrion", "Chloroplast", "Ribosome", "Nucleus"],
     "correctAnswer": 1, "explanation": "Chloroplasts contain chlorophyll.",
     "bloomLevel": "remember", "topic": "Photosynthesis"},
    {"id": "q2", "type": "multiple_choice",
     "question": "Which gas is released during photosynthesis?",
     "options": ["Carbon dioxide", "Nitrogen", "Oxygen", "Hydrogen"],
     "correctAnswer": 2, "explanation": "Water is split and oxygen is released.",
     "bloomLevel": "remember", "topic": "Photosynthesis"},
    {"id": "q3", "type": "fill_in",
     "question": "The green pigment in plants is called ________.",
     "correctAnswer": "chlorophyll", "explanation": "Chlorophyll absorbs light.",
     "bloomLevel": "remember", "topic": "Photosynthesis"},
    {"id": "q4", "type": "multiple_choice",
     "question": "Why do plants grow poorly in very low light?",
     "options": ["Too little glucose is made", "Roots stop working",
                 "Leaves absorb too much water", "Oxygen levels rise"],
     "correctAnswer": 0, "explanation": "Light drives glucose production.",
     "bloomLevel": "understand", "topic": "Photosynthesis"},
    {"id": "q5", "type": "fill_in",
     "question": "Photosynthesis converts light energy into ________ energy.",
     "correctAnswer": "chemical", "explanation": "Energy is stored in glucose.",
     "bloomLevel": "understand", "topic": "Photosynthesis"},
]

quiz = quiz_store.save_quiz({"id": QUIZ_ID, "title": "Photosynthesis basics", "questions": QUESTIONS}, owner=user_id)

# Realistic leaderboard: (name, correct answers, seconds)
PLAYERS = [
    ("Maya", 5, 62), ("Leo", 5, 75), ("Priya", 4, 58), ("Sam", 4, 90),
    ("Jonas", 3, 71), ("Aiko", 3, None), ("Ben", 2, 120), ("Demo Student", 4, 80),
]
for name, correct, seconds in PLAYERS:
    score = round(correct / len(QUESTIONS) * 100)
    db.add_leaderboard_entry(QUIZ_ID, name, score, seconds)

# A few attempts in the demo user's history
for _ in range(3):
    answers = [q["correctAnswer"] if random.random() < 0.7 else None for q in QUESTIONS]
    quiz_store.save_quiz_attempt(user_id, {
        "quizId": QUIZ_ID, "questions": QUESTIONS, "userAnswers": answers,
    })
quiz_store.add_to_review_list(user_id, QUESTIONS[3])
db.increment_question_count(user_id, len(QUESTIONS))

forum.get_posts()

# Verify
board = db.get_leaderboard(QUIZ_ID)
history = quiz_store.load_quiz_history(user_id)
sub = subscriptions.get_user_subscription(user_id)

print(f"Demo login: {DEMO_EMAIL} / {DEMO_PASSWORD}")
print(f"Quiz '{quiz['title']}' with {len(QUESTIONS)} questions (id={QUIZ_ID})")
print(f"Leaderboard top: {board[0]['user_name']} ({board[0]['score']}%)")
print(f"History: {len(history['attempts'])} attempts, {len(history['reviewList'])} in review list")
print(f"Subscription: {sub['tier']}, {subscriptions.get_remaining_questions(user_id)} questions left")
