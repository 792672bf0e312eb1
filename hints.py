import random
import logging

import llm
from errors import UpstreamError

logger = logging.getLogger(__name__)

BLOOM_LEVELS = ["remember", "understand", "apply", "analyze", "evaluate", "create"]
# Levels answered from the canned lists; everything above goes to the model
CANNED_LEVELS = {"remember", "understand"}

MULTIPLE_CHOICE_HINTS = [
    "Look for keywords in the question that may point to a specific option.",
    "Try to eliminate obviously incorrect options first.",
    "Consider what you know about this topic and use process of elimination.",
    "Think about related concepts that might help you determine the answer.",
    "Review what you've learned about this topic recently.",
    "Focus on the specific terminology used in the question.",
    "Try to recall examples related to this concept.",
]

FILL_IN_HINTS = [
    "Consider the key terminology related to this topic.",
    "Think about the main concepts discussed in this section.",
    "Remember the definitions you've studied about this topic.",
]

FALLBACK_HINTS = {
    "multiple_choice": "Consider all options carefully and eliminate those that don't fit.",
    "fill_in": "Think about the key terminology related to this question.",
}

HINT_PROMPT = (
    "You are a patient STEM tutor. Give the student ONE short hint (max 2 sentences) "
    "for the quiz question below. The hint must guide their thinking at the "
    "\"{level}\" level of Bloom's Taxonomy and must NOT reveal or restate the answer. "
    "Reply with the hint text only."
)


def _question_type(question):
    return "multiple_choice" if question.get("type") == "multiple_choice" else "fill_in"


def fallback_hint(question):
    return FALLBACK_HINTS[_question_type(question)]


def canned_hint(question):
    if _question_type(question) == "multiple_choice":
        return random.choice(MULTIPLE_CHOICE_HINTS)
    answer = str(question.get("correctAnswer", "")).strip()
    options = list(FILL_IN_HINTS)
    if answer:
        options.append(f'This term starts with the letter "{answer[0]}".')
    return random.choice(options)


def _hint_request(question, level):
    lines = [f"Question: {question.get('question', '')}"]
    if question.get("options"):
        for i, option in enumerate(question["options"]):
            lines.append(f"{chr(ord('A') + i)}. {option}")
    if question.get("topic"):
        lines.append(f"Topic: {question['topic']}")
    return [
        {"role": "system", "content": HINT_PROMPT.format(level=level)},
        {"role": "user", "content": "\n".join(lines)},
    ]


def _reveals_answer(hint, question):
    answer = question.get("correctAnswer")
    if _question_type(question) == "multiple_choice":
        options = question.get("options") or []
        if isinstance(answer, int) and 0 <= answer < len(options):
            answer = options[answer]
        else:
            return False
    answer = str(answer or "").strip().lower()
    return len(answer) > 2 and answer in hint.lower()


def generate_hint(question, bloom_level=None):
    """Return a hint for a quiz question. Never returns an empty string."""
    question = question or {}
    level = (bloom_level or question.get("bloomLevel") or "").lower()
    try:
        if level not in BLOOM_LEVELS or level in CANNED_LEVELS:
            return canned_hint(question)
        hint = llm.chat_completion(_hint_request(question, level), temperature=0.5, max_tokens=120)
        if not hint or _reveals_answer(hint, question):
            return fallback_hint(question)
        return hint
    except (UpstreamError, ValueError, TypeError) as exc:
        logger.error("Error generating hint: %s", exc)
        return fallback_hint(question)


def get_basic_hint(question):
    if _question_type(question) == "multiple_choice":
        return "Try to eliminate obviously incorrect options first. Focus on the key terms in the question."
    answer = str(question.get("correctAnswer", ""))
    if not answer:
        return fallback_hint(question)
    return f'The answer starts with "{answer[0]}" and has {len(answer)} characters.'
