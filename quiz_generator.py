import math
import logging

import config
import llm
import moderation
from errors import UpstreamError

logger = logging.getLogger(__name__)

BLOOM_LEVEL_DESCRIPTIONS = {
    "remember": "Basic recall level - Tests students' ability to remember and recognize facts, terms, and concepts. "
                "Question types: Define terms, list points, identify correct statements, etc.",
    "understand": "Comprehension level - Tests students' ability to understand content and explain it in their own words. "
                  "Question types: Explain concepts, summarize content, classify, compare differences, etc.",
    "apply": "Application level - Tests students' ability to apply knowledge to solve problems in new situations. "
             "Question types: Apply formulas, use concepts to solve practical problems, demonstrate methods, etc.",
    "analyze": "Analysis level - Tests students' ability to break down information into components and understand their relationships. "
               "Question types: Analyze causes and effects, find patterns, distinguish main points and supporting evidence, etc.",
    "evaluate": "Evaluation level - Tests students' ability to make judgments based on criteria and evidence. "
                "Question types: Evaluate method effectiveness, defend positions, critically analyze arguments, make decisions and justify, etc.",
    "create": "Creation level - Tests students' ability to combine elements to form a new whole. "
              "Question types: Design solutions, propose hypotheses, create models, develop plans, etc.",
}

QUESTION_TYPES = ["multiple_choice", "fill_in"]
LETTER_TO_INDEX = {"a": 0, "b": 1, "c": 2, "d": 3, "e": 4, "f": 5}


def split_question_counts(count, question_types):
    """60% multiple choice when both types are requested."""
    if "multiple_choice" in question_types and "fill_in" in question_types:
        multiple_choice = math.ceil(count * 0.6)
        return multiple_choice, count - multiple_choice
    if "fill_in" in question_types:
        return 0, count
    return count, 0


def build_system_prompt(count, bloom_level, question_types):
    multiple_choice, fill_in = split_question_counts(count, question_types)
    return (
        f"You are a quiz generator. Please create {count} practice questions "
        f"({multiple_choice} multiple-choice and {fill_in} fill-in-the-blank) based on the provided learning objectives.\n\n"
        f"The questions should align with the \"{bloom_level}\" cognitive level of Bloom's Taxonomy:\n"
        f"{BLOOM_LEVEL_DESCRIPTIONS[bloom_level]}\n\n"
        "IMPORTANT GUIDELINES FOR CREATING EFFECTIVE QUESTIONS:\n"
        "1. Use clear, concise language suitable for educational assessment.\n"
        "2. For multiple-choice questions:\n"
        "   - Keep correct answers relatively short and concise\n"
        "   - Make all options similar in length to avoid giving away the answer\n"
        "   - Ensure distractors (wrong answers) are plausible but clearly incorrect\n"
        "   - Use 4 options for each multiple-choice question (A, B, C, D)\n"
        "3. For fill-in-the-blank questions:\n"
        "   - Keep the answer short (1-3 words maximum)\n"
        "   - Focus on key concepts rather than lengthy definitions\n"
        "   - Avoid using blank spaces that could accept multiple correct answers\n\n"
        "Return your response in JSON format as follows:\n"
        '{"questions": [\n'
        '  {"id": "q1", "type": "multiple_choice", "question": "Question text", '
        '"options": ["Option A", "Option B", "Option C", "Option D"], "correctAnswer": 0, '
        f'"explanation": "Explanation", "bloomLevel": "{bloom_level}"}},\n'
        '  {"id": "q2", "type": "fill_in", "question": "Question with blank ________.", '
        f'"correctAnswer": "answer", "explanation": "Explanation", "bloomLevel": "{bloom_level}"}}\n'
        "]}\n\n"
        "Remember to ensure all questions are in English, regardless of what language "
        "the learning objectives are provided in."
    )


def parse_questions(content):
    try:
        parsed = llm.extract_json(content)
    except ValueError as exc:
        raise UpstreamError(500, "Failed to parse DeepSeek API response as JSON") from exc
    if not isinstance(parsed, dict) or not isinstance(parsed.get("questions"), list):
        raise UpstreamError(500, "Invalid response format from DeepSeek API")
    return parsed["questions"]


def _answer_index(answer, options):
    wanted = answer.strip().lower()
    for i, option in enumerate(options):
        if str(option).strip().lower() == wanted:
            return i
    if wanted in LETTER_TO_INDEX and LETTER_TO_INDEX[wanted] < len(options):
        return LETTER_TO_INDEX[wanted]
    return answer


def normalize_questions(raw_questions, learning_objectives, bloom_level):
    topics = [t.strip() for t in learning_objectives.split(",") if t.strip()]
    topic = topics[0] if topics else None
    questions = []
    for index, q in enumerate(raw_questions):
        if not isinstance(q, dict):
            continue
        q = dict(q)
        answer = q.get("correctAnswer")
        if q.get("type") == "multiple_choice" and isinstance(answer, str):
            answer = _answer_index(answer, q.get("options") or [])
        q["id"] = q.get("id") or f"q{index + 1}"
        q["correctAnswer"] = answer
        q["bloomLevel"] = q.get("bloomLevel") or bloom_level
        q["topic"] = topic
        questions.append(q)
    return questions


def validate_request(learning_objectives, options):
    """Returns (count, bloom_level, question_types) or raises ValueError."""
    if not isinstance(learning_objectives, str):
        raise ValueError("Learning objectives must be text")
    if options is not None and not isinstance(options, dict):
        raise ValueError("Options must be an object")
    if not learning_objectives.strip():
        raise ValueError("Learning objectives cannot be empty")
    if len(learning_objectives) > config.MAX_VALUES["text_length"]:
        raise ValueError("Learning objectives are too long")
    if moderation.detect_prompt_injection(learning_objectives):
        raise ValueError("Potential prompt injection detected")
    options = options or {}
    count = options.get("count") or 5
    if isinstance(count, bool) or not isinstance(count, int) or count < 1 or count > config.MAX_VALUES["questions"]:
        raise ValueError(f"Question count must be between 1 and {config.MAX_VALUES['questions']}")
    bloom_level = options.get("bloomLevel") or "understand"
    if not isinstance(bloom_level, str) or bloom_level not in BLOOM_LEVEL_DESCRIPTIONS:
        raise ValueError(f"Unknown Bloom level: {bloom_level}")
    requested = options.get("questionTypes") or QUESTION_TYPES
    if not isinstance(requested, list):
        raise ValueError("questionTypes must be a list")
    question_types = [t for t in QUESTION_TYPES if t in requested]
    if not question_types:
        raise ValueError("At least one valid question type is required")
    return count, bloom_level, question_types


def generate_quiz(learning_objectives, options=None, api_key=None):
    count, bloom_level, question_types = validate_request(learning_objectives, options)
    logger.info("Requesting %d questions at %s level", count, bloom_level)
    content = llm.chat_completion(
        [
            {"role": "system", "content": build_system_prompt(count, bloom_level, question_types)},
            {"role": "user", "content": f"Create test questions based on these learning objectives: {learning_objectives}"},
        ],
        temperature=0.7,
        max_tokens=2000,
        api_key=api_key,
    )
    questions = normalize_questions(parse_questions(content), learning_objectives, bloom_level)
    logger.info("Generated %d questions", len(questions))
    return questions
