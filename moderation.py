import re
import logging

import config
import llm
from errors import UpstreamError

logger = logging.getLogger(__name__)

SENSITIVE_TERMS = {
    "sexual": ["porn", "xxx", "sex", "nude"],
    "hate": ["hate", "racist", "nazi", "bigot"],
    "harassment": ["harass", "bully", "stalk"],
    "selfHarm": ["suicide", "kill myself", "self harm"],
    "violence": ["kill", "murder", "bomb", "shoot", "terrorist"],
    "illicit": ["drug", "cocaine", "heroin", "illegal"],
}
CATEGORIES = list(SENSITIVE_TERMS.keys())

# Categories that block a post outright instead of masking it
BLOCKING_CATEGORIES = ("violence", "hate")

INJECTION_PATTERNS = [
    "ignore previous instructions",
    "ignore all instructions",
    "disregard",
    "forget everything",
    "new instructions",
    "override",
    "system prompt",
    "admin mode",
    "developer mode",
    "bypass",
    "jailbreak",
]

MODERATION_PROMPT = (
    "You are a content moderation system. Analyze the following content and determine "
    "if it contains inappropriate material in any of these categories:\n"
    "- sexual: Any sexually explicit or adult content\n"
    "- hate: Hateful, racist or discriminatory content\n"
    "- harassment: Content that harasses or bullies individuals or groups\n"
    "- selfHarm: Content promoting self-harm or suicide\n"
    "- violence: Violent or graphic content\n"
    "- illicit: Content promoting illegal activities\n\n"
    "Respond with a JSON object only, structured as follows:\n"
    '{"flagged": boolean, '
    '"categories": {"sexual": boolean, "hate": boolean, "harassment": boolean, '
    '"selfHarm": boolean, "violence": boolean, "illicit": boolean}, '
    '"categoryScores": {"sexual": number, "hate": number, "harassment": number, '
    '"selfHarm": number, "violence": number, "illicit": number}}\n'
    "Scores are between 0 and 1."
)


def local_moderate_content(content):
    categories = {c: False for c in CATEGORIES}
    scores = {c: 0 for c in CATEGORIES}
    lowered = (content or "").lower()
    for category, terms in SENSITIVE_TERMS.items():
        for term in terms:
            if term in lowered:
                categories[category] = True
                scores[category] += 0.7
    return {
        "flagged": any(categories.values()),
        "categories": categories,
        "categoryScores": scores,
    }


def contains_harmful_content(text):
    if not text:
        return False
    lowered = text.lower()
    return any(term in lowered for terms in SENSITIVE_TERMS.values() for term in terms)


def detect_prompt_injection(text):
    lowered = (text or "").lower()
    return any(pattern in lowered for pattern in INJECTION_PATTERNS)


def _normalize_result(result):
    categories = result.get("categories") or {}
    scores = result.get("categoryScores") or {}
    if not isinstance(categories, dict) or not isinstance(scores, dict):
        raise ValueError("Invalid moderation result from DeepSeek API")
    normalized = {
        "categories": {c: bool(categories.get(c, False)) for c in CATEGORIES},
        "categoryScores": {c: float(scores.get(c, 0) or 0) for c in CATEGORIES},
    }
    normalized["flagged"] = bool(result.get("flagged")) or any(normalized["categories"].values())
    return normalized


def moderate_content(content):
    """Classify content with DeepSeek, falling back to the local term list."""
    api_key = config.get_env_var("DEEPSEEK_API_KEY") or config.get_env_var("DEEPSEEK_API_KEY_MODERATION")
    if not api_key:
        return local_moderate_content(content)
    try:
        reply = llm.chat_completion(
            [
                {"role": "system", "content": MODERATION_PROMPT},
                {"role": "user", "content": content or ""},
            ],
            temperature=0.1,
            max_tokens=500,
            api_key=api_key,
        )
        result = llm.extract_json(reply)
        if not isinstance(result, dict):
            raise ValueError("Invalid response from DeepSeek API")
        return _normalize_result(result)
    except (UpstreamError, ValueError, TypeError) as exc:
        logger.warning("DeepSeek moderation unavailable, using local rules: %s", exc)
        return local_moderate_content(content)


def filter_user_input(text):
    """Returns (filtered_text, blocked). filtered_text is None when the input is rejected."""
    result = moderate_content(text)
    if result["flagged"] and any(result["categories"][c] for c in BLOCKING_CATEGORIES):
        return None, True
    filtered = text
    for terms in SENSITIVE_TERMS.values():
        for term in terms:
            filtered = re.sub(re.escape(term), "*" * len(term), filtered, flags=re.IGNORECASE)
    return filtered, filtered != text
