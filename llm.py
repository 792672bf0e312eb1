import json
import logging
import re

from crewai import LLM

import config
from errors import UpstreamError

logger = logging.getLogger(__name__)


def _status_from_exception(exc):
    if "timeout" in type(exc).__name__.lower():
        return 504
    status = getattr(exc, "status_code", None)
    if isinstance(status, int) and 400 <= status < 600:
        return status
    return 502


def make_llm(api_key, temperature=0.7, max_tokens=2000):
    return LLM(
        model=config.DEEPSEEK_MODEL,
        api_key=api_key,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=config.LLM_TIMEOUT_SEC,
    )


def chat_completion(messages, temperature=0.7, max_tokens=2000, api_key=None):
    """Send chat messages to DeepSeek and return the reply text."""
    api_key = api_key or config.get_env_var("DEEPSEEK_API_KEY")
    if not api_key:
        raise UpstreamError(500, "DeepSeek API key not configured")
    llm = make_llm(api_key, temperature=temperature, max_tokens=max_tokens)
    try:
        reply = llm.call(messages)
    except Exception as exc:
        logger.error("DeepSeek request failed: %s", exc)
        raise UpstreamError(_status_from_exception(exc), str(exc) or "DeepSeek request failed") from exc
    return str(reply or "").strip()


def parse_json_lenient(raw):
    """Parse JSON that may contain invalid escapes like LaTeX \\frac{}{} or \\(."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    # Valid JSON escapes: \", \\, \/, \b, \f, \n, \r, \t, \uXXXX
    sanitized = re.sub(r'\\(?!["\\/bfnrtu])', r'\\\\', raw)
    return json.loads(sanitized)


def extract_json(text):
    """Pull the JSON payload out of a model reply, with or without ``` fences."""
    match = re.search(r"```json\s*\n([\s\S]*?)\n?```", text) or re.search(r"```([\s\S]*?)```", text)
    if match:
        return parse_json_lenient(match.group(1).strip())
    start = text.find('{')
    end = text.rfind('}')
    if start != -1 and end > start:
        return parse_json_lenient(text[start:end + 1])
    return parse_json_lenient(text.strip())
