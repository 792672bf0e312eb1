"""Unit tests for llm.py"""
import pytest

import llm
from errors import UpstreamError


class FakeLLM:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error

    def call(self, messages):
        if self.error:
            raise self.error
        return self.reply


class APITimeoutError(Exception):
    pass


class RateLimitError(Exception):
    status_code = 429


class TestChatCompletion:
    def test_missing_key(self):
        with pytest.raises(UpstreamError) as exc:
            llm.chat_completion([{"role": "user", "content": "hi"}])
        assert exc.value.status == 500

    def test_returns_stripped_text(self, monkeypatch):
        monkeypatch.setattr(llm, "make_llm", lambda *a, **kw: FakeLLM(reply="  hello \n"))
        assert llm.chat_completion([], api_key="k") == "hello"

    @pytest.mark.parametrize("error, status", [
        (APITimeoutError("slow"), 504),
        (RateLimitError("busy"), 429),
        (RuntimeError("boom"), 502),
    ])
    def test_error_status(self, monkeypatch, error, status):
        monkeypatch.setattr(llm, "make_llm", lambda *a, **kw: FakeLLM(error=error))
        with pytest.raises(UpstreamError) as exc:
            llm.chat_completion([], api_key="k")
        assert exc.value.status == status


class TestExtractJson:
    def test_fenced(self):
        assert llm.extract_json('```json\n{"a": 1}\n```') == {"a": 1}

    def test_embedded_object(self):
        assert llm.extract_json('Sure! {"a": [1, 2]} Hope that helps') == {"a": [1, 2]}

    def test_latex_escapes(self):
        assert llm.extract_json('{"q": "Compute \\sqrt{2}"}') == {"q": "Compute \\sqrt{2}"}

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            llm.extract_json("nothing")
