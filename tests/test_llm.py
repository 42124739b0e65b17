"""Tests for the language-model client."""

from __future__ import annotations

import pytest
import requests

from factories import FakeResponse, FakeSession
from pos_insights.assistant.llm import API_VERSION, AnthropicClient
from pos_insights.config import AssistantConfig
from pos_insights.exceptions import ConfigurationError, ParseError, UpstreamError

CONFIG = AssistantConfig(api_key="sk-test", model="test-model", max_tokens=256, timeout=5.0)


def test_complete_returns_first_text_block() -> None:
    session = FakeSession(
        [FakeResponse({"content": [{"type": "tool_use"}, {"type": "text", "text": "Hi!"}, {"type": "text", "text": "x"}]})]
    )

    assert AnthropicClient(CONFIG, session=session).complete("system", "prompt") == "Hi!"

    (call,) = session.calls
    assert call["json"]["model"] == "test-model"
    assert call["json"]["max_tokens"] == 256
    assert call["json"]["system"] == "system"
    assert call["json"]["messages"] == [{"role": "user", "content": "prompt"}]
    assert call["headers"]["x-api-key"] == "sk-test"
    assert call["headers"]["anthropic-version"] == API_VERSION
    assert call["timeout"] == 5.0


def test_missing_key() -> None:
    session = FakeSession([])

    with pytest.raises(ConfigurationError):
        AnthropicClient(AssistantConfig(), session=session).complete("s", "p")
    assert session.calls == []


def test_http_error() -> None:
    session = FakeSession([FakeResponse({}, status_code=529, text="overloaded")])

    with pytest.raises(UpstreamError, match="529"):
        AnthropicClient(CONFIG, session=session).complete("s", "p")


def test_timeout() -> None:
    with pytest.raises(UpstreamError, match="timed out"):
        AnthropicClient(CONFIG, session=FakeSession([requests.Timeout()])).complete("s", "p")


@pytest.mark.parametrize("payload", [{"content": []}, {"content": [{"type": "text", "text": ""}]}, ["x"], ValueError()])
def test_reply_without_text(payload: object) -> None:
    with pytest.raises(ParseError):
        AnthropicClient(CONFIG, session=FakeSession([FakeResponse(payload)])).complete("s", "p")
