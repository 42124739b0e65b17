"""Tests for chat event handlers."""

from __future__ import annotations

from pos_insights.assistant.chat import (
    GREETING,
    handle_command,
    handle_direct_message,
    handle_mention,
    strip_mentions,
)


class RecordingAssistant:
    def __init__(self) -> None:
        self.calls: list[tuple[str, bool]] = []

    def answer(self, text: str, include_context: bool = False, now=None) -> str:
        self.calls.append((text, include_context))
        return f"answer: {text}"

    def sales_summary(self, now=None) -> str:
        return "summary"


def test_strip_mentions() -> None:
    assert strip_mentions("<@U012AB3CD> how are sales?") == "how are sales?"
    assert strip_mentions("<@U1><@U2>") == ""
    assert strip_mentions(None) == ""


def test_mention_answers_with_context() -> None:
    assistant = RecordingAssistant()

    assert handle_mention(assistant, "<@U1> top sellers?") == "answer: top sellers?"
    assert assistant.calls == [("top sellers?", True)]


def test_empty_mention_greets() -> None:
    assistant = RecordingAssistant()

    assert handle_mention(assistant, "<@U1>  ") == GREETING
    assert assistant.calls == []


def test_direct_message_filters() -> None:
    """Subtypes, thread replies and non-DM channels are ignored."""
    assistant = RecordingAssistant()

    assert handle_direct_message(assistant, {"channel_type": "im", "subtype": "bot_message", "text": "x"}) is None
    assert handle_direct_message(assistant, {"channel_type": "im", "thread_ts": "1.2", "text": "x"}) is None
    assert handle_direct_message(assistant, {"channel_type": "channel", "text": "x"}) is None
    assert assistant.calls == []

    assert handle_direct_message(assistant, {"channel_type": "im", "text": " sales? "}) == "answer: sales?"


def test_commands() -> None:
    assistant = RecordingAssistant()

    assert handle_command(assistant, "/sales") == "summary"
    assert handle_command(assistant, "/claude", "compare to yesterday") == "answer: compare to yesterday"
    assert handle_command(assistant, "/ask", "  ") == GREETING
    assert "/refund" in handle_command(assistant, "/refund")
