"""Tests for the assistant facade."""

from __future__ import annotations

from factories import FakeClient, make_config, make_line, make_sale, ny
from pos_insights.assistant.prompts import UNAVAILABLE_NOTE
from pos_insights.assistant.router import FALLBACK_PROMPT
from pos_insights.assistant.service import SALES_UNAVAILABLE, Assistant
from pos_insights.config import AssistantConfig
from pos_insights.exceptions import UpstreamError

NOW = ny(2024, 7, 4, 12, 0)
SALES = [make_sale(32.0, [make_line(30.0, unit_cost=10.0, description="Cold Brew")])]


class FakeLLM:
    def __init__(self, reply: str = "Sales look great!", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def complete(self, system: str, prompt: str) -> str:
        self.calls.append((system, prompt))
        if self.error is not None:
            raise self.error
        return self.reply


def _assistant(llm: FakeLLM, client: FakeClient | None = None, with_pos: bool = True) -> Assistant:
    config = AssistantConfig(api_key="sk-test", business_name="Corner Shop")
    pos_config = make_config() if with_pos else None
    return Assistant(config, pos_config, llm=llm, client=client or FakeClient(default=SALES))


def test_business_question_gets_live_data() -> None:
    llm = FakeLLM()

    reply = _assistant(llm).answer("How are sales today?", now=NOW)

    assert reply == "Sales look great!"
    system, prompt = llm.calls[0]
    assert "Corner Shop" in system
    assert "07/04/2024, 12:00:00 PM" in system
    assert prompt.startswith("LIVE BUSINESS DATA:")
    assert "• Revenue: $30.00" in prompt
    assert 'USER QUESTION: "How are sales today?"' in prompt


def test_small_talk_sent_unchanged() -> None:
    llm = FakeLLM()
    client = FakeClient(default=SALES)

    _assistant(llm, client).answer("hello there", now=NOW)

    assert llm.calls[0][1] == "hello there"
    assert client.windows == []


def test_include_context_uses_overview() -> None:
    llm = FakeLLM()

    _assistant(llm).answer("hello there", include_context=True, now=NOW)

    prompt = llm.calls[0][1]
    for title in ("TODAY'S PERFORMANCE", "CHANNEL BREAKDOWN", "COMPARED TO YESTERDAY", "TOP SELLING PRODUCTS"):
        assert title in prompt


def test_without_pos_config_answers_with_note() -> None:
    llm = FakeLLM()
    assistant = _assistant(llm, with_pos=False)

    assert not assistant.live_data_enabled
    assert assistant.answer("How are sales today?", now=NOW) == "Sales look great!"
    assert llm.calls[0][1].endswith(UNAVAILABLE_NOTE)


def test_pos_failure_is_noted_in_prompt() -> None:
    llm = FakeLLM()
    client = FakeClient(error=UpstreamError("Lightspeed API timed out"))

    _assistant(llm, client).answer("sales today?", now=NOW)

    assert "(Note: Could not fetch live data - Lightspeed API timed out)" in llm.calls[0][1]


def test_llm_failure_becomes_error_message() -> None:
    llm = FakeLLM(error=UpstreamError("Language model API timed out"))

    reply = _assistant(llm).answer("hello", now=NOW)

    assert reply == "❌ Error processing your request: Language model API timed out"


def test_missing_api_key_becomes_error_message() -> None:
    assistant = Assistant(AssistantConfig(api_key=None))

    assert assistant.answer("hello", now=NOW) == "❌ Error processing your request: ANTHROPIC_API_KEY is not set"


def test_sales_summary() -> None:
    summary = _assistant(FakeLLM()).sales_summary(now=NOW)

    assert summary.startswith("📊 Today's Sales (as of 12:00 PM):")
    assert "• Profit: $20.00 (66.7% margin)" in summary


def test_sales_summary_degrades() -> None:
    assert _assistant(FakeLLM(), with_pos=False).sales_summary(now=NOW) == SALES_UNAVAILABLE

    failing = _assistant(FakeLLM(), FakeClient(error=UpstreamError("down")))
    assert failing.sales_summary(now=NOW) == "Error fetching sales data. Please check Lightspeed connection."


def test_data_block() -> None:
    assistant = _assistant(FakeLLM())

    assert assistant.data_block("hello", now=NOW) == FALLBACK_PROMPT
    assert "TODAY'S PERFORMANCE" in assistant.data_block("today", now=NOW)
    assert _assistant(FakeLLM(), with_pos=False).data_block("today") == SALES_UNAVAILABLE
