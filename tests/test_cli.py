"""Tests for the command-line interface."""

from __future__ import annotations

import json

import pytest

from factories import FakeClient, make_line, make_sale
from pos_insights import cli
from pos_insights.assistant.service import SALES_UNAVAILABLE


@pytest.fixture(autouse=True)
def no_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("LIGHTSPEED_ACCOUNT_ID", "LIGHTSPEED_SHOP_ID", "LIGHTSPEED_TOKEN", "POS_CONFIG_DIR", "BUSINESS_TIMEZONE"):
        monkeypatch.delenv(name, raising=False)


def _with_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIGHTSPEED_ACCOUNT_ID", "123")
    monkeypatch.setenv("LIGHTSPEED_SHOP_ID", "1")
    monkeypatch.setenv("LIGHTSPEED_TOKEN", "tok")
    fake = FakeClient(default=[make_sale(12.0, [make_line(12.0, description="Tea")])])
    monkeypatch.setattr(cli, "LightspeedClient", lambda config: fake)


def test_parser_subcommands() -> None:
    args = cli.build_parser().parse_args(["compare", "--period", "weekly", "--json"])

    assert args.command == "compare"
    assert args.period == "weekly"
    assert args.json is True

    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["compare", "--period", "yearly"])


def test_sales_without_pos(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["sales"]) == 0
    assert SALES_UNAVAILABLE in capsys.readouterr().out


def test_metrics_requires_pos() -> None:
    with pytest.raises(SystemExit):
        cli.main(["metrics"])


def test_metrics_json(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _with_credentials(monkeypatch)

    assert cli.main(["metrics", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["total_revenue"] == 12.0
    assert data["transaction_count"] == 1


def test_top_json(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _with_credentials(monkeypatch)

    assert cli.main(["top", "--days", "7", "--json"]) == 0

    (product,) = json.loads(capsys.readouterr().out)
    assert product["description"] == "Tea"


def test_top_title_names_window(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    """A seven-day ranking is not labelled as today's."""
    _with_credentials(monkeypatch)

    assert cli.main(["top", "--days", "7"]) == 0

    out = capsys.readouterr().out
    assert "🏆 TOP SELLING PRODUCTS LAST 7 DAYS:" in out
    assert "TODAY" not in out


def test_metrics_title_names_window(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _with_credentials(monkeypatch)

    assert cli.main(["metrics", "--days-ago", "1"]) == 0

    assert "📊 PERFORMANCE, YESTERDAY:" in capsys.readouterr().out


def test_lookup(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _with_credentials(monkeypatch)

    assert cli.main(["lookup", "items", "house"]) == 0
    assert cli.main(["lookup", "customers", "doordash"]) == 0

    out = capsys.readouterr().out
    assert "• #55 House Blend" in out
    assert "• #7 Doordash Orders" in out


def test_chat_sales_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["chat", "/sales"]) == 0
    assert SALES_UNAVAILABLE in capsys.readouterr().out


class RecordingAssistant:
    def __init__(self) -> None:
        self.calls: list[tuple[str, bool]] = []

    def answer(self, text: str, include_context: bool = False, now=None) -> str:
        self.calls.append((text, include_context))
        return f"answer: {text}"

    def sales_summary(self, now=None) -> str:
        return "summary"


def test_dispatch_chat_routes_by_shape() -> None:
    """Slash commands, mentions and plain messages reach their handlers."""
    assistant = RecordingAssistant()

    assert cli.dispatch_chat(assistant, "/sales") == "summary"
    assert cli.dispatch_chat(assistant, "/claude compare to yesterday") == "answer: compare to yesterday"
    assert cli.dispatch_chat(assistant, "<@U012AB3CD> top sellers?") == "answer: top sellers?"
    assert cli.dispatch_chat(assistant, "how is the week going") == "answer: how is the week going"
    assert cli.dispatch_chat(assistant, "<@U1>") == "Hi! How can I help you today?"
    assert assistant.calls == [
        ("compare to yesterday", True),
        ("top sellers?", True),
        ("how is the week going", True),
    ]
