"""Chat-platform event handlers.

Platform-agnostic: each handler takes the event text (or event dict) and
returns the reply text. Acknowledgement, typing indicators and posting the
reply belong to the chat adapter that calls these.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pos_insights.assistant.service import Assistant

logger = logging.getLogger(__name__)

MENTION_RE = re.compile(r"<@[A-Z0-9]+>")

GREETING = "Hi! How can I help you today?"
UNKNOWN_COMMAND = "Unknown command {command}. Try /sales, /ask or /claude."


def strip_mentions(text: str) -> str:
    """Remove user-mention tokens such as ``<@U012AB3CD>``."""
    return MENTION_RE.sub("", text or "").strip()


def handle_mention(assistant: Assistant, text: str) -> str:
    """Reply to a message that mentions the bot."""
    message = strip_mentions(text)
    if not message:
        return GREETING
    logger.info("Mention: %s", message)
    return assistant.answer(message, include_context=True)


def handle_direct_message(assistant: Assistant, event: dict[str, Any]) -> str | None:
    """Reply to a direct message, or return None for events to ignore.

    Bot messages and edits (any subtype), threaded replies and messages
    outside direct-message channels are ignored.
    """
    if event.get("subtype") or event.get("thread_ts"):
        return None
    if event.get("channel_type") != "im":
        return None

    text = (event.get("text") or "").strip()
    if not text:
        return GREETING
    logger.info("DM from %s: %s", event.get("user"), text)
    return assistant.answer(text, include_context=True)


def handle_command(assistant: Assistant, command: str, text: str = "") -> str:
    """Reply to a slash command.

    Supported commands:
        /sales: today's sales summary.
        /ask, /claude: answer the given text with full context.
    """
    name = command.strip().lower()
    if name == "/sales":
        return assistant.sales_summary()
    if name in ("/ask", "/claude"):
        if not text.strip():
            return GREETING
        return assistant.answer(text.strip(), include_context=True)
    return UNKNOWN_COMMAND.format(command=command)
