"""Language-model client (Anthropic Messages API).

One request per user turn: a system prompt and a single user message go in,
the first text block comes out. No streaming and no conversation memory.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import requests

from pos_insights.exceptions import ConfigurationError, ParseError, UpstreamError

if TYPE_CHECKING:
    from pos_insights.config import AssistantConfig

logger = logging.getLogger(__name__)

MESSAGES_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"


class AnthropicClient:
    """Minimal client for the Messages endpoint."""

    def __init__(
        self,
        config: AssistantConfig,
        session: requests.Session | None = None,
        url: str = MESSAGES_URL,
    ) -> None:
        self.config = config
        self.url = url
        self.session = session or requests.Session()

    def complete(self, system: str, prompt: str) -> str:
        """Send one prompt and return the model's text reply.

        Args:
            system: System prompt.
            prompt: User message.

        Returns:
            Text of the first text content block.

        Raises:
            ConfigurationError: If no API key is configured.
            UpstreamError: On network failure, timeout or non-2xx status.
            ParseError: If the reply has no text content.

        """
        if not self.config.api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is not set")

        payload: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self.config.api_key,
            "anthropic-version": API_VERSION,
            "content-type": "application/json",
        }

        logger.debug("Sending prompt to %s (%d chars)", self.config.model, len(prompt))
        try:
            resp = self.session.post(self.url, json=payload, headers=headers, timeout=self.config.timeout)
        except requests.Timeout as e:
            raise UpstreamError("Language model API timed out") from e
        except requests.RequestException as e:
            raise UpstreamError(f"Language model API unreachable: {e}") from e

        if not (200 <= resp.status_code < 300):
            raise UpstreamError(f"Language model API error. HTTP {resp.status_code}: {resp.text[:400]}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ParseError("Language model API returned non-JSON body") from e

        content = data.get("content") if isinstance(data, dict) else None
        for block in content or []:
            if isinstance(block, dict) and block.get("type") == "text" and block.get("text"):
                return str(block["text"])
        raise ParseError("Language model reply contained no text")
