"""The assistant: question in, narrated answer out.

Every error raised below this layer (POS, language model, configuration or
parse failures) is turned into a short user-visible message here; nothing
propagates to the chat process.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pos_insights.assistant.formatters import format_sales_summary
from pos_insights.assistant.llm import AnthropicClient
from pos_insights.assistant.prompts import (
    UNAVAILABLE_NOTE,
    build_system_prompt,
    build_user_prompt,
    is_business_query,
    with_note,
)
from pos_insights.assistant.router import OVERVIEW, QueryRouter, match_requirements
from pos_insights.config import AssistantConfig, PosConfig
from pos_insights.exceptions import InsightsError
from pos_insights.pos.client import LightspeedClient
from pos_insights.windows import business_now

logger = logging.getLogger(__name__)

SALES_UNAVAILABLE = "Sales data unavailable - Lightspeed not configured."


class Assistant:
    """Answer chat questions, enriched with live sales data when available.

    Args:
        config: Language-model and business settings.
        pos_config: Lightspeed settings; None runs without live data.
        llm: Language-model client (defaults to AnthropicClient).
        router: Pre-built router (defaults to one wired from pos_config).

    Example:
        >>> assistant = Assistant(AssistantConfig.from_env(), load_pos_config())
        >>> print(assistant.answer("How are sales today?"))

    """

    def __init__(
        self,
        config: AssistantConfig,
        pos_config: PosConfig | None = None,
        llm: AnthropicClient | None = None,
        router: QueryRouter | None = None,
        client: LightspeedClient | None = None,
    ) -> None:
        self.config = config
        self.pos_config = pos_config
        self.llm = llm or AnthropicClient(config)
        if router is None and pos_config is not None:
            router = QueryRouter.from_config(pos_config, client)
        self.router = router

    @property
    def live_data_enabled(self) -> bool:
        return self.router is not None

    def _now(self, now: datetime | None = None) -> datetime:
        return business_now(self.config.timezone, now)

    def build_prompt(self, text: str, include_context: bool = False, now: datetime | None = None) -> str:
        """Build the user prompt, prefixed with live data when relevant."""
        if self.router is None:
            return with_note(text, UNAVAILABLE_NOTE)
        if not (include_context or is_business_query(text)):
            return text

        logger.info("Detected business query, fetching data")
        requirements = match_requirements(text) or OVERVIEW
        block = self.router.collect(requirements, now=now)
        if block.sections:
            return build_user_prompt(block.text, text)

        reasons = "; ".join(sorted(set(block.failures.values()))) or "no data returned"
        return with_note(text, f"(Note: Could not fetch live data - {reasons})")

    def answer(self, text: str, include_context: bool = False, now: datetime | None = None) -> str:
        """Answer a question with one language-model call.

        Args:
            text: The user's message.
            include_context: Fetch live data even if the message does not look
                like a business question.
            now: Reference instant; defaults to the current time.

        Returns:
            The model's reply, or a short error message.

        """
        try:
            now = self._now(now)
            prompt = self.build_prompt(text, include_context=include_context, now=now)
            system = build_system_prompt(self.config.business_name, now)
            return self.llm.complete(system, prompt)
        except InsightsError as e:
            logger.error("Error answering question: %s", e)
            return f"❌ Error processing your request: {e}"

    def data_block(self, text: str, now: datetime | None = None) -> str:
        """Return the raw data block for a question, without the model."""
        if self.router is None:
            return SALES_UNAVAILABLE
        try:
            return self.router.build_data_block(text, now=self._now(now))
        except InsightsError as e:
            logger.error("Error building data block: %s", e)
            return f"❌ Error fetching sales data: {e}"

    def sales_summary(self, now: datetime | None = None) -> str:
        """Today's sales summary (the /sales command)."""
        if self.router is None:
            return SALES_UNAVAILABLE
        try:
            now = self._now(now)
            metrics = self.router.aggregator.metrics_for(0, 1, now=now)
        except InsightsError as e:
            logger.error("Error fetching sales: %s", e)
            return "Error fetching sales data. Please check Lightspeed connection."
        return format_sales_summary(metrics, now)
