"""Keyword routing from a question to the sales data it needs.

Routing policy lives in RULES, a table of keyword predicates and the data
each one requires. A question is matched against every rule once; several
rules can fire together and each adds its own section to the data block.

Fetching is separate from matching: the data sources behind the matched
requirements are fetched concurrently, each in isolation, so one failing
POS call leaves the other sections intact. The daily comparison is built
from the same "today" fetch that backs the today and channel sections.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pos_insights.assistant.formatters import (
    format_channel_block,
    format_comparison_block,
    format_today_block,
    format_top_products_block,
    format_week_block,
)
from pos_insights.exceptions import InsightsError
from pos_insights.sales.compare import compare_metrics
from pos_insights.sales.metrics import SalesAggregator
from pos_insights.sales.ranking import TopProductsRanker
from pos_insights.windows import business_now

if TYPE_CHECKING:
    from pos_insights.config import PosConfig
    from pos_insights.pos.client import LightspeedClient

logger = logging.getLogger(__name__)

FALLBACK_PROMPT = "I can fetch that data for you! Please specify what you'd like to know."

# Items fetched for the top-products section, and how many are shown
TOP_PRODUCTS_FETCH = 10
TOP_PRODUCTS_SHOWN = 5


class DataRequirement(enum.Enum):
    """A section of the data block; declaration order is render order."""

    TODAY_METRICS = "today_metrics"
    CHANNEL_MIX = "channel_mix"
    DAILY_COMPARISON = "daily_comparison"
    TOP_PRODUCTS = "top_products"
    WEEK_METRICS = "week_metrics"


@dataclass(frozen=True)
class IntentRule:
    """Keyword predicate -> data requirements."""

    name: str
    keywords: tuple[str, ...]
    requirements: frozenset[DataRequirement]

    def matches(self, question: str) -> bool:
        text = question.casefold()
        return any(keyword in text for keyword in self.keywords)


RULES: tuple[IntentRule, ...] = (
    IntentRule("today", ("today",), frozenset({DataRequirement.TODAY_METRICS})),
    IntentRule("compare", ("compare", "yesterday"), frozenset({DataRequirement.DAILY_COMPARISON})),
    IntentRule("top", ("top", "best", "selling"), frozenset({DataRequirement.TOP_PRODUCTS})),
    IntentRule("week", ("week",), frozenset({DataRequirement.WEEK_METRICS})),
    IntentRule("channel", ("channel", "delivery"), frozenset({DataRequirement.CHANNEL_MIX})),
)

# Requirement set used when full context is wanted but no rule fired
OVERVIEW: frozenset[DataRequirement] = frozenset(
    {
        DataRequirement.TODAY_METRICS,
        DataRequirement.CHANNEL_MIX,
        DataRequirement.DAILY_COMPARISON,
        DataRequirement.TOP_PRODUCTS,
    }
)

# Fetches backing each requirement; requirements sharing a source share a fetch
SOURCES: dict[DataRequirement, tuple[str, ...]] = {
    DataRequirement.TODAY_METRICS: ("today",),
    DataRequirement.CHANNEL_MIX: ("today",),
    DataRequirement.DAILY_COMPARISON: ("today", "yesterday"),
    DataRequirement.TOP_PRODUCTS: ("top_products",),
    DataRequirement.WEEK_METRICS: ("week",),
}


def match_requirements(question: str, rules: Iterable[IntentRule] = RULES) -> frozenset[DataRequirement]:
    """Return the union of requirements of every rule the question matches.

    Examples:
        >>> sorted(r.name for r in match_requirements("top sellers this week"))
        ['TOP_PRODUCTS', 'WEEK_METRICS']
        >>> match_requirements("hello")
        frozenset()

    """
    required: set[DataRequirement] = set()
    for rule in rules:
        if rule.matches(question):
            required |= rule.requirements
    return frozenset(required)


@dataclass
class DataBlock:
    """Rendered sections plus the sources that could not be fetched."""

    sections: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return "\n\n".join(self.sections)


class QueryRouter:
    """Fetch and render the data a question asks for.

    Example:
        >>> router = QueryRouter.from_config(config)
        >>> print(router.build_data_block("how are sales today vs yesterday?"))

    """

    def __init__(
        self,
        aggregator: SalesAggregator,
        ranker: TopProductsRanker,
        timezone: str,
        max_workers: int = 4,
    ) -> None:
        self.aggregator = aggregator
        self.ranker = ranker
        self.timezone = timezone
        self.max_workers = max_workers

    @classmethod
    def from_config(cls, config: PosConfig, client: LightspeedClient | None = None) -> QueryRouter:
        """Wire a router and its sales components from one PosConfig."""
        from pos_insights.pos.client import LightspeedClient

        client = client or LightspeedClient(config)
        aggregator = SalesAggregator(client, config)
        return cls(
            aggregator=aggregator,
            ranker=TopProductsRanker(client, config),
            timezone=config.timezone,
        )

    def _fetchers(self, now: datetime) -> dict[str, Callable[[], Any]]:
        return {
            "today": lambda: self.aggregator.metrics_for(0, 1, now=now),
            "week": lambda: self.aggregator.metrics_for(0, 7, now=now),
            "yesterday": lambda: self.aggregator.metrics_for(1, 1, now=now),
            "top_products": lambda: self.ranker.top_for(0, 1, limit=TOP_PRODUCTS_FETCH, now=now),
        }

    def gather(
        self,
        requirements: Iterable[DataRequirement],
        now: datetime | None = None,
    ) -> tuple[dict[str, Any], dict[str, str]]:
        """Fetch every source the requirements need, concurrently.

        Returns:
            (results, failures): results maps source name to its value, or to
            None when that fetch failed; failures maps failed source names to
            a short error description.

        """
        now = business_now(self.timezone, now)
        needed = sorted({source for r in requirements for source in SOURCES[r]})
        if not needed:
            return {}, {}

        fetchers = self._fetchers(now)
        results: dict[str, Any] = {}
        failures: dict[str, str] = {}

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(needed))) as executor:
            futures = {name: executor.submit(fetchers[name]) for name in needed}
            for name, future in futures.items():
                try:
                    results[name] = future.result()
                except InsightsError as e:
                    logger.warning("Fetching %s failed: %s", name, e)
                    results[name] = None
                    failures[name] = str(e)
                except Exception as e:
                    logger.exception("Unexpected error fetching %s", name)
                    results[name] = None
                    failures[name] = f"{type(e).__name__}: {e}"

        return results, failures

    def collect(
        self,
        requirements: Iterable[DataRequirement],
        now: datetime | None = None,
    ) -> DataBlock:
        """Fetch and render the requirements into a DataBlock."""
        now = business_now(self.timezone, now)
        requirements = frozenset(requirements)
        results, failures = self.gather(requirements, now=now)

        block = DataBlock(failures=failures)
        for requirement in DataRequirement:
            if requirement not in requirements:
                continue
            values = [results.get(source) for source in SOURCES[requirement]]
            if any(value is None for value in values):
                continue
            block.sections.append(_render(requirement, values, now))
        return block

    def build_data_block(self, question: str, now: datetime | None = None) -> str:
        """Render the data a question asks for, or the fallback prompt.

        When every matched fetch fails, the failures are reported instead.
        """
        requirements = match_requirements(question)
        if not requirements:
            return FALLBACK_PROMPT

        block = self.collect(requirements, now=now)
        if block.sections:
            return block.text
        reasons = "; ".join(sorted(set(block.failures.values())))
        return f"Could not fetch live sales data: {reasons}"


def _render(requirement: DataRequirement, values: list[Any], now: datetime) -> str:
    value = values[0]
    if requirement is DataRequirement.TODAY_METRICS:
        return format_today_block(value, now)
    if requirement is DataRequirement.CHANNEL_MIX:
        return format_channel_block(value)
    if requirement is DataRequirement.DAILY_COMPARISON:
        today, yesterday = values
        return format_comparison_block(compare_metrics(today, yesterday, "daily"))
    if requirement is DataRequirement.TOP_PRODUCTS:
        return format_top_products_block(value, TOP_PRODUCTS_SHOWN)
    return format_week_block(value)
