"""Free-text search over a window's sales."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from pos_insights.windows import date_window

if TYPE_CHECKING:
    from pos_insights.config import PosConfig
    from pos_insights.pos.client import LightspeedClient
    from pos_insights.pos.records import Transaction

logger = logging.getLogger(__name__)


def search_sales(transactions: Sequence[Transaction], term: str) -> list[Transaction]:
    """Return sales whose customer name or any line description contains ``term``.

    Matching is case-insensitive. An empty term matches nothing.
    """
    needle = term.strip().casefold()
    if not needle:
        return []

    matches = []
    for sale in transactions:
        if sale.customer is not None and needle in sale.customer.full_name.casefold():
            matches.append(sale)
            continue
        if any(line.description and needle in line.description.casefold() for line in sale.lines):
            matches.append(sale)
    return matches


class SalesSearch:
    """Search recent sales by customer or product."""

    def __init__(self, client: LightspeedClient, config: PosConfig) -> None:
        self.client = client
        self.config = config

    def search(
        self,
        term: str,
        days_ago: int = 0,
        days_span: int = 7,
        now: datetime | None = None,
    ) -> list[Transaction]:
        window = date_window(days_ago, days_span, self.config.timezone, now=now)
        matches = search_sales(self.client.fetch_transactions(window), term)
        logger.info("Search %r over %s: %d match(es)", term, window.label, len(matches))
        return matches
