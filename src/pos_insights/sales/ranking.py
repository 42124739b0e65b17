"""Top products by revenue."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import pandas as pd

from pos_insights.sales.frames import build_line_frame
from pos_insights.windows import DateWindow, date_window

if TYPE_CHECKING:
    from pos_insights.config import PosConfig
    from pos_insights.pos.client import LightspeedClient
    from pos_insights.pos.records import Transaction

logger = logging.getLogger(__name__)

UNKNOWN_DESCRIPTION = "Unknown"


@dataclass(frozen=True)
class ProductRanking:
    """Accumulated sales of one item within a window."""

    item_id: str | None
    description: str
    quantity: float
    revenue: float


def rank_products(transactions: Sequence[Transaction], limit: int = 10) -> list[ProductRanking]:
    """Rank items by revenue across all non-voided sales.

    Unlike the metrics summary, sales are filtered on voided status only, so
    lines of zero-total sales still count toward an item's totals.

    Args:
        transactions: Sales for one window.
        limit: Maximum number of items to return.

    Returns:
        Items sorted by revenue, highest first. Ties keep the order in which
        the items were first seen.

    Raises:
        ValueError: If limit is negative.

    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    lines = build_line_frame(transactions)
    lines = lines[~lines["voided"]]
    if lines.empty or limit == 0:
        return []

    per_item = lines.groupby("item_id", sort=False, dropna=False).agg(
        description=("description", "first"),
        quantity=("quantity", "sum"),
        revenue=("subtotal", "sum"),
    )
    per_item = per_item.sort_values("revenue", ascending=False, kind="stable").head(limit)

    return [
        ProductRanking(
            item_id=None if pd.isna(item_id) else str(item_id),
            description=UNKNOWN_DESCRIPTION if pd.isna(row["description"]) else str(row["description"]),
            quantity=float(row["quantity"]),
            revenue=float(row["revenue"]),
        )
        for item_id, row in per_item.iterrows()
    ]


class TopProductsRanker:
    """Fetch a window's sales and rank its items.

    Example:
        >>> ranker = TopProductsRanker(client, config)
        >>> for p in ranker.top_for(0, 7, limit=5):
        ...     print(p.description, p.revenue)

    """

    def __init__(self, client: LightspeedClient, config: PosConfig) -> None:
        self.client = client
        self.config = config

    def top(self, window: DateWindow, limit: int = 10) -> list[ProductRanking]:
        """Return the top ``limit`` items by revenue in ``window``."""
        transactions = self.client.fetch_transactions(window)
        logger.info("Ranking products for %s", window.label)
        return rank_products(transactions, limit)

    def top_for(
        self,
        days_ago: int = 0,
        days_span: int = 1,
        limit: int = 10,
        now: datetime | None = None,
    ) -> list[ProductRanking]:
        """Return the top items for the window ending ``days_ago`` days back."""
        return self.top(date_window(days_ago, days_span, self.config.timezone, now=now), limit)
