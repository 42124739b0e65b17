"""Sales metrics for a date window.

Turns the sales fetched for one window into a SalesMetrics summary:
revenue, cost, profit and margin, transaction and item counts, averages,
channel mix and the hourly distribution with its peak hour.

A sale is counted when it is not voided and its total is positive. The same
filter applies to its lines, so refunds and zero-total sales contribute to
neither the counts nor the revenue/cost/item totals.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from pos_insights.channels import ChannelClassifier
from pos_insights.sales.frames import build_line_frame, build_sale_frame
from pos_insights.windows import DateWindow, date_window

if TYPE_CHECKING:
    from pos_insights.config import PosConfig
    from pos_insights.pos.client import LightspeedClient
    from pos_insights.pos.records import Transaction

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


@dataclass(frozen=True)
class SalesMetrics:
    """Summary of the counted sales in one window.

    Attributes:
        label: Start date of the window (YYYY-MM-DD).
        total_revenue: Sum of line subtotals.
        total_cost: Sum of unit cost x quantity over lines.
        profit: total_revenue - total_cost.
        profit_margin: Profit as a percentage of revenue; 0 without revenue.
        transaction_count: Number of counted sales.
        total_items: Sum of line quantities.
        avg_sale: Revenue per counted sale.
        avg_items: Items per counted sale.
        channels: Counted sales per channel, in first-seen order.
        hourly: 24 counts, index = business-local hour of completion.
        peak_hour: Earliest hour with the highest count.
    """

    label: str
    total_revenue: float
    total_cost: float
    profit: float
    profit_margin: float
    transaction_count: int
    total_items: float
    avg_sale: float
    avg_items: float
    channels: dict[str, int]
    hourly: tuple[int, ...]
    peak_hour: int


def peak_hour(hourly: Sequence[int]) -> int:
    """Return the first hour holding the maximum count (0 when empty)."""
    if len(hourly) == 0:
        return 0
    return int(np.argmax(np.asarray(hourly)))


def _counted_sales(sales: pd.DataFrame) -> pd.DataFrame:
    return sales[~sales["voided"] & (sales["total"] > 0)]


def compute_metrics(
    transactions: Sequence[Transaction],
    tz: str = "America/New_York",
    label: str = "",
    classifier: ChannelClassifier | None = None,
) -> SalesMetrics:
    """Compute SalesMetrics from a list of transactions.

    Pure function of its arguments; nothing is fetched or cached.

    Args:
        transactions: Sales for one window.
        tz: IANA business timezone for hourly buckets.
        label: Window label carried into the result.
        classifier: Channel classifier; defaults to the built-in table.

    Returns:
        SalesMetrics for the counted sales.

    """
    sales = build_sale_frame(transactions, tz, classifier)
    lines = build_line_frame(transactions)

    counted = _counted_sales(sales)
    counted_lines = lines[lines["sale_idx"].isin(counted["sale_idx"])]

    total_revenue = float(counted_lines["subtotal"].sum())
    total_cost = float(counted_lines["cost"].sum())
    total_items = float(counted_lines["quantity"].sum())
    transaction_count = int(len(counted))

    profit = total_revenue - total_cost
    profit_margin = (profit / total_revenue) * 100 if total_revenue > 0 else 0.0
    avg_sale = total_revenue / transaction_count if transaction_count > 0 else 0.0
    avg_items = total_items / transaction_count if transaction_count > 0 else 0.0

    channel_counts = counted.groupby("channel", sort=False).size()
    channels = {str(name): int(count) for name, count in channel_counts.items()}

    hours = counted["hour"].dropna().astype(int)
    hourly_series = hours.value_counts().reindex(range(HOURS_PER_DAY), fill_value=0)
    hourly = tuple(int(v) for v in hourly_series.tolist())

    logger.debug(
        "Metrics %s: %d of %d sales counted, revenue=%.2f",
        label,
        transaction_count,
        len(sales),
        total_revenue,
    )

    return SalesMetrics(
        label=label,
        total_revenue=total_revenue,
        total_cost=total_cost,
        profit=profit,
        profit_margin=profit_margin,
        transaction_count=transaction_count,
        total_items=total_items,
        avg_sale=avg_sale,
        avg_items=avg_items,
        channels=channels,
        hourly=hourly,
        peak_hour=peak_hour(hourly),
    )


class SalesAggregator:
    """Fetch a window's sales and summarize them.

    Example:
        >>> config = PosConfig.from_env()
        >>> aggregator = SalesAggregator(LightspeedClient(config), config)
        >>> today = aggregator.metrics_for(0, 1)
        >>> today.total_revenue

    """

    def __init__(
        self,
        client: LightspeedClient,
        config: PosConfig,
        classifier: ChannelClassifier | None = None,
    ) -> None:
        self.client = client
        self.config = config
        self.classifier = classifier or ChannelClassifier(config.channels)

    def window(self, days_ago: int = 0, days_span: int = 1, now: datetime | None = None) -> DateWindow:
        """Build a business-timezone window (see windows.date_window)."""
        return date_window(days_ago, days_span, self.config.timezone, now=now)

    def metrics(self, window: DateWindow) -> SalesMetrics:
        """Fetch and summarize the sales in ``window``.

        Raises:
            UpstreamError: If the POS request fails.
            ParseError: If the POS response is malformed.

        """
        transactions = self.client.fetch_transactions(window)
        logger.info("Computing metrics for %s", window.label)
        return compute_metrics(
            transactions,
            tz=self.config.timezone,
            label=window.label,
            classifier=self.classifier,
        )

    def metrics_for(self, days_ago: int = 0, days_span: int = 1, now: datetime | None = None) -> SalesMetrics:
        """Summarize the window ``days_span`` days long ending ``days_ago`` days back."""
        return self.metrics(self.window(days_ago, days_span, now=now))
