"""Period-over-period comparison of sales metrics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from pos_insights.sales.metrics import SalesAggregator, SalesMetrics

if TYPE_CHECKING:
    from pos_insights.config import PosConfig
    from pos_insights.pos.client import LightspeedClient

logger = logging.getLogger(__name__)

# Window length in days per comparison period. Monthly uses fixed 30-day
# buckets, not calendar months.
PERIOD_DAYS = {
    "daily": 1,
    "weekly": 7,
    "monthly": 30,
}


@dataclass(frozen=True)
class SalesDeltas:
    """Changes from the previous window to the current one.

    Attributes:
        revenue_pct: Percentage change in total revenue.
        transactions_pct: Percentage change in transaction count.
        avg_sale_abs: Absolute change in average sale amount.
    """

    revenue_pct: float
    transactions_pct: float
    avg_sale_abs: float


@dataclass(frozen=True)
class ComparisonResult:
    """Current vs. previous window metrics and their deltas."""

    period: str
    current: SalesMetrics
    previous: SalesMetrics
    deltas: SalesDeltas


def pct_change(current: float, previous: float) -> float:
    """Percentage change from ``previous`` to ``current``; 0 when previous is 0.

    Examples:
        >>> pct_change(150.0, 100.0)
        50.0
        >>> pct_change(10.0, 0.0)
        0.0

    """
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def compare_metrics(current: SalesMetrics, previous: SalesMetrics, period: str = "daily") -> ComparisonResult:
    """Build a ComparisonResult from two already computed summaries."""
    deltas = SalesDeltas(
        revenue_pct=pct_change(current.total_revenue, previous.total_revenue),
        transactions_pct=pct_change(current.transaction_count, previous.transaction_count),
        avg_sale_abs=current.avg_sale - previous.avg_sale,
    )
    return ComparisonResult(period=period, current=current, previous=previous, deltas=deltas)


class Comparator:
    """Compare a window with the equal-length window right before it.

    Example:
        >>> comparator = Comparator(client, config)
        >>> result = comparator.compare("weekly")
        >>> result.deltas.revenue_pct

    """

    def __init__(
        self,
        client: LightspeedClient,
        config: PosConfig,
        aggregator: SalesAggregator | None = None,
    ) -> None:
        self.config = config
        self.aggregator = aggregator or SalesAggregator(client, config)

    def compare(self, period: str = "daily", now: datetime | None = None) -> ComparisonResult:
        """Compare the current period with the previous one.

        Args:
            period: "daily", "weekly" or "monthly".
            now: Reference instant; defaults to the current time.

        Returns:
            ComparisonResult for the two windows.

        Raises:
            ValueError: If period is not one of PERIOD_DAYS.
            UpstreamError: If either POS request fails.

        """
        if period not in PERIOD_DAYS:
            raise ValueError(f"Invalid period '{period}'. Must be one of {sorted(PERIOD_DAYS)}.")

        span = PERIOD_DAYS[period]
        logger.info("Comparing %s windows of %d day(s)", period, span)

        current = self.aggregator.metrics_for(0, span, now=now)
        previous = self.aggregator.metrics_for(span, span, now=now)
        return compare_metrics(current, previous, period)
