"""Sales domain module.

This module turns the sales of a date window into business metrics:

- **metrics**: `SalesAggregator` / `compute_metrics` -> `SalesMetrics`
  (revenue, cost, profit, margin, counts, averages, channel mix, hourly
  distribution and peak hour).
- **compare**: `Comparator` -> `ComparisonResult` (current vs. previous
  window of equal length: daily, weekly, monthly).
- **ranking**: `TopProductsRanker` / `rank_products` -> `ProductRanking` list.
- **search**: `SalesSearch` / `search_sales` for customer or product text.

Example:
    >>> from pos_insights.config import PosConfig
    >>> from pos_insights.pos import LightspeedClient
    >>> from pos_insights.sales import Comparator, SalesAggregator, TopProductsRanker
    >>>
    >>> config = PosConfig.from_env()
    >>> client = LightspeedClient(config)
    >>>
    >>> today = SalesAggregator(client, config).metrics_for(0, 1)
    >>> weekly = Comparator(client, config).compare("weekly")
    >>> top5 = TopProductsRanker(client, config).top_for(0, 1, limit=5)
"""

from pos_insights.sales.compare import (
    Comparator,
    ComparisonResult,
    SalesDeltas,
    compare_metrics,
    pct_change,
)
from pos_insights.sales.metrics import SalesAggregator, SalesMetrics, compute_metrics
from pos_insights.sales.ranking import ProductRanking, TopProductsRanker, rank_products
from pos_insights.sales.search import SalesSearch, search_sales

__all__ = [
    "Comparator",
    "ComparisonResult",
    "ProductRanking",
    "SalesAggregator",
    "SalesDeltas",
    "SalesMetrics",
    "SalesSearch",
    "TopProductsRanker",
    "compare_metrics",
    "compute_metrics",
    "pct_change",
    "rank_products",
    "search_sales",
]
