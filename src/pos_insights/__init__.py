"""POS Insights - live point-of-sale metrics for a chat assistant.

This package answers business questions from chat with figures computed
fresh from the Lightspeed Retail API:

- **pos**: Lightspeed client and sale record normalization
- **sales**: metrics aggregation, period comparison, top products, search
- **assistant**: keyword routing, prompt building, language model, chat handlers
- **windows**: business-timezone date windows
- **channels**: delivery-platform channel classification

Module Structure:
    pos_insights.config: PosConfig / AssistantConfig
    pos_insights.pos: LightspeedClient, Transaction, LineItem
    pos_insights.sales: SalesAggregator, Comparator, TopProductsRanker
    pos_insights.assistant: Assistant, QueryRouter
    pos_insights.health: status endpoint
    pos_insights.cli: command-line entry point

Quick Start:
    >>> from pos_insights import PosConfig
    >>> from pos_insights.pos import LightspeedClient
    >>> from pos_insights.sales import Comparator, SalesAggregator
    >>>
    >>> config = PosConfig.from_env()
    >>> client = LightspeedClient(config)
    >>>
    >>> today = SalesAggregator(client, config).metrics_for(0, 1)
    >>> print(today.total_revenue, today.peak_hour)
    >>>
    >>> result = Comparator(client, config).compare("daily")
    >>> print(result.deltas.revenue_pct)
"""

__version__ = "0.1.0"

from pos_insights.config import AssistantConfig, PosConfig, load_pos_config
from pos_insights.exceptions import (
    ConfigurationError,
    InsightsError,
    ParseError,
    UpstreamError,
)

__all__ = [
    "AssistantConfig",
    "ConfigurationError",
    "InsightsError",
    "ParseError",
    "PosConfig",
    "UpstreamError",
    "__version__",
    "load_pos_config",
]
