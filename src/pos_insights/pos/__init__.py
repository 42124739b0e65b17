"""POS access layer.

- **client**: Lightspeed Retail HTTP client (`LightspeedClient`).
- **records**: typed sale records and payload normalization.

Example:
    >>> from pos_insights.config import PosConfig
    >>> from pos_insights.pos import LightspeedClient
    >>> from pos_insights.windows import date_window
    >>>
    >>> config = PosConfig.from_env()
    >>> client = LightspeedClient(config)
    >>> sales = client.fetch_transactions(date_window(0, 1, config.timezone))
"""

from pos_insights.pos.client import LightspeedClient, make_session
from pos_insights.pos.records import Customer, LineItem, Transaction, as_records

__all__ = [
    "Customer",
    "LightspeedClient",
    "LineItem",
    "Transaction",
    "as_records",
    "make_session",
]
