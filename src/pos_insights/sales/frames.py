"""Fact tables built from fetched sales.

Two grains are produced from one list of transactions:

- **fact_sale** (one row per sale): sale_idx, sale_id, completed_at (UTC),
  voided, total, subtotal, channel, hour (business-local hour of day).
- **fact_sale_line** (one row per sale line): sale_idx, voided, sale_total,
  item_id, description, quantity, subtotal, cost.

``sale_idx`` is the position of the sale in the input list and is the join
key between the two grains (Lightspeed saleIDs are not guaranteed present in
test data or partial payloads).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import pandas as pd

from pos_insights.channels import ChannelClassifier

if TYPE_CHECKING:
    from pos_insights.pos.records import Transaction

SALE_COLUMNS = [
    "sale_idx",
    "sale_id",
    "completed_at",
    "voided",
    "total",
    "subtotal",
    "channel",
    "hour",
]

LINE_COLUMNS = [
    "sale_idx",
    "voided",
    "sale_total",
    "item_id",
    "description",
    "quantity",
    "subtotal",
    "cost",
]


def build_sale_frame(
    transactions: Sequence[Transaction],
    tz: str,
    classifier: ChannelClassifier | None = None,
) -> pd.DataFrame:
    """Build fact_sale from transactions.

    Args:
        transactions: Parsed sales.
        tz: IANA business timezone for the ``hour`` column.
        classifier: Channel classifier; defaults to the built-in platform table.

    Returns:
        DataFrame with SALE_COLUMNS. ``hour`` is a nullable integer that is
        missing when the sale has no completion time.

    """
    classifier = classifier or ChannelClassifier()
    rows = [
        {
            "sale_idx": idx,
            "sale_id": t.sale_id,
            "completed_at": t.completed_at,
            "voided": t.voided,
            "total": t.total,
            "subtotal": t.subtotal,
            "channel": classifier.classify(t.customer),
        }
        for idx, t in enumerate(transactions)
    ]
    df = pd.DataFrame(rows, columns=SALE_COLUMNS[:-1])
    df = df.astype({"voided": bool, "total": float, "subtotal": float})

    completed = pd.to_datetime(df["completed_at"], utc=True)
    df["completed_at"] = completed
    df["hour"] = completed.dt.tz_convert(tz).dt.hour.astype("Int64")
    return df


def build_line_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Build fact_sale_line from transactions.

    Returns:
        DataFrame with LINE_COLUMNS, lines in sale then POS order.

    """
    rows = [
        {
            "sale_idx": idx,
            "voided": t.voided,
            "sale_total": t.total,
            "item_id": line.item_id,
            "description": line.description,
            "quantity": line.quantity,
            "subtotal": line.subtotal,
            "cost": line.cost,
        }
        for idx, t in enumerate(transactions)
        for line in t.lines
    ]
    df = pd.DataFrame(rows, columns=LINE_COLUMNS)
    return df.astype(
        {
            "voided": bool,
            "sale_total": float,
            "quantity": float,
            "subtotal": float,
            "cost": float,
        }
    )
