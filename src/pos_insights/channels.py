"""Sales channel classification.

Lightspeed has no authoritative channel field for delivery orders. Stores
that take orders through delivery platforms ring them up against a
placeholder customer named after the platform ("DoorDash Orders",
"Uber Eats", ...), so the channel is inferred from the customer name.
This is a heuristic: a sale with no customer, or a customer whose name
does not mention a known platform, is counted as "In-Store".

The platform table can be extended without code changes by pointing
POS_CHANNELS_JSON at a JSON file. Two shapes are accepted:

    {
      "DoorDash": "doordash",
      "Caviar": ["caviar", "cav order"]
    }

Entries are evaluated in file order and the first matching channel wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from pos_insights.pos.records import Customer

logger = logging.getLogger(__name__)

IN_STORE = "In-Store"

DEFAULT_CHANNELS: dict[str, tuple[str, ...]] = {
    "UberEats": ("ubereats", "uber eats"),
    "DoorDash": ("doordash",),
    "GrubHub": ("grubhub",),
    "CityHive": ("cityhive",),
}


def load_channel_map(path: str | Path | None) -> dict[str, tuple[str, ...]]:
    """Load the channel pattern table from a JSON file.

    Falls back to DEFAULT_CHANNELS when no path is given, the file does not
    exist, or it cannot be parsed.

    Args:
        path: Path to the channels JSON file, or None.

    Returns:
        Ordered mapping of channel name to case-folded substring patterns.

    """
    if not path or not Path(path).exists():
        return dict(DEFAULT_CHANNELS)

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("channels file must be a JSON object mapping name -> patterns")

        mapping: dict[str, tuple[str, ...]] = {}
        for name, patterns in raw.items():
            if isinstance(patterns, str):
                patterns = [patterns]
            elif not isinstance(patterns, list):
                raise ValueError(
                    f"Entry {name!r} has unsupported type {type(patterns).__name__} "
                    f"(expected string or list of strings)"
                )
            cleaned = tuple(str(p).strip().casefold() for p in patterns if str(p).strip())
            if cleaned:
                mapping[str(name)] = cleaned
        return mapping

    except (ValueError, json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load channels file (%s): %s", path, e)

    return dict(DEFAULT_CHANNELS)


class ChannelClassifier:
    """Classify sales into channels by matching the customer name.

    Example:
        >>> classifier = ChannelClassifier()
        >>> classifier.classify_name("DoorDash", "Orders")
        'DoorDash'
        >>> classifier.classify(None)
        'In-Store'

    """

    def __init__(self, channels: Mapping[str, tuple[str, ...]] | None = None) -> None:
        self.channels = dict(channels) if channels is not None else dict(DEFAULT_CHANNELS)

    def classify_name(self, first_name: str | None, last_name: str | None) -> str:
        """Return the channel for a customer's first and last name."""
        full_name = f"{first_name or ''} {last_name or ''}".strip().casefold()
        if not full_name:
            return IN_STORE
        for channel, patterns in self.channels.items():
            if any(pattern in full_name for pattern in patterns):
                return channel
        return IN_STORE

    def classify(self, customer: Customer | None) -> str:
        """Return the channel for a sale's customer (None means walk-in)."""
        if customer is None:
            return IN_STORE
        return self.classify_name(customer.first_name, customer.last_name)
