"""Health check endpoint for process monitoring.

Passive status only: no POS or language-model calls are made.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI

from pos_insights import __version__


def create_app(started_at: float | None = None) -> FastAPI:
    """Create the FastAPI app serving ``GET /health``.

    Args:
        started_at: ``time.monotonic()`` value the uptime is measured from;
            defaults to the moment the app is created.

    """
    start = time.monotonic() if started_at is None else started_at
    app = FastAPI(title="POS Insights", version=__version__)

    @app.get("/health", summary="Health check")
    async def health() -> dict[str, Any]:
        """Report process uptime and the current UTC time."""
        return {
            "status": "ok",
            "uptime": round(time.monotonic() - start, 3),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app
