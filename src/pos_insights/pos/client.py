"""Lightspeed Retail HTTP client.

Thin, stateless wrapper around the Lightspeed Retail (R-Series) REST API:
bearer-token GETs against ``{base_url}/{account_id}/{endpoint}``.

Environment (read by PosConfig.from_env, never here):
  LIGHTSPEED_ACCOUNT_ID, LIGHTSPEED_SHOP_ID, LIGHTSPEED_TOKEN
  POS_TIMEOUT=30   # seconds
  POS_RETRIES=0    # single attempt by default

Notes:
- Each call is a single attempt unless retries are configured; failures
  surface as UpstreamError for the caller to report.
- Response bodies are normalized at this boundary: Sale/Item/Customer
  members always come back as lists.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING, Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from pos_insights.exceptions import ParseError, UpstreamError
from pos_insights.pos.records import (
    Customer,
    Transaction,
    as_records,
    parse_customer,
    parse_transaction,
)

if TYPE_CHECKING:
    from pos_insights.config import PosConfig
    from pos_insights.windows import DateWindow

logger = logging.getLogger(__name__)

SALE_RELATIONS = ["SaleLines", "SaleLines.Item", "Customer"]


def make_session(token: str, timeout: float = 30.0, retries: int = 0) -> requests.Session:
    """Create a requests Session with bearer auth, retry policy and default timeout.

    Configures the session with:
    - Authorization and Accept headers
    - Retry adapter for HTTP/HTTPS (no retries unless ``retries`` > 0)
    - Default timeout for all requests
    - Retries on 429, 500, 502, 503, 504 status codes when enabled

    Args:
        token: Lightspeed OAuth access token.
        timeout: Default timeout in seconds for all requests.
        retries: Number of retry attempts after the first request.

    Returns:
        Configured requests.Session object.

    """
    s = requests.Session()
    s.headers.update(
        {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
    )
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.8,  # 0.8, 1.6, 3.2, ...
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    # Default timeouts via a wrapper
    orig_request = s.request

    def timed_request(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return orig_request(method, url, **kwargs)

    s.request = timed_request  # type: ignore[method-assign,assignment]
    return s


def ensure_ok(resp: requests.Response, msg: str) -> None:
    """Raise UpstreamError unless the response status is 2xx."""
    if not (200 <= resp.status_code < 300):
        raise UpstreamError(f"{msg}. HTTP {resp.status_code}: {resp.text[:400]}")


def _attr_int(data: dict[str, Any], name: str) -> int | None:
    attrs = data.get("@attributes")
    if not isinstance(attrs, dict):
        return None
    try:
        return int(attrs[name])
    except (KeyError, TypeError, ValueError):
        return None


class LightspeedClient:
    """Read-only client for the Lightspeed Retail API.

    Example:
        >>> from pos_insights.config import PosConfig
        >>> from pos_insights.windows import date_window
        >>> config = PosConfig.from_env()
        >>> client = LightspeedClient(config)
        >>> sales = client.fetch_transactions(date_window(0, 1, config.timezone))

    """

    def __init__(self, config: PosConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self._shared_session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """Session for the calling thread, created on first use.

        A session passed to the constructor is shared by every thread.
        """
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = make_session(self.config.token, self.config.timeout, self.config.retries)
            self._local.session = session
        return session

    def _url(self, endpoint: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{self.config.account_id}/{endpoint}"

    def query(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Issue one GET and return the decoded JSON object.

        Args:
            endpoint: Resource path relative to the account, e.g. "Sale.json".
            params: Query parameters.

        Returns:
            Decoded response body.

        Raises:
            UpstreamError: On network failure, timeout or non-2xx status.
            ParseError: If the body is not a JSON object.

        """
        url = self._url(endpoint)
        logger.debug("GET %s params=%s", url, params)
        try:
            resp = self.session.get(url, params=params or {})
        except requests.Timeout as e:
            raise UpstreamError(f"Lightspeed API timed out ({endpoint})") from e
        except requests.RequestException as e:
            raise UpstreamError(f"Lightspeed API unreachable ({endpoint}): {e}") from e

        ensure_ok(resp, f"Lightspeed API error ({endpoint})")

        try:
            data = resp.json()
        except ValueError as e:
            raise ParseError(f"Lightspeed API returned non-JSON body ({endpoint})") from e
        if not isinstance(data, dict):
            raise ParseError(
                f"Lightspeed API returned {type(data).__name__} instead of an object ({endpoint})"
            )
        return data

    def fetch_transactions(self, window: DateWindow, shop_id: str | None = None) -> list[Transaction]:
        """Fetch completed sales for a window, with lines, items and customers.

        Follows offset pagination while ``@attributes.count`` says more
        records exist; a response without attributes is read as one page.

        Args:
            window: Date window in the business timezone.
            shop_id: Shop to scope to; defaults to the configured shop.

        Returns:
            Transactions in API order (possibly empty).

        Raises:
            UpstreamError: If any page request fails.
            ParseError: If any page body is malformed.

        """
        params: dict[str, Any] = {
            "completeTime": window.range_filter(),
            "completed": "true",
            "shopID": shop_id or self.config.shop_id,
            "load_relations": json.dumps(SALE_RELATIONS),
            "limit": self.config.page_limit,
            "offset": 0,
        }

        records: list[dict[str, Any]] = []
        while True:
            data = self.query("Sale.json", params)
            page = as_records(data.get("Sale"), "Sale")
            records.extend(page)

            count = _attr_int(data, "count")
            if not page or count is None or len(records) >= count:
                break
            params["offset"] = len(records)

        logger.info("Fetched %d sales for %s (%d day(s))", len(records), window.label, window.days)
        return [parse_transaction(rec) for rec in records]

    def find_items(self, text: str, limit: int = 10) -> list[dict[str, Any]]:
        """Search non-archived items whose description contains ``text``."""
        data = self.query(
            "Item.json",
            {"description": f"~,%{text}%", "archived": "false", "limit": limit},
        )
        return as_records(data.get("Item"), "Item")

    def find_customers(self, text: str, limit: int = 10) -> list[Customer]:
        """Search customers whose first or last name contains ``text``."""
        data = self.query(
            "Customer.json",
            {"or": f"firstName=~,%{text}%|lastName=~,%{text}%", "limit": limit},
        )
        customers = (parse_customer(rec) for rec in as_records(data.get("Customer"), "Customer"))
        return [c for c in customers if c is not None]
