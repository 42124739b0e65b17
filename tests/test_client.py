"""Tests for the Lightspeed HTTP client.

The live test is skipped unless LIGHTSPEED_ACCOUNT_ID, LIGHTSPEED_SHOP_ID and
LIGHTSPEED_TOKEN are set.
"""

from __future__ import annotations

import json
import os
from concurrent.futures import ThreadPoolExecutor

import pytest
import requests

from factories import TZ, FakeResponse, FakeSession, make_config, ny
from pos_insights.exceptions import ParseError, UpstreamError
from pos_insights.pos.client import SALE_RELATIONS, LightspeedClient, make_session
from pos_insights.windows import date_window

WINDOW = date_window(0, 1, TZ, now=ny(2024, 7, 4))


def _raw_sale(sale_id: str, total: str = "10.00") -> dict:
    return {"saleID": sale_id, "completeTime": "2024-07-04T10:00:00-04:00", "voided": "false", "calcTotal": total}


def test_make_session_sets_auth_and_retries() -> None:
    session = make_session("tok", timeout=5.0, retries=0)

    assert session.headers["Authorization"] == "Bearer tok"
    assert session.headers["Accept"] == "application/json"
    assert session.get_adapter("https://api.lightspeedapp.com").max_retries.total == 0


def test_session_per_thread() -> None:
    """Each worker thread queries through its own session."""
    client = LightspeedClient(make_config())

    with ThreadPoolExecutor(max_workers=1) as executor:
        worker_session = executor.submit(lambda: client.session).result()

    assert client.session is client.session
    assert worker_session is not client.session
    assert worker_session.headers["Authorization"] == "Bearer test-token"


def test_injected_session_is_shared() -> None:
    session = FakeSession([])
    client = LightspeedClient(make_config(), session=session)

    with ThreadPoolExecutor(max_workers=1) as executor:
        assert executor.submit(lambda: client.session).result() is session


def test_fetch_transactions_builds_query() -> None:
    """Window, shop, relations and paging params are sent on Sale.json."""
    session = FakeSession([FakeResponse({"@attributes": {"count": "1"}, "Sale": _raw_sale("1")})])
    client = LightspeedClient(make_config(), session=session)

    sales = client.fetch_transactions(WINDOW)

    assert [s.sale_id for s in sales] == ["1"]
    (call,) = session.calls
    assert call["url"] == "https://api.example.test/API/Account/123/Sale.json"
    params = call["params"]
    assert params["completeTime"] == WINDOW.range_filter()
    assert params["completed"] == "true"
    assert params["shopID"] == "1"
    assert json.loads(params["load_relations"]) == SALE_RELATIONS
    assert params["offset"] == 0


def test_fetch_transactions_shop_override() -> None:
    session = FakeSession([FakeResponse({"Sale": []})])
    LightspeedClient(make_config(), session=session).fetch_transactions(WINDOW, shop_id="9")

    assert session.calls[0]["params"]["shopID"] == "9"


def test_fetch_transactions_follows_pagination() -> None:
    """Pages are requested until @attributes.count records have been read."""
    session = FakeSession(
        [
            FakeResponse({"@attributes": {"count": "3", "offset": "0"}, "Sale": [_raw_sale("1"), _raw_sale("2")]}),
            FakeResponse({"@attributes": {"count": "3", "offset": "2"}, "Sale": _raw_sale("3")}),
        ]
    )
    client = LightspeedClient(make_config(page_limit=2), session=session)

    sales = client.fetch_transactions(WINDOW)

    assert [s.sale_id for s in sales] == ["1", "2", "3"]
    assert [c["params"]["offset"] for c in session.calls] == [0, 2]
    assert all(c["params"]["limit"] == 2 for c in session.calls)


def test_fetch_transactions_empty_window() -> None:
    session = FakeSession([FakeResponse({"@attributes": {"count": "0"}})])

    assert LightspeedClient(make_config(), session=session).fetch_transactions(WINDOW) == []
    assert len(session.calls) == 1


def test_http_error_raises_upstream_error() -> None:
    session = FakeSession([FakeResponse({}, status_code=401, text="Unauthorized")])
    client = LightspeedClient(make_config(), session=session)

    with pytest.raises(UpstreamError, match="401"):
        client.fetch_transactions(WINDOW)


@pytest.mark.parametrize("error", [requests.ConnectionError("refused"), requests.Timeout("slow")])
def test_network_failure_raises_upstream_error(error: Exception) -> None:
    client = LightspeedClient(make_config(), session=FakeSession([error]))

    with pytest.raises(UpstreamError):
        client.fetch_transactions(WINDOW)


def test_non_json_body_raises_parse_error() -> None:
    session = FakeSession([FakeResponse(ValueError("no json"))])

    with pytest.raises(ParseError):
        LightspeedClient(make_config(), session=session).query("Sale.json")


def test_non_object_body_raises_parse_error() -> None:
    session = FakeSession([FakeResponse(["not", "an", "object"])])

    with pytest.raises(ParseError, match="list"):
        LightspeedClient(make_config(), session=session).query("Sale.json")


def test_find_customers_and_items() -> None:
    session = FakeSession(
        [
            FakeResponse({"Customer": {"customerID": "4", "firstName": "Jane", "lastName": "Doe"}}),
            FakeResponse({"Item": [{"itemID": "1", "description": "Cold Brew"}]}),
        ]
    )
    client = LightspeedClient(make_config(), session=session)

    customers = client.find_customers("jane")
    items = client.find_items("brew")

    assert [c.full_name for c in customers] == ["Jane Doe"]
    assert items == [{"itemID": "1", "description": "Cold Brew"}]
    assert session.calls[1]["params"]["description"] == "~,%brew%"


@pytest.mark.live
def test_live_fetch_today() -> None:
    """Fetch today's sales from the real API."""
    if not all(os.environ.get(k) for k in ("LIGHTSPEED_ACCOUNT_ID", "LIGHTSPEED_SHOP_ID", "LIGHTSPEED_TOKEN")):
        pytest.skip("Lightspeed credentials not set")

    from pos_insights.config import PosConfig

    config = PosConfig.from_env()
    sales = LightspeedClient(config).fetch_transactions(date_window(0, 1, config.timezone))

    assert isinstance(sales, list)
