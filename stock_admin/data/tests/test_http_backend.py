import asyncio
import json

import httpx
import pytest

from stock_admin.data.backends.http_backend import HttpStockApi
from stock_admin.data.models import StockPayload
from stock_admin.errors import TransportFailure

BASE_URL = "https://stocks.test/api"

STOCK = {
    "id": 42,
    "name": "Widget",
    "price": 500,
    "quantity": 3,
    "store_id": "s1",
    "user_id": "u1",
    "created_at": "2026-01-01T09:00:00Z",
    "updated_at": "2026-01-02T09:00:00Z",
}


def make_api(handler):
    return HttpStockApi(base_url=BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))


def payload():
    return StockPayload(name="Widget", price=500, quantity=3, store_id="s1", user_id="u1")


def test_fetch_page_sends_limit_and_offset():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[STOCK, {"name": "Partial"}])

    records = asyncio.run(make_api(handler).fetch_page(limit=10, offset=20))
    assert seen["path"] == "/api/stocks"
    assert seen["params"] == {"limit": "10", "offset": "20"}
    assert records[0].id == 42
    assert records[1].id is None
    assert records[1].created_at is None


def test_create_posts_payload():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=STOCK)

    record = asyncio.run(make_api(handler).create(payload()))
    assert seen["method"] == "POST"
    assert seen["body"] == {"name": "Widget", "price": 500, "quantity": 3, "store_id": "s1", "user_id": "u1"}
    assert record.id == 42


def test_create_without_id_in_response():
    def handler(request):
        return httpx.Response(201, json={"name": "Widget"})

    with pytest.raises(TransportFailure):
        asyncio.run(make_api(handler).create(payload()))


def test_update_puts_to_record_path():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(200, json=STOCK)

    asyncio.run(make_api(handler).update(42, payload()))
    assert seen == {"method": "PUT", "path": "/api/stocks/42"}


def test_delete():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(204)

    assert asyncio.run(make_api(handler).delete(42)) is None
    assert seen == {"method": "DELETE", "path": "/api/stocks/42"}


@pytest.mark.parametrize("status", [400, 404, 500, 503])
def test_error_status_is_transport_failure(status):
    def handler(request):
        return httpx.Response(status, json={"error": "nope"})

    with pytest.raises(TransportFailure) as exc:
        asyncio.run(make_api(handler).delete(42))
    assert exc.value.operation == "delete"
    assert str(status) in str(exc.value)


def test_connection_error_is_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportFailure) as exc:
        asyncio.run(make_api(handler).fetch_page(10, 0))
    assert exc.value.operation == "fetch"


def test_malformed_list_is_transport_failure():
    def handler(request):
        return httpx.Response(200, json={"items": []})

    with pytest.raises(TransportFailure):
        asyncio.run(make_api(handler).fetch_page(10, 0))


def test_non_http_error_is_transport_failure():
    def handler(request):
        raise httpx.InvalidURL("bad url")

    with pytest.raises(TransportFailure) as exc:
        asyncio.run(make_api(handler).create(payload()))
    assert exc.value.operation == "create"
