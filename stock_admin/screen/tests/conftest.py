import asyncio
from datetime import datetime

import pytest

from stock_admin.config import set_config_for_test
from stock_admin.data.models import StockRecord
from stock_admin.errors import TransportFailure
from stock_admin.screen.list_store import ListStore
from stock_admin.screen.notifications import NotificationSlot
from stock_admin.screen.orchestrator import CrudOrchestrator
from stock_admin.session import SessionContextProvider


def make_record(stock_id, name="Widget", price=500, quantity=3, **extra):
    values = {
        "id": stock_id,
        "name": name,
        "price": price,
        "quantity": quantity,
        "store_id": "store-1",
        "user_id": "owner-1",
        "created_at": datetime(2026, 1, 1, 9, 30),
        "updated_at": datetime(2026, 1, 2, 18, 5),
    }
    values.update(extra)
    return StockRecord(**values)


class FakeStockApi:
    """Records every call; `fail` names the operations that raise TransportFailure,
    `errors` maps operations to any other exception to raise."""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.calls = []
        self.fail = set()
        self.errors = {}
        self.gate = None

    async def _maybe_fail(self, operation):
        if self.gate is not None:
            await self.gate.wait()
        if operation in self.errors:
            raise self.errors[operation]
        if operation in self.fail:
            raise TransportFailure(operation, "simulated")

    async def fetch_page(self, limit, offset):
        self.calls.append(("fetch", limit, offset))
        await self._maybe_fail("fetch")
        return self.records[offset:offset + limit]

    async def create(self, payload):
        self.calls.append(("create", payload))
        await self._maybe_fail("create")
        return StockRecord(id="new-1", **payload.model_dump())

    async def update(self, stock_id, payload):
        self.calls.append(("update", stock_id, payload))
        await self._maybe_fail("update")
        return StockRecord(id=stock_id, **payload.model_dump())

    async def delete(self, stock_id):
        self.calls.append(("delete", stock_id))
        await self._maybe_fail("delete")

    def mutations(self):
        return [c for c in self.calls if c[0] != "fetch"]

    def fetches(self):
        return [c for c in self.calls if c[0] == "fetch"]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture(autouse=True)
def config(monkeypatch):
    for var in ["SESSION_STORE_ID", "SESSION_USER_ID", "DEFAULT_PAGE_SIZE", "NOTIFICATION_TTL_SECONDS"]:
        monkeypatch.delenv(var, raising=False)
    set_config_for_test(
        session_store_id="store-1",
        session_user_id="user-9",
        default_page_size=10,
        notification_ttl_seconds=4.0,
    )


@pytest.fixture
def records():
    return [make_record(i, name=f"Item {i}") for i in range(1, 26)]


@pytest.fixture
def api(records):
    return FakeStockApi(records)


@pytest.fixture
def list_store(api):
    store = ListStore(api, page_size=10)
    asyncio.run(store.load())
    api.calls.clear()
    return store


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def orchestrator(api, list_store, clock):
    return CrudOrchestrator(
        api,
        list_store,
        session_provider=SessionContextProvider(),
        notifications=NotificationSlot(ttl_seconds=4.0, clock=clock),
    )
