from __future__ import annotations

from typing import List, Protocol

from .models import StockId, StockPayload, StockRecord


class StockApi(Protocol):
    """
    Backend-agnostic contract for the stock screen.

    - Implementations never cache: every call goes to the underlying source.
    - Failures are raised as `stock_admin.errors.TransportFailure`.
    """

    async def fetch_page(self, limit: int, offset: int) -> List[StockRecord]:
        """Fetch one page of stock records in server order."""
        ...

    async def create(self, payload: StockPayload) -> StockRecord:
        """Create a stock record; the returned record carries its new id."""
        ...

    async def update(self, stock_id: StockId, payload: StockPayload) -> StockRecord:
        """Replace the editable fields of an existing stock record."""
        ...

    async def delete(self, stock_id: StockId) -> None:
        """Delete a stock record."""
        ...
