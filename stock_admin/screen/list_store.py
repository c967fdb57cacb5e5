"""Current page of stock records, backed by the stock API."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from stock_admin.config import get_config
from stock_admin.data.interface import StockApi
from stock_admin.data.models import PageRequest, StockRecord
from stock_admin.errors import TransportFailure
from stock_admin.logging import get_logger

FETCH_ERROR_MESSAGE = "在庫データの取得中にエラーが発生しました。"


@dataclass(frozen=True)
class PageState:
    page_index: int = 0
    page_size: int = 10
    records: Tuple[StockRecord, ...] = field(default_factory=tuple)
    is_loading: bool = False
    error: Optional[str] = None

    @property
    def request(self) -> PageRequest:
        return PageRequest.for_page(self.page_index, self.page_size)

    @property
    def has_next_page(self) -> bool:
        # The total is not tracked; a full page means there may be more
        return len(self.records) == self.page_size


class ListStore:
    """
    Holds the page window and the records the server returned for it.

    Every load is a fresh round-trip. Each request is numbered and a response
    that arrives after a newer request was issued is dropped, so the latest
    request always wins.
    """

    def __init__(
        self,
        api: StockApi,
        page_size: Optional[int] = None,
        page_size_options: Optional[Sequence[int]] = None,
    ) -> None:
        config = get_config()
        self.api = api
        self.page_size_options: List[int] = list(page_size_options or config.page_size_options)
        self.state = PageState(page_size=page_size or config.default_page_size)
        self.logger = get_logger(__name__)
        self._sequence = 0

    @property
    def records(self) -> Tuple[StockRecord, ...]:
        return self.state.records

    async def load(self) -> None:
        self._sequence += 1
        sequence = self._sequence
        request = self.state.request
        self.state = replace(self.state, is_loading=True, error=None)
        self.logger.debug(f"Fetching stocks limit={request.limit} offset={request.offset} (#{sequence})")
        try:
            records = await self.api.fetch_page(request.limit, request.offset)
        except Exception as e:
            if sequence != self._sequence:
                return
            if isinstance(e, TransportFailure):
                self.logger.error(f"Stock list fetch failed: {e}")
            else:
                self.logger.opt(exception=e).error(f"Stock list fetch failed unexpectedly: {e!r}")
            self.state = replace(self.state, records=(), is_loading=False, error=FETCH_ERROR_MESSAGE)
            return
        if sequence != self._sequence:
            self.logger.debug(f"Discarding stale stock page #{sequence}")
            return
        self.state = replace(self.state, records=tuple(records), is_loading=False, error=None)
        self.logger.debug(f"Loaded {len(records)} stocks (#{sequence})")

    async def refetch(self) -> None:
        """Re-issue the current page request."""
        await self.load()

    async def set_page(self, index: int) -> None:
        if index < 0:
            raise ValueError(f"Page index must be >= 0, got {index}")
        self.state = replace(self.state, page_index=index)
        await self.load()

    async def set_page_size(self, size: int) -> None:
        if size <= 0:
            raise ValueError(f"Page size must be > 0, got {size}")
        # The old index may point past the end for the new size
        self.state = replace(self.state, page_index=0, page_size=size)
        await self.load()

    def reset_to_first_page(self) -> None:
        """Move back to page 0 without fetching; the caller refetches."""
        self.state = replace(self.state, page_index=0)
