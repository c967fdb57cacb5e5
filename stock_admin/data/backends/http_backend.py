"""httpx-backed implementation of the stock API."""

from __future__ import annotations

from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from ..models import StockId, StockPayload, StockRecord
from stock_admin.config import get_config
from stock_admin.errors import TransportFailure
from stock_admin.logging import get_logger

USER_AGENT = "Stock-Admin/0.1"


class HttpStockApi:
    """
    Talks to the stock REST endpoints:

    - GET    /stocks?limit=&offset=
    - POST   /stocks
    - PUT    /stocks/{id}
    - DELETE /stocks/{id}

    A fresh AsyncClient is opened per call; the timeout is the only one applied
    to a request.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        config = get_config()
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.api_timeout_seconds
        self._transport = transport
        self.logger = get_logger(__name__)

    async def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers=headers,
            ) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.logger.warning(f"{operation}: server returned {e.response.status_code}")
            raise TransportFailure(operation, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            self.logger.warning(f"{operation}: {e.__class__.__name__}: {e}")
            raise TransportFailure(operation, str(e) or e.__class__.__name__) from e
        except Exception as e:
            # InvalidURL and friends are not HTTPError subclasses
            self.logger.exception(f"{operation}: unexpected transport error")
            raise TransportFailure(operation, e.__class__.__name__) from e
        return response

    @staticmethod
    def _parse_record(operation: str, response: httpx.Response) -> StockRecord:
        try:
            return StockRecord.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportFailure(operation, "malformed stock record in response") from e

    async def fetch_page(self, limit: int, offset: int) -> List[StockRecord]:
        response = await self._request("fetch", "GET", "/stocks", params={"limit": limit, "offset": offset})
        try:
            body = response.json()
            if not isinstance(body, list):
                raise ValueError("expected a JSON array")
            return [StockRecord.model_validate(item) for item in body]
        except (ValueError, ValidationError) as e:
            raise TransportFailure("fetch", "malformed stock list in response") from e

    async def create(self, payload: StockPayload) -> StockRecord:
        response = await self._request("create", "POST", "/stocks", json=payload.model_dump(mode="json"))
        record = self._parse_record("create", response)
        if record.id is None:
            raise TransportFailure("create", "response did not include an id")
        return record

    async def update(self, stock_id: StockId, payload: StockPayload) -> StockRecord:
        response = await self._request(
            "update", "PUT", f"/stocks/{stock_id}", json=payload.model_dump(mode="json")
        )
        return self._parse_record("update", response)

    async def delete(self, stock_id: StockId) -> None:
        await self._request("delete", "DELETE", f"/stocks/{stock_id}")
