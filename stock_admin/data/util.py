from __future__ import annotations

from typing import Literal, Optional

from .backends.csv_backend import CsvStockApi
from .backends.http_backend import HttpStockApi
from .interface import StockApi
from stock_admin.config import get_config


def get_stock_api(kind: Optional[Literal["csv", "http"]] = None) -> StockApi:
    config = get_config()
    kind = kind or config.api_kind
    if kind == "csv":
        # Reads and writes the configured CSV folder
        return CsvStockApi(data_dir=config.data_dir)
    if kind == "http":
        return HttpStockApi(base_url=config.api_base_url, timeout=config.api_timeout_seconds)
    raise ValueError(f"Unknown stock api kind: {kind}")
