from .stocks import (
    NAME_MAX_LENGTH,
    PRICE_MAX,
    QUANTITY_MAX,
    StockId,
    StockPayload,
    StockRecord,
)
from .page import PageRequest

__all__ = [
    # Limits
    "NAME_MAX_LENGTH",
    "PRICE_MAX",
    "QUANTITY_MAX",
    # Stock models
    "StockId",
    "StockPayload",
    "StockRecord",
    # Pagination
    "PageRequest",
]
