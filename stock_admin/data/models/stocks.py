from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

PRICE_MAX = 99_999_999
QUANTITY_MAX = 999_999
NAME_MAX_LENGTH = 100

StockId = Union[int, str]


class StockRecord(BaseModel):
    """Stock record as returned by the server. Every field may be absent on the wire."""
    model_config = ConfigDict(frozen=True)

    id: Optional[StockId] = Field(default=None, description="Server-assigned identifier, absent before creation")
    name: Optional[str] = Field(default=None, description="Product name")
    price: Optional[Union[int, float]] = Field(default=None, description="Unit price in yen")
    quantity: Optional[int] = Field(default=None, description="Units in stock")
    store_id: Optional[str] = Field(default=None, description="Owning store")
    user_id: Optional[str] = Field(default=None, description="User who registered the stock")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")


class StockPayload(BaseModel):
    """Request body for creating or updating a stock record."""
    name: str = Field(description="Product name")
    price: Union[int, float] = Field(description="Unit price in yen")
    quantity: int = Field(description="Units in stock")
    store_id: str = Field(description="Owning store")
    user_id: str = Field(description="User who registered the stock")
