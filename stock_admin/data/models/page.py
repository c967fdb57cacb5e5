from __future__ import annotations

from pydantic import BaseModel, Field


class PageRequest(BaseModel):
    """Server-side pagination window for the stock list."""
    limit: int = Field(gt=0, description="Maximum number of records to return")
    offset: int = Field(ge=0, description="Number of records to skip")

    @classmethod
    def for_page(cls, page_index: int, page_size: int) -> "PageRequest":
        return cls(limit=page_size, offset=page_index * page_size)
