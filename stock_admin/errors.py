"""Exceptions raised by the stock admin screen and its collaborators."""

from __future__ import annotations

from typing import Optional


class StockAdminError(Exception):
    """Base class for every error the screen converts into user-facing state."""


class TransportFailure(StockAdminError):
    """A fetch/create/update/delete call failed at the network or server."""

    def __init__(self, operation: str, detail: Optional[str] = None) -> None:
        self.operation = operation
        self.detail = detail
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class GuardViolation(StockAdminError):
    """An edit or delete was requested for a record without an identifier."""


class ExportFailure(StockAdminError):
    """Formatting or downloading the CSV export failed."""


class SessionContextError(StockAdminError):
    """The store/user the screen acts for is not configured."""
