"""CSV export of the currently loaded stock page."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Union

import pandas as pd

from stock_admin.config import get_config
from stock_admin.data.models import StockRecord
from stock_admin.errors import ExportFailure
from stock_admin.logging import get_logger
from .list_store import ListStore

EXPORT_COLUMNS = ["ID", "商品名", "価格", "在庫数", "作成日時", "更新日時"]
EXPORT_ERROR_MESSAGE = "CSV出力中にエラーが発生しました"
TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M"
FILENAME_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

Row = Dict[str, Union[str, int, float]]


class DownloadTarget(Protocol):
    def __call__(self, text: str, filename: str) -> None:
        ...


def format_price(price: Optional[Union[int, float]]) -> str:
    if price is None:
        return ""
    if isinstance(price, float) and price.is_integer():
        price = int(price)
    return f"{price:,}円"


def format_timestamp(ts: Optional[datetime]) -> str:
    if ts is None:
        return ""
    if ts.tzinfo is not None:
        ts = ts.astimezone()
    return ts.strftime(TIMESTAMP_FORMAT)


def format_rows(records: Sequence[StockRecord]) -> List[Row]:
    """One flat row per record; absent values render as empty strings."""
    return [
        {
            "ID": "" if r.id is None else str(r.id),
            "商品名": r.name or "",
            "価格": format_price(r.price),
            "在庫数": "" if r.quantity is None else r.quantity,
            "作成日時": format_timestamp(r.created_at),
            "更新日時": format_timestamp(r.updated_at),
        }
        for r in records
    ]


def serialize_csv(rows: Sequence[Row]) -> str:
    return pd.DataFrame(list(rows), columns=EXPORT_COLUMNS).to_csv(index=False)


def export_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"stocks_{now.strftime(FILENAME_TIMESTAMP_FORMAT)}.csv"


class DirectoryDownload:
    """Writes exports into a directory, BOM-prefixed so spreadsheets detect UTF-8."""

    def __init__(self, directory: Union[str, Path, None] = None) -> None:
        self.directory = Path(directory or get_config().export_dir)
        self.last_path: Optional[Path] = None

    def __call__(self, text: str, filename: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / filename
        try:
            path.write_text(text, encoding="utf-8-sig")
        except OSError as e:
            raise ExportFailure(f"Could not write {path}: {e}") from e
        self.last_path = path


class StockExporter:
    """
    Exports whatever page the list store currently holds.

    Errors are kept in `error` and never reach the CRUD notification slot.
    """

    def __init__(
        self,
        list_store: ListStore,
        download: DownloadTarget,
        serializer: Callable[[Sequence[Row]], str] = serialize_csv,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.list_store = list_store
        self.download = download
        self.serializer = serializer
        self._clock = clock
        self.logger = get_logger(__name__)
        self.is_exporting = False
        self.error: Optional[str] = None

    @property
    def can_export(self) -> bool:
        return not self.is_exporting and len(self.list_store.records) > 0

    def export(self) -> Optional[str]:
        """Serialize the loaded page and hand it to the download target.

        Returns the file name, or None when export is disabled or failed.
        """
        if not self.can_export:
            return None
        self.is_exporting = True
        self.error = None
        try:
            rows = format_rows(self.list_store.records)
            text = self.serializer(rows)
            filename = export_filename(self._clock())
            self.download(text, filename)
        except Exception as e:
            self.logger.exception(f"Stock export failed: {e}")
            self.error = EXPORT_ERROR_MESSAGE
            return None
        finally:
            self.is_exporting = False
        self.logger.info(f"Exported {len(rows)} stocks to {filename}")
        return filename
