import asyncio
import io
from datetime import datetime

import pandas as pd

from conftest import FakeStockApi, make_record
from stock_admin.screen.export import (
    EXPORT_COLUMNS,
    EXPORT_ERROR_MESSAGE,
    DirectoryDownload,
    StockExporter,
    export_filename,
    format_price,
    format_rows,
    format_timestamp,
)
from stock_admin.data.models import StockRecord
from stock_admin.screen.list_store import ListStore

NOW = datetime(2026, 3, 4, 5, 6, 7)


class Downloads:
    def __init__(self, error=None):
        self.files = []
        self.error = error

    def __call__(self, text, filename):
        if self.error:
            raise self.error
        self.files.append((filename, text))


def loaded_store(records):
    store = ListStore(FakeStockApi(records), page_size=10)
    asyncio.run(store.load())
    return store


def test_format_price():
    assert format_price(1234567) == "1,234,567円"
    assert format_price(0) == "0円"
    assert format_price(None) == ""


def test_format_whole_float_price():
    assert format_price(500.0) == "500円"
    assert format_price(1234567.0) == "1,234,567円"
    assert format_price(10.5) == "10.5円"


def test_format_timestamp():
    assert format_timestamp(datetime(2026, 1, 2, 3, 4, 59)) == "2026/01/02 03:04"
    assert format_timestamp(None) == ""


def test_export_filename():
    assert export_filename(NOW) == "stocks_20260304_050607.csv"


def test_missing_created_at_renders_empty():
    """Two records, one without a creation time."""
    rows = format_rows([
        make_record(1, price=1500, created_at=None),
        make_record(2, price=20),
    ])
    assert rows[0]["作成日時"] == ""
    assert rows[0]["価格"] == "1,500円"
    assert rows[1]["作成日時"] == "2026/01/01 09:30"
    assert rows[1]["更新日時"] == "2026/01/02 18:05"


def test_missing_fields_never_render_as_null():
    rows = format_rows([StockRecord()])
    assert rows == [{"ID": "", "商品名": "", "価格": "", "在庫数": "", "作成日時": "", "更新日時": ""}]


def test_zero_quantity_is_kept():
    assert format_rows([make_record(1, quantity=0)])[0]["在庫数"] == 0


def test_export_writes_csv():
    downloads = Downloads()
    store = loaded_store([make_record(1, created_at=None), make_record(2)])
    exporter = StockExporter(store, downloads, clock=lambda: NOW)

    assert exporter.export() == "stocks_20260304_050607.csv"
    filename, text = downloads.files[0]
    frame = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    assert list(frame.columns) == EXPORT_COLUMNS
    assert frame["作成日時"].tolist() == ["", "2026/01/01 09:30"]
    assert "undefined" not in text and "None" not in text and "nan" not in text
    assert not exporter.is_exporting
    assert exporter.error is None


def test_export_disabled_without_records():
    downloads = Downloads()
    serialized = []
    exporter = StockExporter(loaded_store([]), downloads, serializer=lambda rows: serialized.append(rows) or "")
    assert not exporter.can_export
    assert exporter.export() is None
    assert serialized == []
    assert downloads.files == []


def test_export_disabled_while_exporting():
    exporter = StockExporter(loaded_store([make_record(1)]), Downloads())
    exporter.is_exporting = True
    assert not exporter.can_export
    assert exporter.export() is None


def test_download_failure_sets_local_error():
    exporter = StockExporter(loaded_store([make_record(1)]), Downloads(error=OSError("disk full")))
    assert exporter.export() is None
    assert exporter.error == EXPORT_ERROR_MESSAGE
    assert not exporter.is_exporting


def test_error_cleared_on_next_success():
    downloads = Downloads(error=OSError("disk full"))
    exporter = StockExporter(loaded_store([make_record(1)]), downloads)
    exporter.export()
    downloads.error = None
    assert exporter.export() is not None
    assert exporter.error is None


def test_directory_download(tmp_path):
    target = DirectoryDownload(tmp_path / "out")
    target("ID\n1\n", "stocks_x.csv")
    assert target.last_path == tmp_path / "out" / "stocks_x.csv"
    assert target.last_path.read_bytes().startswith(b"\xef\xbb\xbf")
