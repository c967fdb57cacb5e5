import asyncio

from stock_admin.data.backends.csv_backend import CsvStockApi
from stock_admin.seed_data import main


def test_generates_readable_stocks(tmp_path):
    assert main(["--count", "12", "--output-dir", str(tmp_path), "--seed", "7"]) == 0
    api = CsvStockApi(data_dir=tmp_path)
    records = asyncio.run(api.fetch_page(limit=50, offset=0))
    assert len(records) == 12
    assert all(r.id and r.created_at and r.updated_at for r in records)
    assert all(0 <= r.quantity <= 999_999 and 0 <= r.price <= 99_999_999 for r in records)
    created = [r.created_at for r in records]
    assert created == sorted(created, reverse=True)


def test_no_overwrite(tmp_path):
    assert main(["--count", "1", "--output-dir", str(tmp_path)]) == 0
    assert main(["--count", "1", "--output-dir", str(tmp_path), "--no-overwrite"]) == 2


def test_same_seed_same_catalog(tmp_path):
    main(["--count", "5", "--output-dir", str(tmp_path / "a"), "--seed", "3"])
    main(["--count", "5", "--output-dir", str(tmp_path / "b"), "--seed", "3"])
    names = []
    for sub in ("a", "b"):
        names.append(sorted(r.name for r in asyncio.run(CsvStockApi(data_dir=tmp_path / sub).fetch_page(10, 0))))
    assert names[0] == names[1]
