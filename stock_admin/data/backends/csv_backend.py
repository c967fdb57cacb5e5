from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List
from uuid import uuid4

import pandas as pd
from pydantic import ValidationError

from ..models import StockId, StockPayload, StockRecord
from stock_admin.config import get_config
from stock_admin.errors import TransportFailure
from stock_admin.logging import get_logger

STOCKS_FILE = "stocks.csv"
STOCK_COLUMNS = ["id", "name", "price", "quantity", "store_id", "user_id", "created_at", "updated_at"]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CsvStockApi:
    """
    CSV-backed implementation for local development.
    - Loads `stocks.csv` from `data_dir` once at construction.
    - Pages are served newest-first, like the server orders them.
    - Every mutation is written back to the file, ids and timestamps are
      assigned here the way the server would.
    """

    def __init__(self, data_dir: str | Path = None, clock: Callable[[], datetime] = _utc_now) -> None:
        if data_dir is None:
            config = get_config()
            data_dir = config.data_dir

        self.data_dir = Path(data_dir)

        # If the path is relative, make it relative to the repository root
        if not self.data_dir.is_absolute():
            current = Path.cwd()
            repo_root = None

            # Look up the directory tree for pyproject.toml
            for parent in [current] + list(current.parents):
                if (parent / "pyproject.toml").exists():
                    repo_root = parent
                    break

            self.data_dir = (repo_root or current) / self.data_dir

        self.path = self.data_dir / STOCKS_FILE
        self._clock = clock
        self.logger = get_logger(__name__)
        self._frame = self._load_stocks(self.path)

    # ---------- loading / persistence helpers ----------

    @staticmethod
    def _load_stocks(path: Path) -> pd.DataFrame:
        if not path.exists():
            raise FileNotFoundError(
                f"Stock file not found: {path}\n"
                f"Please either:\n"
                f"  1. Generate sample data: python -m stock_admin.seed_data\n"
                f"  2. Set DATA_DIR environment variable to point to your data directory\n"
                f"  3. Create a .env file with DATA_DIR=/path/to/your/data"
            )

        try:
            # Everything as text; pydantic does the typing when rows leave the backend
            frame = pd.read_csv(path, dtype=str, keep_default_na=False)
        except Exception as e:
            raise RuntimeError(
                f"Error reading {path}: {e}\n"
                f"Please check that the CSV file is valid and readable."
            ) from e

        missing = [c for c in STOCK_COLUMNS if c not in frame.columns]
        if missing:
            raise RuntimeError(f"{path} is missing columns: {', '.join(missing)}")
        return frame[STOCK_COLUMNS].copy()

    def _save(self, operation: str, frame: pd.DataFrame) -> None:
        """Write `frame` to disk, then make it the served frame."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            frame.to_csv(self.path, index=False)
        except OSError as e:
            self.logger.error(f"{operation}: could not write {self.path}: {e}")
            raise TransportFailure(operation, f"could not write {self.path.name}") from e
        self._frame = frame

    @staticmethod
    def _to_record(row: Dict[str, str]) -> StockRecord:
        return StockRecord.model_validate({k: (v if v != "" else None) for k, v in row.items()})

    def _row_index(self, operation: str, stock_id: StockId) -> int:
        matches = self._frame.index[self._frame["id"] == str(stock_id)]
        if len(matches) == 0:
            raise TransportFailure(operation, f"stock not found: {stock_id}")
        return matches[0]

    @staticmethod
    def _payload_row(payload: StockPayload) -> Dict[str, str]:
        return {
            "name": payload.name,
            "price": str(payload.price),
            "quantity": str(payload.quantity),
            "store_id": payload.store_id,
            "user_id": payload.user_id,
        }

    # ---------- interface implementation ----------

    async def fetch_page(self, limit: int, offset: int) -> List[StockRecord]:
        ordered = self._frame.sort_values("created_at", ascending=False, kind="stable")
        window = ordered.iloc[offset:offset + limit]
        try:
            return [self._to_record(row) for row in window.to_dict(orient="records")]
        except ValidationError as e:
            raise TransportFailure("fetch", f"invalid row in {self.path.name}") from e

    async def create(self, payload: StockPayload) -> StockRecord:
        now = self._clock().isoformat()
        row = {"id": uuid4().hex[:10], **self._payload_row(payload), "created_at": now, "updated_at": now}
        frame = pd.concat([self._frame, pd.DataFrame([row], columns=STOCK_COLUMNS)], ignore_index=True)
        self._save("create", frame)
        self.logger.debug(f"Created stock {row['id']}")
        return self._to_record(row)

    async def update(self, stock_id: StockId, payload: StockPayload) -> StockRecord:
        idx = self._row_index("update", stock_id)
        changes = {**self._payload_row(payload), "updated_at": self._clock().isoformat()}
        frame = self._frame.copy()
        for column, value in changes.items():
            frame.at[idx, column] = value
        self._save("update", frame)
        self.logger.debug(f"Updated stock {stock_id}")
        return self._to_record(frame.loc[idx].to_dict())

    async def delete(self, stock_id: StockId) -> None:
        idx = self._row_index("delete", stock_id)
        self._save("delete", self._frame.drop(index=idx).reset_index(drop=True))
        self.logger.debug(f"Deleted stock {stock_id}")
