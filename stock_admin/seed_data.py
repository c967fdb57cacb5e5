#!/usr/bin/env python3
"""
seed_data.py

Generates fake stock records to `stocks.csv` under a local folder (default: sample_data),
in the layout the CSV stock backend reads.

Run:
  python -m stock_admin.seed_data --count 40
"""

from __future__ import annotations
import argparse
import csv
import os
import random
import string
import sys
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from stock_admin.config import get_config
from stock_admin.data.backends.csv_backend import STOCK_COLUMNS, STOCKS_FILE

# -----------------------------
# Catalog building blocks
# -----------------------------

CATEGORIES = {
    "Beverages": (["Green Tea", "Cold Brew", "Sparkling Water", "Barley Tea"], (120, 480)),
    "Snacks": (["Rice Crackers", "Potato Chips", "Chocolate Bar", "Dried Mango"], (98, 398)),
    "Household": (["Dish Soap", "Paper Towels", "Trash Bags", "Sponge Set"], (198, 898)),
    "Stationery": (["Gel Pen", "Notebook A5", "Sticky Notes", "Stapler"], (110, 1980)),
}

STORE_IDS = ["store-001", "store-002"]
USER_IDS = ["user-001", "user-002", "user-003"]


# -----------------------------
# Utility functions
# -----------------------------

def ensure_dir(path: str) -> None:
    if not os.path.exists(path):
        os.makedirs(path, exist_ok=True)

def rand_code() -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=10))

def price_round(p: float) -> int:
    # Shelf prices end in 0 or 8
    p = int(p)
    return max(p - p % 10 + random.choice([0, 8]), 0)


# -----------------------------
# Core generator
# -----------------------------

def gen_stocks(n: int, end_ts: datetime) -> List[Dict]:
    stocks = []
    for _ in range(n):
        category = random.choice(list(CATEGORIES))
        names, (low, high) = CATEGORIES[category]
        created = end_ts - timedelta(minutes=random.randint(60, 60 * 24 * 60))
        updated = created + timedelta(minutes=random.randint(0, int((end_ts - created).total_seconds() // 60)))
        stocks.append({
            "id": rand_code(),
            "name": f"{random.choice(names)} {random.randint(1, 99):02d}",
            "price": price_round(random.uniform(low, high)),
            "quantity": random.choice([0, random.randint(1, 50), random.randint(50, 2000)]),
            "store_id": random.choice(STORE_IDS),
            "user_id": random.choice(USER_IDS),
            "created_at": created.isoformat(timespec="seconds"),
            "updated_at": updated.isoformat(timespec="seconds"),
        })
    return stocks

def write_csv(path: str, rows: List[Dict], headers: List[str]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=headers)
        w.writeheader()
        for r in rows:
            w.writerow(r)


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()

    parser = argparse.ArgumentParser(description="Generate fake stock records to a CSV.")
    parser.add_argument("--count", type=int, default=config.default_seed_count, help="Number of stock records.")
    parser.add_argument("--output-dir", type=str, default=config.data_dir)
    parser.add_argument("--seed", type=int, default=config.default_seed_value)
    parser.add_argument("--no-overwrite", action="store_true", help="Fail if stocks.csv already exists.")
    args = parser.parse_args(argv)

    if args.count < 0:
        print("--count must be >= 0", file=sys.stderr)
        return 2

    random.seed(args.seed)

    outdir = args.output_dir
    ensure_dir(outdir)
    path = os.path.join(outdir, STOCKS_FILE)
    if args.no_overwrite and os.path.exists(path):
        print(f"Refusing to overwrite existing file: {path}", file=sys.stderr)
        return 2

    stocks = gen_stocks(args.count, datetime.now(timezone.utc).replace(microsecond=0))
    write_csv(path, stocks, STOCK_COLUMNS)

    print(f"Generated {len(stocks)} stocks in {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
