"""Seeding helpers for reference currencies.

`seed_currencies` ensures the reference currency rows exist. Existing rows
are left untouched so this can be safely re-run.
"""

from __future__ import annotations
from pathlib import Path
import sqlite3
from typing import Iterable, Mapping

from household_finance.models.constants import SEED_CURRENCIES
from .schema import init_db


def seed_currencies(
    db_path: Path, currencies: Iterable[Mapping[str, object]] | None = None
) -> int:
    """Insert missing currencies and return how many rows were added."""
    init_db(db_path)  # ensure tables exist
    rows = list(currencies) if currencies is not None else SEED_CURRENCIES
    added = 0
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        for currency in rows:
            cur.execute(
                """
                INSERT OR IGNORE INTO currencies (id, name, symbol, decimal_places, is_active)
                VALUES (?, ?, ?, ?, 1)
                """,
                (
                    str(currency["id"]).upper(),
                    currency["name"],
                    currency["symbol"],
                    int(currency.get("decimal_places", 2)),  # type: ignore[arg-type]
                ),
            )
            added += cur.rowcount
        conn.commit()
    return added
