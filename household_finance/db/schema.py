"""Database schema DDL definitions and initialization utilities.

Tables:
  - users: acting identities (authentication itself is external)
  - households / household_members: shared ledgers and who belongs to them
  - currencies: reference data (seeded, read-only to the service)
  - household_currencies: currencies a household opted into, one primary
  - exchange_rates: directed quotes per household, append-only history
  - transactions: income / expense / investment / saving records
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

USERS_DDL = f"""
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

HOUSEHOLDS_DDL = f"""
CREATE TABLE IF NOT EXISTS households (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

HOUSEHOLD_MEMBERS_DDL = f"""
CREATE TABLE IF NOT EXISTS household_members (
    household_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'member' CHECK (role IN ('owner','member')),
    joined_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    PRIMARY KEY (household_id, user_id),
    FOREIGN KEY (household_id) REFERENCES households(id) ON DELETE CASCADE,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

CURRENCIES_DDL = """
CREATE TABLE IF NOT EXISTS currencies (
    id TEXT PRIMARY KEY, -- ISO code, e.g. 'USD'
    name TEXT NOT NULL,
    symbol TEXT NOT NULL,
    decimal_places INTEGER NOT NULL DEFAULT 2,
    is_active INTEGER NOT NULL DEFAULT 1
);
"""

HOUSEHOLD_CURRENCIES_DDL = """
CREATE TABLE IF NOT EXISTS household_currencies (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    household_id TEXT NOT NULL,
    currency_id TEXT NOT NULL,
    is_primary INTEGER NOT NULL DEFAULT 0,
    display_order INTEGER NOT NULL DEFAULT 0,
    UNIQUE(household_id, currency_id),
    FOREIGN KEY (household_id) REFERENCES households(id) ON DELETE CASCADE,
    FOREIGN KEY (currency_id) REFERENCES currencies(id)
);
"""

EXCHANGE_RATES_DDL = f"""
CREATE TABLE IF NOT EXISTS exchange_rates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    household_id TEXT NOT NULL,
    from_currency TEXT NOT NULL,
    to_currency TEXT NOT NULL,
    rate REAL NOT NULL CHECK (rate > 0),
    rate_type TEXT NOT NULL DEFAULT 'manual',
    valid_from TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    is_active INTEGER NOT NULL DEFAULT 1,
    notes TEXT,
    FOREIGN KEY (household_id) REFERENCES households(id) ON DELETE CASCADE,
    FOREIGN KEY (from_currency) REFERENCES currencies(id),
    FOREIGN KEY (to_currency) REFERENCES currencies(id)
);
"""

TRANSACTIONS_DDL = f"""
CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    household_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL CHECK (type IN ('income','expense','investment','saving')),
    amount REAL NOT NULL,
    currency_id TEXT NOT NULL,
    amount_usd REAL NOT NULL DEFAULT 0,
    exchange_rate REAL NOT NULL DEFAULT 1,
    exchange_rate_type TEXT NOT NULL DEFAULT 'manual',
    description TEXT NOT NULL,
    category TEXT NOT NULL,
    date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (household_id) REFERENCES households(id) ON DELETE CASCADE,
    FOREIGN KEY (currency_id) REFERENCES currencies(id)
);
"""

MEMBERS_USER_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_members_user ON household_members(user_id);"
)
RATES_HOUSEHOLD_INDEX_DDL = """
CREATE INDEX IF NOT EXISTS idx_rates_household_active
ON exchange_rates(household_id, is_active, valid_from);
"""
TRANSACTIONS_HOUSEHOLD_INDEX_DDL = """
CREATE INDEX IF NOT EXISTS idx_transactions_household_date
ON transactions(household_id, date);
"""
# At most one primary currency per household
HOUSEHOLD_PRIMARY_INDEX_DDL = """
CREATE UNIQUE INDEX IF NOT EXISTS idx_household_currencies_primary
ON household_currencies(household_id)
WHERE is_primary = 1;
"""

DDL_ORDER: Sequence[str] = (
    USERS_DDL,
    HOUSEHOLDS_DDL,
    HOUSEHOLD_MEMBERS_DDL,
    CURRENCIES_DDL,
    HOUSEHOLD_CURRENCIES_DDL,
    EXCHANGE_RATES_DDL,
    TRANSACTIONS_DDL,
)

INDEX_ORDER: Sequence[str] = (
    MEMBERS_USER_INDEX_DDL,
    RATES_HOUSEHOLD_INDEX_DDL,
    TRANSACTIONS_HOUSEHOLD_INDEX_DDL,
    HOUSEHOLD_PRIMARY_INDEX_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables and indexes idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        for ddl in INDEX_ORDER:
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()
