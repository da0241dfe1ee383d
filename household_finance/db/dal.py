"""Data Access Layer for the household finance store.

Responsibilities
----------------
- Provide the row-store contract consumed by the currency ledger
  (list currencies / household currencies / active rates, insert rate).
- Household, membership and user CRUD used by the routers.
- Transaction insert / list / delete scoped to a household.

Every public method opens its own connection; failures from sqlite3 are
re-raised as StoreError (or StoreConflictError for constraint violations)
carrying the driver's message.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
import sqlite3
import uuid
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from household_finance.core.errors import StoreError

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"


class StoreConflictError(StoreError):
    """A uniqueness or foreign-key constraint rejected the write."""


def utc_iso(value: datetime) -> str:
    """Render a datetime the way the schema defaults do (UTC, millis, 'Z')."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Cursor]:
        conn = self._connect()
        try:
            yield conn.cursor()
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise StoreConflictError(str(e)) from e
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Users
    def create_user(self, email: str) -> Dict[str, Any]:
        user_id = str(uuid.uuid4())
        with self._session() as cur:
            cur.execute("INSERT INTO users (id, email) VALUES (?, ?)", (user_id, email))
            cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            return dict(cur.fetchone())

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute("SELECT * FROM users WHERE email = ?", (email,))
            row = cur.fetchone()
            return dict(row) if row else None

    # ------------------------------------------------------------------
    # Households & membership
    def create_household_with_owner(
        self, name: str, user_id: str, currencies: Sequence[str] = ()
    ) -> str:
        """Create a household, register the owner and attach starter currencies.

        The first starter currency that exists in the reference table becomes
        the primary one; unknown codes are skipped.
        """
        household_id = str(uuid.uuid4())
        with self._session() as cur:
            cur.execute(
                "INSERT INTO households (id, name) VALUES (?, ?)",
                (household_id, name),
            )
            cur.execute(
                "INSERT INTO household_members (household_id, user_id, role) VALUES (?, ?, 'owner')",
                (household_id, user_id),
            )
            order = 0
            for code in currencies:
                cur.execute("SELECT 1 FROM currencies WHERE id = ?", (code,))
                if cur.fetchone() is None:
                    continue
                cur.execute(
                    """
                    INSERT INTO household_currencies (household_id, currency_id, is_primary, display_order)
                    VALUES (?, ?, ?, ?)
                    """,
                    (household_id, code, 1 if order == 0 else 0, order),
                )
                order += 1
        return household_id

    def get_household(self, household_id: str) -> Optional[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute("SELECT * FROM households WHERE id = ?", (household_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def list_user_households(self, user_id: str) -> List[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute(
                """
                SELECT h.id, h.name, h.created_at, m.role
                FROM households h
                JOIN household_members m ON m.household_id = h.id
                WHERE m.user_id = ?
                ORDER BY h.created_at ASC, h.id ASC
                """,
                (user_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def get_membership(
        self, household_id: str, user_id: str
    ) -> Optional[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute(
                "SELECT * FROM household_members WHERE household_id = ? AND user_id = ?",
                (household_id, user_id),
            )
            row = cur.fetchone()
            return dict(row) if row else None

    def add_member(
        self, household_id: str, user_id: str, role: str = "member"
    ) -> Dict[str, Any]:
        with self._session() as cur:
            cur.execute(
                "INSERT INTO household_members (household_id, user_id, role) VALUES (?, ?, ?)",
                (household_id, user_id, role),
            )
            cur.execute(
                "SELECT * FROM household_members WHERE household_id = ? AND user_id = ?",
                (household_id, user_id),
            )
            return dict(cur.fetchone())

    def remove_member(self, household_id: str, user_id: str) -> int:
        with self._session() as cur:
            cur.execute(
                "DELETE FROM household_members WHERE household_id = ? AND user_id = ?",
                (household_id, user_id),
            )
            return cur.rowcount

    # ------------------------------------------------------------------
    # Currencies (reference data)
    def list_active_currencies(self) -> List[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute("SELECT * FROM currencies WHERE is_active = 1 ORDER BY id")
            return [dict(r) for r in cur.fetchall()]

    # ------------------------------------------------------------------
    # Household currencies
    def list_household_currencies(self, household_id: str) -> List[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute(
                """
                SELECT * FROM household_currencies
                WHERE household_id = ?
                ORDER BY display_order ASC, id ASC
                """,
                (household_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def add_household_currency(
        self,
        household_id: str,
        currency_id: str,
        is_primary: bool = False,
        display_order: Optional[int] = None,
    ) -> Dict[str, Any]:
        with self._session() as cur:
            if display_order is None:
                cur.execute(
                    "SELECT COALESCE(MAX(display_order) + 1, 0) FROM household_currencies WHERE household_id = ?",
                    (household_id,),
                )
                display_order = int(cur.fetchone()[0])
            if is_primary:
                self._clear_primary(cur, household_id)
            cur.execute(
                """
                INSERT INTO household_currencies (household_id, currency_id, is_primary, display_order)
                VALUES (?, ?, ?, ?)
                """,
                (household_id, currency_id, 1 if is_primary else 0, display_order),
            )
            cur.execute(
                "SELECT * FROM household_currencies WHERE id = ?", (cur.lastrowid,)
            )
            return dict(cur.fetchone())

    def set_primary_currency(self, household_id: str, currency_id: str) -> None:
        """Mark one associated currency primary, clearing the previous one atomically."""
        with self._session() as cur:
            cur.execute(
                "SELECT id FROM household_currencies WHERE household_id = ? AND currency_id = ?",
                (household_id, currency_id),
            )
            row = cur.fetchone()
            if not row:
                raise ValueError(
                    f"Currency {currency_id} is not enabled for this household"
                )
            self._clear_primary(cur, household_id)
            cur.execute(
                "UPDATE household_currencies SET is_primary = 1 WHERE id = ?",
                (row["id"],),
            )

    def _clear_primary(self, cur: sqlite3.Cursor, household_id: str) -> None:
        cur.execute(
            "UPDATE household_currencies SET is_primary = 0 WHERE household_id = ? AND is_primary = 1",
            (household_id,),
        )

    # ------------------------------------------------------------------
    # Exchange rates
    def list_active_rates(self, household_id: str) -> List[Dict[str, Any]]:
        """Active rates, newest first (valid_from desc, then insertion order desc)."""
        with self._session() as cur:
            cur.execute(
                """
                SELECT * FROM exchange_rates
                WHERE household_id = ? AND is_active = 1
                ORDER BY valid_from DESC, id DESC
                """,
                (household_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def insert_rate(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        valid_from = record.get("valid_from")
        if isinstance(valid_from, datetime):
            valid_from = utc_iso(valid_from)
        with self._session() as cur:
            cur.execute(
                f"""
                INSERT INTO exchange_rates
                    (household_id, from_currency, to_currency, rate, rate_type, valid_from, is_active, notes)
                VALUES (?, ?, ?, ?, ?, COALESCE(?, ({UTC_NOW_SQL})), 1, ?)
                """,
                (
                    record["household_id"],
                    record["from_currency"],
                    record["to_currency"],
                    float(record["rate"]),
                    record.get("rate_type", "manual"),
                    valid_from,
                    record.get("notes"),
                ),
            )
            cur.execute("SELECT * FROM exchange_rates WHERE id = ?", (cur.lastrowid,))
            return dict(cur.fetchone())

    def deactivate_rate(self, household_id: str, rate_id: int) -> int:
        with self._session() as cur:
            cur.execute(
                "UPDATE exchange_rates SET is_active = 0 WHERE id = ? AND household_id = ? AND is_active = 1",
                (rate_id, household_id),
            )
            return cur.rowcount

    # ------------------------------------------------------------------
    # Transactions
    def list_transactions(
        self,
        household_id: str,
        type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        clauses = ["household_id = ?"]
        params: List[Any] = [household_id]
        if type:
            clauses.append("type = ?")
            params.append(type)
        if start_date:
            clauses.append("date >= ?")
            params.append(start_date.isoformat())
        if end_date:
            clauses.append("date <= ?")
            params.append(end_date.isoformat())
        where = " WHERE " + " AND ".join(clauses)
        sql = f"SELECT * FROM transactions{where} ORDER BY date DESC, created_at DESC, id DESC"
        with self._session() as cur:
            cur.execute(sql, params)
            return [dict(r) for r in cur.fetchall()]

    def get_transaction(self, transaction_id: int) -> Optional[Dict[str, Any]]:
        with self._session() as cur:
            cur.execute("SELECT * FROM transactions WHERE id = ?", (transaction_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def insert_transaction(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        tx_date = record["date"]
        with self._session() as cur:
            cur.execute(
                f"""
                INSERT INTO transactions
                    (household_id, user_id, type, amount, currency_id, amount_usd,
                     exchange_rate, exchange_rate_type, description, category, date,
                     created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                """,
                (
                    record["household_id"],
                    record["user_id"],
                    record["type"],
                    float(record["amount"]),
                    record["currency_id"],
                    float(record.get("amount_usd", 0.0)),
                    float(record.get("exchange_rate", 1.0)),
                    record.get("exchange_rate_type", "manual"),
                    record["description"],
                    record["category"],
                    tx_date.isoformat() if isinstance(tx_date, date) else tx_date,
                ),
            )
            cur.execute("SELECT * FROM transactions WHERE id = ?", (cur.lastrowid,))
            return dict(cur.fetchone())

    def delete_transaction(
        self,
        transaction_id: int,
        household_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> int:
        """Delete by id, optionally narrowed by household and/or owner; returns rows removed."""
        clauses = ["id = ?"]
        params: List[Any] = [transaction_id]
        if household_id is not None:
            clauses.append("household_id = ?")
            params.append(household_id)
        if user_id is not None:
            clauses.append("user_id = ?")
            params.append(user_id)
        with self._session() as cur:
            cur.execute(
                f"DELETE FROM transactions WHERE {' AND '.join(clauses)}", params
            )
            return cur.rowcount
