"""Test doubles for the row store and small API helpers."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from fastapi.testclient import TestClient

from household_finance.core.errors import StoreError
from household_finance.models.constants import SEED_CURRENCIES


class FakeLedgerStore:
    """In-memory stand-in for the row store used by CurrencyLedger tests.

    Rates are kept newest first, matching the real store's ordering.
    """

    def __init__(
        self,
        rates: Optional[List[Dict[str, Any]]] = None,
        household_currencies: Optional[List[Dict[str, Any]]] = None,
        currencies: Optional[List[Dict[str, Any]]] = None,
    ):
        self.currencies = [dict(c, is_active=True) for c in (currencies or SEED_CURRENCIES)]
        self.household_currencies = household_currencies or []
        self.rates = rates or []
        self.fail = False
        self.rate_fetches = 0
        self._next_id = max((r["id"] for r in self.rates), default=0) + 1

    def _check(self) -> None:
        if self.fail:
            raise StoreError("connection refused")

    def list_active_currencies(self) -> List[Dict[str, Any]]:
        self._check()
        return sorted(self.currencies, key=lambda c: c["id"])

    def list_household_currencies(self, household_id: str) -> List[Dict[str, Any]]:
        self._check()
        return [hc for hc in self.household_currencies if hc["household_id"] == household_id]

    def list_active_rates(self, household_id: str) -> List[Dict[str, Any]]:
        self._check()
        self.rate_fetches += 1
        return [
            r for r in self.rates if r["household_id"] == household_id and r["is_active"]
        ]

    def insert_rate(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        self._check()
        row = dict(record)
        row["id"] = self._next_id
        self._next_id += 1
        row["is_active"] = True
        row["valid_from"] = row.get("valid_from") or datetime.now(timezone.utc)
        self.rates.insert(0, row)
        return row


def make_rate(
    rate_id: int,
    from_currency: str,
    to_currency: str,
    rate: float,
    rate_type: str = "manual",
    valid_from: str = "2026-01-01T00:00:00.000Z",
    household_id: str = "h1",
) -> Dict[str, Any]:
    return {
        "id": rate_id,
        "household_id": household_id,
        "from_currency": from_currency,
        "to_currency": to_currency,
        "rate": rate,
        "rate_type": rate_type,
        "valid_from": valid_from,
        "is_active": True,
        "notes": None,
    }


def register(client: TestClient, email: str) -> Dict[str, str]:
    """Register a user through the API and return the acting-user headers."""
    resp = client.post("/users/", json={"email": email})
    assert resp.status_code == 201, resp.text
    return {"X-User-Id": resp.json()["id"]}
