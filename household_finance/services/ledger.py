"""Currency & rate ledger for one household.

Holds a snapshot of three sequences fetched from the store:
    - active currencies (reference data, ordered by code)
    - the household's currency associations (ordered by display order)
    - the household's active exchange rates (newest first)

Every lookup is a pure read against that snapshot. The only write is
`add_rate`, which inserts one record and then reloads the whole rate set;
snapshots are replaced wholesale, never merged.

Rate selection
    Rates are directed edges. A lookup for (from, to, type) takes the first
    direct match in snapshot order, else the first reverse match inverted
    (1 / rate), else degrades to the identity rate 1.0 without raising.
    With `as_of` the first pass only considers rates whose valid_from is on
    or before that moment; when nothing qualifies the lookup is repeated
    over the full snapshot before falling back to identity.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from household_finance.core.errors import StoreError
from household_finance.models import (
    Currency,
    ExchangeRate,
    HouseholdCurrency,
    RateQuote,
)
from household_finance.services.money import (
    DEFAULT_LOCALE,
    format_number,
    plain_number,
)
from household_finance.services.rate_validation import validate_rate_domain

logger = logging.getLogger("household_finance.ledger")

IDENTITY_RATE = 1.0


class LedgerStore(Protocol):
    def list_active_currencies(self) -> List[Dict[str, Any]]: ...

    def list_household_currencies(self, household_id: str) -> List[Dict[str, Any]]: ...

    def list_active_rates(self, household_id: str) -> List[Dict[str, Any]]: ...

    def insert_rate(self, record: Mapping[str, Any]) -> Dict[str, Any]: ...


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _valid_as_of(rate: ExchangeRate, as_of: Optional[date]) -> bool:
    if as_of is None:
        return True
    valid_from = _as_utc(rate.valid_from)
    if isinstance(as_of, datetime):
        return valid_from <= _as_utc(as_of)
    return valid_from.date() <= as_of


class CurrencyLedger:
    def __init__(
        self,
        store: LedgerStore,
        household_id: Optional[str] = None,
        *,
        default_rate_type: str = "manual",
        fallback_primary_currency: str = "ARS",
        number_locale: str = DEFAULT_LOCALE,
    ):
        self._store = store
        self.household_id = household_id
        self.default_rate_type = default_rate_type
        self.fallback_primary_currency = fallback_primary_currency
        self.number_locale = number_locale
        self._currencies: List[Currency] = []
        self._household_currencies: List[HouseholdCurrency] = []
        self._rates: List[ExchangeRate] = []
        self.loading = False
        self.error: Optional[str] = None

    @classmethod
    def from_settings(cls, store: LedgerStore, household_id: Optional[str], settings) -> "CurrencyLedger":  # type: ignore[no-untyped-def]
        return cls(
            store,
            household_id,
            default_rate_type=settings.default_rate_type,
            fallback_primary_currency=settings.fallback_primary_currency,
            number_locale=settings.number_locale,
        )

    # Raw accessors ---------------------------------------------
    @property
    def currencies(self) -> Sequence[Currency]:
        return tuple(self._currencies)

    @property
    def household_currencies(self) -> Sequence[HouseholdCurrency]:
        return tuple(self._household_currencies)

    @property
    def exchange_rates(self) -> Sequence[ExchangeRate]:
        return tuple(self._rates)

    def currency_info(self, currency_id: str) -> Optional[Currency]:
        return next((c for c in self._currencies if c.id == currency_id), None)

    # Loading ---------------------------------------------------
    def refresh(self) -> bool:
        """Reload every sequence; returns False when any fetch failed (see `error`)."""
        self.error = None
        self.loading = True
        try:
            ok = self._load_currencies()
            if self.household_id is not None:
                ok = self._load_household_currencies() and ok
                ok = self._load_rates() and ok
            return ok
        finally:
            self.loading = False

    def _load_currencies(self) -> bool:
        try:
            rows = self._store.list_active_currencies()
        except StoreError as e:
            logger.error("error fetching currencies: %s", e)
            self.error = str(e) or "error fetching currencies"
            return False
        self._currencies = [Currency(**r) for r in rows]
        return True

    def _load_household_currencies(self) -> bool:
        try:
            rows = self._store.list_household_currencies(self.household_id)  # type: ignore[arg-type]
        except StoreError as e:
            logger.error("error fetching household currencies: %s", e)
            self.error = str(e) or "error fetching household currencies"
            return False
        self._household_currencies = [HouseholdCurrency(**r) for r in rows]
        return True

    def _load_rates(self) -> bool:
        try:
            rows = self._store.list_active_rates(self.household_id)  # type: ignore[arg-type]
        except StoreError as e:
            logger.error("error fetching exchange rates: %s", e)
            self.error = str(e) or "error fetching exchange rates"
            return False
        self._rates = [ExchangeRate(**r) for r in rows]
        return True

    # Lookups ---------------------------------------------------
    def _find(
        self,
        from_currency: str,
        to_currency: str,
        rate_type: str,
        as_of: Optional[date],
    ) -> Optional[RateQuote]:
        for r in self._rates:
            if (
                r.from_currency == from_currency
                and r.to_currency == to_currency
                and r.rate_type == rate_type
                and _valid_as_of(r, as_of)
            ):
                return RateQuote(rate=r.rate, source="direct", rate_id=r.id)
        for r in self._rates:
            if (
                r.from_currency == to_currency
                and r.to_currency == from_currency
                and r.rate_type == rate_type
                and _valid_as_of(r, as_of)
            ):
                return RateQuote(rate=1 / r.rate, source="inverse", rate_id=r.id)
        return None

    def resolve_rate(
        self,
        from_currency: str,
        to_currency: str,
        rate_type: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> RateQuote:
        if from_currency == to_currency:
            return RateQuote(rate=IDENTITY_RATE, source="identity")
        rate_type = rate_type or self.default_rate_type
        bounds: List[Optional[date]] = [None] if as_of is None else [as_of, None]
        for bound in bounds:
            quote = self._find(from_currency, to_currency, rate_type, bound)
            if quote is not None:
                return quote
        logger.warning(
            "no %s rate between %s and %s; using identity rate",
            rate_type,
            from_currency,
            to_currency,
        )
        return RateQuote(rate=IDENTITY_RATE, source="fallback")

    def latest_rate(
        self,
        from_currency: str,
        to_currency: str,
        rate_type: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> float:
        return self.resolve_rate(from_currency, to_currency, rate_type, as_of).rate

    def convert(
        self,
        amount: float,
        from_currency: str,
        to_currency: str,
        rate_type: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> float:
        if from_currency == to_currency:
            return amount
        return amount * self.latest_rate(from_currency, to_currency, rate_type, as_of)

    def format(self, amount: float, currency_id: str) -> str:
        currency = self.currency_info(currency_id)
        if currency is None:
            return plain_number(amount)
        number = format_number(amount, currency.decimal_places, self.number_locale)
        return f"{currency.symbol}{number}"

    def primary_currency(self) -> str:
        primary = next((hc for hc in self._household_currencies if hc.is_primary), None)
        return primary.currency_id if primary else self.fallback_primary_currency

    # Writes ----------------------------------------------------
    def add_rate(
        self,
        from_currency: str,
        to_currency: str,
        rate: float,
        rate_type: Optional[str] = None,
        notes: Optional[str] = None,
        valid_from: Optional[datetime] = None,
    ) -> ExchangeRate:
        """Append a new active rate and reload the rate set.

        Older records for the same pair and type stay active; the newest one
        wins lookups because the snapshot is ordered newest first.
        """
        if self.household_id is None:
            raise ValueError("ledger is not bound to a household")
        rate_type = rate_type or self.default_rate_type
        validate_rate_domain(
            from_currency,
            to_currency,
            rate,
            rate_type,
            known_currencies={c.id for c in self._currencies if c.is_active},
        )
        row = self._store.insert_rate(
            {
                "household_id": self.household_id,
                "from_currency": from_currency,
                "to_currency": to_currency,
                "rate": rate,
                "rate_type": rate_type,
                "notes": notes,
                "valid_from": valid_from,
            }
        )
        logger.info(
            "added %s rate %s->%s = %s", rate_type, from_currency, to_currency, rate
        )
        if not self._load_rates():
            raise StoreError(self.error or "error reloading exchange rates")
        return ExchangeRate(**row)
