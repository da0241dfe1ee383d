"""Tests for CurrencyLedger lookups, conversion, formatting and rate writes."""

from datetime import date, datetime, timezone

import pytest

from household_finance.core.errors import StoreError
from household_finance.services.ledger import CurrencyLedger
from household_finance.services.rate_validation import RateValidationError

from helpers import FakeLedgerStore, make_rate


def _ledger(store: FakeLedgerStore, household_id: str = "h1") -> CurrencyLedger:
    ledger = CurrencyLedger(store, household_id)
    assert ledger.refresh()
    return ledger


class TestLatestRate:
    def test_same_currency_is_identity_without_lookup(self):
        ledger = _ledger(FakeLedgerStore(rates=[make_rate(1, "USD", "USD", 5.0)]))
        quote = ledger.resolve_rate("USD", "USD", "manual")
        assert quote.rate == 1.0
        assert quote.source == "identity"

    def test_direct_match(self):
        ledger = _ledger(FakeLedgerStore(rates=[make_rate(1, "USD", "ARS", 1000.0)]))
        assert ledger.latest_rate("USD", "ARS", "manual") == 1000.0

    def test_reverse_lookup_is_inverted(self):
        ledger = _ledger(FakeLedgerStore(rates=[make_rate(1, "USD", "ARS", 1000.0)]))
        quote = ledger.resolve_rate("ARS", "USD", "manual")
        assert quote.source == "inverse"
        assert quote.rate == pytest.approx(1 / 1000.0)
        assert ledger.latest_rate("ARS", "USD") == pytest.approx(
            1 / ledger.latest_rate("USD", "ARS")
        )

    def test_rate_type_must_match(self):
        ledger = _ledger(
            FakeLedgerStore(rates=[make_rate(1, "USD", "ARS", 1200.0, rate_type="blue")])
        )
        assert ledger.latest_rate("USD", "ARS", "manual") == 1.0
        assert ledger.latest_rate("USD", "ARS", "blue") == 1200.0

    def test_default_rate_type_is_manual(self):
        ledger = _ledger(
            FakeLedgerStore(
                rates=[
                    make_rate(2, "USD", "ARS", 1200.0, rate_type="blue"),
                    make_rate(1, "USD", "ARS", 950.0, rate_type="manual"),
                ]
            )
        )
        assert ledger.latest_rate("USD", "ARS") == 950.0

    def test_first_match_in_snapshot_order_wins(self):
        ledger = _ledger(
            FakeLedgerStore(
                rates=[
                    make_rate(2, "USD", "ARS", 1100.0, valid_from="2026-03-01T00:00:00.000Z"),
                    make_rate(1, "USD", "ARS", 900.0, valid_from="2026-01-01T00:00:00.000Z"),
                ]
            )
        )
        assert ledger.latest_rate("USD", "ARS") == 1100.0

    def test_direct_preferred_over_inverse(self):
        ledger = _ledger(
            FakeLedgerStore(
                rates=[
                    make_rate(2, "ARS", "USD", 0.002),
                    make_rate(1, "USD", "ARS", 1000.0),
                ]
            )
        )
        assert ledger.latest_rate("USD", "ARS") == 1000.0

    def test_missing_pair_falls_back_to_identity(self):
        ledger = _ledger(FakeLedgerStore())
        quote = ledger.resolve_rate("USD", "EUR", "manual")
        assert quote.rate == 1.0
        assert quote.source == "fallback"
        assert quote.rate_id is None


class TestAsOfSelection:
    def _store(self):
        return FakeLedgerStore(
            rates=[
                make_rate(2, "USD", "ARS", 1000.0, valid_from="2026-03-01T12:00:00.000Z"),
                make_rate(1, "USD", "ARS", 900.0, valid_from="2026-01-01T12:00:00.000Z"),
            ]
        )

    def test_skips_rates_valid_after_the_date(self):
        ledger = _ledger(self._store())
        assert ledger.latest_rate("USD", "ARS", as_of=date(2026, 2, 1)) == 900.0

    def test_same_day_rate_counts_as_valid(self):
        ledger = _ledger(self._store())
        assert ledger.latest_rate("USD", "ARS", as_of=date(2026, 3, 1)) == 1000.0

    def test_datetime_bound_is_compared_exactly(self):
        ledger = _ledger(self._store())
        before_noon = datetime(2026, 3, 1, 11, 0, tzinfo=timezone.utc)
        assert ledger.latest_rate("USD", "ARS", as_of=before_noon) == 900.0

    def test_inverse_respects_date(self):
        ledger = _ledger(self._store())
        assert ledger.latest_rate("ARS", "USD", as_of=date(2026, 2, 1)) == pytest.approx(
            1 / 900.0
        )

    def test_no_rate_valid_yet_uses_newest(self):
        ledger = _ledger(self._store())
        assert ledger.latest_rate("USD", "ARS", as_of=date(2025, 6, 1)) == 1000.0


class TestConvert:
    def test_identity_law(self):
        ledger = _ledger(FakeLedgerStore(rates=[make_rate(1, "USD", "ARS", 1000.0)]))
        for amount in (0.0, 1.5, 123456.78):
            assert ledger.convert(amount, "ARS", "ARS", "blue") == amount

    def test_scenario_direct_and_inverse(self):
        ledger = _ledger(FakeLedgerStore(rates=[make_rate(1, "USD", "ARS", 1000.0)]))
        assert ledger.convert(10, "USD", "ARS", "manual") == 10000
        assert ledger.convert(10000, "ARS", "USD", "manual") == pytest.approx(10)

    def test_inverse_law_round_trip(self):
        ledger = _ledger(FakeLedgerStore(rates=[make_rate(1, "EUR", "USD", 1.0873)]))
        there = ledger.convert(250.0, "EUR", "USD", "manual")
        assert ledger.convert(there, "USD", "EUR", "manual") == pytest.approx(250.0)

    def test_fallback_law_with_no_rates(self):
        ledger = _ledger(FakeLedgerStore())
        assert ledger.convert(50, "USD", "EUR", "manual") == 50

    def test_no_rounding(self):
        ledger = _ledger(FakeLedgerStore(rates=[make_rate(1, "USD", "ARS", 3.0)]))
        assert ledger.convert(0.333, "USD", "ARS") == pytest.approx(0.999)


class TestFormat:
    def test_zero_has_symbol_and_two_decimals(self):
        ledger = _ledger(FakeLedgerStore())
        assert ledger.format(0, "USD") == "US$0,00"

    def test_grouping_uses_locale_separators(self):
        ledger = _ledger(FakeLedgerStore())
        assert ledger.format(1234567.891, "ARS") == "$1.234.567,89"

    def test_zero_decimal_currency(self):
        ledger = _ledger(FakeLedgerStore())
        assert ledger.format(1500.6, "CLP") == "CLP$1.501"

    def test_other_locale(self):
        ledger = CurrencyLedger(FakeLedgerStore(), "h1", number_locale="en-US")
        ledger.refresh()
        assert ledger.format(1234.5, "USD") == "US$1,234.50"

    def test_large_amount(self):
        ledger = _ledger(FakeLedgerStore())
        assert ledger.format(1e27, "USD") == "US$1.000.000.000.000.000.000.000.000.000,00"

    def test_infinite_amount(self):
        ledger = _ledger(FakeLedgerStore())
        assert ledger.format(float("inf"), "USD") == "US$∞"
        assert ledger.format(float("inf"), "XYZ") == "Infinity"

    def test_unknown_currency_is_plain_text(self):
        ledger = _ledger(FakeLedgerStore())
        assert ledger.format(50.0, "XYZ") == "50"
        assert ledger.format(12.5, "XYZ") == "12.5"


class TestPrimaryCurrency:
    def test_flagged_row_wins(self):
        store = FakeLedgerStore(
            household_currencies=[
                {"id": 1, "household_id": "h1", "currency_id": "ARS", "is_primary": False, "display_order": 0},
                {"id": 2, "household_id": "h1", "currency_id": "USD", "is_primary": True, "display_order": 1},
            ]
        )
        assert _ledger(store).primary_currency() == "USD"

    def test_defaults_when_none_flagged(self):
        assert _ledger(FakeLedgerStore()).primary_currency() == "ARS"

    def test_configured_fallback(self):
        ledger = CurrencyLedger(FakeLedgerStore(), "h1", fallback_primary_currency="EUR")
        ledger.refresh()
        assert ledger.primary_currency() == "EUR"


class TestAddRate:
    def test_appends_and_reloads(self):
        store = FakeLedgerStore(rates=[make_rate(1, "USD", "ARS", 900.0)])
        ledger = _ledger(store)
        fetches = store.rate_fetches

        created = ledger.add_rate("USD", "ARS", 1000.0, "manual", notes="cierre")

        assert created.rate == 1000.0
        assert created.notes == "cierre"
        assert store.rate_fetches == fetches + 1
        assert [r.rate for r in ledger.exchange_rates] == [1000.0, 900.0]
        assert ledger.latest_rate("USD", "ARS") == 1000.0

    @pytest.mark.parametrize(
        "args",
        [
            ("USD", "ARS", 0.0, "manual"),
            ("USD", "ARS", -5.0, "manual"),
            ("USD", "ARS", float("nan"), "manual"),
            ("USD", "USD", 1.0, "manual"),
            ("USD", "ARS", 1.0, "tarjeta"),
            ("USD", "XYZ", 1.0, "manual"),
        ],
    )
    def test_rejects_invalid_records(self, args):
        store = FakeLedgerStore()
        ledger = _ledger(store)
        with pytest.raises(RateValidationError):
            ledger.add_rate(*args)
        assert store.rates == []

    def test_requires_household(self):
        ledger = CurrencyLedger(FakeLedgerStore(), None)
        ledger.refresh()
        with pytest.raises(ValueError):
            ledger.add_rate("USD", "ARS", 1000.0)


class TestRefresh:
    def test_store_failure_is_captured(self):
        store = FakeLedgerStore(rates=[make_rate(1, "USD", "ARS", 1000.0)])
        ledger = _ledger(store)
        store.fail = True

        assert ledger.refresh() is False
        assert ledger.error == "connection refused"
        assert ledger.loading is False
        # previous snapshot kept
        assert ledger.latest_rate("USD", "ARS") == 1000.0

    def test_add_rate_propagates_insert_failure(self):
        store = FakeLedgerStore()
        ledger = _ledger(store)
        store.fail = True
        with pytest.raises(StoreError):
            ledger.add_rate("USD", "ARS", 1000.0)

    def test_without_household_loads_only_currencies(self):
        store = FakeLedgerStore(rates=[make_rate(1, "USD", "ARS", 1000.0)])
        ledger = CurrencyLedger(store, None)
        assert ledger.refresh()
        assert ledger.exchange_rates == ()
        assert ledger.currency_info("USD").symbol == "US$"
