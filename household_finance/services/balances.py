"""Household balance totals.

Per transaction type, two totals are produced:
    - primary: every amount converted into the household's primary currency
      with the ledger's default rate type (live conversion, current snapshot);
    - reference: the stored `amount_usd` when non-zero, otherwise a live
      conversion into the reference currency.
Transactions are taken as plain rows so the function stays pure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from household_finance.models.constants import TRANSACTION_TYPES
from household_finance.services.ledger import CurrencyLedger

TYPE_ORDER: List[str] = ["income", "expense", "investment", "saving"]


@dataclass(frozen=True)
class BalanceLine:
    type: str
    amount: float
    formatted: str
    reference_amount: float
    reference_formatted: str


@dataclass(frozen=True)
class BalanceSummary:
    primary_currency: str
    reference_currency: str
    lines: List[BalanceLine] = field(default_factory=list)
    transaction_count: int = 0

    def by_type(self) -> Dict[str, BalanceLine]:
        return {line.type: line for line in self.lines}


def compute_balances(
    ledger: CurrencyLedger,
    transactions: Iterable[Mapping[str, Any]],
    reference_currency: str = "USD",
) -> BalanceSummary:
    primary = ledger.primary_currency()
    totals = {t: 0.0 for t in TRANSACTION_TYPES}
    reference_totals = {t: 0.0 for t in TRANSACTION_TYPES}
    count = 0
    for tx in transactions:
        tx_type = tx["type"]
        if tx_type not in totals:
            continue
        count += 1
        amount = float(tx["amount"])
        currency = tx.get("currency_id") or primary
        totals[tx_type] += ledger.convert(amount, currency, primary)
        cached = tx.get("amount_usd")
        if cached:
            reference_totals[tx_type] += float(cached)
        else:
            reference_totals[tx_type] += ledger.convert(
                amount, currency, reference_currency
            )

    lines = [
        BalanceLine(
            type=t,
            amount=totals[t],
            formatted=ledger.format(totals[t], primary),
            reference_amount=reference_totals[t],
            reference_formatted=ledger.format(reference_totals[t], reference_currency),
        )
        for t in TYPE_ORDER
    ]
    return BalanceSummary(
        primary_currency=primary,
        reference_currency=reference_currency,
        lines=lines,
        transaction_count=count,
    )
