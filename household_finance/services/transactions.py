"""Transaction writes: USD derivation on insert, guarded delete.

`amount_usd`, `exchange_rate` and `exchange_rate_type` are computed once
here and stored; reads never re-derive them.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

from household_finance.models import TransactionIn
from household_finance.services.ledger import CurrencyLedger
from household_finance.services.money import round2

logger = logging.getLogger("household_finance.transactions")


class TransactionValidationError(ValueError):
    pass


class TransactionNotFound(LookupError):
    pass


class TransactionStore(Protocol):
    def get_transaction(self, transaction_id: int) -> Optional[Dict[str, Any]]: ...

    def insert_transaction(self, record: Dict[str, Any]) -> Dict[str, Any]: ...

    def delete_transaction(
        self,
        transaction_id: int,
        household_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> int: ...


def create_transaction(
    store: TransactionStore,
    ledger: CurrencyLedger,
    payload: TransactionIn,
    user_id: str,
    reference_currency: str = "USD",
) -> Dict[str, Any]:
    """Insert a transaction with its reference-currency amount resolved as of its date."""
    if ledger.household_id is None:
        raise ValueError("ledger is not bound to a household")
    currency_id = payload.currency_id or ledger.primary_currency()
    if ledger.currency_info(currency_id) is None:
        raise TransactionValidationError(f"unknown or inactive currency '{currency_id}'")

    quote = ledger.resolve_rate(
        currency_id, reference_currency, payload.exchange_rate_type, as_of=payload.date
    )
    record = {
        "household_id": ledger.household_id,
        "user_id": user_id,
        "type": payload.type,
        "amount": payload.amount,
        "currency_id": currency_id,
        "amount_usd": round2(payload.amount * quote.rate),
        "exchange_rate": quote.rate,
        "exchange_rate_type": payload.exchange_rate_type,
        "description": payload.description,
        "category": payload.category,
        "date": payload.date,
    }
    row = store.insert_transaction(record)
    logger.info(
        "added %s transaction %s (%s %s, rate source %s)",
        payload.type,
        row.get("id"),
        payload.amount,
        currency_id,
        quote.source,
    )
    return row


def delete_transaction(
    store: TransactionStore, transaction_id: int, household_id: str, user_id: str
) -> None:
    """Delete a household transaction.

    When the household-scoped delete removes nothing, one more attempt is
    made scoped by the acting user as owner of the row. Raises
    TransactionNotFound when the row is absent from the household and
    PermissionError when neither attempt removed it.
    """
    existing = store.get_transaction(transaction_id)
    if not existing or existing.get("household_id") != household_id:
        raise TransactionNotFound("transaction not found")

    deleted = store.delete_transaction(transaction_id, household_id=household_id)
    if deleted:
        logger.info("deleted transaction %s", transaction_id)
        return

    logger.warning(
        "no rows deleted for transaction %s; retrying scoped to user", transaction_id
    )
    deleted = store.delete_transaction(
        transaction_id, household_id=household_id, user_id=user_id
    )
    if not deleted:
        raise PermissionError("you do not have permission to delete this transaction")
    logger.info("deleted transaction %s on user-scoped retry", transaction_id)
