"""
Balance calculator — pure functions over the transaction log.

``account_balance`` is the principal: deposits minus withdrawals.
``current_balance`` is the principal plus simple interest at the investor's
ROI.  Interest is recomputed from the principal every time, never carried
forward from the previous ``current_balance``, so repeated transactions do
not compound it.

All arithmetic is ``Decimal``; results are rounded half-up to cents.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from apex_backoffice.core.exceptions import InsufficientFundsException, InvalidInputException
from apex_backoffice.models.transaction import MAX_MONEY, TransactionType

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


class BalanceSnapshot(NamedTuple):
    account_balance: Decimal
    current_balance: Decimal


def to_cents(value: Decimal) -> Decimal:
    """Round a monetary value to two decimal places (half-up)."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def apply_interest(account_balance: Decimal, roi: Decimal) -> Decimal:
    """Principal plus simple interest at ``roi`` percent."""
    return to_cents(account_balance + account_balance * (roi / HUNDRED))


def ensure_storable(snapshot: BalanceSnapshot) -> BalanceSnapshot:
    """Reject balances too large for the DECIMAL(20,2) balance columns."""
    if max(snapshot) > MAX_MONEY:
        raise InvalidInputException(
            f"Resulting balance exceeds the maximum supported amount of {MAX_MONEY}"
        )
    return snapshot


def compute_balances(
    existing_deposits: Decimal,
    existing_withdrawals: Decimal,
    roi: Decimal,
    transaction_type: TransactionType,
    amount: Decimal,
) -> BalanceSnapshot:
    """
    Balances after applying one new transaction to the existing log.

    Raises :class:`InsufficientFundsException` when a withdrawal is larger
    than the balance before it.  Withdrawing exactly the whole balance is
    allowed and leaves zero.  Raises :class:`InvalidInputException` when a
    deposit would push either balance past :data:`MAX_MONEY`.
    """
    prior_balance = existing_deposits - existing_withdrawals

    if transaction_type == TransactionType.DEPOSIT:
        account_balance = prior_balance + amount
    elif transaction_type == TransactionType.WITHDRAWAL:
        if amount > prior_balance:
            raise InsufficientFundsException(requested=amount, available=to_cents(prior_balance))
        account_balance = prior_balance - amount
    else:
        raise ValueError(f"Unsupported transaction type: {transaction_type!r}")

    account_balance = to_cents(account_balance)
    return ensure_storable(
        BalanceSnapshot(
            account_balance=account_balance,
            current_balance=apply_interest(account_balance, roi),
        )
    )
