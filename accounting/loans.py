"""Balances of money lent to and borrowed from people.

A positive balance means the person owes the workshop; a negative one means
the workshop owes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable

from .records import LoanRecord, PersonRecord


class LoanTransactionType(str, Enum):
    lend = "lend"
    borrow = "borrow"


def signed_amount(transaction_type: str, amount) -> Decimal:
    """Lending is stored positive, borrowing negative."""

    value = abs(Decimal(str(amount)))
    if LoanTransactionType(transaction_type) == LoanTransactionType.borrow:
        return -value
    return value


def _round(value: Decimal) -> Decimal:
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def _sum(values: Iterable[Decimal]) -> Decimal:
    return _round(sum(values, Decimal("0")))


@dataclass(frozen=True)
class LoanSummary:
    person_id: str
    person_name: str
    total_balance: Decimal
    total_lent: Decimal
    total_borrowed: Decimal
    transactions: tuple[LoanRecord, ...] = ()

    def to_dict(self) -> dict:
        return {
            "person_id": self.person_id,
            "person_name": self.person_name,
            "total_balance": float(self.total_balance),
            "total_lent": float(self.total_lent),
            "total_borrowed": float(self.total_borrowed),
            "transactions": [
                {
                    "id": loan.id,
                    "transaction_type": loan.transaction_type,
                    "amount": float(loan.amount),
                    "transaction_date": loan.transaction_date,
                    "description": loan.description,
                }
                for loan in self.transactions
            ],
        }


def total_balance(loans: Iterable[LoanRecord]) -> Decimal:
    return _sum(Decimal(str(loan.amount)) for loan in loans)


def total_lent(loans: Iterable[LoanRecord]) -> Decimal:
    return _sum(
        abs(Decimal(str(loan.amount)))
        for loan in loans
        if loan.transaction_type == LoanTransactionType.lend.value
    )


def total_borrowed(loans: Iterable[LoanRecord]) -> Decimal:
    return _sum(
        abs(Decimal(str(loan.amount)))
        for loan in loans
        if loan.transaction_type == LoanTransactionType.borrow.value
    )


def person_balance(person_id: str, loans: Iterable[LoanRecord]) -> Decimal:
    return total_balance(loan for loan in loans if loan.person_id == person_id)


def person_loan_summary(person: PersonRecord, loans: Iterable[LoanRecord]) -> LoanSummary:
    person_loans = [loan for loan in loans if loan.person_id == person.id]
    return LoanSummary(
        person_id=person.id,
        person_name=person.name,
        total_balance=total_balance(person_loans),
        total_lent=total_lent(person_loans),
        total_borrowed=total_borrowed(person_loans),
        transactions=tuple(
            sorted(person_loans, key=lambda loan: loan.transaction_date, reverse=True)
        ),
    )


def loan_summaries(
    people: Iterable[PersonRecord], loans: Iterable[LoanRecord]
) -> list[LoanSummary]:
    """Summaries for active people that have at least one transaction."""

    loans = list(loans)
    summaries = [person_loan_summary(person, loans) for person in people if person.is_active]
    return [summary for summary in summaries if summary.transactions]
