"""Monthly salary summaries built from partial salary payments."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from .periods import month_in_range, parse_month
from .records import EmployeeRecord, SalaryPaymentRecord

_WHOLE = Decimal("1")


def _round(value: Decimal) -> Decimal:
    return Decimal(value).quantize(_WHOLE, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SalarySummary:
    employee_id: str
    employee_name: str
    month: str
    total_days_worked: int
    expected_salary: Decimal
    total_paid: Decimal
    remaining: Decimal
    payments: tuple[SalaryPaymentRecord, ...] = ()

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "month": self.month,
            "total_days_worked": self.total_days_worked,
            "expected_salary": float(self.expected_salary),
            "total_paid": float(self.total_paid),
            "remaining": float(self.remaining),
            "payments": [
                {
                    "id": payment.id,
                    "payment_date": payment.payment_date,
                    "daily_salary": float(payment.daily_salary),
                    "days_worked": payment.days_worked,
                    "amount": float(payment.amount),
                    "payment_method": payment.payment_method,
                }
                for payment in self.payments
            ],
        }


def _payments_for(
    employee_id: str, month: str, payments: Iterable[SalaryPaymentRecord]
) -> list[SalaryPaymentRecord]:
    target = parse_month(month)
    return [
        payment
        for payment in payments
        if payment.employee_id == employee_id and parse_month(payment.month) == target
    ]


def salary_summary_for_month(
    employee: EmployeeRecord, month: str, payments: Iterable[SalaryPaymentRecord]
) -> SalarySummary:
    """Expected pay follows each payment's own daily rate, not a default."""

    month_payments = _payments_for(employee.id, month, payments)
    expected = _round(
        sum(
            (Decimal(str(p.daily_salary)) * Decimal(int(p.days_worked)) for p in month_payments),
            Decimal("0"),
        )
    )
    paid = _round(sum((Decimal(str(p.amount)) for p in month_payments), Decimal("0")))
    parsed = parse_month(month)

    return SalarySummary(
        employee_id=employee.id,
        employee_name=employee.name,
        month=str(parsed) if parsed else month,
        total_days_worked=sum(int(p.days_worked) for p in month_payments),
        expected_salary=expected,
        total_paid=paid,
        remaining=max(Decimal("0"), expected - paid),
        payments=tuple(sorted(month_payments, key=lambda p: p.payment_date, reverse=True)),
    )


def salary_summaries_for_month(
    employees: Iterable[EmployeeRecord], month: str, payments: Iterable[SalaryPaymentRecord]
) -> list[SalarySummary]:
    payments = list(payments)
    summaries = [
        salary_summary_for_month(employee, month, payments)
        for employee in employees
        if employee.is_active
    ]
    return [s for s in summaries if s.total_days_worked > 0 or s.total_paid > 0]


def total_salary_costs_for_period(
    start_date: str, end_date: str, payments: Iterable[SalaryPaymentRecord]
) -> Decimal:
    """Sum of payments whose salary month falls in the window's months."""

    return _round(
        sum(
            (
                Decimal(str(p.amount))
                for p in payments
                if month_in_range(p.month, start_date, end_date)
            ),
            Decimal("0"),
        )
    )
