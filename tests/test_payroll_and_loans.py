from decimal import Decimal

from accounting.loans import (
    loan_summaries,
    person_balance,
    person_loan_summary,
    signed_amount,
    total_borrowed,
    total_lent,
)
from accounting.payroll import (
    salary_summaries_for_month,
    salary_summary_for_month,
    total_salary_costs_for_period,
)
from accounting.records import EmployeeRecord, LoanRecord, PersonRecord, SalaryPaymentRecord

ALI = EmployeeRecord(id="1", name="Ali")
REZA = EmployeeRecord(id="2", name="Reza")
IDLE = EmployeeRecord(id="3", name="Idle", is_active=False)


def _payment(payment_id, employee, month, payment_date, daily, days, amount):
    return SalaryPaymentRecord(
        id=payment_id,
        employee_id=employee.id,
        employee_name=employee.name,
        month=month,
        payment_date=payment_date,
        daily_salary=Decimal(str(daily)),
        days_worked=days,
        amount=Decimal(str(amount)),
    )


PAYMENTS = [
    _payment("a", ALI, "1404/10", "1404/10/10", 500000, 10, 3000000),
    _payment("b", ALI, "1404/10", "1404/10/25", 550000, 5, 1000000),
    _payment("c", REZA, "1404/09", "1404/09/30", 400000, 20, 8000000),
    _payment("d", IDLE, "1404/10", "1404/10/12", 100000, 3, 300000),
]


def test_salary_summary_tracks_expected_paid_and_remaining():
    summary = salary_summary_for_month(ALI, "1404/10", PAYMENTS)
    assert summary.total_days_worked == 15
    assert summary.expected_salary == Decimal("7750000")
    assert summary.total_paid == Decimal("4000000")
    assert summary.remaining == Decimal("3750000")
    assert [p.id for p in summary.payments] == ["b", "a"]


def test_salary_remaining_is_never_negative():
    overpaid = [_payment("x", ALI, "1404/10", "1404/10/01", 100, 2, 1000)]
    assert salary_summary_for_month(ALI, "1404/10", overpaid).remaining == Decimal("0")


def test_salary_summaries_include_only_active_employees_with_activity():
    summaries = salary_summaries_for_month([ALI, REZA, IDLE], "1404/10", PAYMENTS)
    assert [summary.employee_id for summary in summaries] == ["1"]


def test_total_salary_costs_for_period_filters_by_month():
    assert total_salary_costs_for_period("1404/09/01", "1404/09/30", PAYMENTS) == Decimal("8000000")
    assert total_salary_costs_for_period("1404/09/15", "1404/10/05", PAYMENTS) == Decimal("12300000")


HASAN = PersonRecord(id="h", name="Hasan")
MINA = PersonRecord(id="m", name="Mina")
GONE = PersonRecord(id="g", name="Gone", is_active=False)


def _loan(loan_id, person, kind, amount, when):
    return LoanRecord(
        id=loan_id,
        person_id=person.id,
        person_name=person.name,
        transaction_type=kind,
        amount=signed_amount(kind, amount),
        transaction_date=when,
    )


LOANS = [
    _loan("1", HASAN, "lend", 5000, "1404/08/01"),
    _loan("2", HASAN, "borrow", 2000, "1404/09/01"),
    _loan("3", GONE, "lend", 700, "1404/09/02"),
]


def test_signed_amount_follows_transaction_type():
    assert signed_amount("lend", -100) == Decimal("100")
    assert signed_amount("borrow", 100) == Decimal("-100")


def test_person_balance_is_signed():
    assert person_balance("h", LOANS) == Decimal("3000")

    summary = person_loan_summary(HASAN, LOANS)
    assert summary.total_lent == Decimal("5000")
    assert summary.total_borrowed == Decimal("2000")
    assert [loan.id for loan in summary.transactions] == ["2", "1"]


def test_loan_summaries_skip_inactive_and_people_without_transactions():
    summaries = loan_summaries([HASAN, MINA, GONE], LOANS)
    assert [summary.person_id for summary in summaries] == ["h"]
    assert total_lent(LOANS) == Decimal("5700")
    assert total_borrowed(LOANS) == Decimal("2000")
