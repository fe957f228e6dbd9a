"""Cost allocation, stock and profit reporting for the workshop ledger."""

from .costs import (
    CostAllocation,
    CostSummary,
    allocate_costs_to_products,
    collect_costs_for_month,
    collect_costs_for_period,
    costs_by_type,
    distribute_costs,
    summarize_costs,
)
from .digits import normalize_digits
from .invoices import (
    InvoiceTransitionError,
    approve_invoice,
    calculate_totals,
    generate_invoice_number,
    invoice_to_sales,
    mark_invoice_paid,
)
from .loans import loan_summaries, person_balance, person_loan_summary
from .payroll import salary_summaries_for_month, salary_summary_for_month, total_salary_costs_for_period
from .periods import PersianDate, PersianMonth, cost_matches_period, month_window, parse_date, parse_month
from .reports import generate_custom_report, generate_daily_report, generate_monthly_report
from .stock import calculate_all_stocks, calculate_stock, get_product_stock, has_sufficient_stock

__all__ = [
    "CostAllocation",
    "CostSummary",
    "InvoiceTransitionError",
    "PersianDate",
    "PersianMonth",
    "allocate_costs_to_products",
    "approve_invoice",
    "calculate_all_stocks",
    "calculate_stock",
    "calculate_totals",
    "collect_costs_for_month",
    "collect_costs_for_period",
    "cost_matches_period",
    "costs_by_type",
    "distribute_costs",
    "generate_custom_report",
    "generate_daily_report",
    "generate_invoice_number",
    "generate_monthly_report",
    "get_product_stock",
    "has_sufficient_stock",
    "invoice_to_sales",
    "loan_summaries",
    "mark_invoice_paid",
    "month_window",
    "normalize_digits",
    "parse_date",
    "parse_month",
    "person_balance",
    "person_loan_summary",
    "salary_summaries_for_month",
    "salary_summary_for_month",
    "summarize_costs",
    "total_salary_costs_for_period",
]
