"""Daily, monthly and custom-range profit and loss reports.

Reports are value objects rebuilt on every request from the production,
sales and cost snapshots; nothing here is cached or persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from .costs import (
    ZERO,
    CostSummary,
    allocate_costs_to_products,
    as_decimal,
    collect_costs_for_month,
    collect_costs_for_period,
    summarize_costs,
)
from .digits import normalize_digits
from .periods import date_in_month, date_in_range, month_window, parse_date
from .records import CostRecord, ProductRecord, ProductionRecord, SaleRecord

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class ProductQuantity:
    product_id: str
    product_name: str
    quantity: int

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class ProductionSummary:
    total_quantity: int
    by_product: tuple[ProductQuantity, ...] = ()

    def to_dict(self) -> dict:
        return {
            "total_quantity": self.total_quantity,
            "by_product": [entry.to_dict() for entry in self.by_product],
        }


@dataclass(frozen=True)
class SalesSummary:
    total_amount: Decimal
    total_quantity: int
    count: int

    def to_dict(self) -> dict:
        return {
            "total_amount": float(self.total_amount),
            "total_quantity": self.total_quantity,
            "count": self.count,
        }


@dataclass(frozen=True)
class ProductProfit:
    product_id: str
    product_name: str
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    profit_margin: Decimal

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "revenue": float(self.revenue),
            "cost": float(self.cost),
            "profit": float(self.profit),
            "profit_margin": round(float(self.profit_margin), 2),
        }


@dataclass(frozen=True)
class DailyReport:
    date: str
    production: ProductionSummary
    sales: SalesSummary
    costs: CostSummary
    profit: Decimal

    kind = "daily"

    @property
    def title(self) -> str:
        return self.date

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "date": self.date,
            "production": self.production.to_dict(),
            "sales": self.sales.to_dict(),
            "costs": self.costs.to_dict(),
            "profit": float(self.profit),
        }


@dataclass(frozen=True)
class PeriodReport:
    start_date: str
    end_date: str
    production: ProductionSummary
    sales: SalesSummary
    costs: CostSummary
    profit: Decimal
    profit_by_product: tuple[ProductProfit, ...] = field(default=())

    kind = "period"

    @property
    def title(self) -> str:
        return f"{self.start_date} - {self.end_date}"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "production": self.production.to_dict(),
            "sales": self.sales.to_dict(),
            "costs": self.costs.to_dict(),
            "profit": float(self.profit),
            "profit_by_product": [entry.to_dict() for entry in self.profit_by_product],
        }


@dataclass(frozen=True)
class MonthlyReport(PeriodReport):
    year: str = ""
    month: str = ""

    kind = "monthly"

    @property
    def title(self) -> str:
        return f"{self.year}/{self.month}"

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload.update({"year": self.year, "month": self.month})
        return payload


@dataclass(frozen=True)
class CustomReport(PeriodReport):
    kind = "custom"


def _summarize_production(productions: list[ProductionRecord]) -> ProductionSummary:
    quantities: dict[str, int] = {}
    names: dict[str, str] = {}
    for production in productions:
        quantities[production.product_id] = (
            quantities.get(production.product_id, 0) + int(production.quantity or 0)
        )
        names.setdefault(production.product_id, production.product_name)

    return ProductionSummary(
        total_quantity=sum(quantities.values()),
        by_product=tuple(
            ProductQuantity(product_id=product_id, product_name=names[product_id], quantity=qty)
            for product_id, qty in quantities.items()
        ),
    )


def _summarize_sales(sales: list[SaleRecord]) -> SalesSummary:
    return SalesSummary(
        total_amount=sum((as_decimal(sale.total_price) for sale in sales), ZERO),
        total_quantity=sum(int(sale.quantity or 0) for sale in sales),
        count=len(sales),
    )


def _profit_by_product(
    products: Iterable[ProductRecord],
    productions: list[ProductionRecord],
    sales: list[SaleRecord],
    cost_total: Decimal,
) -> tuple[ProductProfit, ...]:
    allocation = allocate_costs_to_products(cost_total, productions)

    names: dict[str, str] = {product.id: product.name for product in products}
    for record in [*productions, *sales]:
        names.setdefault(record.product_id, record.product_name)

    breakdown = []
    for product_id, product_name in names.items():
        revenue = sum(
            (as_decimal(sale.total_price) for sale in sales if sale.product_id == product_id),
            ZERO,
        )
        cost = allocation.get(product_id, ZERO)
        profit = revenue - cost
        margin = (profit / revenue) * HUNDRED if revenue > 0 else ZERO
        breakdown.append(
            ProductProfit(
                product_id=product_id,
                product_name=product_name,
                revenue=revenue,
                cost=cost,
                profit=profit,
                profit_margin=margin,
            )
        )
    return tuple(breakdown)


def generate_daily_report(
    date: str,
    productions: Iterable[ProductionRecord],
    sales: Iterable[SaleRecord],
    costs: Iterable[CostRecord],
) -> DailyReport:
    day = _canonical(date)

    day_productions = [p for p in productions if date_in_range(p.date, day, day)]
    day_sales = [s for s in sales if date_in_range(s.date, day, day)]
    cost_summary = summarize_costs(collect_costs_for_period(costs, day, day))
    sales_summary = _summarize_sales(day_sales)

    return DailyReport(
        date=day,
        production=_summarize_production(day_productions),
        sales=sales_summary,
        costs=cost_summary,
        profit=sales_summary.total_amount - cost_summary.total_amount,
    )


def generate_monthly_report(
    year: int | str,
    month: int | str,
    products: Iterable[ProductRecord],
    productions: Iterable[ProductionRecord],
    sales: Iterable[SaleRecord],
    costs: Iterable[CostRecord],
) -> MonthlyReport:
    start, end = month_window(year, month)

    month_productions = [p for p in productions if date_in_month(p.date, start.year, start.month)]
    month_sales = [s for s in sales if date_in_month(s.date, start.year, start.month)]
    cost_summary = summarize_costs(collect_costs_for_month(costs, start.year, start.month))
    sales_summary = _summarize_sales(month_sales)

    return MonthlyReport(
        start_date=str(start),
        end_date=str(end),
        year=f"{start.year:04d}",
        month=f"{start.month:02d}",
        production=_summarize_production(month_productions),
        sales=sales_summary,
        costs=cost_summary,
        profit=sales_summary.total_amount - cost_summary.total_amount,
        profit_by_product=_profit_by_product(
            products, month_productions, month_sales, cost_summary.total_amount
        ),
    )


def generate_custom_report(
    start_date: str,
    end_date: str,
    products: Iterable[ProductRecord],
    productions: Iterable[ProductionRecord],
    sales: Iterable[SaleRecord],
    costs: Iterable[CostRecord],
) -> CustomReport:
    start = _canonical(start_date)
    end = _canonical(end_date)

    range_productions = [p for p in productions if date_in_range(p.date, start, end)]
    range_sales = [s for s in sales if date_in_range(s.date, start, end)]
    cost_summary = summarize_costs(collect_costs_for_period(costs, start, end))
    sales_summary = _summarize_sales(range_sales)

    return CustomReport(
        start_date=start,
        end_date=end,
        production=_summarize_production(range_productions),
        sales=sales_summary,
        costs=cost_summary,
        profit=sales_summary.total_amount - cost_summary.total_amount,
        profit_by_product=_profit_by_product(
            products, range_productions, range_sales, cost_summary.total_amount
        ),
    )


def _canonical(value: Optional[str]) -> str:
    parsed = parse_date(value)
    return str(parsed) if parsed is not None else normalize_digits(value)
