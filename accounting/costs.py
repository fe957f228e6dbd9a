"""Cost collection, aggregation and proportional allocation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from .periods import PersianMonth, cost_matches_period, date_in_month, month_window, parse_month
from .records import CostRecord, PeriodType, ProductionRecord

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    return Decimal(str(value))


@dataclass(frozen=True)
class CostTypeTotal:
    type: str
    type_label: str
    amount: Decimal

    def to_dict(self) -> dict:
        return {"type": self.type, "type_label": self.type_label, "amount": float(self.amount)}


@dataclass(frozen=True)
class CostSummary:
    total_amount: Decimal
    by_type: tuple[CostTypeTotal, ...] = ()
    costs: tuple[CostRecord, ...] = ()

    def to_dict(self) -> dict:
        return {
            "total_amount": float(self.total_amount),
            "by_type": [entry.to_dict() for entry in self.by_type],
            "costs": [
                {
                    "id": cost.id,
                    "type": cost.type,
                    "type_label": cost.label,
                    "amount": float(cost.amount),
                    "period_type": cost.period_type,
                    "period_value": cost.period_value,
                    "description": cost.description,
                }
                for cost in self.costs
            ],
        }


@dataclass(frozen=True)
class CostAllocation:
    product_id: str
    product_name: str
    quantity: int
    allocated_cost: Decimal
    cost_per_unit: Decimal = field(default=ZERO)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "allocated_cost": float(self.allocated_cost),
            "cost_per_unit": float(self.cost_per_unit),
        }


def _unique(costs: Iterable[CostRecord]) -> list[CostRecord]:
    seen: set[str] = set()
    unique: list[CostRecord] = []
    for cost in costs:
        if cost.id in seen:
            continue
        seen.add(cost.id)
        unique.append(cost)
    return unique


def collect_costs_for_period(
    costs: Iterable[CostRecord], start_date: str, end_date: str
) -> list[CostRecord]:
    """Every cost (daily or monthly) whose period overlaps the window."""

    return _unique(cost for cost in costs if cost_matches_period(cost, start_date, end_date))


def _monthly_cost_in_month(cost: CostRecord, target: PersianMonth) -> bool:
    parsed = parse_month(cost.period_value)
    if parsed is None:
        logger.warning(
            "Skipping monthly cost %s with unparseable period value %r", cost.id, cost.period_value
        )
        return False
    return parsed == target


def collect_costs_for_month(
    costs: Iterable[CostRecord], year: int | str, month: int | str
) -> list[CostRecord]:
    """Costs of a calendar month.

    Monthly costs are matched on their month directly and daily costs on the
    month part of their date. Other period types go through
    :func:`cost_matches_period` over the month window, which excludes and logs
    them.
    """

    costs = list(costs)
    start, end = month_window(year, month)
    target = PersianMonth(start.year, start.month)

    monthly = [
        cost
        for cost in costs
        if cost.period_type == PeriodType.monthly.value
        and cost.period_value
        and _monthly_cost_in_month(cost, target)
    ]
    daily = [
        cost
        for cost in costs
        if cost.period_type == PeriodType.daily.value
        and cost.period_value
        and date_in_month(cost.period_value, target.year, target.month)
    ]
    others = collect_costs_for_period(
        (
            cost
            for cost in costs
            if cost.period_type not in (PeriodType.monthly.value, PeriodType.daily.value)
            or not cost.period_value
        ),
        str(start),
        str(end),
    )
    return _unique(monthly + daily + others)


def costs_by_type(costs: Iterable[CostRecord]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for cost in costs:
        totals[cost.type] = totals.get(cost.type, ZERO) + as_decimal(cost.amount)
    return totals


def summarize_costs(costs: Iterable[CostRecord]) -> CostSummary:
    costs = tuple(costs)
    labels: dict[str, str] = {}
    for cost in costs:
        labels.setdefault(cost.type, cost.label)

    by_type = tuple(
        CostTypeTotal(type=cost_type, type_label=labels[cost_type], amount=amount)
        for cost_type, amount in costs_by_type(costs).items()
    )
    total = sum((as_decimal(cost.amount) for cost in costs), ZERO)
    return CostSummary(total_amount=total, by_type=by_type, costs=costs)


def _production_quantities(
    productions: Iterable[ProductionRecord],
) -> tuple[dict[str, int], dict[str, str]]:
    quantities: dict[str, int] = {}
    names: dict[str, str] = {}
    for production in productions:
        quantities[production.product_id] = (
            quantities.get(production.product_id, 0) + int(production.quantity or 0)
        )
        names.setdefault(production.product_id, production.product_name)
    return quantities, names


def allocate_costs_to_products(
    total, productions: Iterable[ProductionRecord]
) -> dict[str, Decimal]:
    """Split ``total`` across products by their share of produced quantity.

    Returns an empty mapping when nothing was produced. The last product takes
    the division remainder so the shares add up to ``total`` exactly.
    """

    total = as_decimal(total)
    quantities, _ = _production_quantities(productions)
    total_quantity = sum(quantities.values())
    if total_quantity <= 0:
        return {}

    allocation: dict[str, Decimal] = {}
    remaining = total
    product_ids = [product_id for product_id, qty in quantities.items() if qty > 0]
    for index, product_id in enumerate(product_ids):
        if index == len(product_ids) - 1:
            share = remaining
        else:
            share = total * Decimal(quantities[product_id]) / Decimal(total_quantity)
            remaining -= share
        allocation[product_id] = share
    return allocation


def distribute_costs(total, productions: Iterable[ProductionRecord]) -> list[CostAllocation]:
    productions = list(productions)
    quantities, names = _production_quantities(productions)
    allocation = allocate_costs_to_products(total, productions)

    distribution = []
    for product_id, allocated in allocation.items():
        quantity = quantities[product_id]
        distribution.append(
            CostAllocation(
                product_id=product_id,
                product_name=names.get(product_id, ""),
                quantity=quantity,
                allocated_cost=allocated,
                cost_per_unit=allocated / Decimal(quantity) if quantity else ZERO,
            )
        )
    return distribution
