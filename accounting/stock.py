"""Stock levels derived from production and paid invoices."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from .invoices import invoice_to_sales
from .records import InvoiceRecord, ProductRecord, ProductionRecord, SaleRecord


@dataclass(frozen=True)
class Stock:
    product_id: str
    product_name: str
    total_production: int
    total_sales: int
    remaining_stock: int
    last_updated: str

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "total_production": self.total_production,
            "total_sales": self.total_sales,
            "remaining_stock": self.remaining_stock,
            "last_updated": self.last_updated,
        }


def sales_from_invoices(invoices: Iterable[InvoiceRecord]) -> list[SaleRecord]:
    """Synthesize sales from every paid invoice; other statuses are ignored."""

    sales: list[SaleRecord] = []
    for invoice in invoices:
        if invoice.is_paid:
            sales.extend(invoice_to_sales(invoice))
    return sales


def effective_sales(
    invoices: Iterable[InvoiceRecord], legacy_sales: Iterable[SaleRecord] = ()
) -> list[SaleRecord]:
    """Paid-invoice sales plus direct sales that are not tied to an invoice.

    Persisted sales that carry an invoice id are skipped because the invoice
    itself is the source of truth for them.
    """

    sales = sales_from_invoices(invoices)
    sales.extend(sale for sale in legacy_sales if not sale.invoice_id)
    return sales


def _stock_for(
    product_id: str,
    productions: list[ProductionRecord],
    sales: list[SaleRecord],
    fallback_name: str = "",
) -> Stock:
    product_productions = [p for p in productions if p.product_id == product_id]
    product_sales = [s for s in sales if s.product_id == product_id]

    total_production = sum(int(p.quantity or 0) for p in product_productions)
    total_sales = sum(int(s.quantity or 0) for s in product_sales)

    name = fallback_name
    if not name and product_productions:
        name = product_productions[0].product_name
    if not name and product_sales:
        name = product_sales[0].product_name

    return Stock(
        product_id=product_id,
        product_name=name,
        total_production=total_production,
        total_sales=total_sales,
        remaining_stock=max(0, total_production - total_sales),
        last_updated=datetime.now(timezone.utc).isoformat(),
    )


def calculate_stock(
    product_id: str,
    productions: Iterable[ProductionRecord],
    invoices: Iterable[InvoiceRecord],
    legacy_sales: Iterable[SaleRecord] = (),
    product_name: str = "",
) -> Stock:
    """Stock of one product as of now: production minus paid sales, floored at 0."""

    return _stock_for(
        product_id,
        list(productions),
        effective_sales(invoices, legacy_sales),
        fallback_name=product_name,
    )


def calculate_all_stocks(
    products: Iterable[ProductRecord],
    productions: Iterable[ProductionRecord],
    invoices: Iterable[InvoiceRecord],
    legacy_sales: Iterable[SaleRecord] = (),
) -> list[Stock]:
    productions = list(productions)
    sales = effective_sales(invoices, legacy_sales)
    return [
        _stock_for(product.id, productions, sales, fallback_name=product.name)
        for product in products
    ]


def get_product_stock(
    product_id: str,
    productions: Iterable[ProductionRecord],
    invoices: Iterable[InvoiceRecord],
    legacy_sales: Iterable[SaleRecord] = (),
) -> int:
    return calculate_stock(product_id, productions, invoices, legacy_sales).remaining_stock


def has_sufficient_stock(
    product_id: str,
    requested_quantity: int,
    productions: Iterable[ProductionRecord],
    invoices: Iterable[InvoiceRecord],
    legacy_sales: Iterable[SaleRecord] = (),
) -> bool:
    return get_product_stock(product_id, productions, invoices, legacy_sales) >= int(requested_quantity)
