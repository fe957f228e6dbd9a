"""Immutable snapshots of ledger rows consumed by the accounting core."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class CostType(str, Enum):
    electricity = "electricity"
    water = "water"
    gas = "gas"
    salary = "salary"
    rent = "rent"
    other = "other"


class PeriodType(str, Enum):
    daily = "daily"
    monthly = "monthly"
    yearly = "yearly"


class InvoiceStatus(str, Enum):
    draft = "draft"
    approved = "approved"
    paid = "paid"


@dataclass(frozen=True)
class ProductRecord:
    id: str
    name: str
    dimensions: str = ""
    material: str = ""
    unit_price: Decimal = Decimal("0")


@dataclass(frozen=True)
class ProductionRecord:
    id: str
    product_id: str
    product_name: str
    quantity: int
    date: str
    shift: str = ""


@dataclass(frozen=True)
class LegacyCostFields:
    """Deprecated cost columns kept only for backward compatibility."""

    date: Optional[str] = None
    product_id: Optional[str] = None
    production_date: Optional[str] = None


@dataclass(frozen=True)
class CostRecord:
    id: str
    type: str
    amount: Decimal
    period_type: Optional[str]
    period_value: Optional[str]
    type_label: str = ""
    description: str = ""
    legacy: LegacyCostFields = field(default_factory=LegacyCostFields)

    @property
    def label(self) -> str:
        return self.type_label or self.type


@dataclass(frozen=True)
class InvoiceItemRecord:
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total: Decimal
    dimensions: str = ""
    id: Optional[str] = None


@dataclass(frozen=True)
class InvoiceRecord:
    id: str
    invoice_number: str
    status: str
    customer_name: str
    items: tuple[InvoiceItemRecord, ...]
    subtotal: Decimal
    total: Decimal
    date: str
    tax: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    paid_date: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.paid.value


@dataclass(frozen=True)
class SaleRecord:
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    date: str
    invoice_id: Optional[str] = None
    invoice_item_id: Optional[str] = None
    customer_name: str = ""
    id: Optional[str] = None


@dataclass(frozen=True)
class EmployeeRecord:
    id: str
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class SalaryPaymentRecord:
    id: str
    employee_id: str
    month: str
    payment_date: str
    daily_salary: Decimal
    days_worked: int
    amount: Decimal
    employee_name: str = ""
    payment_method: str = "cash"


@dataclass(frozen=True)
class PersonRecord:
    id: str
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class LoanRecord:
    id: str
    person_id: str
    transaction_type: str
    amount: Decimal
    transaction_date: str
    person_name: str = ""
    description: str = ""
