from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, UniqueConstraint, event
from werkzeug.security import check_password_hash, generate_password_hash

from accounting.loans import LoanTransactionType
from accounting.records import (
    CostRecord,
    CostType,
    EmployeeRecord,
    InvoiceItemRecord,
    InvoiceRecord,
    InvoiceStatus,
    LegacyCostFields,
    LoanRecord,
    PeriodType,
    PersonRecord,
    ProductRecord,
    ProductionRecord,
    SalaryPaymentRecord,
    SaleRecord,
)
from extensions import db


class RoleEnum(str, Enum):
    admin = "admin"
    staff = "staff"


class ProductionShift(str, Enum):
    morning = "morning"
    evening = "evening"
    night = "night"


class PaymentMethod(str, Enum):
    cash = "cash"
    transfer = "transfer"
    check = "check"


COST_TYPE_LABELS: dict[CostType, str] = {
    CostType.electricity: "برق",
    CostType.water: "آب",
    CostType.gas: "گاز",
    CostType.salary: "حقوق",
    CostType.rent: "اجاره",
    CostType.other: "سایر",
}


def _decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _enum_value(value) -> str:
    return getattr(value, "value", value)


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.Enum(RoleEnum), nullable=False, default=RoleEnum.staff)
    active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def set_password(self, pw): self.password_hash = generate_password_hash(pw)
    def check_password(self, pw): return check_password_hash(self.password_hash, pw)


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    dimensions = db.Column(db.String(120), nullable=False, default="")
    material = db.Column(db.String(120), nullable=False, default="")
    unit_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (CheckConstraint("unit_price >= 0", name="ck_products_unit_price_non_negative"),)

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            id=str(self.id),
            name=self.name,
            dimensions=self.dimensions or "",
            material=self.material or "",
            unit_price=_decimal(self.unit_price),
        )


class Production(db.Model):
    __tablename__ = "productions"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    product_name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    date = db.Column(db.String(10), nullable=False, index=True)
    shift = db.Column(db.Enum(ProductionShift), nullable=False, default=ProductionShift.morning)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    product = db.relationship("Product", backref=db.backref("productions", lazy="dynamic"))

    __table_args__ = (CheckConstraint("quantity > 0", name="ck_productions_quantity_positive"),)

    def to_record(self) -> ProductionRecord:
        return ProductionRecord(
            id=str(self.id),
            product_id=str(self.product_id),
            product_name=self.product_name,
            quantity=int(self.quantity or 0),
            date=self.date,
            shift=_enum_value(self.shift) or "",
        )


class Cost(db.Model):
    __tablename__ = "costs"

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.Enum(CostType), nullable=False, index=True)
    type_label = db.Column(db.String(120), nullable=False, default="")
    amount = db.Column(db.Numeric(16, 2), nullable=False, default=0)
    period_type = db.Column(db.Enum(PeriodType), nullable=True)
    period_value = db.Column(db.String(10), nullable=True, index=True)
    description = db.Column(db.Text, nullable=False, default="")
    # Older rows were tied to a single day and product.
    legacy_date = db.Column(db.String(10), nullable=True)
    legacy_product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True)
    legacy_production_date = db.Column(db.String(10), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (CheckConstraint("amount >= 0", name="ck_costs_amount_non_negative"),)

    def to_record(self) -> CostRecord:
        return CostRecord(
            id=str(self.id),
            type=_enum_value(self.type),
            type_label=self.type_label or "",
            amount=_decimal(self.amount),
            period_type=_enum_value(self.period_type),
            period_value=self.period_value,
            description=self.description or "",
            legacy=LegacyCostFields(
                date=self.legacy_date,
                product_id=str(self.legacy_product_id) if self.legacy_product_id else None,
                production_date=self.legacy_production_date,
            ),
        )


@event.listens_for(Cost, "before_insert")
def _cost_defaults(mapper, connection, target):  # pragma: no cover - SQLAlchemy hook
    if not target.legacy_date and target.period_value:
        target.legacy_date = target.period_value
    if not target.type_label and target.type is not None:
        target.type_label = COST_TYPE_LABELS.get(CostType(_enum_value(target.type)), "")


class Invoice(db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(32), nullable=False, unique=True)
    status = db.Column(db.Enum(InvoiceStatus), nullable=False, default=InvoiceStatus.draft, index=True)
    customer_name = db.Column(db.String(200), nullable=False)
    customer_address = db.Column(db.String(255))
    customer_phone = db.Column(db.String(40))
    customer_tax_id = db.Column(db.String(40))
    subtotal = db.Column(db.Numeric(16, 2), nullable=False, default=0)
    discount = db.Column(db.Numeric(16, 2), nullable=False, default=0)
    tax = db.Column(db.Numeric(16, 2), nullable=False, default=0)
    total = db.Column(db.Numeric(16, 2), nullable=False, default=0)
    date = db.Column(db.String(10), nullable=False)
    due_date = db.Column(db.String(10))
    paid_date = db.Column(db.String(10))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship(
        "InvoiceItem",
        backref="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )

    def to_record(self) -> InvoiceRecord:
        return InvoiceRecord(
            id=str(self.id),
            invoice_number=self.invoice_number,
            status=_enum_value(self.status),
            customer_name=self.customer_name,
            items=tuple(item.to_record() for item in self.items),
            subtotal=_decimal(self.subtotal),
            discount=_decimal(self.discount),
            tax=_decimal(self.tax),
            total=_decimal(self.total),
            date=self.date,
            paid_date=self.paid_date,
        )


class InvoiceItem(db.Model):
    __tablename__ = "invoice_items"

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(
        db.Integer, db.ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    product_name = db.Column(db.String(200), nullable=False)
    dimensions = db.Column(db.String(120), nullable=False, default="")
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(14, 2), nullable=False)
    total = db.Column(db.Numeric(16, 2), nullable=False)

    __table_args__ = (CheckConstraint("quantity > 0", name="ck_invoice_items_quantity_positive"),)

    def to_record(self) -> InvoiceItemRecord:
        return InvoiceItemRecord(
            id=str(self.id) if self.id is not None else None,
            product_id=str(self.product_id),
            product_name=self.product_name,
            dimensions=self.dimensions or "",
            quantity=int(self.quantity or 0),
            unit_price=_decimal(self.unit_price),
            total=_decimal(self.total),
        )


class Sale(db.Model):
    __tablename__ = "sales"

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(db.Integer, db.ForeignKey("invoices.id", ondelete="SET NULL"), index=True)
    invoice_item_id = db.Column(db.Integer, db.ForeignKey("invoice_items.id", ondelete="SET NULL"))
    customer_name = db.Column(db.String(200), nullable=False, default="")
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    product_name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(14, 2), nullable=False)
    total_price = db.Column(db.Numeric(16, 2), nullable=False)
    date = db.Column(db.String(10), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # One sale per invoice line, however many times "mark paid" is submitted.
    __table_args__ = (UniqueConstraint("invoice_item_id", name="uq_sales_invoice_item_id"),)

    def to_record(self) -> SaleRecord:
        return SaleRecord(
            id=str(self.id),
            invoice_id=str(self.invoice_id) if self.invoice_id else None,
            invoice_item_id=str(self.invoice_item_id) if self.invoice_item_id else None,
            customer_name=self.customer_name or "",
            product_id=str(self.product_id),
            product_name=self.product_name,
            quantity=int(self.quantity or 0),
            unit_price=_decimal(self.unit_price),
            total_price=_decimal(self.total_price),
            date=self.date,
        )


class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    phone = db.Column(db.String(40))
    address = db.Column(db.String(255))
    notes = db.Column(db.Text)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_record(self) -> EmployeeRecord:
        return EmployeeRecord(id=str(self.id), name=self.name, is_active=bool(self.is_active))


class SalaryPayment(db.Model):
    __tablename__ = "salary_payments"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)
    employee_name = db.Column(db.String(200), nullable=False)
    month = db.Column(db.String(7), nullable=False, index=True)
    payment_date = db.Column(db.String(10), nullable=False)
    daily_salary = db.Column(db.Numeric(14, 2), nullable=False)
    days_worked = db.Column(db.Integer, nullable=False)
    amount = db.Column(db.Numeric(16, 2), nullable=False)
    payment_method = db.Column(db.Enum(PaymentMethod), nullable=False, default=PaymentMethod.cash)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    employee = db.relationship("Employee", backref=db.backref("salary_payments", lazy="dynamic"))

    __table_args__ = (
        CheckConstraint("days_worked >= 0", name="ck_salary_payments_days_non_negative"),
        CheckConstraint("amount >= 0", name="ck_salary_payments_amount_non_negative"),
    )

    def to_record(self) -> SalaryPaymentRecord:
        return SalaryPaymentRecord(
            id=str(self.id),
            employee_id=str(self.employee_id),
            employee_name=self.employee_name,
            month=self.month,
            payment_date=self.payment_date,
            daily_salary=_decimal(self.daily_salary),
            days_worked=int(self.days_worked or 0),
            amount=_decimal(self.amount),
            payment_method=_enum_value(self.payment_method),
        )


class Person(db.Model):
    __tablename__ = "people"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    phone = db.Column(db.String(40))
    address = db.Column(db.String(255))
    notes = db.Column(db.Text)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_record(self) -> PersonRecord:
        return PersonRecord(id=str(self.id), name=self.name, is_active=bool(self.is_active))


class Loan(db.Model):
    __tablename__ = "loans"

    id = db.Column(db.Integer, primary_key=True)
    person_id = db.Column(db.Integer, db.ForeignKey("people.id"), nullable=False, index=True)
    person_name = db.Column(db.String(200), nullable=False)
    transaction_type = db.Column(db.Enum(LoanTransactionType), nullable=False)
    # Signed: positive when lent, negative when borrowed.
    amount = db.Column(db.Numeric(16, 2), nullable=False)
    transaction_date = db.Column(db.String(10), nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    person = db.relationship("Person", backref=db.backref("loans", lazy="dynamic"))

    def to_record(self) -> LoanRecord:
        return LoanRecord(
            id=str(self.id),
            person_id=str(self.person_id),
            person_name=self.person_name,
            transaction_type=_enum_value(self.transaction_type),
            amount=_decimal(self.amount),
            transaction_date=self.transaction_date,
            description=self.description or "",
        )
