import re

from marshmallow import Schema, ValidationError, fields, pre_load, validates, validates_schema
from marshmallow.validate import Length, OneOf, Range

from accounting.digits import normalize_digits
from accounting.loans import LoanTransactionType
from accounting.periods import parse_date, parse_month
from accounting.records import CostType, PeriodType
from models import PaymentMethod, ProductionShift

DATE_PATTERN = re.compile(r"^\d{4}/\d{2}/\d{2}$")
MONTH_PATTERN = re.compile(r"^\d{4}/\d{2}$")

MAX_AMOUNT = 999_999_999_999

# Persian shift names accepted from the UI alongside the English values.
SHIFT_ALIASES = {
    "صبح": ProductionShift.morning.value,
    "عصر": ProductionShift.evening.value,
    "شب": ProductionShift.night.value,
}


def _enum_value(value):
    return getattr(value, "value", value)


def _money(value):
    return float(value) if value is not None else None


# --- helpers ---------------------------------------------------------------


def canonical_date(value):
    """Western-digit, zero-padded ``YYYY/MM/DD`` or the normalized input."""

    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is not None:
        return str(parsed)
    return normalize_digits(str(value)).strip()


def canonical_month(value):
    if value is None:
        return None
    text = normalize_digits(str(value)).strip()
    if text.count("/") + text.count("-") != 1:
        return text
    parsed = parse_month(text)
    return str(parsed) if parsed is not None else text


def _normalize_keys(data, date_keys=(), month_keys=(), number_keys=()):
    data = dict(data or {})
    for key in date_keys:
        if data.get(key) not in (None, ""):
            data[key] = canonical_date(data[key])
    for key in month_keys:
        if data.get(key) not in (None, ""):
            data[key] = canonical_month(data[key])
    for key in number_keys:
        if isinstance(data.get(key), str):
            data[key] = normalize_digits(data[key]).replace(",", "").strip()
    return data


def validate_date_shape(value):
    if not DATE_PATTERN.match(value or ""):
        raise ValidationError("Date must use the YYYY/MM/DD format.")
    if parse_date(value) is None:
        raise ValidationError("Date is out of range.")


def validate_month_shape(value):
    if not MONTH_PATTERN.match(value or ""):
        raise ValidationError("Month must use the YYYY/MM format.")
    if parse_month(value) is None:
        raise ValidationError("Month is out of range.")


# --- output schemas ---------------------------------------------------------


class UserSchema(Schema):
    id = fields.Int()
    name = fields.Str()
    email = fields.Str()
    role = fields.Function(lambda obj: _enum_value(obj.role))
    active = fields.Bool()


class ProductSchema(Schema):
    id = fields.Int()
    name = fields.Str()
    dimensions = fields.Str()
    material = fields.Str()
    unit_price = fields.Function(lambda obj: _money(obj.unit_price))
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class ProductionSchema(Schema):
    id = fields.Int()
    product_id = fields.Int()
    product_name = fields.Str()
    quantity = fields.Int()
    date = fields.Str()
    shift = fields.Function(lambda obj: _enum_value(obj.shift))
    created_at = fields.DateTime()


class CostSchema(Schema):
    id = fields.Int()
    type = fields.Function(lambda obj: _enum_value(obj.type))
    type_label = fields.Str()
    amount = fields.Function(lambda obj: _money(obj.amount))
    period_type = fields.Function(lambda obj: _enum_value(obj.period_type))
    period_value = fields.Str(allow_none=True)
    description = fields.Str()
    date = fields.Str(attribute="legacy_date", allow_none=True)
    created_at = fields.DateTime()


class InvoiceItemSchema(Schema):
    id = fields.Int()
    product_id = fields.Int()
    product_name = fields.Str()
    dimensions = fields.Str()
    quantity = fields.Int()
    unit_price = fields.Function(lambda obj: _money(obj.unit_price))
    total = fields.Function(lambda obj: _money(obj.total))


class InvoiceSchema(Schema):
    id = fields.Int()
    invoice_number = fields.Str()
    status = fields.Function(lambda obj: _enum_value(obj.status))
    customer_name = fields.Str()
    customer_address = fields.Str(allow_none=True)
    customer_phone = fields.Str(allow_none=True)
    customer_tax_id = fields.Str(allow_none=True)
    items = fields.Nested(InvoiceItemSchema, many=True)
    subtotal = fields.Function(lambda obj: _money(obj.subtotal))
    discount = fields.Function(lambda obj: _money(obj.discount))
    tax = fields.Function(lambda obj: _money(obj.tax))
    total = fields.Function(lambda obj: _money(obj.total))
    date = fields.Str()
    due_date = fields.Str(allow_none=True)
    paid_date = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class SaleSchema(Schema):
    id = fields.Int()
    invoice_id = fields.Int(allow_none=True)
    invoice_item_id = fields.Int(allow_none=True)
    customer_name = fields.Str()
    product_id = fields.Int()
    product_name = fields.Str()
    quantity = fields.Int()
    unit_price = fields.Function(lambda obj: _money(obj.unit_price))
    total_price = fields.Function(lambda obj: _money(obj.total_price))
    date = fields.Str()


class EmployeeSchema(Schema):
    id = fields.Int()
    name = fields.Str()
    phone = fields.Str(allow_none=True)
    address = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)
    is_active = fields.Bool()


class SalaryPaymentSchema(Schema):
    id = fields.Int()
    employee_id = fields.Int()
    employee_name = fields.Str()
    month = fields.Str()
    payment_date = fields.Str()
    daily_salary = fields.Function(lambda obj: _money(obj.daily_salary))
    days_worked = fields.Int()
    amount = fields.Function(lambda obj: _money(obj.amount))
    payment_method = fields.Function(lambda obj: _enum_value(obj.payment_method))
    description = fields.Str(allow_none=True)


class PersonSchema(Schema):
    id = fields.Int()
    name = fields.Str()
    phone = fields.Str(allow_none=True)
    address = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)
    is_active = fields.Bool()


class LoanSchema(Schema):
    id = fields.Int()
    person_id = fields.Int()
    person_name = fields.Str()
    transaction_type = fields.Function(lambda obj: _enum_value(obj.transaction_type))
    amount = fields.Function(lambda obj: _money(obj.amount))
    transaction_date = fields.Str()
    description = fields.Str(allow_none=True)


# --- input schemas ----------------------------------------------------------


class ProductCreateSchema(Schema):
    name = fields.Str(required=True, validate=Length(min=1, max=200))
    dimensions = fields.Str(load_default="")
    material = fields.Str(load_default="")
    unit_price = fields.Decimal(required=True, validate=Range(min=0, max=MAX_AMOUNT))

    @pre_load
    def normalize_inputs(self, in_data, **kwargs):
        data = _normalize_keys(in_data, number_keys=("unit_price",))
        if isinstance(data.get("name"), str):
            data["name"] = data["name"].strip()
        return data


class ProductUpdateSchema(ProductCreateSchema):
    name = fields.Str(validate=Length(min=1, max=200))
    dimensions = fields.Str()
    material = fields.Str()
    unit_price = fields.Decimal(validate=Range(min=0, max=MAX_AMOUNT))


class ProductionCreateSchema(Schema):
    """Validate a day's production entry; digits may be Persian."""

    product_id = fields.Int(required=True)
    quantity = fields.Int(required=True, strict=False, validate=Range(min=1))
    date = fields.Str(required=True)
    shift = fields.Str(load_default=ProductionShift.morning.value,
                       validate=OneOf([s.value for s in ProductionShift]))

    @pre_load
    def normalize_inputs(self, in_data, **kwargs):
        data = _normalize_keys(in_data, date_keys=("date",), number_keys=("quantity", "product_id"))
        shift = data.get("shift")
        if isinstance(shift, str):
            data["shift"] = SHIFT_ALIASES.get(shift.strip(), shift.strip().lower())
        return data

    @validates("date")
    def validate_date(self, value, **kwargs):
        validate_date_shape(value)


class CostCreateSchema(Schema):
    type = fields.Str(required=True, validate=OneOf([c.value for c in CostType]))
    type_label = fields.Str(load_default="")
    amount = fields.Decimal(required=True, validate=Range(min=0, max=MAX_AMOUNT))
    period_type = fields.Str(required=True, validate=OneOf([p.value for p in PeriodType]))
    period_value = fields.Str(required=True)
    description = fields.Str(load_default="")
    date = fields.Str(allow_none=True)
    product_id = fields.Int(allow_none=True)
    production_date = fields.Str(allow_none=True)

    @pre_load
    def normalize_inputs(self, in_data, **kwargs):
        data = _normalize_keys(
            in_data,
            date_keys=("date", "production_date"),
            number_keys=("amount",),
        )
        value = data.get("period_value")
        if value not in (None, ""):
            if data.get("period_type") == PeriodType.monthly.value:
                data["period_value"] = canonical_month(value)
            elif data.get("period_type") == PeriodType.daily.value:
                data["period_value"] = canonical_date(value)
            else:
                data["period_value"] = normalize_digits(str(value)).strip()
        return data

    @validates_schema
    def validate_period(self, data, **kwargs):
        period_type = data.get("period_type")
        value = data.get("period_value") or ""
        try:
            if period_type == PeriodType.daily.value:
                validate_date_shape(value)
            elif period_type == PeriodType.monthly.value:
                validate_month_shape(value)
            elif period_type == PeriodType.yearly.value and not re.match(r"^\d{4}$", value):
                raise ValidationError("Year must use the YYYY format.")
        except ValidationError as error:
            raise ValidationError(error.messages, field_name="period_value") from error


class InvoiceItemInputSchema(Schema):
    product_id = fields.Int(required=True)
    quantity = fields.Int(required=True, strict=False, validate=Range(min=1))

    @pre_load
    def normalize_inputs(self, in_data, **kwargs):
        return _normalize_keys(in_data, number_keys=("quantity", "product_id"))


class InvoiceCreateSchema(Schema):
    customer_name = fields.Str(required=True, validate=Length(min=1, max=200))
    customer_address = fields.Str(allow_none=True)
    customer_phone = fields.Str(allow_none=True)
    customer_tax_id = fields.Str(allow_none=True)
    date = fields.Str(required=True)
    due_date = fields.Str(allow_none=True)
    discount = fields.Decimal(load_default=0, validate=Range(min=0, max=MAX_AMOUNT))
    notes = fields.Str(allow_none=True)
    items = fields.List(fields.Nested(InvoiceItemInputSchema), required=True, validate=Length(min=1))

    @pre_load
    def normalize_inputs(self, in_data, **kwargs):
        data = _normalize_keys(
            in_data,
            date_keys=("date", "due_date"),
            number_keys=("discount", "customer_phone"),
        )
        if isinstance(data.get("customer_name"), str):
            data["customer_name"] = data["customer_name"].strip()
        return data

    @validates("date")
    def validate_date(self, value, **kwargs):
        validate_date_shape(value)

    @validates("due_date")
    def validate_due_date(self, value, **kwargs):
        if value:
            validate_date_shape(value)


class InvoiceUpdateSchema(InvoiceCreateSchema):
    """Edits to a draft invoice; every field is optional."""

    customer_name = fields.Str(validate=Length(min=1, max=200))
    date = fields.Str()
    discount = fields.Decimal(validate=Range(min=0, max=MAX_AMOUNT))
    items = fields.List(fields.Nested(InvoiceItemInputSchema), validate=Length(min=1))


class InvoicePaySchema(Schema):
    paid_date = fields.Str(allow_none=True)

    @pre_load
    def normalize_inputs(self, in_data, **kwargs):
        return _normalize_keys(in_data, date_keys=("paid_date",))

    @validates("paid_date")
    def validate_paid_date(self, value, **kwargs):
        if value:
            validate_date_shape(value)


class EmployeeCreateSchema(Schema):
    name = fields.Str(required=True, validate=Length(min=1, max=200))
    phone = fields.Str(allow_none=True)
    address = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)
    is_active = fields.Bool(load_default=True)

    @pre_load
    def normalize_inputs(self, in_data, **kwargs):
        return _normalize_keys(in_data, number_keys=("phone",))


class SalaryPaymentCreateSchema(Schema):
    employee_id = fields.Int(required=True)
    month = fields.Str(required=True)
    payment_date = fields.Str(required=True)
    daily_salary = fields.Decimal(required=True, validate=Range(min=0, max=MAX_AMOUNT))
    days_worked = fields.Int(required=True, strict=False, validate=Range(min=0, max=31))
    amount = fields.Decimal(required=True, validate=Range(min=0, max=MAX_AMOUNT))
    payment_method = fields.Str(load_default=PaymentMethod.cash.value,
                                validate=OneOf([m.value for m in PaymentMethod]))
    description = fields.Str(allow_none=True)

    @pre_load
    def normalize_inputs(self, in_data, **kwargs):
        return _normalize_keys(
            in_data,
            date_keys=("payment_date",),
            month_keys=("month",),
            number_keys=("employee_id", "daily_salary", "days_worked", "amount"),
        )

    @validates("month")
    def validate_month(self, value, **kwargs):
        validate_month_shape(value)

    @validates("payment_date")
    def validate_payment_date(self, value, **kwargs):
        validate_date_shape(value)


class EmployeeUpdateSchema(EmployeeCreateSchema):
    name = fields.Str(validate=Length(min=1, max=200))
    is_active = fields.Bool()


class SalaryPaymentUpdateSchema(SalaryPaymentCreateSchema):
    employee_id = fields.Int()
    month = fields.Str()
    payment_date = fields.Str()
    daily_salary = fields.Decimal(validate=Range(min=0, max=MAX_AMOUNT))
    days_worked = fields.Int(strict=False, validate=Range(min=0, max=31))
    amount = fields.Decimal(validate=Range(min=0, max=MAX_AMOUNT))
    payment_method = fields.Str(validate=OneOf([m.value for m in PaymentMethod]))


class PersonCreateSchema(EmployeeCreateSchema):
    pass


class PersonUpdateSchema(EmployeeUpdateSchema):
    pass


class LoanCreateSchema(Schema):
    person_id = fields.Int(required=True)
    transaction_type = fields.Str(required=True,
                                  validate=OneOf([t.value for t in LoanTransactionType]))
    amount = fields.Decimal(required=True, validate=Range(min=0, max=MAX_AMOUNT, min_inclusive=False))
    transaction_date = fields.Str(required=True)
    description = fields.Str(allow_none=True)

    @pre_load
    def normalize_inputs(self, in_data, **kwargs):
        return _normalize_keys(
            in_data,
            date_keys=("transaction_date",),
            number_keys=("person_id", "amount"),
        )

    @validates("transaction_date")
    def validate_transaction_date(self, value, **kwargs):
        validate_date_shape(value)


class LoanUpdateSchema(LoanCreateSchema):
    person_id = fields.Int()
    transaction_type = fields.Str(validate=OneOf([t.value for t in LoanTransactionType]))
    amount = fields.Decimal(validate=Range(min=0, max=MAX_AMOUNT, min_inclusive=False))
    transaction_date = fields.Str()


class SaleCreateSchema(Schema):
    """A direct sale recorded outside the invoice workflow."""

    customer_name = fields.Str(required=True, validate=Length(min=1, max=200))
    product_id = fields.Int(required=True)
    quantity = fields.Int(required=True, strict=False, validate=Range(min=1))
    unit_price = fields.Decimal(validate=Range(min=0, max=MAX_AMOUNT))
    date = fields.Str(required=True)

    @pre_load
    def normalize_inputs(self, in_data, **kwargs):
        data = _normalize_keys(
            in_data,
            date_keys=("date",),
            number_keys=("product_id", "quantity", "unit_price"),
        )
        if isinstance(data.get("customer_name"), str):
            data["customer_name"] = data["customer_name"].strip()
        return data

    @validates("date")
    def validate_date(self, value, **kwargs):
        validate_date_shape(value)
