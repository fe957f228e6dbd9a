from . import (
    auth,
    costs,
    invoices,
    loans,
    payroll,
    production,
    products,
    reports,
    sales,
    stock,
)

__all__ = [
    "auth",
    "costs",
    "invoices",
    "loans",
    "payroll",
    "production",
    "products",
    "reports",
    "sales",
    "stock",
]
