"""Numeral normalization for Persian and Arabic-Indic digits."""

from __future__ import annotations

PERSIAN_DIGITS = "۰۱۲۳۴۵۶۷۸۹"
ARABIC_INDIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
WESTERN_DIGITS = "0123456789"

_DIGIT_TABLE = str.maketrans(
    PERSIAN_DIGITS + ARABIC_INDIC_DIGITS,
    WESTERN_DIGITS * 2,
)


def normalize_digits(value: str | None) -> str:
    """Return ``value`` with every Persian/Arabic-Indic digit made Western.

    Non-digit characters are left untouched, so the function is idempotent.
    """

    if not value:
        return ""
    return str(value).translate(_DIGIT_TABLE)
