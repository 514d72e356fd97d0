"""
Text helpers for attendance exports.

Time-clock exports often arrive with damaged encoding, so every keyword
comparison goes through strip_diacritics() and lower-casing.
"""

import re
import unicodedata
from datetime import date
from typing import Optional

_NON_DIGITS = re.compile(r"\D")

_DATE_PATTERNS = (
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), ("day", "month", "year")),
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), ("year", "month", "day")),
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), ("day", "month", "year")),
)

WEEKEND_LABELS = frozenset({"CN", "T7"})


def strip_diacritics(value: str) -> str:
    """Remove combining marks; 'đ' has no decomposition and is mapped by hand."""
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("đ", "d").replace("Đ", "D")


def fold(value: str) -> str:
    """Accent-stripped, lower-cased form used for keyword matching."""
    return strip_diacritics(value).lower()


def normalize_employee_code(raw_code: str, prefix: str = "NV", digits: int = 5) -> str:
    """
    Convert a raw time-clock code to the directory format.

    "2" -> "NV00002", "00002" -> "NV00002", "NV00002" -> "NV00002".
    Codes without any digit are returned unchanged.
    """
    numeric = _NON_DIGITS.sub("", raw_code or "")
    if not numeric:
        return raw_code
    return f"{prefix}{numeric.zfill(digits)}"


def parse_export_date(value: str) -> Optional[date]:
    """Parse DD/MM/YYYY, YYYY-MM-DD or DD-MM-YYYY; None when invalid."""
    text = (value or "").strip()
    for pattern, order in _DATE_PATTERNS:
        match = pattern.match(text)
        if not match:
            continue
        parts = dict(zip(order, (int(g) for g in match.groups())))
        try:
            return date(parts["year"], parts["month"], parts["day"])
        except ValueError:
            return None
    return None


def day_of_week_label(day: date) -> str:
    """Localized weekday label: 'T2' (Monday) ... 'T7' (Saturday), 'CN' (Sunday)."""
    weekday = day.weekday()
    if weekday == 6:
        return "CN"
    return f"T{weekday + 2}"


def is_weekend_label(label: Optional[str]) -> bool:
    """True for 'CN', 'T7' and the dotted 'T.7' variant used by some exports."""
    if not label:
        return False
    return label.replace(".", "").replace(" ", "").upper() in WEEKEND_LABELS
