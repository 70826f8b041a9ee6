from __future__ import annotations

import math
import re
from datetime import UTC, date, datetime
from numbers import Real
from typing import Any

from ..models.column import PercentScale

"""Scalar parsers: locale-ambiguous numbers, currency, percentages, dates.

Pure functions with no shared state. None of them raise: anything that cannot
be parsed comes back as ``None`` (never NaN / Infinity / an invalid date).

Number format disambiguation:
- BR  ``1.234,56``  (dot groups, comma decimal)
- EN  ``1,234.56``  (comma groups, dot decimal)
When a string matches both (``1,234``) or neither (``1234.5``) the trailing
``,dd`` rule decides whether the comma is a decimal separator.
"""

__all__ = [
    "PERCENT_SCALE_THRESHOLD",
    "TIMESTAMP_MS_THRESHOLD",
    "parse_number",
    "parse_currency",
    "parse_percent",
    "detect_percent_scale",
    "parse_date",
    "date_key",
    "is_truthy",
    "is_falsy",
    "is_boolean_like",
]

# Median above this -> values are 0-100 percentages
PERCENT_SCALE_THRESHOLD = 1.2
# Numeric timestamps above this are milliseconds, otherwise seconds
TIMESTAMP_MS_THRESHOLD = 1e11

_CURRENCY_PREFIXES = (
    re.compile(r"^R\$\s*", re.IGNORECASE),
    re.compile(r"^\$\s*"),
    re.compile(r"^€\s*"),
)
_BR_NUMBER = re.compile(r"\d{1,3}(\.\d{3})*(,\d+)?")
_EN_NUMBER = re.compile(r"\d{1,3}(,\d{3})*(\.\d+)?")
_COMMA_DECIMAL_TAIL = re.compile(r",\d{1,2}$")
_WHITESPACE = re.compile(r"\s")
# Leading numeric prefix, as accepted by JavaScript's parseFloat
_FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

_BR_SLASH_DATE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_BR_DASH_DATE = re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})")

# CRM flag vocabulary (pt-BR + en)
TRUTHY_VALUES = frozenset({
    "1", "true", "sim", "s", "yes", "y", "ok", "x", "on",
    "ativo", "realizado", "agendado", "ganho", "concluido", "fechado",
})
FALSY_VALUES = frozenset({
    "0", "false", "nao", "não", "n", "no", "off",
    "inativo", "pendente", "cancelado", "perdido", "",
})


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a number here
    return isinstance(value, Real) and not isinstance(value, bool)


def _finite_float(value: Any) -> float | None:
    # ints past the float range are legal JSON; they count as non-finite
    try:
        f = float(value)
    except (OverflowError, ValueError, TypeError):
        return None
    return f if math.isfinite(f) else None


def _parse_float_prefix(text: str) -> float | None:
    m = _FLOAT_PREFIX.match(text.lstrip())
    if m is None:
        return None
    try:
        parsed = float(m.group(0).replace("Infinity", "inf"))
    except ValueError:  # pragma: no cover (regex guarantees a float literal)
        return None
    return parsed if math.isfinite(parsed) else None


def parse_number(value: Any) -> float | int | None:
    """Parse a number supporting BR (1.234,56) and EN (1,234.56) formats.

    Accepts numbers, numeric strings and strings prefixed with ``R$``, ``$``
    or ``€``. Returns None for empty / unparseable / non-finite input.

    >>> parse_number("1.234,56"), parse_number("1,234.56"), parse_number("R$ 10,5")
    (1234.56, 1234.56, 10.5)
    """
    if value is None or value == "":
        return None
    if _is_number(value):
        return value if _finite_float(value) is not None else None
    if not isinstance(value, str):
        return None

    cleaned = value.strip()
    for prefix in _CURRENCY_PREFIXES:
        cleaned = prefix.sub("", cleaned)

    is_br = bool(_BR_NUMBER.fullmatch(cleaned) or _COMMA_DECIMAL_TAIL.search(cleaned))
    is_en = bool(_EN_NUMBER.fullmatch(cleaned))

    if is_br and not is_en:
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif is_en and not is_br:
        cleaned = cleaned.replace(",", "")
    else:
        # ambiguous ("1,234") or plain ("1234.5")
        cleaned = _WHITESPACE.sub("", cleaned)
        if _COMMA_DECIMAL_TAIL.search(cleaned):
            cleaned = cleaned.replace(".", "").replace(",", ".", 1)
        else:
            cleaned = cleaned.replace(",", "")

    return _parse_float_prefix(cleaned)


# Currency symbols are already stripped by parse_number
parse_currency = parse_number


def parse_percent(value: Any, scale: PercentScale | str | None = PercentScale.UNIT) -> float | int | None:
    """Parse a percentage and normalize it to the 0-1 range.

    ``scale`` tells how the raw value is expressed: "0to1" (0.25 == 25%) or
    "0to100" (25 == 25%).
    """
    num = parse_number(value)
    if num is None:
        return None
    if scale == PercentScale.HUNDRED:
        return num / 100
    return num


def detect_percent_scale(values: list[Any], threshold: float = PERCENT_SCALE_THRESHOLD) -> PercentScale:
    """Guess whether percentage values are 0-1 or 0-100 from their median.

    >>> detect_percent_scale([0.1, 0.2, 0.35]).value, detect_percent_scale([10, 20, 35]).value
    ('0to1', '0to100')
    """
    valid = sorted(f for f in (_finite_float(v) for v in values if _is_number(v)) if f is not None)
    if not valid:
        return PercentScale.UNIT
    median = valid[len(valid) // 2]
    return PercentScale.HUNDRED if median > threshold else PercentScale.UNIT


def _to_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(UTC).replace(tzinfo=None)


def parse_date(value: Any, ms_threshold: float = TIMESTAMP_MS_THRESHOLD) -> datetime | None:
    """Parse a date from a datetime, a UNIX timestamp or a string.

    Strings are tried as ISO 8601 first, then DD/MM/YYYY, then DD-MM-YYYY.
    The result is a naive datetime in UTC.
    """
    if value is None or (isinstance(value, str) and value == ""):
        return None
    if isinstance(value, datetime):
        return _to_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if _is_number(value):
        num = _finite_float(value)
        if num is None:
            return None
        millis = num if num > ms_threshold else num * 1000
        try:
            return datetime.fromtimestamp(millis / 1000, UTC).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return _to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        pass

    for pattern in (_BR_SLASH_DATE, _BR_DASH_DATE):
        m = pattern.fullmatch(text)
        if m is None:
            continue
        day, month, year = (int(g) for g in m.groups())
        try:
            return datetime(year, month, day)
        except ValueError:
            return None
    return None


def date_key(dt: datetime) -> str:
    """YYYY-MM-DD key used to bucket rows by day."""
    return dt.strftime("%Y-%m-%d")


def is_truthy(value: Any) -> bool:
    if value is None or value == "":
        return False
    if isinstance(value, bool):
        return value
    if _is_number(value):
        return value > 0
    return str(value).strip().lower() in TRUTHY_VALUES


def is_falsy(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    return str(value).strip().lower() in FALSY_VALUES


def is_boolean_like(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if _is_number(value):
        return value in (0, 1)
    v = str(value).strip().lower()
    return v in TRUTHY_VALUES or v in FALSY_VALUES
