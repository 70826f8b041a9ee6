from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Column-level domain models.

ColumnDescriptor is computed once per normalization pass and never mutated.
ColumnType / PercentScale are str-valued enums so they compare equal to the
plain strings found in JSON spec documents ("date", "0to100", ...).
"""

__all__ = [
    "ColumnType",
    "PercentScale",
    "ColumnDescriptor",
    "ColumnStats",
    "NUMERIC_TYPES",
]


class ColumnType(str, Enum):
    DATE = "date"
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENT = "percent"
    STRING = "string"
    BOOLEAN = "boolean"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: Any, default: ColumnType | None = None) -> ColumnType:
        """Map a declared type string onto the enum (unrecognized -> default or UNKNOWN)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return default if default is not None else cls.UNKNOWN


class PercentScale(str, Enum):
    UNIT = "0to1"  # 0.25 == 25%
    HUNDRED = "0to100"  # 25 == 25%

    @classmethod
    def coerce(cls, value: Any) -> PercentScale | None:
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return None


# Column types that receive ColumnStats
NUMERIC_TYPES = frozenset({ColumnType.NUMBER, ColumnType.CURRENCY, ColumnType.PERCENT})


@dataclass(frozen=True)
class ColumnDescriptor:
    """Name + semantic type (+ percent scale) of one dataset column."""
    name: str
    type: ColumnType
    scale: PercentScale | None = None  # only meaningful for PERCENT

    @property
    def is_numeric(self) -> bool:
        return self.type in NUMERIC_TYPES

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "type": self.type.value}
        if self.scale is not None:
            out["scale"] = self.scale.value
        return out


@dataclass(frozen=True)
class ColumnStats:
    """Summary statistics of a numeric-family column.

    When the column has no parseable values only ``nulls`` is populated.
    """
    min: float | None = None
    max: float | None = None
    avg: float | None = None
    nulls: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in (("min", self.min), ("max", self.max), ("avg", self.avg), ("nulls", self.nulls)) if v is not None}
