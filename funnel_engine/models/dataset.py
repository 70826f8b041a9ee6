from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .column import ColumnDescriptor, ColumnStats, ColumnType
from .warning import NormalizationWarning

if TYPE_CHECKING:
    import pandas as pd

"""NormalizedDataset model.

Invariants:
- ``len(rows)`` equals the number of rows extracted from the raw payload
- every row holds a key for every column in ``columns`` (value may be None)
"""

__all__ = [
    "NormalizedRow",
    "NormalizedDataset",
]

# column name -> datetime | float | int | bool | str | None
NormalizedRow = dict[str, Any]


@dataclass(frozen=True)
class NormalizedDataset:
    columns: list[ColumnDescriptor] = field(default_factory=list)
    rows: list[NormalizedRow] = field(default_factory=list)
    warnings: list[NormalizationWarning] = field(default_factory=list)
    stats: dict[str, ColumnStats] = field(default_factory=dict)
    meta: Any = None  # passed through from the payload untouched

    @classmethod
    def empty(cls, warnings: list[NormalizationWarning] | None = None) -> NormalizedDataset:
        return cls(warnings=list(warnings or []))

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def date_column(self) -> str | None:
        """Name of the first date-typed column (the one rows are sorted by)."""
        for c in self.columns:
            if c.type == ColumnType.DATE:
                return c.name
        return None

    def column(self, name: str) -> ColumnDescriptor | None:
        for c in self.columns:
            if c.name == name:
                return c
        return None

    def warning_codes(self) -> list[str]:
        return [w.code for w in self.warnings]

    def to_dataframe(self) -> pd.DataFrame:
        """Rows as a pandas DataFrame with columns in descriptor order."""
        import pandas as pd

        return pd.DataFrame.from_records(self.rows, columns=self.column_names)
