from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

"""NormalizationWarning model.

Warnings are accumulated by the normalizer instead of being raised. Codes are
stable UPPER_SNAKE identifiers; consumers key on ``code`` and treat
``message`` as human-readable text only.
"""

__all__ = [
    "NormalizationWarning",
    "INVALID_INPUT",
    "NO_ROWS",
    "ARRAY_ROWS",
    "INFERRED_COLUMNS",
    "INVALID_ROW",
    "INVALID_DATE",
    "INVALID_NUMBER",
    "OUT_OF_RANGE_PERCENT",
    "NORMALIZATION_ERROR",
    "WARNING_CODES",
]

# Fatal-to-the-call
INVALID_INPUT = "INVALID_INPUT"
NO_ROWS = "NO_ROWS"
NORMALIZATION_ERROR = "NORMALIZATION_ERROR"
# Structural (informational, processing continues)
ARRAY_ROWS = "ARRAY_ROWS"
INFERRED_COLUMNS = "INFERRED_COLUMNS"
# Per-row / per-cell
INVALID_ROW = "INVALID_ROW"
INVALID_DATE = "INVALID_DATE"
INVALID_NUMBER = "INVALID_NUMBER"
OUT_OF_RANGE_PERCENT = "OUT_OF_RANGE_PERCENT"

WARNING_CODES = frozenset({
    INVALID_INPUT,
    NO_ROWS,
    NORMALIZATION_ERROR,
    ARRAY_ROWS,
    INFERRED_COLUMNS,
    INVALID_ROW,
    INVALID_DATE,
    INVALID_NUMBER,
    OUT_OF_RANGE_PERCENT,
})


@dataclass(frozen=True)
class NormalizationWarning:
    """One recoverable problem found while normalizing a payload.

    Attributes:
        code: Stable identifier in UPPER_SNAKE_CASE (see WARNING_CODES)
        message: Human-readable description
        column: Column the warning refers to, if any
        row: 0-based index of the input row, for per-row / per-cell warnings
    """
    code: str
    message: str
    column: str | None = None
    row: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Fixed key set; optional keys are always present (null when unset)."""
        return {"code": self.code, "message": self.message, "column": self.column, "row": self.row}

    def to_json_line(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
