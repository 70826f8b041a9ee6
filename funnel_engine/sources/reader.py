from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd

"""Payload file reader for the diagnostic CLI.

- ``.json``: parsed as-is; any payload shape the normalizer accepts
- ``.csv`` / ``.xlsx``: read with pandas (openpyxl for Excel), first row as
  header, returned as a ``{"columns": [...], "rows": [...]}`` payload with
  NaN cells converted to None
"""

__all__ = [
    "SourceError",
    "SUPPORTED_SUFFIXES",
    "read_payload_file",
    "frame_to_payload",
]

SUPPORTED_SUFFIXES = (".json", ".csv", ".xlsx")


class SourceError(Exception):
    """Raised when a payload file is missing, unsupported or unreadable."""


def frame_to_payload(df: pd.DataFrame) -> dict[str, Any]:
    columns = [str(c).strip() for c in df.columns]
    # object dtype turns numpy scalars into Python int/float; NaN/NaT -> None
    clean = df.astype(object).where(df.notna(), None)
    clean.columns = columns
    return {"columns": columns, "rows": clean.to_dict(orient="records")}


def read_payload_file(path: Path) -> Any:
    """Load a payload from disk.

    Raises:
        SourceError: file missing, suffix not in SUPPORTED_SUFFIXES, or the
            content cannot be parsed
    """
    if not path.exists():
        raise SourceError(f"payload file not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise SourceError(f"unsupported payload type: {suffix or '(none)'}")

    try:
        if suffix == ".json":
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        if suffix == ".csv":
            # keep text as-is; the normalizer owns type conversion
            df = pd.read_csv(path, dtype=str, keep_default_na=True)
        else:
            df = pd.read_excel(path, engine="openpyxl")
    except (OSError, ValueError) as e:  # JSONDecodeError and pandas parser errors are ValueErrors
        raise SourceError(f"failed to read {path.name}: {e}") from e
    return frame_to_payload(df)
