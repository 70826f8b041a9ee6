from __future__ import annotations

from ..models.dataset import NormalizedDataset

"""SUMMARY line rendering for the diagnostic CLI.

Format:
SUMMARY rows={rows} columns={columns} warnings={warnings} date_column={name|-} spec={source}
"""

__all__ = [
    "SPEC_SOURCES",
    "render_summary_line",
]

# where the dashboard spec came from: a valid --spec file, that file after
# column repair, or inference from the dataset's columns
SPEC_SOURCES = ("parsed", "repaired", "inferred")


def render_summary_line(dataset: NormalizedDataset, spec_source: str) -> str:
    """Render the SUMMARY line for one normalization run.

    Examples:
        >>> from funnel_engine.models import NormalizedDataset
        >>> render_summary_line(NormalizedDataset(), "inferred")
        'SUMMARY rows=0 columns=0 warnings=0 date_column=- spec=inferred'
    """
    return (
        f"SUMMARY rows={len(dataset.rows)} "
        f"columns={len(dataset.columns)} "
        f"warnings={len(dataset.warnings)} "
        f"date_column={dataset.date_column or '-'} "
        f"spec={spec_source}"
    )
