"""Header row detection for spreadsheets with leading title/blank rows.

Exported schedules often start with a clinic name, a print date or a few
empty rows before the real column headers. The header is taken to be the
first non-blank row carrying at least ``min_header_cells`` non-blank cells,
searched within the first ``max_scan_rows`` non-blank rows.
"""
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import structlog

from schedule_intake.errors.exceptions import FormatError
from schedule_intake.services.normalize import cell_text

logger = structlog.get_logger(__name__)


@dataclass
class DetectorConfig:
    """Configuration for the header detector."""
    min_header_cells: int = 2
    max_scan_rows: int = 10


def count_non_blank(row: Sequence[Any]) -> int:
    """Number of cells with visible content."""
    return sum(1 for cell in row if cell_text(cell))


def is_blank_row(row: Sequence[Any]) -> bool:
    return count_non_blank(row) == 0


def find_header_row(
    rows: List[List[Any]],
    config: Optional[DetectorConfig] = None
) -> int:
    """Return the index (into ``rows``) of the header row.
    
    Args:
        rows: Sheet rows as lists of cell values, blank rows already removed
        config: Detection thresholds
    
    Raises:
        FormatError: If none of the scanned rows qualifies
    """
    config = config or DetectorConfig()
    
    for idx, row in enumerate(rows[:config.max_scan_rows]):
        if count_non_blank(row) >= config.min_header_cells:
            if idx > 0:
                logger.debug("header_row_after_preamble", header_row=idx, skipped_rows=idx)
            return idx
    
    raise FormatError(
        "no header row found",
        details={
            "scanned_rows": min(len(rows), config.max_scan_rows),
            "min_header_cells": config.min_header_cells,
        },
    )


def header_labels(header_row: Sequence[Any]) -> List[str]:
    """Header cells as labels; unlabeled columns get pandas-style placeholders."""
    labels = []
    for idx, cell in enumerate(header_row):
        label = cell_text(cell)
        labels.append(label if label else f"Unnamed: {idx}")
    return labels
