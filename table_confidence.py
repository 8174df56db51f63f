#!/usr/bin/env python3
"""
Table confidence scoring. The score is advisory metadata, never a gate.
"""

from collections import Counter
from typing import Sequence

from models.base_models import ReconstructedRow, RowKind

HEADER_WEIGHT = 30
CONSISTENCY_WEIGHT = 40
DATA_WEIGHT = 30


def column_consistency(rows: Sequence[ReconstructedRow]) -> float:
    """Share of rows whose cell count equals the modal cell count"""
    if not rows:
        return 0.0
    counts = Counter(len(row.cells) for row in rows)
    _, modal_rows = counts.most_common(1)[0]
    return modal_rows / len(rows)


def calculate_confidence(rows: Sequence[ReconstructedRow], header_found: bool) -> float:
    """
    Score a reconstructed table from 0 to 100.

    30 points for a header row, up to 40 for column-count consistency across
    rows, and 30 when at least one data row exists.
    """
    score = 0.0
    if header_found:
        score += HEADER_WEIGHT
    if rows:
        score += column_consistency(rows) * CONSISTENCY_WEIGHT
    if any(row.kind == RowKind.DATA for row in rows):
        score += DATA_WEIGHT
    return min(100.0, score)
