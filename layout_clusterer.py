#!/usr/bin/env python3
"""
Layout clusterer - rebuilds rows and columns from positioned text fragments.

  1. Bucket fragments by Y (tolerance) -> rows, top of page first
  2. Sort each row by X
  3. Distinct rounded X starts across the page -> column boundaries
  4. Assign fragments to boundary intervals, joining same-column text
"""

import bisect
import logging
import math
from typing import Dict, List, Optional, Sequence

from models.base_models import ExtractedTable, ReconstructedRow, RowKind, TextFragment
from models.config_models import LayoutConfig, PipelineConfig
from row_classifier import RowClassifier
from table_confidence import calculate_confidence


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def bucket_y(y: float, tolerance: float) -> float:
    """Snap a Y coordinate to its tolerance bucket"""
    return round_half_up(y / tolerance) * tolerance


class LayoutClusterer:
    """Reconstructs the table structure of one page from its fragments"""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig.get_default_config()
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def layout(self) -> LayoutConfig:
        return self.config.layout

    def cluster_rows(self, fragments: Sequence[TextFragment],
                     tolerance: Optional[float] = None) -> List[List[TextFragment]]:
        """Group fragments sharing a Y bucket; rows top-to-bottom, fragments left-to-right"""
        tolerance = tolerance or self.layout.row_tolerance
        buckets: Dict[float, List[TextFragment]] = {}
        for fragment in fragments:
            if not fragment.text or not fragment.text.strip():
                continue
            key = bucket_y(fragment.y, tolerance)
            buckets.setdefault(key, []).append(fragment)

        return [
            sorted(buckets[y], key=lambda fragment: fragment.x)
            for y in sorted(buckets, reverse=True)
        ]

    def detect_column_boundaries(self, rows: Sequence[Sequence[TextFragment]]) -> List[int]:
        """Sorted distinct rounded X start positions across the page"""
        positions = {round_half_up(fragment.x) for row in rows for fragment in row}
        return sorted(positions)

    def assign_to_columns(self, fragments: Sequence[TextFragment], boundaries: Sequence[int]) -> List[str]:
        """Place fragments into boundary intervals and return the non-empty cells"""
        if not fragments:
            return []

        columns: Dict[int, str] = {}
        current_column = 0
        current_text = ''

        for fragment in sorted(fragments, key=lambda fragment: fragment.x):
            x = round_half_up(fragment.x)
            # last interval is open-ended
            column_index = max(0, bisect.bisect_right(boundaries, x) - 1)

            if column_index > current_column:
                columns[current_column] = current_text.strip()
                current_column = column_index
                current_text = fragment.text.strip()
            else:
                current_text = f"{current_text} {fragment.text.strip()}"

        columns[current_column] = current_text.strip()
        return [columns[index] for index in sorted(columns) if columns[index]]

    def extract_tables(self, fragments: Sequence[TextFragment], page_number: Optional[int] = None) -> List[ExtractedTable]:
        """Reconstruct the table of one page; no structure means no tables"""
        rows = self.cluster_rows(fragments)
        if not rows:
            return []

        boundaries = self.detect_column_boundaries(rows)
        if len(boundaries) < self.layout.min_column_boundaries:
            self.logger.debug(f"Page {page_number}: {len(boundaries)} column boundaries, no table structure")
            return []

        classifier = RowClassifier(self.config.classifier)
        table_rows: List[ReconstructedRow] = []
        headers: List[str] = []

        for row_fragments in rows:
            cells = self.assign_to_columns(row_fragments, boundaries)
            if not cells:
                continue
            row = classifier.classify(cells)
            if row.kind == RowKind.HEADER:
                headers = cells
            table_rows.append(row)

        if not table_rows:
            return []

        confidence = calculate_confidence(table_rows, classifier.header_found)
        body = [row for row in table_rows if row.kind != RowKind.HEADER]
        if not headers:
            headers = list(table_rows[0].cells)

        self.logger.debug(
            f"Page {page_number}: {len(body)} rows, {len(boundaries)} boundaries, confidence {confidence:.0f}"
        )
        return [ExtractedTable(headers=headers, rows=body, confidence=confidence, page_number=page_number)]


def extract_tables_from_fragments(
    fragments: Sequence[TextFragment],
    page_number: Optional[int] = None,
    config: Optional[PipelineConfig] = None,
) -> List[ExtractedTable]:
    """Convenience wrapper around LayoutClusterer.extract_tables"""
    return LayoutClusterer(config).extract_tables(fragments, page_number)
