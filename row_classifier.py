#!/usr/bin/env python3
"""
Row classifier - labels reconstructed rows as header, section heading or data
using bilingual keyword and numbering-pattern heuristics.
"""

import logging
import re
from typing import List, Optional, Sequence

from models.base_models import ReconstructedRow, RowKind
from models.config_models import ClassifierConfig, PipelineConfig
from text_utils import fold_arabic

DIVISION_PATTERN = re.compile(r'^(DIVISION|SECTION)\s+\d+', re.IGNORECASE)
OUTLINE_PATTERN = re.compile(r'^\d+(\.\d+)*\s*[-–]')
OUTLINE_NUMBER = re.compile(r'\d+(?:\.\d+)*')


def detect_section_level(text: str) -> int:
    """Number of dot-separated groups in the first numeric outline ("31.1.1" -> 3)"""
    match = OUTLINE_NUMBER.search(text or '')
    if not match:
        return 0
    return len(match.group(0).split('.'))


class RowClassifier:
    """Classifies the rows of one table; the first header-like row is latched"""

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config or PipelineConfig.get_default_config().classifier
        self.logger = logging.getLogger(self.__class__.__name__)
        self.header_found = False
        self._keywords = [fold_arabic(keyword) for keyword in self.config.header_keywords]
        low, high = self.config.section_code_min, self.config.section_code_max
        codes = '|'.join(str(code) for code in range(low, high + 1))
        self._division_code_pattern = re.compile(rf'^({codes})(\.\d+)*\s*[-–]')

    def is_header_row(self, cells: Sequence[str]) -> bool:
        """True if any cell contains one of the header keywords; Arabic spelling variants match"""
        for cell in cells:
            folded = fold_arabic(str(cell).casefold())
            if any(keyword in folded for keyword in self._keywords):
                return True
        return False

    def is_section_row(self, cells: Sequence[str]) -> bool:
        """True if the first cell looks like a division / outline heading"""
        if not cells:
            return False
        first = str(cells[0]).strip()
        if DIVISION_PATTERN.match(first):
            return True
        if OUTLINE_PATTERN.match(first):
            return True
        if self._division_code_pattern.match(first):
            return True
        return False

    def classify(self, cells: List[str]) -> ReconstructedRow:
        """Classify one row; later keyword rows are never re-tagged as header"""
        if not self.header_found and self.is_header_row(cells):
            self.header_found = True
            self.logger.debug(f"Header row latched: {cells}")
            return ReconstructedRow(cells=cells, kind=RowKind.HEADER)

        if self.is_section_row(cells):
            level = detect_section_level(cells[0])
            self.logger.debug(f"Section row (level {level}): {cells[0][:50]}")
            return ReconstructedRow(cells=cells, kind=RowKind.SECTION, level=level)

        return ReconstructedRow(cells=cells, kind=RowKind.DATA)

    def reset(self) -> None:
        """Forget the latched header before classifying a new table"""
        self.header_found = False
