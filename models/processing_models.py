#!/usr/bin/env python3
"""
Pydantic models describing processing outcomes: quality reports, warnings,
parse attempts, progress and pipeline results.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from enum import Enum

from .base_models import ExtractedTable
from .item_models import BOQItem, ValidationResult


class WarningKind(str, Enum):
    """Section-level problem categories"""
    UNSUPPORTED_FORMAT = "unsupported_format"
    CORRUPTED_FILE = "corrupted_file"
    MISSING_DATA = "missing_data"
    UNREADABLE_STRUCTURE = "unreadable_structure"
    UNMAPPED_TABLE = "unmapped_table"


class ProcessingWarning(BaseModel):
    """Isolated failure of one page or sheet; never aborts the document"""
    kind: WarningKind
    message: str
    details: Optional[str] = None
    source: Optional[str] = None


class DataQualityReport(BaseModel):
    """Descriptive quality metrics for one sheet"""
    total_rows: int = 0
    valid_rows: int = 0
    invalid_rows: int = 0
    missing_values: int = 0
    data_type_issues: int = 0
    inconsistent_rows: int = 0
    suggestions: List[str] = Field(default_factory=list)


class ParseAttempt(BaseModel):
    """Outcome of one parse strategy against one sheet"""
    strategy: str
    succeeded: bool
    rows: int = 0
    error: Optional[str] = None


class SheetResult(BaseModel):
    """Cleaned rows of one sheet with the strategy that produced them"""
    name: str
    headers: List[str]
    rows: List[Dict[str, Any]]
    quality_report: DataQualityReport
    strategy: str
    attempts: List[ParseAttempt] = Field(default_factory=list)
    language: str = "unknown"
    direction: str = "ltr"


class WorkbookReadResult(BaseModel):
    """All sheets of a source, plus per-sheet warnings"""
    sheets: List[SheetResult] = Field(default_factory=list)
    warnings: List[ProcessingWarning] = Field(default_factory=list)
    total_sheets: int = 0

    @property
    def success_count(self) -> int:
        return len(self.sheets)


class ExtractionProgress(BaseModel):
    """Page-by-page progress report"""
    current_page: int
    total_pages: int
    progress: float = Field(0, ge=0, le=100)
    is_complete: bool = False
    cancelled: bool = False


class PipelineResult(BaseModel):
    """Everything one pipeline invocation produced"""
    tables: List[ExtractedTable] = Field(default_factory=list)
    items: List[BOQItem] = Field(default_factory=list)
    validation: ValidationResult = Field(default_factory=ValidationResult)
    warnings: List[ProcessingWarning] = Field(default_factory=list)
    sheets: List[SheetResult] = Field(default_factory=list)
    pages_processed: int = 0
    total_pages: int = 0
    cancelled: bool = False
