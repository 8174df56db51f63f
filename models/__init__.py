#!/usr/bin/env python3
"""
Models package for the BOQ extraction pipeline.
"""

from .config_models import (
    CanonicalField,
    LayoutConfig,
    ClassifierConfig,
    MappingConfig,
    MaterializerConfig,
    QualityConfig,
    AnalysisConfig,
    PipelineConfig,
    ConfigUpdateRequest
)
from .base_models import (
    ColumnId,
    FIELD_ATTRIBUTES,
    TextFragment,
    RowKind,
    ReconstructedRow,
    ExtractedTable,
    ColumnMapping
)
from .item_models import (
    BOQItem,
    InvalidItem,
    ValidationResult,
    MappingSuggestion,
    MappingSuggestionResult,
    AxisStatistics,
    ItemStatistics,
    OutlierType,
    Outlier,
    CategoryShare,
    ItemsSummary
)
from .processing_models import (
    WarningKind,
    ProcessingWarning,
    DataQualityReport,
    ParseAttempt,
    SheetResult,
    WorkbookReadResult,
    ExtractionProgress,
    PipelineResult
)

__all__ = [
    "CanonicalField",
    "LayoutConfig",
    "ClassifierConfig",
    "MappingConfig",
    "MaterializerConfig",
    "QualityConfig",
    "AnalysisConfig",
    "PipelineConfig",
    "ConfigUpdateRequest",
    "ColumnId",
    "FIELD_ATTRIBUTES",
    "TextFragment",
    "RowKind",
    "ReconstructedRow",
    "ExtractedTable",
    "ColumnMapping",
    "BOQItem",
    "InvalidItem",
    "ValidationResult",
    "MappingSuggestion",
    "MappingSuggestionResult",
    "AxisStatistics",
    "ItemStatistics",
    "OutlierType",
    "Outlier",
    "CategoryShare",
    "ItemsSummary",
    "WarningKind",
    "ProcessingWarning",
    "DataQualityReport",
    "ParseAttempt",
    "SheetResult",
    "WorkbookReadResult",
    "ExtractionProgress",
    "PipelineResult"
]
