#!/usr/bin/env python3
"""
Pydantic models for BOQ extraction pipeline configuration.
Keyword and synonym tables live here as data so that new locales are additive.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, List, Optional
from enum import Enum


class CanonicalField(str, Enum):
    """Canonical BOQ item fields a source column can be mapped to"""
    ITEM_CODE = "itemCode"
    DESCRIPTION = "description"
    UNIT = "unit"
    QUANTITY = "quantity"
    UNIT_PRICE = "unitPrice"
    TOTAL_PRICE = "totalPrice"
    CATEGORY = "category"


class LayoutConfig(BaseModel):
    """Text-fragment clustering settings"""
    row_tolerance: float = Field(2.0, gt=0, description="Y bucket size used to group fragments into rows")
    min_column_boundaries: int = Field(2, ge=1, description="Minimum distinct X starts for a page to hold a table")


class ClassifierConfig(BaseModel):
    """Header and section row detection settings"""
    header_keywords: List[str] = Field(..., min_length=1, description="Bilingual header keywords")
    section_code_min: int = Field(31, ge=0, description="Lowest industry division code treated as a heading")
    section_code_max: int = Field(45, ge=0, description="Highest industry division code treated as a heading")

    @field_validator('header_keywords')
    def validate_header_keywords(cls, v):
        cleaned = [keyword.strip().casefold() for keyword in v if keyword.strip()]
        if not cleaned:
            raise ValueError("Header keywords cannot be empty")
        return cleaned

    @model_validator(mode='after')
    def validate_code_range(self):
        if self.section_code_min > self.section_code_max:
            raise ValueError("section_code_min must not exceed section_code_max")
        return self


class MappingConfig(BaseModel):
    """Column-to-field synonym tables and review thresholds"""
    field_synonyms: Dict[CanonicalField, List[str]] = Field(..., description="Accepted column names per field")
    required_fields: List[CanonicalField] = Field(
        default_factory=lambda: [
            CanonicalField.ITEM_CODE,
            CanonicalField.DESCRIPTION,
            CanonicalField.QUANTITY,
            CanonicalField.UNIT_PRICE,
        ]
    )
    review_threshold: int = Field(70, ge=0, le=100, description="Suggestions below this similarity need review")

    @field_validator('field_synonyms')
    def validate_field_synonyms(cls, v):
        for field, names in v.items():
            if not any(name.strip() for name in names):
                raise ValueError(f"Synonym list for '{field.value}' cannot be empty")
        return v


class MaterializerConfig(BaseModel):
    """Item record defaults"""
    default_unit: str = Field("LOT", min_length=1)
    fallback_code_prefix: str = Field("PDF", min_length=1)
    service_code_pattern: str = Field(r"9\d{6}", min_length=1, description="Full-match pattern for service codes")


class QualityConfig(BaseModel):
    """Data quality report thresholds"""
    missing_value_ratio: float = Field(0.2, ge=0, le=1)
    invalid_row_ratio: float = Field(0.1, ge=0, le=1)
    numeric_column_ratio: float = Field(0.5, gt=0, le=1, description="Share of numeric cells that marks a column numeric")


class AnalysisConfig(BaseModel):
    """Validation and aggregation settings"""
    outlier_std_dev_threshold: float = Field(2.0, gt=0)
    dedupe_description_length: int = Field(30, ge=0)
    missing_description_sentinel: str = "No description"
    uncategorized_label: str = "Uncategorized"


class PipelineConfig(BaseModel):
    """Complete configuration for the extraction pipeline"""
    layout: LayoutConfig
    classifier: ClassifierConfig
    mapping: MappingConfig
    materializer: MaterializerConfig
    quality: QualityConfig
    analysis: AnalysisConfig

    @classmethod
    def get_default_config(cls) -> 'PipelineConfig':
        """Get default configuration for the pipeline"""
        return cls(
            layout=LayoutConfig(row_tolerance=2.0, min_column_boundaries=2),
            classifier=ClassifierConfig(
                header_keywords=[
                    'item', 'description', 'unit', 'quantity', 'price', 'total', 'code',
                    'بند', 'وصف', 'الوحدة', 'الكمية', 'السعر', 'الإجمالي',
                ],
                section_code_min=31,
                section_code_max=45
            ),
            mapping=MappingConfig(
                field_synonyms={
                    CanonicalField.ITEM_CODE: [
                        'item code', 'code', 'item', 'item#', 'item no', 'no', 'number', 'id',
                        'رقم البند', 'رمز', 'الرمز', 'كود', 'الكود', 'رقم',
                    ],
                    CanonicalField.DESCRIPTION: [
                        'description', 'desc', 'name', 'item name', 'title',
                        'وصف', 'الوصف', 'بند', 'البند', 'البيان',
                    ],
                    CanonicalField.UNIT: [
                        'unit', 'uom', 'unit of measure', 'measure', 'unit type',
                        'وحدة', 'الوحدة',
                    ],
                    CanonicalField.QUANTITY: [
                        'quantity', 'qty', 'count', 'quantity required', 'qty required',
                        'كمية', 'الكمية', 'العدد',
                    ],
                    CanonicalField.UNIT_PRICE: [
                        'unit price', 'unitprice', 'price', 'rate', 'unit rate', 'unit cost',
                        'سعر الوحدة', 'السعر', 'سعر',
                    ],
                    CanonicalField.TOTAL_PRICE: [
                        'total price', 'totalprice', 'total', 'amount', 'total amount', 'total cost',
                        'الإجمالي', 'المجموع', 'السعر الإجمالي', 'القيمة',
                    ],
                    CanonicalField.CATEGORY: [
                        'category', 'cat', 'type', 'group', 'trade',
                        'الفئة', 'النوع', 'المجموعة', 'القسم',
                    ],
                },
                review_threshold=70
            ),
            materializer=MaterializerConfig(
                default_unit="LOT",
                fallback_code_prefix="PDF",
                service_code_pattern=r"9\d{6}"
            ),
            quality=QualityConfig(missing_value_ratio=0.2, invalid_row_ratio=0.1),
            analysis=AnalysisConfig(outlier_std_dev_threshold=2.0, dedupe_description_length=30)
        )


class ConfigUpdateRequest(BaseModel):
    """Request model for updating pipeline configuration"""
    row_tolerance: Optional[float] = Field(None, gt=0, description="New row tolerance")
    default_unit: Optional[str] = Field(None, min_length=1, description="New default unit")
    outlier_std_dev_threshold: Optional[float] = Field(None, gt=0, description="New outlier threshold")
    field_synonyms: Optional[Dict[CanonicalField, List[str]]] = Field(None, description="Synonyms to add per field")

    @field_validator('field_synonyms')
    def validate_field_synonyms(cls, v):
        if v is not None:
            for field, names in v.items():
                if not names:
                    raise ValueError(f"No synonyms supplied for '{field.value}'")
        return v
