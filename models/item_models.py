#!/usr/bin/env python3
"""
Pydantic models for canonical BOQ items, validation results and aggregates.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from enum import Enum

from .base_models import ColumnId
from .config_models import CanonicalField


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for presentation collaborators"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BOQItem(CamelModel):
    """Canonical bill-of-quantities line item"""
    item_code: str = Field(..., min_length=1)
    description: str = ""
    unit: str = "LOT"
    quantity: float = 0
    unit_price: float = 0
    total_price: float = 0
    category: Optional[str] = None
    notes: Optional[str] = None


class InvalidItem(CamelModel):
    """Item that failed validation, paired with every failure reason"""
    item: BOQItem
    errors: List[str]


class ValidationResult(CamelModel):
    """Partition of an item list into valid and invalid entries"""
    valid: List[BOQItem] = Field(default_factory=list)
    invalid: List[InvalidItem] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.valid) + len(self.invalid)


class MappingSuggestion(CamelModel):
    """Fuzzy field suggestion for one source column"""
    column: ColumnId
    column_name: str
    field: Optional[CanonicalField] = None
    similarity: float = 0
    requires_review: bool = True


class MappingSuggestionResult(CamelModel):
    """Suggested mapping plus everything a reviewer should look at"""
    suggestions: List[MappingSuggestion]
    missing_required: List[CanonicalField] = Field(default_factory=list)
    review_items: List[str] = Field(default_factory=list)

    @property
    def requires_review(self) -> bool:
        return bool(self.review_items)


class AxisStatistics(CamelModel):
    """Summary statistics over one numeric axis"""
    min: float = 0
    max: float = 0
    mean: float = 0
    median: float = 0
    std_dev: float = 0


class ItemStatistics(CamelModel):
    """Unit price and quantity statistics, computed independently"""
    price: AxisStatistics
    quantity: AxisStatistics


class OutlierType(str, Enum):
    PRICE = "price"
    QUANTITY = "quantity"


class Outlier(CamelModel):
    """Item deviating from the mean by more than the threshold on one axis"""
    item: BOQItem
    type: OutlierType
    deviation: float


class CategoryShare(CamelModel):
    """One category's slice of the total cost"""
    category: str
    count: int
    total_cost: float
    percentage: float
    average_total_price: float = 0


class ItemsSummary(CamelModel):
    """Headline totals for an item set"""
    total_items: int
    total_quantity: float
    total_cost: float
    average_unit_price: float
    categories: List[str]
