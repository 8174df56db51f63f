#!/usr/bin/env python3
"""
Base Pydantic models for table reconstruction shared across PDF and spreadsheet sources.
These models carry positioned text, reconstructed rows and column mappings.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional, Union
from enum import Enum

from .config_models import CanonicalField

ColumnId = Union[int, str]

FIELD_ATTRIBUTES: Dict[CanonicalField, str] = {
    CanonicalField.ITEM_CODE: 'item_code',
    CanonicalField.DESCRIPTION: 'description',
    CanonicalField.UNIT: 'unit',
    CanonicalField.QUANTITY: 'quantity',
    CanonicalField.UNIT_PRICE: 'unit_price',
    CanonicalField.TOTAL_PRICE: 'total_price',
    CanonicalField.CATEGORY: 'category',
}


class TextFragment(BaseModel):
    """One positioned run of text emitted by a PDF text layer"""
    text: str
    x: float
    y: float
    page: Optional[int] = None


class RowKind(str, Enum):
    """Reconstructed row classification"""
    HEADER = "header"
    SECTION = "section"
    DATA = "data"


class ReconstructedRow(BaseModel):
    """Row rebuilt from fragments; cells follow ascending X"""
    cells: List[str]
    kind: RowKind = RowKind.DATA
    level: int = 0  # only meaningful for section rows

    @property
    def is_header(self) -> bool:
        return self.kind == RowKind.HEADER

    @property
    def is_section(self) -> bool:
        return self.kind == RowKind.SECTION


class ExtractedTable(BaseModel):
    """Table reconstructed from one page"""
    headers: List[str]
    rows: List[ReconstructedRow]
    confidence: float = Field(0, ge=0, le=100)
    page_number: Optional[int] = None

    @property
    def data_rows(self) -> List[ReconstructedRow]:
        """Rows that are neither header nor section heading"""
        return [row for row in self.rows if row.kind == RowKind.DATA]


class ColumnMapping(BaseModel):
    """
    Partial mapping of canonical field -> source column identifier.
    None means the field is unmapped; an empty-string key is a real identifier.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    item_code: Optional[ColumnId] = None
    description: Optional[ColumnId] = None
    unit: Optional[ColumnId] = None
    quantity: Optional[ColumnId] = None
    unit_price: Optional[ColumnId] = None
    total_price: Optional[ColumnId] = None
    category: Optional[ColumnId] = None

    @classmethod
    def from_fields(cls, fields: Dict[CanonicalField, ColumnId]) -> 'ColumnMapping':
        """Build a mapping from a field -> column dictionary"""
        return cls(**{FIELD_ATTRIBUTES[CanonicalField(field)]: column for field, column in fields.items()})

    def get(self, field: CanonicalField) -> Optional[ColumnId]:
        """Column identifier for a field, or None when unmapped"""
        return getattr(self, FIELD_ATTRIBUTES[field])

    def as_dict(self) -> Dict[CanonicalField, ColumnId]:
        """Mapped fields only"""
        return {
            field: getattr(self, attribute)
            for field, attribute in FIELD_ATTRIBUTES.items()
            if getattr(self, attribute) is not None
        }

    def is_empty(self) -> bool:
        return not self.as_dict()
