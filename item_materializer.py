#!/usr/bin/env python3
"""
Item materializer - turns mapped rows into canonical BOQ item records.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from column_mapper import ColumnMapper
from models.base_models import ColumnId, ColumnMapping, ExtractedTable
from models.config_models import CanonicalField, PipelineConfig
from models.item_models import BOQItem
from numeral_normalizer import parse_number_safe
from parse_strategies import is_blank

Row = Union[Mapping[str, Any], Sequence[Any]]

_MISSING = object()


class ItemCodeSequence:
    """Fallback item-code counter scoped to one pipeline invocation"""

    def __init__(self, prefix: str = "PDF", start: int = 1):
        self.prefix = prefix
        self.next_value = start

    def next_code(self) -> str:
        code = f"{self.prefix}-{self.next_value:03d}"
        self.next_value += 1
        return code


def _cell_text(value: Any) -> str:
    """Stringify a cell; integral floats lose their '.0'"""
    if is_blank(value):
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class ItemMaterializer:
    """Builds BOQItem records from records or positional rows"""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig.get_default_config()
        self.mapper = ColumnMapper(self.config.mapping)
        self.service_code = re.compile(self.config.materializer.service_code_pattern)
        self.logger = logging.getLogger(self.__class__.__name__)

    def _resolve(self, row: Row, field: CanonicalField, mapping: Optional[ColumnMapping]) -> Any:
        """Raw value for a field, or _MISSING when no column resolves"""
        column: Optional[ColumnId] = mapping.get(field) if mapping is not None else None

        if isinstance(row, Mapping):
            if column is None:
                column = self.mapper.find_column(row, field)
            if isinstance(column, int) and column not in row:
                # keyed rows keep header order, so an index selects by position
                values = list(row.values())
                return values[column] if 0 <= column < len(values) else _MISSING
            if column is None or column not in row:
                return _MISSING
            return row[column]

        if isinstance(column, int) and 0 <= column < len(row):
            return row[column]
        return _MISSING

    def find_service_code(self, row: Row) -> Optional[str]:
        """First raw field that fully matches the service-code pattern"""
        values: Iterable[Any] = row.values() if isinstance(row, Mapping) else row
        for value in values:
            text = _cell_text(value)
            if text and self.service_code.fullmatch(text):
                return text
        return None

    def materialize_row(self, row: Row, mapping: Optional[ColumnMapping], sequence: ItemCodeSequence,
                        default_category: Optional[str] = None) -> Optional[BOQItem]:
        """One canonical item, or None when the row carries no usable signal"""
        raw: Dict[CanonicalField, Any] = {field: self._resolve(row, field, mapping) for field in CanonicalField}

        def text(field: CanonicalField) -> str:
            value = raw[field]
            return '' if value is _MISSING else _cell_text(value)

        description = text(CanonicalField.DESCRIPTION)
        quantity = parse_number_safe(None if raw[CanonicalField.QUANTITY] is _MISSING else raw[CanonicalField.QUANTITY])
        unit_price = parse_number_safe(
            None if raw[CanonicalField.UNIT_PRICE] is _MISSING else raw[CanonicalField.UNIT_PRICE]
        )

        if quantity == 0 and not description:
            return None

        total_raw = raw[CanonicalField.TOTAL_PRICE]
        if total_raw is _MISSING or is_blank(total_raw):
            total_price = quantity * unit_price
        else:
            total_price = parse_number_safe(total_raw)

        item_code = text(CanonicalField.ITEM_CODE) or sequence.next_code()
        unit = text(CanonicalField.UNIT) or self.config.materializer.default_unit
        category = text(CanonicalField.CATEGORY) or default_category

        service_code = self.find_service_code(row)
        return BOQItem(
            item_code=item_code,
            description=description,
            unit=unit,
            quantity=quantity,
            unit_price=unit_price,
            total_price=total_price,
            category=category or None,
            notes=f"Service Code: {service_code}" if service_code else None,
        )

    def map_rows_to_items(self, rows: Iterable[Row], column_mapping: Optional[ColumnMapping] = None,
                          sequence: Optional[ItemCodeSequence] = None,
                          default_category: Optional[str] = None) -> List[BOQItem]:
        """
        Materialize every row. Each call starts a fresh code sequence unless one
        is passed in, so results never depend on earlier calls.
        """
        if sequence is None:
            sequence = ItemCodeSequence(self.config.materializer.fallback_code_prefix)

        items: List[BOQItem] = []
        dropped = 0
        for index, row in enumerate(rows):
            if not row:
                continue
            item = self.materialize_row(row, column_mapping, sequence, default_category)
            if item is None:
                dropped += 1
                self.logger.debug(f"Row {index} dropped: zero quantity and empty description")
                continue
            items.append(item)

        self.logger.debug(f"Materialized {len(items)} items ({dropped} rows without signal dropped)")
        return items

    def table_to_items(self, table: ExtractedTable, column_mapping: ColumnMapping,
                       sequence: Optional[ItemCodeSequence] = None,
                       default_category: Optional[str] = None) -> List[BOQItem]:
        """Materialize the data rows of a reconstructed table; header and section rows are skipped"""
        data_rows = [row.cells for row in table.data_rows]
        return self.map_rows_to_items(data_rows, column_mapping, sequence, default_category)


def map_rows_to_items(rows: Iterable[Row], column_mapping: Optional[ColumnMapping] = None,
                      config: Optional[PipelineConfig] = None,
                      sequence: Optional[ItemCodeSequence] = None,
                      default_category: Optional[str] = None) -> List[BOQItem]:
    """Module-level shortcut for ItemMaterializer.map_rows_to_items"""
    return ItemMaterializer(config).map_rows_to_items(rows, column_mapping, sequence, default_category)
