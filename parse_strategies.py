#!/usr/bin/env python3
"""
Parse strategies for spreadsheet-like sources, from strict to lenient.
Every strategy turns a sheet source into a positional grid: [header_row, *data_rows].

Supported sources: openpyxl worksheets, pandas DataFrames, lists of row
sequences and lists of records (dicts).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd
from openpyxl.worksheet.worksheet import Worksheet

Grid = List[List[Any]]


def is_blank(value: Any) -> bool:
    """None, empty / whitespace string, or NaN"""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def is_blank_row(row: Sequence[Any]) -> bool:
    return all(is_blank(value) for value in row)


def is_worksheet(source: Any) -> bool:
    return isinstance(source, Worksheet) or (hasattr(source, 'iter_rows') and hasattr(source, 'max_row'))


def is_record_list(source: Any) -> bool:
    return isinstance(source, list) and bool(source) and all(isinstance(row, Mapping) for row in source)


def is_row_list(source: Any) -> bool:
    return (
        isinstance(source, (list, tuple))
        and all(isinstance(row, (list, tuple)) for row in source)
    )


def record_headers(records: Sequence[Mapping[str, Any]]) -> List[str]:
    """Union of record keys in first-seen order"""
    headers: Dict[str, None] = {}
    for record in records:
        for key in record.keys():
            headers.setdefault(key, None)
    return list(headers)


class BaseParseStrategy(ABC):
    """Abstract base class for sheet parse strategies"""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        """Short strategy identifier recorded in parse attempts"""
        pass

    @abstractmethod
    def parse(self, source: Any) -> Grid:
        """Return the sheet as a positional grid; raise when the source cannot be read this way"""
        pass


class StructuredGridStrategy(BaseParseStrategy):
    """Row 0 is the header, remaining rows are positional data; blank rows dropped"""

    @property
    def name(self) -> str:
        return "structured"

    def parse(self, source: Any) -> Grid:
        if is_worksheet(source):
            grid = [list(row) for row in source.iter_rows(values_only=True)]
        elif isinstance(source, pd.DataFrame):
            if isinstance(source.columns, pd.RangeIndex):
                grid = source.values.tolist()
            else:
                grid = [list(source.columns)] + source.values.tolist()
        elif is_record_list(source):
            raise TypeError("Records are not a positional grid")
        elif is_row_list(source):
            grid = [list(row) for row in source]
        else:
            raise TypeError(f"Unsupported sheet source: {type(source).__name__}")

        return [row for row in grid if not is_blank_row(row)]


class RecordRowsStrategy(BaseParseStrategy):
    """Object-per-row read, re-derived into the positional shape"""

    @property
    def name(self) -> str:
        return "records"

    def parse(self, source: Any) -> Grid:
        if is_record_list(source):
            records = list(source)
            headers = record_headers(records)
        elif isinstance(source, pd.DataFrame):
            headers = [str(column) for column in source.columns]
            records = [dict(zip(headers, values)) for values in source.values.tolist()]
        elif is_worksheet(source):
            values = list(source.values)
            if not values:
                return []
            frame = pd.DataFrame(values[1:], columns=list(values[0]))
            headers = list(frame.columns)
            records = frame.to_dict('records')
        elif is_row_list(source) and source:
            frame = pd.DataFrame(list(source[1:]), columns=list(source[0]))
            headers = list(frame.columns)
            records = frame.to_dict('records')
        else:
            raise TypeError(f"Unsupported sheet source: {type(source).__name__}")

        if not records:
            return []
        rows = [[record.get(header) for header in headers] for record in records]
        return [list(headers)] + [row for row in rows if not is_blank_row(row)]


class RawCellScanStrategy(BaseParseStrategy):
    """Cell-by-cell scan of the declared used range, skipping fully blank rows"""

    @property
    def name(self) -> str:
        return "raw_cells"

    def parse(self, source: Any) -> Grid:
        if is_worksheet(source):
            return self._scan_worksheet(source)
        if isinstance(source, pd.DataFrame):
            header = [] if isinstance(source.columns, pd.RangeIndex) else [list(source.columns)]
            rows = [
                [source.iat[row, col] for col in range(source.shape[1])]
                for row in range(source.shape[0])
            ]
            return header + [row for row in rows if not is_blank_row(row)]
        if is_record_list(source):
            headers = record_headers(source)
            rows = [[record.get(header) for header in headers] for record in source]
            return [headers] + [row for row in rows if not is_blank_row(row)]
        if isinstance(source, (list, tuple)):
            return self._scan_rows(source)
        raise TypeError(f"Unsupported sheet source: {type(source).__name__}")

    def _scan_worksheet(self, worksheet) -> Grid:
        grid: Grid = []
        for row_idx in range(worksheet.min_row, worksheet.max_row + 1):
            row = [
                worksheet.cell(row=row_idx, column=col_idx).value
                for col_idx in range(worksheet.min_column, worksheet.max_column + 1)
            ]
            if not is_blank_row(row):
                grid.append(row)
        return grid

    def _scan_rows(self, rows: Sequence[Any]) -> Grid:
        width = max((len(row) for row in rows if isinstance(row, (list, tuple))), default=0)
        grid: Grid = []
        for row in rows:
            if not isinstance(row, (list, tuple)):
                self.logger.debug(f"Skipping non-row entry of type {type(row).__name__}")
                continue
            cells = [row[col] if col < len(row) else '' for col in range(width)]
            if not is_blank_row(cells):
                grid.append(cells)
        return grid


DEFAULT_STRATEGIES = (StructuredGridStrategy, RecordRowsStrategy, RawCellScanStrategy)


def default_strategies() -> List[BaseParseStrategy]:
    """Fresh strategy instances in strict-to-lenient order"""
    return [strategy() for strategy in DEFAULT_STRATEGIES]
