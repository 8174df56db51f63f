#!/usr/bin/env python3
"""
Workbook loading for callers that start from a spreadsheet or CSV file.
A file that cannot be opened at all is fatal to the document.
"""

import logging
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Union

import openpyxl
import pandas as pd
from openpyxl.worksheet.worksheet import Worksheet

from errors import SourceUnreadableError, UnsupportedFormatError

logger = logging.getLogger(__name__)

SPREADSHEET_EXTENSIONS = {'.xlsx', '.xlsm', '.xltx', '.xltm'}
CSV_EXTENSIONS = {'.csv'}

Source = Union[str, Path, BinaryIO]


def _source_name(source: Source, file_name: Optional[str]) -> str:
    if file_name:
        return file_name
    if isinstance(source, (str, Path)):
        return str(source)
    return str(getattr(source, 'name', 'workbook'))


def detect_file_type(file_name: str) -> str:
    """'excel', 'csv', 'pdf' or 'unknown' from the file name; legacy .xls is unknown"""
    suffix = Path(file_name).suffix.lower()
    if suffix == '.pdf':
        return 'pdf'
    if suffix in SPREADSHEET_EXTENSIONS:
        return 'excel'
    if suffix in CSV_EXTENSIONS:
        return 'csv'
    return 'unknown'


def load_workbook_sheets(source: Source, file_name: Optional[str] = None) -> Dict[str, Worksheet]:
    """
    Open a workbook with cached cell values and return its sheets by title.

    Raises UnsupportedFormatError for non-spreadsheet files and
    SourceUnreadableError when the workbook cannot be decoded.
    """
    name = _source_name(source, file_name)
    suffix = Path(name).suffix.lower()
    if suffix and suffix not in SPREADSHEET_EXTENSIONS:
        raise UnsupportedFormatError(
            f"Unsupported file format: {suffix}",
            details="Only Excel workbooks (.xlsx, .xlsm) and CSV files are supported",
            source=name,
        )

    try:
        workbook = openpyxl.load_workbook(source, data_only=True)
    except Exception as e:
        logger.error(f"Error loading workbook {name}: {e}", exc_info=True)
        raise SourceUnreadableError("Workbook could not be read", details=str(e), source=name) from e

    if not workbook.worksheets:
        raise SourceUnreadableError("Workbook contains no sheets", source=name)

    logger.info(f"Loaded {len(workbook.worksheets)} sheets from {name}")
    return {worksheet.title: worksheet for worksheet in workbook.worksheets}


def load_csv_sheet(source: Source, file_name: Optional[str] = None) -> Dict[str, List[List[str]]]:
    """
    Read a CSV file into one row-list sheet named after the file.
    Cells stay text; numeric coercion happens while cleaning the sheet.
    """
    name = _source_name(source, file_name)
    try:
        frame = pd.read_csv(source, header=None, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except pd.errors.EmptyDataError as e:
        raise SourceUnreadableError("CSV file is empty", details=str(e), source=name) from e
    except Exception as e:
        logger.error(f"Error reading CSV {name}: {e}", exc_info=True)
        raise SourceUnreadableError("CSV file could not be read", details=str(e), source=name) from e

    logger.info(f"Loaded CSV {name}: {len(frame)} rows, {len(frame.columns)} columns")
    return {Path(name).stem or 'csv': frame.values.tolist()}


def load_sheets(source: Source, file_name: Optional[str] = None) -> Dict[str, Any]:
    """Dispatch on the file type; CSV becomes one sheet, workbooks keep their titles"""
    name = _source_name(source, file_name)
    if detect_file_type(name) == 'csv':
        return load_csv_sheet(source, name)
    return load_workbook_sheets(source, file_name)
