"""
Tests for fallback sheet parsing, row cleaning and data quality reporting
"""
import pandas as pd
from openpyxl import Workbook

from fallback_source_reader import QUALITY_OK_MESSAGE, FallbackSourceReader
from models.processing_models import WarningKind
from parse_strategies import RawCellScanStrategy, RecordRowsStrategy, StructuredGridStrategy


def build_workbook():
    wb = Workbook()
    ws = wb.active
    ws.title = 'Civil'
    ws.append(['Item Code', 'Description', 'Unit', 'Qty', 'Unit Price'])
    ws.append([1, 'Excavation', 'm3', 20, 15])
    ws.append([2, 'Concrete', 'm3', '10', 250])

    other = wb.create_sheet('Electrical')
    other.append(['Code', 'Description', 'Quantity', 'Rate'])
    other.append(['E-1', 'Cable tray', 12, 40])
    return wb


def test_reads_openpyxl_workbook():
    result = FallbackSourceReader().read_workbook(build_workbook())

    assert result.total_sheets == 2
    assert result.success_count == 2
    assert result.warnings == []

    civil = result.sheets[0]
    assert civil.name == 'Civil'
    assert civil.strategy == 'structured'
    assert civil.headers == ['Item Code', 'Description', 'Unit', 'Qty', 'Unit Price']
    assert civil.rows[1] == {'Item Code': 2, 'Description': 'Concrete', 'Unit': 'm3', 'Qty': 10, 'Unit Price': 250}
    assert civil.quality_report.valid_rows == 2
    assert civil.quality_report.suggestions == [QUALITY_OK_MESSAGE]
    assert civil.language == 'en'


def test_records_fall_back_to_record_strategy():
    records = [
        {'Description': 'Pipe', 'Quantity': 2},
        {'Description': 'Valve', 'Quantity': 1, 'Notes': 'spare'},
    ]
    sheet, warnings = FallbackSourceReader().read_sheet('Records', records)

    assert warnings == []
    assert sheet.strategy == 'records'
    assert [attempt.strategy for attempt in sheet.attempts] == ['structured', 'records']
    assert not sheet.attempts[0].succeeded
    assert sheet.attempts[1].succeeded
    assert sheet.headers == ['Description', 'Quantity', 'Notes']
    assert sheet.rows[0]['Notes'] == ''


def test_dataframe_source():
    frame = pd.DataFrame({'Description': ['Pipe', 'Elbow'], 'Quantity': [2, 4]})
    sheet, _ = FallbackSourceReader().read_sheet('Frame', frame)

    assert sheet.headers == ['Description', 'Quantity']
    assert [row['Quantity'] for row in sheet.rows] == [2, 4]


def test_ragged_rows_are_reported():
    grid = [['A', 'B', 'C'], [1, 2], [3, 4, 5, 6]]
    sheet, _ = FallbackSourceReader().read_sheet('Ragged', grid)

    report = sheet.quality_report
    assert report.inconsistent_rows == 2
    assert report.missing_values == 1
    assert report.suggestions == ["2 rows have inconsistent column counts."]
    assert sheet.rows[0] == {'A': 1, 'B': 2, 'C': ''}


def test_missing_value_and_invalid_row_suggestions():
    grid = [['A', 'B'], [1, None], [2, ''], ['', None]]
    headers, rows, report = FallbackSourceReader().clean_and_validate(grid)

    assert len(rows) == 2
    assert report.invalid_rows == 1
    assert report.missing_values == 2
    assert report.suggestions[0].startswith("High number of missing values detected")
    assert report.suggestions[1].startswith("Many invalid rows were skipped (1 of 3)")


def test_numeric_strings_are_coerced():
    headers, rows, report = FallbackSourceReader().clean_and_validate([['Qty'], [' 12 '], ['3.5'], ['١٠']])
    assert [row['Qty'] for row in rows] == [12, 3.5, 10]


def test_data_type_issues_in_numeric_columns():
    grid = [['Qty'], [1], [2], [3], ['n/a']]
    _, _, report = FallbackSourceReader().clean_and_validate(grid)
    assert report.data_type_issues == 1


def test_blank_and_duplicate_headers_are_named():
    sheet, _ = FallbackSourceReader().read_sheet('Headers', [['Qty', None, 'Qty'], [1, 2, 3]])
    assert sheet.headers == ['Qty', 'Column 2', 'Qty_2']


def test_unreadable_sheet_becomes_warning():
    result = FallbackSourceReader().read_workbook({
        'Bad': 42,
        'Good': [['Description', 'Qty'], ['Pipe', 1]],
    })

    assert result.success_count == 1
    assert result.sheets[0].name == 'Good'
    assert len(result.warnings) == 1
    warning = result.warnings[0]
    assert warning.kind == WarningKind.UNREADABLE_STRUCTURE
    assert warning.source == 'Bad'
    assert 'structured' in warning.details


def test_sheet_without_data_rows_is_a_warning():
    sheet, warnings = FallbackSourceReader().read_sheet('Empty', [['A', 'B']])
    assert sheet is None
    assert warnings[0].kind == WarningKind.MISSING_DATA


def test_empty_workbook():
    result = FallbackSourceReader().read_workbook({})
    assert result.total_sheets == 0
    assert result.warnings[0].kind == WarningKind.MISSING_DATA


def test_arabic_sheet_is_right_to_left():
    grid = [['الوصف', 'الكمية'], ['خرسانة', '٥']]
    sheet, _ = FallbackSourceReader().read_sheet('عربي', grid)
    assert sheet.language == 'ar'
    assert sheet.direction == 'rtl'
    assert sheet.rows[0]['الكمية'] == 5


def test_raw_cell_scan_covers_used_range():
    wb = Workbook()
    ws = wb.active
    ws['B2'] = 'x'
    ws['C3'] = 5
    assert RawCellScanStrategy().parse(ws) == [['x', None], [None, 5]]


def test_raw_cell_scan_pads_ragged_lists():
    assert RawCellScanStrategy().parse([['a'], ['b', 'c']]) == [['a', ''], ['b', 'c']]


def test_structured_strategy_drops_blank_rows():
    assert StructuredGridStrategy().parse([['a', 'b'], [None, ' '], [1, 2]]) == [['a', 'b'], [1, 2]]


def test_record_strategy_on_worksheet():
    ws = build_workbook()['Electrical']
    grid = RecordRowsStrategy().parse(ws)
    assert grid[0] == ['Code', 'Description', 'Quantity', 'Rate']
    assert grid[1] == ['E-1', 'Cable tray', 12, 40]
