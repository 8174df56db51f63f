#!/usr/bin/env python3
"""
Fallback source reader - parses spreadsheet-like sources with an ordered list
of strategies (first success wins), cleans the rows and reports data quality.
One unreadable sheet is a warning, never a failure of the whole file.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from models.config_models import PipelineConfig, QualityConfig
from models.processing_models import (
    DataQualityReport,
    ParseAttempt,
    ProcessingWarning,
    SheetResult,
    WarningKind,
    WorkbookReadResult,
)
from numeral_normalizer import coerce_numeric_string, is_numeric_string
from parse_strategies import BaseParseStrategy, Grid, default_strategies, is_blank
from text_utils import detect_language_and_direction

QUALITY_OK_MESSAGE = "Data quality looks good!"


def _unique_headers(raw_headers: Sequence[Any]) -> List[str]:
    """Stringify header cells, naming blanks and de-duplicating repeats"""
    headers: List[str] = []
    seen: Dict[str, int] = {}
    for index, raw in enumerate(raw_headers):
        header = f"Column {index + 1}" if is_blank(raw) else str(raw).strip()
        if header in seen:
            seen[header] += 1
            header = f"{header}_{seen[header]}"
        else:
            seen[header] = 1
        headers.append(header)
    return headers


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class FallbackSourceReader:
    """Reads sheets with decreasingly strict strategies and cleans their rows"""

    def __init__(self, config: Optional[PipelineConfig] = None,
                 strategies: Optional[Sequence[BaseParseStrategy]] = None):
        self.config = config or PipelineConfig.get_default_config()
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def quality(self) -> QualityConfig:
        return self.config.quality

    def parse_with_fallback(self, source: Any) -> Tuple[Optional[Grid], Optional[str], List[ParseAttempt]]:
        """Run strategies in order; return the first non-empty grid and every attempt made"""
        attempts: List[ParseAttempt] = []
        for strategy in self.strategies:
            try:
                grid = strategy.parse(source)
            except Exception as e:
                self.logger.debug(f"Strategy '{strategy.name}' failed: {e}")
                attempts.append(ParseAttempt(strategy=strategy.name, succeeded=False, error=str(e)))
                continue

            if grid:
                attempts.append(ParseAttempt(strategy=strategy.name, succeeded=True, rows=len(grid)))
                return grid, strategy.name, attempts

            attempts.append(ParseAttempt(strategy=strategy.name, succeeded=False, error="No data"))
        return None, None, attempts

    def clean_and_validate(self, grid: Grid) -> Tuple[List[str], List[Dict[str, Any]], DataQualityReport]:
        """Trim strings, coerce numeric strings, count gaps and build the quality report"""
        headers = _unique_headers(grid[0] if grid else [])
        raw_rows = grid[1:]

        rows: List[Dict[str, Any]] = []
        invalid_rows = 0
        missing_values = 0
        inconsistent_rows = 0

        for raw_row in raw_rows:
            if not isinstance(raw_row, (list, tuple)) or all(is_blank(cell) for cell in raw_row):
                invalid_rows += 1
                continue
            if len(raw_row) != len(headers):
                inconsistent_rows += 1

            row: Dict[str, Any] = {}
            row_has_data = False
            for index, header in enumerate(headers):
                value = raw_row[index] if index < len(raw_row) else None
                if is_blank(value):
                    missing_values += 1
                    value = ''
                elif isinstance(value, str):
                    value = value.strip()
                    if is_numeric_string(value):
                        value = coerce_numeric_string(value)

                row[header] = value
                if value != '':
                    row_has_data = True

            if row_has_data:
                rows.append(row)
            else:
                invalid_rows += 1

        report = DataQualityReport(
            total_rows=len(raw_rows),
            valid_rows=len(rows),
            invalid_rows=invalid_rows,
            missing_values=missing_values,
            data_type_issues=self._count_data_type_issues(headers, rows),
            inconsistent_rows=inconsistent_rows,
        )
        report.suggestions = self.generate_suggestions(report, len(headers))
        return headers, rows, report

    def _count_data_type_issues(self, headers: Sequence[str], rows: Sequence[Mapping[str, Any]]) -> int:
        """Non-numeric values inside columns that are mostly numeric"""
        issues = 0
        for header in headers:
            values = [row[header] for row in rows if row.get(header, '') != '']
            if not values:
                continue
            numeric = sum(1 for value in values if _is_number(value))
            if numeric / len(values) > self.quality.numeric_column_ratio:
                issues += len(values) - numeric
        return issues

    def generate_suggestions(self, report: DataQualityReport, column_count: int) -> List[str]:
        """Human-readable remediation hints; a single affirmation when nothing triggers"""
        suggestions: List[str] = []

        total_cells = report.valid_rows * column_count
        if total_cells and report.missing_values / total_cells > self.quality.missing_value_ratio:
            share = report.missing_values / total_cells * 100
            suggestions.append(
                f"High number of missing values detected ({share:.0f}% of cells). "
                f"Consider verifying the source data."
            )

        if report.total_rows and report.invalid_rows / report.total_rows > self.quality.invalid_row_ratio:
            suggestions.append(
                f"Many invalid rows were skipped ({report.invalid_rows} of {report.total_rows}). "
                f"Check the file format and data structure."
            )

        if report.inconsistent_rows > 0:
            suggestions.append(f"{report.inconsistent_rows} rows have inconsistent column counts.")

        if not suggestions:
            suggestions.append(QUALITY_OK_MESSAGE)
        return suggestions

    def read_sheet(self, name: str, source: Any) -> Tuple[Optional[SheetResult], List[ProcessingWarning]]:
        """Parse and clean one sheet; failures come back as warnings"""
        grid, strategy, attempts = self.parse_with_fallback(source)
        if grid is None:
            failed = "; ".join(f"{a.strategy}: {a.error}" for a in attempts)
            self.logger.warning(f"Failed to parse sheet '{name}' with all strategies ({failed})")
            return None, [ProcessingWarning(
                kind=WarningKind.UNREADABLE_STRUCTURE,
                message=f'Failed to parse sheet "{name}" with all strategies',
                details=failed,
                source=name,
            )]

        if strategy != self.strategies[0].name:
            self.logger.info(f"Sheet '{name}' parsed with fallback strategy '{strategy}'")

        headers, rows, report = self.clean_and_validate(grid)
        if not rows:
            self.logger.warning(f"Sheet '{name}' has no valid data rows after cleaning")
            return None, [ProcessingWarning(
                kind=WarningKind.MISSING_DATA,
                message=f'Sheet "{name}" has no valid data rows after cleaning',
                source=name,
            )]

        sample = ' '.join(
            [*headers, *(str(value) for row in rows[:5] for value in row.values())]
        )
        language, direction = detect_language_and_direction(sample)

        self.logger.info(
            f"Sheet '{name}': {report.valid_rows}/{report.total_rows} rows, "
            f"{report.missing_values} missing values, strategy '{strategy}'"
        )
        return SheetResult(
            name=name,
            headers=headers,
            rows=rows,
            quality_report=report,
            strategy=strategy,
            attempts=attempts,
            language=language,
            direction=direction,
        ), []

    def read_workbook(self, sheets: Union[Mapping[str, Any], Iterable[Tuple[str, Any]], Any]) -> WorkbookReadResult:
        """Read every sheet independently; accepts an openpyxl Workbook or name -> source pairs"""
        result = WorkbookReadResult()

        if hasattr(sheets, 'worksheets'):
            named_sources = [(worksheet.title, worksheet) for worksheet in sheets.worksheets]
        elif isinstance(sheets, Mapping):
            named_sources = list(sheets.items())
        else:
            named_sources = list(sheets)

        result.total_sheets = len(named_sources)
        if not named_sources:
            result.warnings.append(ProcessingWarning(
                kind=WarningKind.MISSING_DATA,
                message="Workbook contains no sheets",
            ))
            return result

        for name, source in named_sources:
            try:
                sheet, warnings = self.read_sheet(name, source)
            except Exception as e:
                self.logger.warning(f"Failed to process sheet '{name}': {e}", exc_info=True)
                result.warnings.append(ProcessingWarning(
                    kind=WarningKind.UNREADABLE_STRUCTURE,
                    message=f'Failed to process sheet "{name}"',
                    details=str(e),
                    source=name,
                ))
                continue

            result.warnings.extend(warnings)
            if sheet is not None:
                result.sheets.append(sheet)

        self.logger.info(f"Read {result.success_count}/{result.total_sheets} sheets")
        return result
