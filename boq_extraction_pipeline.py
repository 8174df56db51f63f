#!/usr/bin/env python3
"""
BOQ extraction pipeline.

Orchestrates table reconstruction (PDF text fragments) and fallback sheet
reading (spreadsheets), maps columns onto canonical fields, materializes items
and returns them validated, de-duplicated and sorted. A failing page or sheet
becomes a warning; only an unreadable document raises.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from column_mapper import ColumnMapper
from fallback_source_reader import FallbackSourceReader
from item_materializer import ItemCodeSequence, ItemMaterializer
from item_validator import deduplicate_items, sort_items, validate_items
from layout_clusterer import LayoutClusterer
from models.base_models import ColumnMapping, TextFragment
from models.config_models import PipelineConfig
from models.item_models import BOQItem
from models.processing_models import (
    ExtractionProgress,
    PipelineResult,
    ProcessingWarning,
    WarningKind,
)
from workbook_reader import load_sheets

FragmentLike = Union[TextFragment, Mapping[str, Any]]
Page = Sequence[FragmentLike]
ProgressCallback = Callable[[ExtractionProgress], None]


def _as_fragments(page: Page) -> List[TextFragment]:
    return [
        fragment if isinstance(fragment, TextFragment) else TextFragment.model_validate(fragment)
        for fragment in page
    ]


class BOQExtractionPipeline:
    """
    Holds configuration only. Every process_* call builds its own item-code
    sequence and result, so one instance can serve concurrent callers.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig.get_default_config()
        self.clusterer = LayoutClusterer(self.config)
        self.mapper = ColumnMapper(self.config.mapping)
        self.materializer = ItemMaterializer(self.config)
        self.reader = FallbackSourceReader(self.config)
        self.logger = logging.getLogger(self.__class__.__name__)

    def _new_sequence(self) -> ItemCodeSequence:
        return ItemCodeSequence(self.config.materializer.fallback_code_prefix)

    def _finalize(self, result: PipelineResult, items: List[BOQItem]) -> PipelineResult:
        unique = deduplicate_items(items, self.config)
        result.validation = validate_items(unique, self.config)
        result.items = sort_items(result.validation.valid)
        self.logger.info(
            f"Extracted {len(result.items)} valid items "
            f"({len(result.validation.invalid)} invalid, {len(items) - len(unique)} duplicates, "
            f"{len(result.warnings)} warnings)"
        )
        return result

    def process_pages(self, pages: Sequence[Page], column_mapping: Optional[ColumnMapping] = None,
                      progress_callback: Optional[ProgressCallback] = None,
                      cancel_event: Optional[threading.Event] = None,
                      default_category: Optional[str] = None) -> PipelineResult:
        """
        Reconstruct tables page by page, then map and materialize their rows.

        Cancellation is checked between pages; the pages reconstructed before
        the event was set are still mapped and returned with cancelled=True.
        """
        total_pages = len(pages)
        result = PipelineResult(total_pages=total_pages)

        for index, page in enumerate(pages):
            page_number = index + 1
            if cancel_event is not None and cancel_event.is_set():
                self.logger.info(f"Extraction cancelled after {result.pages_processed}/{total_pages} pages")
                result.cancelled = True
                break

            try:
                tables = self.clusterer.extract_tables(_as_fragments(page), page_number)
            except Exception as e:
                self.logger.warning(f"Failed to process page {page_number}: {e}", exc_info=True)
                result.warnings.append(ProcessingWarning(
                    kind=WarningKind.UNREADABLE_STRUCTURE,
                    message=f"Failed to process page {page_number}",
                    details=str(e),
                    source=f"page {page_number}",
                ))
            else:
                result.tables.extend(tables)

            result.pages_processed += 1
            if progress_callback is not None:
                progress_callback(ExtractionProgress(
                    current_page=page_number,
                    total_pages=total_pages,
                    progress=page_number / total_pages * 100,
                    is_complete=page_number == total_pages,
                ))

        if result.cancelled and progress_callback is not None:
            progress_callback(ExtractionProgress(
                current_page=result.pages_processed,
                total_pages=total_pages,
                progress=result.pages_processed / total_pages * 100 if total_pages else 0,
                is_complete=False,
                cancelled=True,
            ))

        sequence = self._new_sequence()
        items: List[BOQItem] = []
        for table in result.tables:
            mapping = column_mapping or self.mapper.detect_column_mapping(table.headers)
            if mapping is None:
                self.logger.warning(f"No column mapping detected for table on page {table.page_number}")
                result.warnings.append(ProcessingWarning(
                    kind=WarningKind.UNMAPPED_TABLE,
                    message=f"Could not map the columns of the table on page {table.page_number}",
                    details=", ".join(table.headers),
                    source=f"page {table.page_number}",
                ))
                continue
            items.extend(self.materializer.table_to_items(table, mapping, sequence, default_category))

        self.logger.info(
            f"Processed {result.pages_processed}/{total_pages} pages, {len(result.tables)} tables"
        )
        return self._finalize(result, items)

    def process_sheets(self, sheets: Any, column_mapping: Optional[ColumnMapping] = None,
                       default_category: Optional[str] = None) -> PipelineResult:
        """Read every sheet with fallback strategies and materialize its rows"""
        read = self.reader.read_workbook(sheets)
        result = PipelineResult(sheets=read.sheets, warnings=list(read.warnings))

        sequence = self._new_sequence()
        items: List[BOQItem] = []
        for sheet in read.sheets:
            mapping = column_mapping or self.mapper.detect_column_mapping(dict.fromkeys(sheet.headers))
            if mapping is None:
                self.logger.warning(f"No column mapping detected for sheet '{sheet.name}'")
                result.warnings.append(ProcessingWarning(
                    kind=WarningKind.UNMAPPED_TABLE,
                    message=f'Could not map the columns of sheet "{sheet.name}"',
                    details=", ".join(sheet.headers),
                    source=sheet.name,
                ))
                continue
            items.extend(self.materializer.map_rows_to_items(sheet.rows, mapping, sequence, default_category))

        return self._finalize(result, items)

    def process_workbook(self, source: Any, file_name: Optional[str] = None,
                         column_mapping: Optional[ColumnMapping] = None,
                         default_category: Optional[str] = None) -> PipelineResult:
        """Open a workbook or CSV file and process its sheets; unreadable files raise"""
        sheets = load_sheets(source, file_name)
        return self.process_sheets(sheets, column_mapping, default_category)

    def process_documents_concurrently(self, documents: Sequence[Sequence[Page]],
                                       max_workers: Optional[int] = None) -> List[PipelineResult]:
        """
        Run independent page extractions on a thread pool. Results come back in
        input order and match what sequential calls would return.
        """
        if not documents:
            return []

        workers = max_workers or min(4, len(documents))
        results: List[Optional[PipelineResult]] = [None] * len(documents)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures: Dict[Any, int] = {
                executor.submit(self.process_pages, pages): index
                for index, pages in enumerate(documents)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()

        self.logger.info(f"Processed {len(documents)} documents with {workers} workers")
        return results


def process_documents_concurrently(documents: Sequence[Sequence[Page]], config: Optional[PipelineConfig] = None,
                                   max_workers: Optional[int] = None) -> List[PipelineResult]:
    """Module-level shortcut for BOQExtractionPipeline.process_documents_concurrently"""
    return BOQExtractionPipeline(config).process_documents_concurrently(documents, max_workers)
