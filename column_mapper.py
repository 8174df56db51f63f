#!/usr/bin/env python3
"""
Column mapper - maps header rows or record keys onto the canonical BOQ fields
using bilingual synonym tables. Exact normalized matches drive automatic
mapping; fuzzy scores are only used to suggest a mapping for manual review.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from fuzzywuzzy import fuzz

from models.base_models import ColumnId, ColumnMapping
from models.config_models import CanonicalField, MappingConfig, PipelineConfig
from models.item_models import MappingSuggestion, MappingSuggestionResult
from text_utils import fold_arabic

_WHITESPACE = re.compile(r'\s+')
_NON_WORD = re.compile(r'[^\w]')

Columns = Union[Sequence[Any], Mapping[str, Any]]


def normalize_column_name(name: Any) -> str:
    """Lower-case, trim, whitespace -> '_', strip non-word characters, fold Arabic letter forms"""
    if name is None:
        return ''
    normalized = str(name).lower().strip()
    normalized = _WHITESPACE.sub('_', normalized)
    normalized = _NON_WORD.sub('', normalized)
    return fold_arabic(normalized)


class ColumnMapper:
    """Resolves source columns to canonical fields independently per document"""

    def __init__(self, config: Optional[MappingConfig] = None):
        self.config = config or PipelineConfig.get_default_config().mapping
        self.logger = logging.getLogger(self.__class__.__name__)
        self.synonyms: Dict[CanonicalField, set] = {
            field: {normalize_column_name(name) for name in names if normalize_column_name(name)}
            for field, names in self.config.field_synonyms.items()
        }

    def match_field(self, column_name: Any) -> Optional[CanonicalField]:
        """Canonical field whose synonym set holds the normalized name"""
        normalized = normalize_column_name(column_name)
        if not normalized:
            return None
        for field in CanonicalField:
            if normalized in self.synonyms.get(field, set()):
                return field
        return None

    @staticmethod
    def _column_entries(columns: Columns) -> List[Tuple[ColumnId, Any]]:
        """(identifier, display name) pairs for a header row or a record's keys"""
        if isinstance(columns, Mapping):
            return [(key, key) for key in columns.keys()]
        return list(enumerate(columns))

    def detect_column_mapping(self, columns: Columns) -> Optional[ColumnMapping]:
        """
        Map a header row (positional -> int ids) or a sample record (-> key ids).

        The first matching column wins for each field. Returns None, not an
        empty mapping, when no column matched so the caller can ask for a
        manual mapping.
        """
        fields: Dict[CanonicalField, ColumnId] = {}
        for column_id, name in self._column_entries(columns):
            field = self.match_field(name)
            if field is not None and field not in fields:
                fields[field] = column_id

        if not fields:
            self.logger.debug(f"No column mapping detected for columns: {list(columns)[:10]}")
            return None

        mapping = ColumnMapping.from_fields(fields)
        self.logger.debug(f"Detected column mapping: {mapping.as_dict()}")
        return mapping

    def find_column(self, row: Mapping[str, Any], field: CanonicalField) -> Optional[str]:
        """Key of the row whose normalized name is a synonym of the field"""
        accepted = self.synonyms.get(field, set())
        for key in row.keys():
            if normalize_column_name(key) in accepted:
                return key
        return None

    def suggest_column_mapping(self, columns: Columns) -> MappingSuggestionResult:
        """Best fuzzy field per column, for a manual mapping screen"""
        suggestions: List[MappingSuggestion] = []
        review_items: List[str] = []
        claimed: Dict[CanonicalField, float] = {}

        for column_id, name in self._column_entries(columns):
            normalized = normalize_column_name(name)
            best_field, best_score = None, 0
            if normalized:
                for field, accepted in self.synonyms.items():
                    for synonym in accepted:
                        score = 100 if synonym == normalized else fuzz.ratio(normalized, synonym)
                        if score > best_score:
                            best_field, best_score = field, score

            requires_review = best_score < self.config.review_threshold
            suggestion = MappingSuggestion(
                column=column_id,
                column_name=str(name),
                field=best_field if best_score > 0 else None,
                similarity=best_score,
                requires_review=requires_review,
            )
            suggestions.append(suggestion)

            if best_field is not None and not requires_review:
                claimed[best_field] = max(claimed.get(best_field, 0), best_score)
            elif best_field is not None:
                review_items.append(f"{name} ({best_field.value}) - Low confidence: {best_score:.0f}%")

        missing = [field for field in self.config.required_fields if field not in claimed]
        review_items.extend(f"Missing required field: {field.value}" for field in missing)

        return MappingSuggestionResult(
            suggestions=suggestions,
            missing_required=missing,
            review_items=review_items,
        )

    def validate_mapping(self, mapping: Optional[ColumnMapping]) -> List[str]:
        """Errors for required fields the mapping leaves unset"""
        mapped = mapping.as_dict() if mapping is not None else {}
        return [f"{field.value} column is required" for field in self.config.required_fields if field not in mapped]


def merge_mappings(*mappings: Optional[ColumnMapping]) -> ColumnMapping:
    """First mapping that sets a field wins"""
    merged: Dict[CanonicalField, ColumnId] = {}
    for mapping in mappings:
        if mapping is None:
            continue
        for field, column in mapping.as_dict().items():
            merged.setdefault(field, column)
    return ColumnMapping.from_fields(merged)


def detect_column_mapping(columns: Columns, config: Optional[PipelineConfig] = None) -> Optional[ColumnMapping]:
    """Module-level shortcut for ColumnMapper.detect_column_mapping"""
    mapping_config = config.mapping if config is not None else None
    return ColumnMapper(mapping_config).detect_column_mapping(columns)


def find_column(row: Mapping[str, Any], field: CanonicalField, config: Optional[PipelineConfig] = None) -> Optional[str]:
    """Module-level shortcut for ColumnMapper.find_column"""
    mapping_config = config.mapping if config is not None else None
    return ColumnMapper(mapping_config).find_column(row, field)
