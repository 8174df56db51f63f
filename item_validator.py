#!/usr/bin/env python3
"""
Item validation, de-duplication, ordering and filtering.
"""

import functools
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from models.config_models import AnalysisConfig, PipelineConfig
from models.item_models import BOQItem, InvalidItem, ValidationResult

logger = logging.getLogger(__name__)


def _analysis_config(config: Optional[PipelineConfig]) -> AnalysisConfig:
    return (config or PipelineConfig.get_default_config()).analysis


def item_errors(item: BOQItem, config: Optional[PipelineConfig] = None) -> List[str]:
    """Every reason an item is unusable; empty when valid"""
    sentinel = _analysis_config(config).missing_description_sentinel
    errors = []
    description = item.description.strip()
    if not description or description == sentinel:
        errors.append("Missing description")
    if item.quantity <= 0:
        errors.append("Invalid quantity")
    if item.unit_price < 0:
        errors.append("Invalid unit price")
    if item.total_price < 0:
        errors.append("Invalid total price")
    return errors


def validate_items(items: Iterable[BOQItem], config: Optional[PipelineConfig] = None) -> ValidationResult:
    """Partition items into valid and invalid; input order is kept in both lists"""
    result = ValidationResult()
    for item in items:
        errors = item_errors(item, config)
        if errors:
            result.invalid.append(InvalidItem(item=item, errors=errors))
        else:
            result.valid.append(item)

    if result.invalid:
        logger.info(f"Validation: {len(result.valid)} valid, {len(result.invalid)} invalid items")
    return result


def deduplicate_items(items: Iterable[BOQItem], config: Optional[PipelineConfig] = None) -> List[BOQItem]:
    """Drop items whose code and description prefix repeat an earlier item"""
    prefix_length = _analysis_config(config).dedupe_description_length
    seen: Dict[Tuple[str, str], None] = {}
    unique: List[BOQItem] = []
    for item in items:
        key = (item.item_code, item.description[:prefix_length])
        if key in seen:
            logger.debug(f"Duplicate item dropped: {key}")
            continue
        seen[key] = None
        unique.append(item)
    return unique


def _as_int(code: str) -> Optional[int]:
    try:
        return int(code.strip())
    except ValueError:
        return None


def compare_item_codes(a: str, b: str) -> int:
    """Numeric comparison when both codes are integers, else lexicographic"""
    num_a, num_b = _as_int(a), _as_int(b)
    if num_a is not None and num_b is not None:
        left, right = num_a, num_b
    else:
        left, right = a, b
    return (left > right) - (left < right)


def sort_items(items: Iterable[BOQItem]) -> List[BOQItem]:
    """Items ordered by item code; a new list is returned"""
    return sorted(items, key=functools.cmp_to_key(lambda x, y: compare_item_codes(x.item_code, y.item_code)))


def filter_by_category(items: Iterable[BOQItem], category: str) -> List[BOQItem]:
    """Items in one category; matching ignores case and surrounding spaces"""
    wanted = category.strip().casefold()
    return [item for item in items if (item.category or '').strip().casefold() == wanted]


def filter_by_price_range(items: Iterable[BOQItem], min_price: Optional[float] = None,
                          max_price: Optional[float] = None) -> List[BOQItem]:
    """Items whose unit price falls within the inclusive bounds"""
    return [
        item for item in items
        if (min_price is None or item.unit_price >= min_price)
        and (max_price is None or item.unit_price <= max_price)
    ]
