#!/usr/bin/env python3
"""
Descriptive statistics, outliers and category aggregates over BOQ items.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from models.config_models import PipelineConfig
from models.item_models import (
    AxisStatistics,
    BOQItem,
    CategoryShare,
    ItemsSummary,
    ItemStatistics,
    Outlier,
    OutlierType,
)

logger = logging.getLogger(__name__)

NO_DATA_INSIGHT = "No data available for analysis"


def _frame(items: Sequence[BOQItem], uncategorized: str = "Uncategorized") -> pd.DataFrame:
    frame = pd.DataFrame(
        [
            {
                'category': item.category or uncategorized,
                'quantity': item.quantity,
                'unit_price': item.unit_price,
                'total_price': item.total_price,
            }
            for item in items
        ],
        columns=['category', 'quantity', 'unit_price', 'total_price'],
    )
    return frame


def axis_statistics(values: Sequence[float]) -> AxisStatistics:
    """min / max / mean / median / population std-dev; zeros when empty"""
    if len(values) == 0:
        return AxisStatistics()
    array = np.asarray(values, dtype=float)
    return AxisStatistics(
        min=float(array.min()),
        max=float(array.max()),
        mean=float(array.mean()),
        median=float(np.median(array)),
        std_dev=float(array.std()),
    )


def calculate_statistics(items: Sequence[BOQItem]) -> ItemStatistics:
    """Unit price and quantity statistics, each axis computed independently"""
    return ItemStatistics(
        price=axis_statistics([item.unit_price for item in items]),
        quantity=axis_statistics([item.quantity for item in items]),
    )


def identify_outliers(items: Sequence[BOQItem], std_dev_threshold: Optional[float] = None,
                      config: Optional[PipelineConfig] = None) -> List[Outlier]:
    """
    Items whose unit price or quantity lies more than the threshold number of
    standard deviations from the mean. One item may be reported on both axes.
    """
    if std_dev_threshold is None:
        std_dev_threshold = (config or PipelineConfig.get_default_config()).analysis.outlier_std_dev_threshold

    stats = calculate_statistics(items)
    axes = (
        (OutlierType.PRICE, stats.price, lambda item: item.unit_price),
        (OutlierType.QUANTITY, stats.quantity, lambda item: item.quantity),
    )

    outliers: List[Outlier] = []
    for item in items:
        for kind, axis, value_of in axes:
            if axis.std_dev == 0:
                continue
            deviation = abs(value_of(item) - axis.mean) / axis.std_dev
            if deviation > std_dev_threshold:
                outliers.append(Outlier(item=item, type=kind, deviation=deviation))

    logger.debug(f"Identified {len(outliers)} outliers among {len(items)} items")
    return outliers


def group_by_category(items: Sequence[BOQItem], config: Optional[PipelineConfig] = None) -> Dict[str, List[BOQItem]]:
    """Items grouped by category in first-seen order"""
    uncategorized = (config or PipelineConfig.get_default_config()).analysis.uncategorized_label
    groups: Dict[str, List[BOQItem]] = {}
    for item in items:
        groups.setdefault(item.category or uncategorized, []).append(item)
    return groups


def get_cost_distribution(items: Sequence[BOQItem], config: Optional[PipelineConfig] = None) -> List[CategoryShare]:
    """Per-category cost, count and share of the overall total, largest first"""
    if not items:
        return []
    uncategorized = (config or PipelineConfig.get_default_config()).analysis.uncategorized_label
    frame = _frame(items, uncategorized)
    grouped = frame.groupby('category', sort=False).agg(
        count=('total_price', 'size'),
        total_cost=('total_price', 'sum'),
        average_total_price=('total_price', 'mean'),
    )
    overall = float(frame['total_price'].sum())

    shares = [
        CategoryShare(
            category=str(category),
            count=int(row['count']),
            total_cost=float(row['total_cost']),
            percentage=float(row['total_cost']) / overall * 100 if overall else 0.0,
            average_total_price=float(row['average_total_price']),
        )
        for category, row in grouped.iterrows()
    ]
    return sorted(shares, key=lambda share: share.total_cost, reverse=True)


def get_items_summary(items: Sequence[BOQItem], config: Optional[PipelineConfig] = None) -> ItemsSummary:
    """Headline totals and the distinct categories present"""
    uncategorized = (config or PipelineConfig.get_default_config()).analysis.uncategorized_label
    categories: Dict[str, None] = {}
    for item in items:
        categories.setdefault(item.category or uncategorized, None)

    return ItemsSummary(
        total_items=len(items),
        total_quantity=float(sum(item.quantity for item in items)),
        total_cost=float(sum(item.total_price for item in items)),
        average_unit_price=float(np.mean([item.unit_price for item in items])) if items else 0.0,
        categories=list(categories),
    )


def generate_insights(items: Sequence[BOQItem], config: Optional[PipelineConfig] = None) -> List[str]:
    """Advisory remarks about cost concentration and price spread"""
    if not items:
        return [NO_DATA_INSIGHT]

    insights: List[str] = []
    totals = axis_statistics([item.total_price for item in items])
    if totals.std_dev > totals.mean * 0.5:
        insights.append("High cost variance detected. Consider reviewing high-cost items.")

    distribution = get_cost_distribution(items, config)
    top = distribution[0]
    if top.percentage > 40:
        insights.append(
            f"{top.category} represents {top.percentage:.1f}% of total cost. "
            f"Consider negotiating bulk discounts."
        )

    price_outliers = [o for o in identify_outliers(items, config=config) if o.type == OutlierType.PRICE]
    if price_outliers:
        insights.append(f"{len(price_outliers)} items with unusual unit prices identified. Review specifications and pricing.")

    prices = axis_statistics([item.unit_price for item in items])
    if prices.std_dev > prices.mean * 0.3:
        insights.append("Significant variation in unit prices. Consider standardization.")

    return insights
