#!/usr/bin/env python3
"""
Locale-aware numeral normalization.
Converts Arabic-Indic / Eastern-Arabic digits and Arabic separators to their
Western forms, and parses numbers without ever raising.
"""

import math
import re
from typing import Any

import pandas as pd

ARABIC_INDIC_DIGITS = '٠١٢٣٤٥٦٧٨٩'
EASTERN_ARABIC_DIGITS = '۰۱۲۳۴۵۶۷۸۹'
ARABIC_THOUSANDS_SEPARATOR = '٬'
ARABIC_DECIMAL_SEPARATOR = '٫'

_NUMERAL_TABLE = str.maketrans({
    **{digit: str(value) for value, digit in enumerate(ARABIC_INDIC_DIGITS)},
    **{digit: str(value) for value, digit in enumerate(EASTERN_ARABIC_DIGITS)},
    ARABIC_THOUSANDS_SEPARATOR: ',',
    ARABIC_DECIMAL_SEPARATOR: '.',
})

_NON_NUMERIC = re.compile(r'[^\d.\-]')
_NUMBER_PREFIX = re.compile(r'-?(?:\d+(?:\.\d*)?|\.\d+)')
_PURE_NUMBER = re.compile(r'^-?\d+(\.\d+)?$')


def normalize_numeral(text: str) -> str:
    """Replace Arabic digit forms and separators with Western equivalents"""
    if not isinstance(text, str):
        return text
    return text.translate(_NUMERAL_TABLE)


def parse_number_safe(value: Any) -> float:
    """
    Parse a numeric value from a cell or text fragment.

    Thousands separators and any character other than digits, '.' and a
    leading '-' are stripped before parsing. Unparseable input yields 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else 0
    if not isinstance(value, str):
        try:
            if pd.isna(value):
                return 0
        except (TypeError, ValueError):
            return 0
        value = str(value)

    normalized = normalize_numeral(value).replace(',', '').strip()
    negative = normalized.startswith('-')
    digits = _NON_NUMERIC.sub('', normalized).replace('-', '')
    if negative:
        digits = '-' + digits

    match = _NUMBER_PREFIX.match(digits)
    if not match:
        return 0
    try:
        number = float(match.group(0))
    except ValueError:
        return 0
    return number if math.isfinite(number) else 0


def is_numeric_string(value: Any) -> bool:
    """True for a plain signed decimal string once digits are normalized"""
    if not isinstance(value, str):
        return False
    return bool(_PURE_NUMBER.match(normalize_numeral(value).strip()))


def coerce_numeric_string(value: str) -> float:
    """Convert a string accepted by is_numeric_string into a number"""
    normalized = normalize_numeral(value).strip()
    return float(normalized) if '.' in normalized else int(normalized)
