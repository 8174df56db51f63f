#!/usr/bin/env python3
"""
Text helpers for bilingual (Latin / Arabic) documents: light Arabic letter
folding for label comparison, and language / direction detection.
"""

from typing import Iterable, Tuple

ARABIC_RANGES = [
    (0x0600, 0x06FF),  # Arabic
    (0x0750, 0x077F),  # Arabic Supplement
    (0x08A0, 0x08FF),  # Arabic Extended-A
    (0xFB50, 0xFDFF),  # Presentation Forms-A
    (0xFE70, 0xFEFF),  # Presentation Forms-B
]

LATIN_RANGES = [
    (0x0041, 0x005A),
    (0x0061, 0x007A),
    (0x00C0, 0x00FF),
]

ARABIC_DIACRITICS = ''.join(chr(code) for code in range(0x064B, 0x0659)) + '\u0670'
ZERO_WIDTH = '\u200b\u200c\u200d'
TATWEEL = '\u0640'

_FOLD_TABLE = str.maketrans({
    'أ': 'ا',
    'إ': 'ا',
    'آ': 'ا',
    'ى': 'ي',
    'ة': 'ه',
    **{char: None for char in ARABIC_DIACRITICS + ZERO_WIDTH + TATWEEL},
})

DOMINANT_SHARE = 0.7


def fold_arabic(text: str) -> str:
    """Fold Alef/Ya/Ta-marbuta variants and drop diacritics, tatweel and zero-width marks"""
    if not text:
        return text
    return text.translate(_FOLD_TABLE)


def _in_ranges(char: str, ranges: Iterable[Tuple[int, int]]) -> bool:
    code = ord(char)
    return any(start <= code <= end for start, end in ranges)


def is_arabic_char(char: str) -> bool:
    return _in_ranges(char, ARABIC_RANGES)


def is_latin_char(char: str) -> bool:
    return _in_ranges(char, LATIN_RANGES)


def detect_language(text: str) -> str:
    """Return 'ar', 'en' or 'unknown' from the share of Arabic vs Latin letters"""
    if not text or not text.strip():
        return 'unknown'

    arabic_count = sum(1 for char in text if is_arabic_char(char))
    latin_count = sum(1 for char in text if is_latin_char(char))
    total = arabic_count + latin_count
    if total == 0:
        return 'unknown'

    if arabic_count / total > DOMINANT_SHARE:
        return 'ar'
    if latin_count / total > DOMINANT_SHARE:
        return 'en'
    if arabic_count > latin_count:
        return 'ar'
    if latin_count > arabic_count:
        return 'en'
    return 'unknown'


def text_direction(language: str) -> str:
    return 'rtl' if language == 'ar' else 'ltr'


def detect_language_and_direction(text: str) -> Tuple[str, str]:
    language = detect_language(text)
    return language, text_direction(language)


def has_mixed_languages(text: str) -> bool:
    """True when the text carries both Arabic and Latin letters"""
    return any(is_arabic_char(c) for c in text) and any(is_latin_char(c) for c in text)
