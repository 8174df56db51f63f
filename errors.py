#!/usr/bin/env python3
"""
Exceptions raised when a whole source document cannot be processed.
Page and sheet failures are recorded as warnings instead.
"""

from typing import Optional


class BOQExtractionError(Exception):
    """Base error for document-level extraction failures"""

    def __init__(self, message: str, details: Optional[str] = None, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.source = source

    def __str__(self) -> str:
        text = self.message
        if self.source:
            text = f"{text} [{self.source}]"
        if self.details:
            text = f"{text}: {self.details}"
        return text


class SourceUnreadableError(BOQExtractionError):
    """The source could not be opened or decoded at all"""


class UnsupportedFormatError(BOQExtractionError):
    """The source is not a spreadsheet or text-layer format the pipeline handles"""
