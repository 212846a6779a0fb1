"""
Custom exceptions for the transcript engine.
"""

from typing import Optional, Any, Dict


class TranscriptError(Exception):
    """Base exception for all transcript-related errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class CourseValidationError(TranscriptError):
    """Raised when a course submission is rejected before reaching the record store."""
    pass


class StoreUnavailable(TranscriptError):
    """Raised when the record store cannot be read or written. Safe to retry."""
    pass
