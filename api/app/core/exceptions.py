"""
Custom exceptions for the application.
"""
from typing import List, Optional


class FSILanguagesException(Exception):
    """Base exception for all FSI Languages application exceptions."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ValidationError(FSILanguagesException):
    """Raised when user-supplied data fails validation."""
    pass


class NotFoundError(FSILanguagesException):
    """Raised when a requested resource is not found."""
    pass


class ConflictError(FSILanguagesException):
    """Raised when there's a conflict (e.g., duplicate entry)."""
    pass


class PersistenceError(FSILanguagesException):
    """Raised when a data file cannot be read, parsed or written."""
    pass


class WorkbookFormatError(FSILanguagesException):
    """Raised when an uploaded spreadsheet cannot be opened at all."""
    pass
