"""
Domain exceptions for the milk records app.

These exceptions represent business rule violations and are caught in
views and converted to HTTP responses.

Exception Hierarchy:
    MilkServiceError (base)
    ├── RecordValidationError   (400, carries a list of reasons)
    ├── BulkValidationError     (400, carries per-index reasons)
    ├── RecordNotFoundError     (404)
    ├── DuplicateRecordError    (409)
    └── InvalidPeriodError      (400)
"""


class MilkServiceError(Exception):
    """Base exception for all milk record service errors."""
    pass


class RecordValidationError(MilkServiceError):
    """
    Raised when record input fails validation.

    ``errors`` lists every reason, not only the first one found.
    """

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or []


class BulkValidationError(MilkServiceError):
    """
    Raised when any entry of a bulk request fails validation.

    ``errors`` is a list of ``{'index': int, 'errors': [str, ...]}``.
    Nothing is written when this is raised.
    """

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or []


class RecordNotFoundError(MilkServiceError):
    """Record does not exist or belongs to another user."""
    pass


class DuplicateRecordError(MilkServiceError):
    """A record already exists for this user and date."""
    pass


class InvalidPeriodError(MilkServiceError):
    """Year/month pair does not name a calendar month."""
    pass
