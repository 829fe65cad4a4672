"""Domain exceptions for the exports app."""


class ExportServiceError(Exception):
    """Base exception for export errors."""
    pass


class InvalidExportFormatError(ExportServiceError):
    """Requested export format is not supported."""
    pass
