"""Custom exceptions for the donor registry."""
from typing import Any, Dict, Optional


class DonorRegistryError(Exception):
    """Base exception for all donor registry errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.details = details or {}


class StorageError(DonorRegistryError):
    """Exception raised when the key-value store or backup storage fails."""

    pass


class IngestionError(DonorRegistryError):
    """Base exception for spreadsheet ingestion failures."""

    pass


class UnsupportedFormatError(IngestionError):
    """Exception raised for file extensions the ingestion pipeline cannot read."""

    pass


class FileParseError(IngestionError):
    """Exception raised for malformed CSV, spreadsheet or JSON content."""

    pass


class SchemaMappingError(IngestionError):
    """Exception raised when required canonical columns are missing after mapping."""

    def __init__(self, missing_fields, details: Optional[Dict[str, Any]] = None):
        self.missing_fields = list(missing_fields)
        message = f"Missing required columns (עמודות חסרות): {', '.join(self.missing_fields)}"
        super().__init__(message, details={"missing_fields": self.missing_fields, **(details or {})})


class IngestionBusyError(IngestionError):
    """Exception raised when a panel is already loading a file."""

    pass
