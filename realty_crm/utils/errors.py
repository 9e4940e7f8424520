"""Error handling utilities."""

from typing import Optional


class CRMError(Exception):
    """Base exception for the realty CRM backend."""
    code = "crm_error"


class StoreError(CRMError):
    """Backing store operation error.

    The message is the store's own message, kept verbatim so it can be
    shown to the operator.
    """
    code = "store_error"

    def __init__(self, message: str, table: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.table = table
        self.operation = operation


class CSVParseError(CRMError):
    """Uploaded file could not be parsed as delimited text."""
    code = "parse_error"


class MappingError(CRMError):
    """Column mapping is missing or refers to an unknown column."""
    code = "validation_error"


class BuyerImportError(CRMError):
    """A batch insert failed part way through an import.

    Batches before ``failed_batch`` are already committed.
    """
    code = "import_failed"

    def __init__(self, message: str, inserted_count: int = 0, failed_batch: int = 0, total_batches: int = 0):
        super().__init__(message)
        self.inserted_count = inserted_count
        self.failed_batch = failed_batch
        self.total_batches = total_batches


class ImportInProgressError(CRMError):
    """An import is already running on this importer."""
    code = "import_in_progress"


class ProtectedTagError(CRMError):
    """Protected tags cannot be deleted."""
    code = "protected_tag"
