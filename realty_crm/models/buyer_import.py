"""CSV import models - field schema, importer state, and results."""

from enum import Enum
from pydantic import BaseModel, Field


class FieldType(str, Enum):
    """Coercion applied to a mapped cell."""
    STRING = "string"
    BOOL = "bool"
    NUMBER = "number"
    LIST = "list"


class ImportField(BaseModel):
    """One target field of the import schema."""
    db: str = Field(..., description="Column name in the buyers table")
    label: str = Field(..., description="Header label shown to the operator")
    type: FieldType = FieldType.STRING


class ImportState(str, Enum):
    """Importer lifecycle."""
    IDLE = "idle"
    PARSED = "parsed"
    MAPPING = "mapping"
    IMPORTING = "importing"
    DONE = "done"
    ERROR = "error"


class DuplicatePolicy(str, Enum):
    """What to do with rows that look like buyers already on file."""
    ALLOW = "allow"
    SKIP_EXISTING = "skip_existing"


class ImportResult(BaseModel):
    """Outcome of a completed import run."""
    import_id: str
    total_rows: int = 0
    inserted_count: int = 0
    skipped_duplicates: int = 0
    batches: int = 0
    progress: int = 100
    inserted_ids: list[str] = Field(default_factory=list)
