"""Tag model."""

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

DEFAULT_TAG_COLOR = "#3B82F6"


class Tag(BaseModel):
    """Tag applied to buyers by name."""
    id: str = Field(..., description="Tag ID (text)")
    name: str = Field(..., description="Tag name, compared case-insensitively")
    color: str = Field(default=DEFAULT_TAG_COLOR, description="Display color")
    is_protected: bool = Field(default=False, description="Protected tags cannot be deleted")
    usage_count: int = Field(default=0, ge=0, description="Number of buyers carrying the tag")
    created_at: Optional[str] = None

    @field_validator("color", mode="before")
    @classmethod
    def _coerce_color(cls, value: Any) -> str:
        return value or DEFAULT_TAG_COLOR

    @field_validator("is_protected", mode="before")
    @classmethod
    def _coerce_protected(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("usage_count", mode="before")
    @classmethod
    def _coerce_usage_count(cls, value: Any) -> int:
        if value is None or isinstance(value, bool):
            return 0
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            return 0

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)
