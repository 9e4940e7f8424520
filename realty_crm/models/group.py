"""Group models - manual and rule-derived buyer groups."""

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class Group(BaseModel):
    """Named group of buyers."""
    id: str = Field(..., description="Group ID (text)")
    name: str = Field(..., description="Group name")
    description: Optional[str] = Field(None, description="Free-text description")
    type: str = Field(default="manual", description="manual or rule-derived")
    criteria: Optional[dict[str, Any]] = Field(None, description="Opaque filter definition")
    color: Optional[str] = None
    icon: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> str:
        return value or "manual"


class BuyerGroup(BaseModel):
    """Membership row in the ``buyer_groups`` join table."""
    buyer_id: str = Field(..., description="Buyer ID (FK)")
    group_id: str = Field(..., description="Group ID (FK)")
