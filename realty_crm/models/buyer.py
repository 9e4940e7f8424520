"""Buyer model - the primary CRM contact record."""

from typing import Any, Optional
from datetime import date, datetime, timezone
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

KNOWN_STATUSES = ("lead", "qualified", "active", "under_contract", "closed")

NO_NAME = "No Name"

_DATETIME = TypeAdapter(datetime)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a store timestamp into an aware datetime, or None if unusable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = _DATETIME.validate_python(value.strip())
        except ValidationError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Buyer(BaseModel):
    """Buyer record as stored in the ``buyers`` table.

    Every optional column degrades to a safe default so filtering and
    display never fail on a partial row.
    """
    id: str = Field("", description="Buyer ID (opaque text)")
    fname: Optional[str] = Field(None, description="First name")
    lname: Optional[str] = Field(None, description="Last name")
    full_name: Optional[str] = Field(None, description="Full display name")
    email: Optional[str] = None
    phone: Optional[str] = Field(None, description="Primary phone")
    phone2: Optional[str] = None
    phone3: Optional[str] = None
    company: Optional[str] = None
    score: int = Field(default=0, description="Lead score, 0-100 by convention")
    notes: Optional[str] = None
    mailing_address: Optional[str] = None
    mailing_city: Optional[str] = None
    mailing_state: Optional[str] = None
    mailing_zip: Optional[str] = None
    locations: list[str] = Field(default_factory=list, description="Geotags / target locations")
    tags: list[str] = Field(default_factory=list, description="Free-text tag labels")
    property_type: list[str] = Field(default_factory=list, description="Property types of interest")
    vetted: bool = False
    vip: bool = False
    can_receive_sms: bool = False
    can_receive_email: bool = False
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    timeline: Optional[str] = None
    source: Optional[str] = None
    assigned_agent_id: Optional[str] = None
    last_contact_date: Optional[datetime] = None
    next_followup_date: Optional[datetime] = None
    status: str = Field(
        default="lead",
        description="Lifecycle label: lead, qualified, active, under_contract, closed, or any other string"
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator(
        "fname", "lname", "full_name", "email", "phone", "phone2", "phone3", "company",
        "notes", "mailing_address", "mailing_city", "mailing_state", "mailing_zip",
        "timeline", "source", "assigned_agent_id",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> int:
        if value is None or isinstance(value, bool):
            return 0
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return 0

    @field_validator("budget_min", "budget_max", mode="before")
    @classmethod
    def _coerce_budget(cls, value: Any) -> Optional[float]:
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @field_validator("locations", "tags", "property_type", mode="before")
    @classmethod
    def _coerce_labels(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set)):
            return []
        return [str(item) for item in value if item is not None and str(item) != ""]

    @field_validator("vetted", "vip", "can_receive_sms", "can_receive_email", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("true", "t", "yes", "y", "1", "on")
        if isinstance(value, (int, float)):
            return value != 0
        return False

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str:
        if value is None or value == "":
            return "lead"
        return str(value)

    @field_validator(
        "last_contact_date", "next_followup_date", "created_at", "updated_at",
        mode="before",
    )
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @property
    def display_name(self) -> str:
        """Full name, then "first last", then either part, then a placeholder."""
        if self.full_name:
            return self.full_name
        if self.fname and self.lname:
            return f"{self.fname} {self.lname}"
        if self.fname:
            return self.fname
        if self.lname:
            return self.lname
        return NO_NAME

    @property
    def has_known_status(self) -> bool:
        return self.status in KNOWN_STATUSES
