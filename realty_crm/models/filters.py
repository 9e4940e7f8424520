"""Filter state models for the buyer list."""

from enum import Enum
from typing import Any, Mapping, Optional
from datetime import date
from pydantic import BaseModel, Field, field_validator


class TriState(str, Enum):
    """Three-way boolean filter: unconstrained, require true, require false."""
    ANY = "any"
    YES = "yes"
    NO = "no"

    @classmethod
    def parse(cls, value: Any) -> "TriState":
        """Parse UI values such as ``"vip"``/``"not-vip"``; unknown means ANY."""
        if isinstance(value, TriState):
            return value
        if isinstance(value, bool):
            return cls.YES if value else cls.NO
        if value is None:
            return cls.ANY
        text = str(value).strip().lower()
        if text in _TRUE_WORDS:
            return cls.YES
        if text in _FALSE_WORDS or text.startswith("not-") or text.startswith("no-"):
            return cls.NO
        return cls.ANY

    def allows(self, flag: bool) -> bool:
        if self is TriState.YES:
            return flag
        if self is TriState.NO:
            return not flag
        return True


_TRUE_WORDS = {"yes", "true", "1", "y", "vip", "vetted", "can-email", "can-sms"}
_FALSE_WORDS = {"no", "false", "0", "n"}


class QuickFilter(str, Enum):
    """Toggle chips above the buyer table."""
    VIP = "vip"
    HOT = "hot"
    NEW = "new"
    HIGH_SCORE = "highScore"
    FOLLOW_UP = "followup"


class SmartGroup(str, Enum):
    """Predefined sidebar groups, each a fixed predicate."""
    VIP = "vip"
    HOT = "hot"
    HIGH_VALUE = "high-value"
    INVESTOR = "investor"
    CASH_BUYER = "cash-buyer"
    WHOLESALER = "wholesaler"
    FOLLOW_UP = "follow-up"


SMART_GROUP_LABELS = {
    SmartGroup.VIP: "VIP Clients",
    SmartGroup.HOT: "Hot Leads",
    SmartGroup.HIGH_VALUE: "High Value Buyers",
    SmartGroup.INVESTOR: "Investors",
    SmartGroup.CASH_BUYER: "Cash Buyers",
    SmartGroup.WHOLESALER: "Wholesalers",
    SmartGroup.FOLLOW_UP: "Need Follow-up",
}


def parse_bound(value: Any) -> Optional[int]:
    """Parse a score bound typed by the operator.

    Empty or non-numeric input is unset, never zero. Decimals truncate.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value else None
    text = str(value).strip()
    if not text:
        return None
    if "_" in text or not text.isascii():
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number)


def _split_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


class BuyerFilters(BaseModel):
    """Desired subset of the buyer list. Every active predicate is ANDed."""
    search: str = Field("", description="Free-text search term")
    tags: list[str] = Field(default_factory=list, description="Each tag must match")
    exclude_tags: list[str] = Field(default_factory=list, description="Any match rejects")
    locations: list[str] = Field(default_factory=list, description="At least one must match")
    property_types: list[str] = Field(default_factory=list, description="At least one must match")
    min_score: Optional[int] = None
    max_score: Optional[int] = None
    created_after: Optional[date] = None
    created_before: Optional[date] = None
    vip: TriState = TriState.ANY
    vetted: TriState = TriState.ANY
    can_email: TriState = TriState.ANY
    can_sms: TriState = TriState.ANY
    quick_filters: set[QuickFilter] = Field(default_factory=set)
    smart_group: Optional[SmartGroup] = None

    @field_validator("search", mode="before")
    @classmethod
    def _coerce_search(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("tags", "exclude_tags", "locations", "property_types", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> list[str]:
        return _split_list(value)

    @field_validator("min_score", "max_score", mode="before")
    @classmethod
    def _coerce_bound(cls, value: Any) -> Optional[int]:
        return parse_bound(value)

    @field_validator("created_after", "created_before", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Optional[date]:
        return _parse_date(value)

    @field_validator("vip", "vetted", "can_email", "can_sms", mode="before")
    @classmethod
    def _coerce_tristate(cls, value: Any) -> TriState:
        return TriState.parse(value)

    @field_validator("quick_filters", mode="before")
    @classmethod
    def _coerce_quick_filters(cls, value: Any) -> set[QuickFilter]:
        result = set()
        for key in _split_list(value):
            try:
                result.add(QuickFilter(key))
            except ValueError:
                continue
        return result

    @field_validator("smart_group", mode="before")
    @classmethod
    def _coerce_smart_group(cls, value: Any) -> Optional[SmartGroup]:
        if value is None or value == "":
            return None
        try:
            return SmartGroup(value)
        except ValueError:
            return None

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "BuyerFilters":
        """Build filters from query-string style parameters."""
        params = params or {}

        def pick(*names: str) -> Any:
            for name in names:
                if name in params:
                    return params[name]
            return None

        return cls(
            search=pick("search", "q"),
            tags=pick("tags"),
            exclude_tags=pick("exclude_tags", "excludeTags"),
            locations=pick("locations", "location"),
            property_types=pick("property_types", "propertyTypes"),
            min_score=pick("min_score", "minScore"),
            max_score=pick("max_score", "maxScore"),
            created_after=pick("created_after", "createdAfter"),
            created_before=pick("created_before", "createdBefore"),
            vip=pick("vip"),
            vetted=pick("vetted"),
            can_email=pick("can_email", "canEmail"),
            can_sms=pick("can_sms", "canSms"),
            quick_filters=pick("quick", "quick_filters"),
            smart_group=pick("group", "smart_group"),
        )

    @property
    def active_count(self) -> int:
        """Number of non-empty fields plus active quick filters."""
        count = 0
        for value in (self.search, self.tags, self.exclude_tags, self.locations, self.property_types):
            if value:
                count += 1
        for value in (self.min_score, self.max_score, self.created_after, self.created_before):
            if value is not None:
                count += 1
        for state in (self.vip, self.vetted, self.can_email, self.can_sms):
            if state is not TriState.ANY:
                count += 1
        return count + len(self.quick_filters)
