"""Buyer filter engine - pure predicates over an in-memory buyer list."""

from typing import Callable, Iterable, Optional, Sequence
from datetime import datetime, time, timedelta, timezone
from pydantic import BaseModel, Field
from realty_crm.models.buyer import Buyer
from realty_crm.models.filters import BuyerFilters, QuickFilter, SmartGroup
from realty_crm.utils.config import CRMConfig

Predicate = Callable[[Buyer], bool]


class FilterResult(BaseModel):
    """Visible buyers plus the counts shown around the table."""
    buyers: list[Buyer] = Field(default_factory=list)
    total_count: int = 0
    filtered_count: int = 0
    group_counts: dict[str, int] = Field(default_factory=dict)
    active_filter_count: int = 0


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def has_tag_like(buyer: Buyer, term: str) -> bool:
    """True if any buyer tag contains ``term``, ignoring case."""
    needle = term.lower()
    return any(needle in tag.lower() for tag in buyer.tags)


def matches_search(buyer: Buyer, search: str) -> bool:
    if not search:
        return True
    term = search.lower()
    return any(
        _contains(value, term)
        for value in (buyer.fname, buyer.lname, buyer.email, buyer.phone, buyer.company)
    )


def matches_required_tags(buyer: Buyer, tags: Sequence[str]) -> bool:
    # Each required tag is its own condition
    return all(has_tag_like(buyer, tag) for tag in tags)


def matches_excluded_tags(buyer: Buyer, exclude_tags: Sequence[str]) -> bool:
    return not any(has_tag_like(buyer, tag) for tag in exclude_tags)


def matches_locations(buyer: Buyer, locations: Sequence[str]) -> bool:
    if not locations:
        return True
    fields = [buyer.mailing_city, buyer.mailing_state, buyer.mailing_address, *buyer.locations]
    for location in locations:
        needle = location.lower()
        if any(_contains(value, needle) for value in fields):
            return True
    return False


def matches_property_types(buyer: Buyer, property_types: Sequence[str]) -> bool:
    if not property_types:
        return True
    return any(
        _contains(value, wanted.lower())
        for wanted in property_types
        for value in buyer.property_type
    )


def matches_score(buyer: Buyer, min_score: Optional[int], max_score: Optional[int]) -> bool:
    if min_score is not None and buyer.score < min_score:
        return False
    if max_score is not None and buyer.score > max_score:
        return False
    return True


def matches_created_range(buyer: Buyer, filters: BuyerFilters) -> bool:
    if buyer.created_at is None:
        return True
    if filters.created_after is not None:
        start = datetime.combine(filters.created_after, time.min, tzinfo=timezone.utc)
        if buyer.created_at < start:
            return False
    if filters.created_before is not None:
        end = datetime.combine(filters.created_before, time.max, tzinfo=timezone.utc)
        if buyer.created_at > end:
            return False
    return True


def is_new(buyer: Buyer, now: datetime) -> bool:
    if buyer.created_at is None:
        return False
    return buyer.created_at >= now - timedelta(days=CRMConfig.NEW_BUYER_DAYS)


def needs_followup(buyer: Buyer, now: datetime) -> bool:
    if buyer.next_followup_date is None:
        return False
    return buyer.next_followup_date.date() <= now.date()


def is_high_value(buyer: Buyer) -> bool:
    return buyer.score >= CRMConfig.HIGH_SCORE_THRESHOLD


def is_hot(buyer: Buyer) -> bool:
    return buyer.score >= CRMConfig.HOT_SCORE_THRESHOLD


def quick_filter_predicate(key: QuickFilter, now: datetime) -> Predicate:
    if key is QuickFilter.VIP:
        return lambda buyer: buyer.vip
    if key is QuickFilter.HIGH_SCORE:
        return is_high_value
    if key is QuickFilter.HOT:
        return is_hot
    if key is QuickFilter.NEW:
        return lambda buyer: is_new(buyer, now)
    return lambda buyer: needs_followup(buyer, now)


def smart_group_predicate(group: SmartGroup, now: datetime) -> Predicate:
    if group is SmartGroup.VIP:
        return lambda buyer: buyer.vip
    if group is SmartGroup.HIGH_VALUE:
        return is_high_value
    if group is SmartGroup.HOT:
        return is_hot
    if group is SmartGroup.INVESTOR:
        return lambda buyer: has_tag_like(buyer, "investor")
    if group is SmartGroup.CASH_BUYER:
        return lambda buyer: has_tag_like(buyer, "cash")
    if group is SmartGroup.WHOLESALER:
        return lambda buyer: has_tag_like(buyer, "wholesaler")
    return lambda buyer: needs_followup(buyer, now)


def resolve_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def build_predicates(filters: BuyerFilters, now: datetime) -> list[Predicate]:
    """Predicates for every active part of ``filters``."""
    predicates: list[Predicate] = []
    if filters.search:
        predicates.append(lambda buyer: matches_search(buyer, filters.search))
    if filters.tags:
        predicates.append(lambda buyer: matches_required_tags(buyer, filters.tags))
    if filters.exclude_tags:
        predicates.append(lambda buyer: matches_excluded_tags(buyer, filters.exclude_tags))
    if filters.locations:
        predicates.append(lambda buyer: matches_locations(buyer, filters.locations))
    if filters.property_types:
        predicates.append(lambda buyer: matches_property_types(buyer, filters.property_types))
    predicates.append(lambda buyer: filters.vip.allows(buyer.vip))
    predicates.append(lambda buyer: filters.vetted.allows(buyer.vetted))
    predicates.append(lambda buyer: filters.can_email.allows(buyer.can_receive_email))
    predicates.append(lambda buyer: filters.can_sms.allows(buyer.can_receive_sms))
    if filters.min_score is not None or filters.max_score is not None:
        predicates.append(lambda buyer: matches_score(buyer, filters.min_score, filters.max_score))
    if filters.created_after is not None or filters.created_before is not None:
        predicates.append(lambda buyer: matches_created_range(buyer, filters))
    # quick filters apply in key order
    for key in sorted(filters.quick_filters, key=lambda item: item.value):
        predicates.append(quick_filter_predicate(key, now))
    if filters.smart_group is not None:
        predicates.append(smart_group_predicate(filters.smart_group, now))
    return predicates


def filter_buyers(
    buyers: Iterable[Buyer],
    filters: Optional[BuyerFilters] = None,
    now: Optional[datetime] = None,
) -> list[Buyer]:
    """Buyers satisfying every active filter, in their original order."""
    filters = filters or BuyerFilters()
    now = resolve_now(now)
    predicates = build_predicates(filters, now)
    return [buyer for buyer in buyers if all(predicate(buyer) for predicate in predicates)]


def smart_group_counts(buyers: Sequence[Buyer], now: Optional[datetime] = None) -> dict[str, int]:
    """Sidebar counts, each evaluated alone against the full collection."""
    now = resolve_now(now)
    counts = {}
    for group in SmartGroup:
        predicate = smart_group_predicate(group, now)
        counts[group.value] = sum(1 for buyer in buyers if predicate(buyer))
    return counts


def apply_filters(
    buyers: Sequence[Buyer],
    filters: Optional[BuyerFilters] = None,
    now: Optional[datetime] = None,
) -> FilterResult:
    """Filter ``buyers`` and compute the counts shown with the table."""
    filters = filters or BuyerFilters()
    now = resolve_now(now)
    visible = filter_buyers(buyers, filters, now)
    return FilterResult(
        buyers=visible,
        total_count=len(buyers),
        filtered_count=len(visible),
        group_counts=smart_group_counts(buyers, now),
        active_filter_count=filters.active_count,
    )
