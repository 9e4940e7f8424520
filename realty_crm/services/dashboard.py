"""Dashboard summary derived from the buyer collection."""

from collections import Counter
from typing import Optional, Sequence
from datetime import datetime
from pydantic import BaseModel, Field
from realty_crm.models.buyer import Buyer, KNOWN_STATUSES
from realty_crm.models.filters import SMART_GROUP_LABELS
from realty_crm.services.buyer_filter import is_hot, is_new, resolve_now, smart_group_counts


class HotLead(BaseModel):
    id: str
    name: str
    score: int
    status: str


class DashboardSummary(BaseModel):
    """Headline numbers for the dashboard page."""
    total_buyers: int = 0
    vip_buyers: int = 0
    hot_leads: int = 0
    new_this_week: int = 0
    average_score: float = 0.0
    status_counts: dict[str, int] = Field(default_factory=dict)
    smart_groups: dict[str, dict] = Field(default_factory=dict)
    top_hot_leads: list[HotLead] = Field(default_factory=list)


def summarize_buyers(
    buyers: Sequence[Buyer],
    now: Optional[datetime] = None,
    top_n: int = 5,
) -> DashboardSummary:
    """Counts over the full collection; unknown statuses are grouped as "other"."""
    now = resolve_now(now)
    statuses = Counter(
        buyer.status if buyer.status in KNOWN_STATUSES else "other"
        for buyer in buyers
    )
    status_counts = {status: statuses.get(status, 0) for status in KNOWN_STATUSES}
    if statuses.get("other"):
        status_counts["other"] = statuses["other"]

    group_counts = smart_group_counts(buyers, now)
    smart_groups = {
        group.value: {"label": label, "count": group_counts[group.value]}
        for group, label in SMART_GROUP_LABELS.items()
    }

    hot = sorted((buyer for buyer in buyers if is_hot(buyer)), key=lambda buyer: buyer.score, reverse=True)
    return DashboardSummary(
        total_buyers=len(buyers),
        vip_buyers=sum(1 for buyer in buyers if buyer.vip),
        hot_leads=len(hot),
        new_this_week=sum(1 for buyer in buyers if is_new(buyer, now)),
        average_score=round(sum(buyer.score for buyer in buyers) / len(buyers), 1) if buyers else 0.0,
        status_counts=status_counts,
        smart_groups=smart_groups,
        top_hot_leads=[
            HotLead(id=buyer.id, name=buyer.display_name, score=buyer.score, status=buyer.status)
            for buyer in hot[:top_n]
        ],
    )
