"""Tests for filter state models."""

import pytest
from datetime import date
from realty_crm.models.filters import (
    BuyerFilters,
    QuickFilter,
    SmartGroup,
    TriState,
    parse_bound,
)


@pytest.mark.unit
@pytest.mark.parametrize("raw,expected", [
    (None, TriState.ANY),
    ("", TriState.ANY),
    ("all", TriState.ANY),
    (True, TriState.YES),
    (False, TriState.NO),
    ("vip", TriState.YES),
    ("not-vip", TriState.NO),
    ("can-email", TriState.YES),
    ("no-email", TriState.NO),
    ("YES", TriState.YES),
    ("0", TriState.NO),
])
def test_tristate_parse(raw, expected):
    assert TriState.parse(raw) is expected


@pytest.mark.unit
def test_tristate_allows():
    assert TriState.ANY.allows(True) and TriState.ANY.allows(False)
    assert TriState.YES.allows(True) and not TriState.YES.allows(False)
    assert TriState.NO.allows(False) and not TriState.NO.allows(True)


@pytest.mark.unit
@pytest.mark.parametrize("raw,expected", [
    ("", None),
    (None, None),
    ("abc", None),
    ("80", 80),
    (" 75 ", 75),
    ("80.9", 80),
    (0, 0),
    ("nan", None),
    ("1_000", None),
    ("８０", None),
])
def test_parse_bound(raw, expected):
    assert parse_bound(raw) == expected


@pytest.mark.unit
def test_filters_defaults_are_inactive():
    filters = BuyerFilters()

    assert filters.active_count == 0
    assert filters.vip is TriState.ANY
    assert filters.smart_group is None
    assert filters.quick_filters == set()


@pytest.mark.unit
def test_filters_list_fields_split_commas():
    filters = BuyerFilters(tags="cash, investor,,", locations=["Austin", " "])

    assert filters.tags == ["cash", "investor"]
    assert filters.locations == ["Austin"]


@pytest.mark.unit
def test_filters_ignore_unknown_quick_and_group_keys():
    filters = BuyerFilters(quick_filters="vip,bogus,highScore", smart_group="nope")

    assert filters.quick_filters == {QuickFilter.VIP, QuickFilter.HIGH_SCORE}
    assert filters.smart_group is None


@pytest.mark.unit
def test_filters_from_query_accepts_camel_case():
    filters = BuyerFilters.from_query({
        "q": "smith",
        "excludeTags": "wholesaler",
        "minScore": "80",
        "maxScore": "",
        "createdAfter": "2024-11-01",
        "canEmail": "can-email",
        "quick": "hot,new",
        "group": "cash-buyer",
    })

    assert filters.search == "smith"
    assert filters.exclude_tags == ["wholesaler"]
    assert filters.min_score == 80
    assert filters.max_score is None
    assert filters.created_after == date(2024, 11, 1)
    assert filters.can_email is TriState.YES
    assert filters.quick_filters == {QuickFilter.HOT, QuickFilter.NEW}
    assert filters.smart_group is SmartGroup.CASH_BUYER


@pytest.mark.unit
def test_active_count_excludes_smart_group():
    """Sidebar group selection is not counted as a filter."""
    filters = BuyerFilters(
        search="a",
        tags=["x"],
        min_score=10,
        vip="vip",
        quick_filters=["hot", "new"],
        smart_group="vip",
    )

    assert filters.active_count == 6


@pytest.mark.unit
def test_bad_created_date_is_unset():
    assert BuyerFilters(created_before="12/31/2024").created_before is None
