"""Tests for the Buyer model."""

import pytest
from datetime import date, datetime, timezone
from realty_crm.models.buyer import Buyer, NO_NAME, parse_timestamp


@pytest.mark.unit
def test_buyer_from_partial_row():
    """A row with only an id validates with safe defaults."""
    buyer = Buyer.model_validate({"id": "b1"})

    assert buyer.score == 0
    assert buyer.tags == []
    assert buyer.locations == []
    assert buyer.property_type == []
    assert buyer.vip is False
    assert buyer.status == "lead"
    assert buyer.created_at is None


@pytest.mark.unit
def test_buyer_null_columns_degrade():
    """Nulls from the store become defaults, not errors."""
    buyer = Buyer.model_validate({
        "id": 42,
        "score": None,
        "tags": None,
        "vip": None,
        "status": None,
        "locations": "Downtown",
        "property_type": ["Condo", None, ""],
    })

    assert buyer.id == "42"
    assert buyer.score == 0
    assert buyer.tags == []
    assert buyer.vip is False
    assert buyer.status == "lead"
    assert buyer.locations == ["Downtown"]
    assert buyer.property_type == ["Condo"]


@pytest.mark.unit
@pytest.mark.parametrize("raw,expected", [
    (85, 85),
    ("72", 72),
    (90.7, 90),
    ("not a number", 0),
    (True, 0),
])
def test_buyer_score_coercion(raw, expected):
    assert Buyer(score=raw).score == expected


@pytest.mark.unit
def test_buyer_flag_strings():
    buyer = Buyer(vip="Yes", vetted="false", can_receive_sms=1, can_receive_email="")

    assert buyer.vip is True
    assert buyer.vetted is False
    assert buyer.can_receive_sms is True
    assert buyer.can_receive_email is False


@pytest.mark.unit
def test_buyer_budget_coercion():
    buyer = Buyer(budget_min="250000", budget_max="")

    assert buyer.budget_min == 250000.0
    assert buyer.budget_max is None


@pytest.mark.unit
@pytest.mark.parametrize("data,expected", [
    ({"full_name": "Emily Davis", "fname": "Em"}, "Emily Davis"),
    ({"fname": "John", "lname": "Smith"}, "John Smith"),
    ({"fname": "Mike"}, "Mike"),
    ({"lname": "Jones"}, "Jones"),
    ({}, NO_NAME),
])
def test_display_name_fallbacks(data, expected):
    assert Buyer(**data).display_name == expected


@pytest.mark.unit
def test_has_known_status():
    assert Buyer(status="qualified").has_known_status
    assert not Buyer(status="nurture").has_known_status


@pytest.mark.unit
def test_parse_timestamp_variants():
    """Zulu suffix, naive strings and dates all become aware UTC datetimes."""
    zulu = parse_timestamp("2024-12-01T10:30:00Z")
    naive = parse_timestamp("2024-12-01T10:30:00")
    day = parse_timestamp(date(2024, 12, 1))

    assert zulu == datetime(2024, 12, 1, 10, 30, tzinfo=timezone.utc)
    assert naive == zulu
    assert day == datetime(2024, 12, 1, tzinfo=timezone.utc)
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(12345) is None


@pytest.mark.unit
def test_buyer_unparseable_created_at_is_none():
    assert Buyer(created_at="garbage").created_at is None


@pytest.mark.unit
@pytest.mark.parametrize("raw", [
    "2024-05-01T12:34:56.12345+00:00",
    "2024-05-01T12:34:56.1+00:00",
    "2024-05-01 12:34:56.123456Z",
])
def test_store_timestamps_with_trimmed_fractions(raw):
    """Postgres drops trailing zeros from fractional seconds."""
    buyer = Buyer.model_validate({"id": "1", "created_at": raw})

    assert buyer.created_at is not None
    assert buyer.created_at.tzinfo is not None
    assert (buyer.created_at.year, buyer.created_at.second) == (2024, 56)
