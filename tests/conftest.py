"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import MagicMock
from datetime import datetime, timedelta, timezone

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("IMPORT_BATCH_SIZE", "50")

from realty_crm.models.buyer import Buyer
from realty_crm.services.memory_store import InMemoryStore
from realty_crm.services.store import BUYERS_TABLE, TAGS_TABLE

FROZEN_NOW = datetime(2024, 12, 9, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Reference instant used by time-dependent filter tests."""
    return FROZEN_NOW


@pytest.fixture
def memory_store():
    """Empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def sample_buyer_rows():
    """Buyer rows as the store returns them, newest first."""
    return [
        {
            "id": "b1",
            "fname": "John",
            "lname": "Smith",
            "email": "john@example.com",
            "phone": "(555) 123-4567",
            "company": "Smith Holdings",
            "score": 92,
            "vip": True,
            "vetted": True,
            "can_receive_email": True,
            "can_receive_sms": True,
            "tags": ["Investor", "High-Value"],
            "locations": ["Downtown"],
            "property_type": ["Luxury Condo"],
            "mailing_city": "Austin",
            "mailing_state": "TX",
            "status": "qualified",
            "created_at": (FROZEN_NOW - timedelta(days=2)).isoformat(),
        },
        {
            "id": "b2",
            "fname": "Sarah",
            "lname": "Johnson",
            "email": "sarah@example.com",
            "phone": "555-987-6543",
            "score": 80,
            "vip": False,
            "vetted": True,
            "can_receive_email": True,
            "can_receive_sms": False,
            "tags": ["Cash Buyer"],
            "locations": ["Round Rock", "Cedar Park"],
            "property_type": ["Single Family"],
            "mailing_city": "Round Rock",
            "mailing_state": "TX",
            "status": "lead",
            "created_at": (FROZEN_NOW - timedelta(days=10)).isoformat(),
        },
        {
            "id": "b3",
            "fname": "Mike",
            "lname": None,
            "email": None,
            "phone": None,
            "score": 45,
            "vip": False,
            "vetted": False,
            "can_receive_email": False,
            "can_receive_sms": True,
            "tags": ["Wholesaler", "cash"],
            "locations": None,
            "property_type": None,
            "mailing_address": "12 Elm St, Dallas, TX",
            "status": "closed",
            "created_at": (FROZEN_NOW - timedelta(days=40)).isoformat(),
        },
        {
            "id": "b4",
            "full_name": "Emily Davis",
            "email": "emily@davis.io",
            "score": None,
            "vip": None,
            "tags": None,
            "status": "nurture",
            "created_at": None,
            "next_followup_date": (FROZEN_NOW - timedelta(days=1)).isoformat(),
        },
    ]


@pytest.fixture
def sample_buyers(sample_buyer_rows):
    return [Buyer.model_validate(row) for row in sample_buyer_rows]


@pytest.fixture
def seeded_store(sample_buyer_rows):
    """In-memory store holding the sample buyers and a few tags."""
    return InMemoryStore({
        BUYERS_TABLE: sample_buyer_rows,
        TAGS_TABLE: [
            {"id": "t1", "name": "Investor", "color": "#8B5CF6", "is_protected": True, "usage_count": 1},
            {"id": "t2", "name": "Cash Buyer", "color": "#10B981", "is_protected": False, "usage_count": 1},
            {"id": "t3", "name": "Wholesaler", "color": "#3B82F6", "is_protected": False, "usage_count": 0},
        ],
    })


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client whose query builder chains back to itself."""
    client = MagicMock()
    query = MagicMock()
    for method in ("select", "insert", "update", "delete", "eq", "ilike", "order"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=[], count=0)
    client.table.return_value = query
    client.query = query
    return client
