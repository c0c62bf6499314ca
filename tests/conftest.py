"""
Shared pytest fixtures for unit tests.

All tests run with ``USE_SQLITE=true`` and mocked dependencies so that
no real database, S3 bucket or network I/O is needed.  This ensures tests
are fast, deterministic, and fully isolated.
"""

import os

# Must be set before anything imports apex_backoffice.core.config.
os.environ.setdefault("USE_SQLITE", "true")

import uuid  # noqa: E402
from datetime import date, datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from apex_backoffice.core.cache import TTLCache  # noqa: E402
from apex_backoffice.models.client import Client, Renewal  # noqa: E402
from apex_backoffice.models.ferry import Booking, FerryCustomer, VehicleType  # noqa: E402
from apex_backoffice.models.investor import Investor, InvestorStatus  # noqa: E402
from apex_backoffice.models.transaction import Transaction, TransactionType  # noqa: E402

# ────────────────────────────────────────────────────────────────────────────
# Factory helpers — create domain objects with sensible defaults
# ────────────────────────────────────────────────────────────────────────────

INVESTOR_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")
INVESTOR_ID_2 = uuid.UUID("55555555-5555-5555-5555-555555555555")
TRANSACTION_ID = uuid.UUID("33333333-3333-3333-3333-333333333333")
CLIENT_ID = uuid.UUID("66666666-6666-6666-6666-666666666666")
RENEWAL_ID = uuid.UUID("77777777-7777-7777-7777-777777777777")
BOOKING_ID = uuid.UUID("88888888-8888-8888-8888-888888888888")
VEHICLE_TYPE_ID = uuid.UUID("99999999-9999-9999-9999-999999999999")


def make_investor(
    *,
    id: uuid.UUID = INVESTOR_ID,
    name: str = "Test Investor",
    account_type: str = "Fixed Deposit",
    investment_term: str = "12 months",
    roi: Decimal = Decimal("10"),
    account_balance: Decimal = Decimal("0.00"),
    current_balance: Decimal = Decimal("0.00"),
    status: InvestorStatus = InvestorStatus.ACTIVE,
    date_joined: date = date(2025, 1, 15),
    created_at: datetime | None = None,
) -> Investor:
    """Create an Investor domain object with sensible test defaults."""
    return Investor(
        id=id,
        name=name,
        account_type=account_type,
        investment_term=investment_term,
        roi=roi,
        account_balance=account_balance,
        current_balance=current_balance,
        status=status,
        date_joined=date_joined,
        created_at=created_at or datetime.now(timezone.utc),
    )


def make_transaction(
    *,
    id: uuid.UUID = TRANSACTION_ID,
    investor_id: uuid.UUID = INVESTOR_ID,
    transaction_type: TransactionType = TransactionType.DEPOSIT,
    amount: Decimal = Decimal("100.00"),
    transaction_date: datetime | None = None,
) -> Transaction:
    """Create a Transaction domain object with sensible test defaults."""
    return Transaction(
        id=id,
        investor_id=investor_id,
        transaction_type=transaction_type,
        amount=amount,
        transaction_date=transaction_date or datetime.now(timezone.utc),
    )


def make_client(
    *,
    id: uuid.UUID = CLIENT_ID,
    name: str = "Test Client",
    policy_number: str | None = "POL-001",
    premium: Decimal | None = Decimal("1250.00"),
    additional_attachments: list | None = None,
) -> Client:
    """Create a Client domain object with sensible test defaults."""
    return Client(
        id=id,
        name=name,
        policy_number=policy_number,
        premium=premium,
        additional_attachments=additional_attachments or [],
        created_at=datetime.now(timezone.utc),
    )


def make_renewal(
    *,
    id: uuid.UUID = RENEWAL_ID,
    client_id: uuid.UUID = CLIENT_ID,
    renewal_date: date = date(2025, 3, 1),
    next_renewal_date: date | None = date(2026, 3, 1),
    policy_document: str = "https://bucket.s3.us-east-1.amazonaws.com/uploads/1_policy.pdf",
) -> Renewal:
    """Create a Renewal domain object with sensible test defaults."""
    return Renewal(
        id=id,
        client_id=client_id,
        renewal_date=renewal_date,
        next_renewal_date=next_renewal_date,
        policy_document=policy_document,
        created_at=datetime.now(timezone.utc),
    )


def make_vehicle_type(
    *,
    id: uuid.UUID = VEHICLE_TYPE_ID,
    name: str = "Saloon car",
    cost: Decimal = Decimal("150.00"),
) -> VehicleType:
    return VehicleType(id=id, name=name, cost=cost)


def make_customer(*, name: str = "Ama Owusu", contact: str = "+233 24 555 0101") -> FerryCustomer:
    return FerryCustomer(name=name, contact=contact, created_at=datetime.now(timezone.utc))


def make_booking(
    *,
    id: uuid.UUID = BOOKING_ID,
    customer_name: str = "Ama Owusu",
    booking_number: str | None = "BK-1001",
) -> Booking:
    """Create a Booking domain object with sensible test defaults."""
    return Booking(
        id=id,
        customer_name=customer_name,
        booking_number=booking_number,
        passengers=[{"type": "Adult", "count": 2}],
        admin_charge=Decimal("5.00"),
        net_cost=Decimal("205.00"),
        created_at=datetime.now(timezone.utc),
    )


# ────────────────────────────────────────────────────────────────────────────
# Pytest fixtures
# ────────────────────────────────────────────────────────────────────────────


@pytest.fixture()
def mock_db():
    """A mocked AsyncSession that tracks add/commit/refresh/rollback calls."""
    session = AsyncMock()
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.merge = AsyncMock()
    session.delete = AsyncMock()
    return session


@pytest.fixture()
def test_cache():
    """A fresh TTL cache instance for test isolation."""
    return TTLCache(ttl=30.0, max_size=100, enabled=True)


@pytest.fixture()
def disabled_cache():
    """A disabled TTL cache — all operations are no-ops."""
    return TTLCache(ttl=30.0, max_size=100, enabled=False)


@pytest.fixture(autouse=True)
def _clear_global_cache():
    """
    Clear the global cache before each test to prevent cross-test pollution.

    Uses autouse=True so every test gets a clean cache automatically.
    """
    from apex_backoffice.core.cache import cache

    cache.clear()
    yield
    cache.clear()
