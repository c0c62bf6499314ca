"""
Seed script — populates the database with sample data for development / demo.

Usage:
    python -m apex_backoffice.seed

Investors are inserted directly; their deposits and withdrawals go through
the ledger so the stored balances match the transaction log.

The script is idempotent: it checks for existing data before inserting.
"""

import asyncio
import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlmodel import SQLModel

import apex_backoffice.models  # noqa: F401
from apex_backoffice.db.session import AsyncSessionLocal, engine
from apex_backoffice.models.ferry import PassengerType, VehicleType
from apex_backoffice.models.investor import Investor
from apex_backoffice.models.transaction import Transaction, TransactionType
from apex_backoffice.repositories.investor_repo import InvestorRepository
from apex_backoffice.repositories.transaction_repo import TransactionRepository
from apex_backoffice.services.ledger_service import LedgerService

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger(__name__)

# ── Sample data ──

INVESTORS = [
    Investor(
        id=uuid.UUID("5f1c2a3e-8b7d-4e21-9a10-3c4d5e6f7a01"),
        name="Kofi Boateng",
        account_type="Fixed Deposit",
        investment_term="12 months",
        roi=Decimal("10"),
        date_joined=date(2024, 1, 15),
        date_payable=date(2025, 1, 15),
    ),
    Investor(
        id=uuid.UUID("5f1c2a3e-8b7d-4e21-9a10-3c4d5e6f7a02"),
        name="Abena Darko",
        account_type="Savings",
        investment_term="6 months",
        roi=Decimal("7.5"),
        date_joined=date(2024, 6, 1),
        date_payable=date(2024, 12, 1),
    ),
    Investor(
        id=uuid.UUID("5f1c2a3e-8b7d-4e21-9a10-3c4d5e6f7a03"),
        name="Yaw Mensah",
        account_type="Fixed Deposit",
        investment_term="24 months",
        roi=Decimal("12.25"),
        date_joined=date(2025, 2, 20),
    ),
]

# (investor index, type, amount) in the order they are applied
LEDGER_ENTRIES = [
    (0, TransactionType.DEPOSIT, Decimal("100.00")),
    (0, TransactionType.WITHDRAWAL, Decimal("40.00")),
    (1, TransactionType.DEPOSIT, Decimal("2500.00")),
    (1, TransactionType.DEPOSIT, Decimal("1500.00")),
    (1, TransactionType.WITHDRAWAL, Decimal("750.50")),
    (2, TransactionType.DEPOSIT, Decimal("10000.00")),
]

VEHICLE_TYPES = [
    VehicleType(name="Motorbike", cost=Decimal("40.00")),
    VehicleType(name="Saloon car", cost=Decimal("150.00")),
    VehicleType(name="SUV", cost=Decimal("200.00")),
    VehicleType(name="Truck", cost=Decimal("450.00")),
]

PASSENGER_TYPES = [
    PassengerType(name="Adult", cost=Decimal("25.00")),
    PassengerType(name="Child", cost=Decimal("12.50")),
    PassengerType(name="Senior", cost=Decimal("15.00")),
]


async def seed() -> None:
    """Create tables and insert sample data if the database is empty."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(Investor).limit(1))
        if result.scalars().first() is not None:
            logger.info("Database already contains data — skipping seed.")
            return

        for investor in INVESTORS:
            session.add(investor)
        for fare in [*VEHICLE_TYPES, *PASSENGER_TYPES]:
            session.add(fare)
        await session.commit()

        ledger = LedgerService(
            InvestorRepository(Investor, session),
            TransactionRepository(Transaction, session),
        )
        for index, tx_type, amount in LEDGER_ENTRIES:
            await ledger.record_transaction(INVESTORS[index].id, tx_type, amount)

        logger.info(
            "Seeded %d investors, %d transactions, %d vehicle fares, %d passenger fares",
            len(INVESTORS),
            len(LEDGER_ENTRIES),
            len(VEHICLE_TYPES),
            len(PASSENGER_TYPES),
        )


if __name__ == "__main__":
    asyncio.run(seed())
