"""SQLModel table models — import here so metadata is populated."""

from apex_backoffice.models.client import Client, Renewal  # noqa: F401
from apex_backoffice.models.ferry import (  # noqa: F401
    Booking,
    FerryCustomer,
    PassengerType,
    VehicleNumber,
    VehicleType,
)
from apex_backoffice.models.investor import Investor  # noqa: F401
from apex_backoffice.models.transaction import Transaction  # noqa: F401
