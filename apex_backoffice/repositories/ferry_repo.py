"""
Ferry-pass repositories.

Customers, fare types and bookings only need the generic CRUD; registered
vehicle numbers are listed joined with their vehicle-type name.
"""

from typing import List, Tuple

from sqlalchemy.future import select

from apex_backoffice.models.ferry import (
    Booking,
    FerryCustomer,
    PassengerType,
    VehicleNumber,
    VehicleType,
)
from apex_backoffice.repositories.base import BaseRepository


class FerryCustomerRepository(BaseRepository[FerryCustomer]):
    """Concrete repository for :class:`FerryCustomer` entities."""

    pass


class VehicleTypeRepository(BaseRepository[VehicleType]):
    """Concrete repository for :class:`VehicleType` entities."""

    pass


class PassengerTypeRepository(BaseRepository[PassengerType]):
    """Concrete repository for :class:`PassengerType` entities."""

    pass


class BookingRepository(BaseRepository[Booking]):
    """Concrete repository for :class:`Booking` entities."""

    async def list_recent(self, skip: int = 0, limit: int = 100) -> List[Booking]:
        return await self.get_all(skip=skip, limit=limit, order_by=self.model.created_at.desc())


class VehicleNumberRepository(BaseRepository[VehicleNumber]):
    """Concrete repository for :class:`VehicleNumber` entities."""

    async def list_with_type_names(self) -> List[Tuple[VehicleNumber, str]]:
        """
        Every registered vehicle with its type name, newest first.

        Outer join so a plate whose type row is missing is still listed
        (with a ``None`` name).
        """

        async def _list_with_type_names() -> List[Tuple[VehicleNumber, str]]:
            stmt = (
                select(self.model, VehicleType.name)
                .join(VehicleType, self.model.vehicle_type_id == VehicleType.id, isouter=True)
                .order_by(self.model.created_at.desc())
            )
            result = await self.db.execute(stmt)
            return [(row[0], row[1]) for row in result.all()]

        return await self._execute_with_circuit_breaker(_list_with_type_names)
