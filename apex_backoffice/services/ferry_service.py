"""
Ferry service — customers, fare tables, registered vehicles and bookings.

Caching:
    The vehicle-type and passenger-type fare tables are read on every
    booking form load and change rarely, so their listings go through the
    in-memory TTL cache.  Creating or deleting a fare type invalidates its
    prefix.  Nothing else in this module is cached.
"""

import logging
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from apex_backoffice.core.cache import cache
from apex_backoffice.core.exceptions import (
    BusinessRuleViolation,
    InvalidInputException,
    NotFoundException,
)
from apex_backoffice.models.ferry import (
    Booking,
    FerryCustomer,
    PassengerType,
    VehicleNumber,
    VehicleType,
)
from apex_backoffice.repositories.ferry_repo import (
    BookingRepository,
    FerryCustomerRepository,
    PassengerTypeRepository,
    VehicleNumberRepository,
    VehicleTypeRepository,
)
from apex_backoffice.schemas.ferry import (
    BookingCreate,
    BookingPaymentUpdate,
    BookingStatusUpdate,
    FareTypeCreate,
    FerryCustomerCreate,
    VehicleNumberCreate,
)

logger = logging.getLogger(__name__)


class FerryService:
    """Encapsulates the ferry-pass back office."""

    VEHICLE_TYPES_PREFIX = "vehicle_types:"
    PASSENGER_TYPES_PREFIX = "passenger_types:"

    def __init__(
        self,
        customer_repo: FerryCustomerRepository,
        vehicle_type_repo: VehicleTypeRepository,
        passenger_type_repo: PassengerTypeRepository,
        vehicle_number_repo: VehicleNumberRepository,
        booking_repo: BookingRepository,
    ):
        self._customers = customer_repo
        self._vehicle_types = vehicle_type_repo
        self._passenger_types = passenger_type_repo
        self._vehicle_numbers = vehicle_number_repo
        self._bookings = booking_repo

    # ── Customers ──

    async def list_customers(self, skip: int = 0, limit: int = 100) -> List[FerryCustomer]:
        return await self._customers.get_all(
            skip=skip, limit=limit, order_by=FerryCustomer.created_at.desc()
        )

    async def create_customer(self, customer_in: FerryCustomerCreate) -> FerryCustomer:
        created = await self._customers.create(FerryCustomer(**customer_in.model_dump()))
        logger.info("Created ferry customer %s (%s)", created.id, created.name)
        return created

    async def delete_customer(self, customer_id: UUID) -> None:
        if not await self._customers.delete(customer_id):
            raise NotFoundException("Customer", customer_id)
        logger.info("Deleted ferry customer %s", customer_id)

    # ── Fare tables ──

    async def list_vehicle_types(self) -> List[VehicleType]:
        """All vehicle fares by name (cache-backed)."""
        return await cache.get_or_load(
            f"{self.VEHICLE_TYPES_PREFIX}all",
            lambda: self._vehicle_types.get_all(limit=1000, order_by=VehicleType.name),
        )

    async def create_vehicle_type(self, fare_in: FareTypeCreate) -> VehicleType:
        created = await self._create_fare(self._vehicle_types, VehicleType(**fare_in.model_dump()))
        cache.invalidate(self.VEHICLE_TYPES_PREFIX)
        return created

    async def delete_vehicle_type(self, type_id: UUID) -> None:
        if not await self._vehicle_types.delete(type_id):
            raise NotFoundException("Vehicle type", type_id)
        cache.invalidate(self.VEHICLE_TYPES_PREFIX)
        logger.info("Deleted vehicle type %s", type_id)

    async def list_passenger_types(self) -> List[PassengerType]:
        """All passenger fares by name (cache-backed)."""
        return await cache.get_or_load(
            f"{self.PASSENGER_TYPES_PREFIX}all",
            lambda: self._passenger_types.get_all(limit=1000, order_by=PassengerType.name),
        )

    async def create_passenger_type(self, fare_in: FareTypeCreate) -> PassengerType:
        created = await self._create_fare(
            self._passenger_types, PassengerType(**fare_in.model_dump())
        )
        cache.invalidate(self.PASSENGER_TYPES_PREFIX)
        return created

    async def delete_passenger_type(self, type_id: UUID) -> None:
        if not await self._passenger_types.delete(type_id):
            raise NotFoundException("Passenger type", type_id)
        cache.invalidate(self.PASSENGER_TYPES_PREFIX)
        logger.info("Deleted passenger type %s", type_id)

    async def _create_fare(self, repo: Any, fare: Any) -> Any:
        """Insert a fare row; a duplicate name becomes a 422."""
        try:
            created = await repo.create(fare)
        except IntegrityError:
            await repo.db.rollback()
            logger.warning("Duplicate fare name '%s'", fare.name)
            raise BusinessRuleViolation(f"A fare named '{fare.name}' already exists")
        logger.info("Created %s '%s' at %s", type(fare).__name__, created.name, created.cost)
        return created

    # ── Vehicle numbers ──

    async def register_vehicle_number(self, vehicle_in: VehicleNumberCreate) -> Dict[str, Any]:
        """
        Remember a plate against a vehicle type.

        Raises :class:`NotFoundException` if the vehicle type does not exist.
        """
        vehicle_type = await self._vehicle_types.get(vehicle_in.vehicle_type_id)
        if not vehicle_type:
            raise NotFoundException("Vehicle type", vehicle_in.vehicle_type_id)

        created = await self._vehicle_numbers.create(VehicleNumber(**vehicle_in.model_dump()))
        logger.info("Registered vehicle %s as %s", created.vehicle_number, vehicle_type.name)
        return {**created.model_dump(), "vehicle_type_name": vehicle_type.name}

    async def list_vehicle_numbers(self) -> List[Dict[str, Any]]:
        """Registered plates with their vehicle-type name, newest first."""
        rows = await self._vehicle_numbers.list_with_type_names()
        return [
            {**vehicle.model_dump(), "vehicle_type_name": type_name}
            for vehicle, type_name in rows
        ]

    # ── Bookings ──

    async def list_bookings(self, skip: int = 0, limit: int = 100) -> List[Booking]:
        return await self._bookings.list_recent(skip=skip, limit=limit)

    async def get_booking(self, booking_id: UUID) -> Booking:
        booking = await self._bookings.get(booking_id)
        if not booking:
            raise NotFoundException("Booking", booking_id)
        return booking

    async def create_booking(self, booking_in: BookingCreate) -> Booking:
        created = await self._bookings.create(Booking(**booking_in.model_dump()))
        logger.info(
            "Created booking %s for %s (%s)",
            created.id,
            created.customer_name,
            created.booking_number,
        )
        return created

    async def update_booking(self, booking_id: UUID, booking_in: BookingCreate) -> Booking:
        """Full edit: every field is replaced by the request's value."""
        booking = await self.get_booking(booking_id)
        for field, value in booking_in.model_dump().items():
            setattr(booking, field, value)
        updated = await self._bookings.update(booking)
        logger.info("Updated booking %s", booking_id)
        return updated

    async def update_status(self, booking_id: UUID, status_in: BookingStatusUpdate) -> Booking:
        """
        Change the booking and/or payment status.

        Raises :class:`InvalidInputException` when neither is supplied.
        """
        changes = status_in.model_dump(exclude_none=True)
        if not changes:
            raise InvalidInputException("booking_status or payment_status is required")

        booking = await self.get_booking(booking_id)
        for field, value in changes.items():
            setattr(booking, field, value)
        updated = await self._bookings.update(booking)
        logger.info(
            "Booking %s is now %s/%s",
            booking_id,
            updated.booking_status.value,
            updated.payment_status.value,
        )
        return updated

    async def update_payment(self, booking_id: UUID, payment_in: BookingPaymentUpdate) -> Booking:
        booking = await self.get_booking(booking_id)
        booking.payment_status = payment_in.payment_status
        if payment_in.payment_number is not None:
            booking.payment_number = payment_in.payment_number
        updated = await self._bookings.update(booking)
        logger.info("Booking %s payment is now %s", booking_id, updated.payment_status.value)
        return updated

    async def delete_booking(self, booking_id: UUID) -> None:
        if not await self._bookings.delete(booking_id):
            raise NotFoundException("Booking", booking_id)
        logger.info("Deleted booking %s", booking_id)
