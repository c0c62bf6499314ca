"""
Ferry-pass API endpoints.

- GET/POST  /customers,         DELETE /customers/{id}
- GET/POST  /vehicle-types,     DELETE /vehicle-types/{id}
- GET/POST  /passenger-types,   DELETE /passenger-types/{id}
- GET/POST  /vehicle-numbers
- GET/POST  /bookings,          PUT/DELETE /bookings/{id}
- PUT       /bookings/{id}/status, /bookings/{id}/payment
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from apex_backoffice.db.session import get_db
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
from apex_backoffice.schemas.common import ErrorResponse, MessageResponse
from apex_backoffice.schemas.ferry import (
    BookingCreate,
    BookingPaymentUpdate,
    BookingResponse,
    BookingStatusUpdate,
    FareTypeCreate,
    FareTypeResponse,
    FerryCustomerCreate,
    FerryCustomerResponse,
    VehicleNumberCreate,
    VehicleNumberResponse,
)
from apex_backoffice.services.ferry_service import FerryService

router = APIRouter()

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Not found"}}
_DUPLICATE = {422: {"model": ErrorResponse, "description": "A fare with this name already exists"}}


# ── Dependency injection ──


def _get_ferry_service(db: AsyncSession = Depends(get_db)) -> FerryService:
    """Build a FerryService wired to the current request's DB session."""
    return FerryService(
        customer_repo=FerryCustomerRepository(FerryCustomer, db),
        vehicle_type_repo=VehicleTypeRepository(VehicleType, db),
        passenger_type_repo=PassengerTypeRepository(PassengerType, db),
        vehicle_number_repo=VehicleNumberRepository(VehicleNumber, db),
        booking_repo=BookingRepository(Booking, db),
    )


# ── Customers ──


@router.get("/customers", response_model=List[FerryCustomerResponse], summary="List customers")
async def list_customers(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    service: FerryService = Depends(_get_ferry_service),
) -> List[FerryCustomerResponse]:
    return await service.list_customers(skip=skip, limit=limit)


@router.post(
    "/customers",
    response_model=FerryCustomerResponse,
    status_code=201,
    summary="Create a customer",
)
async def create_customer(
    customer: FerryCustomerCreate,
    service: FerryService = Depends(_get_ferry_service),
) -> FerryCustomerResponse:
    return await service.create_customer(customer)


@router.delete(
    "/customers/{customer_id}",
    response_model=MessageResponse,
    summary="Delete a customer",
    responses=_NOT_FOUND,
)
async def delete_customer(
    customer_id: UUID,
    service: FerryService = Depends(_get_ferry_service),
) -> MessageResponse:
    await service.delete_customer(customer_id)
    return MessageResponse(message="Customer deleted successfully")


# ── Vehicle types ──


@router.get("/vehicle-types", response_model=List[FareTypeResponse], summary="List vehicle fares")
async def list_vehicle_types(
    service: FerryService = Depends(_get_ferry_service),
) -> List[FareTypeResponse]:
    return await service.list_vehicle_types()


@router.post(
    "/vehicle-types",
    response_model=FareTypeResponse,
    status_code=201,
    summary="Add a vehicle fare",
    responses=_DUPLICATE,
)
async def create_vehicle_type(
    fare: FareTypeCreate,
    service: FerryService = Depends(_get_ferry_service),
) -> FareTypeResponse:
    return await service.create_vehicle_type(fare)


@router.delete(
    "/vehicle-types/{type_id}",
    response_model=MessageResponse,
    summary="Delete a vehicle fare",
    responses=_NOT_FOUND,
)
async def delete_vehicle_type(
    type_id: UUID,
    service: FerryService = Depends(_get_ferry_service),
) -> MessageResponse:
    await service.delete_vehicle_type(type_id)
    return MessageResponse(message="Vehicle type deleted successfully")


# ── Passenger types ──


@router.get(
    "/passenger-types",
    response_model=List[FareTypeResponse],
    summary="List passenger fares",
)
async def list_passenger_types(
    service: FerryService = Depends(_get_ferry_service),
) -> List[FareTypeResponse]:
    return await service.list_passenger_types()


@router.post(
    "/passenger-types",
    response_model=FareTypeResponse,
    status_code=201,
    summary="Add a passenger fare",
    responses=_DUPLICATE,
)
async def create_passenger_type(
    fare: FareTypeCreate,
    service: FerryService = Depends(_get_ferry_service),
) -> FareTypeResponse:
    return await service.create_passenger_type(fare)


@router.delete(
    "/passenger-types/{type_id}",
    response_model=MessageResponse,
    summary="Delete a passenger fare",
    responses=_NOT_FOUND,
)
async def delete_passenger_type(
    type_id: UUID,
    service: FerryService = Depends(_get_ferry_service),
) -> MessageResponse:
    await service.delete_passenger_type(type_id)
    return MessageResponse(message="Passenger type deleted successfully")


# ── Vehicle numbers ──


@router.get(
    "/vehicle-numbers",
    response_model=List[VehicleNumberResponse],
    summary="List registered vehicles",
    description="Newest first, each with the name of its vehicle type.",
)
async def list_vehicle_numbers(
    service: FerryService = Depends(_get_ferry_service),
) -> List[VehicleNumberResponse]:
    return await service.list_vehicle_numbers()


@router.post(
    "/vehicle-numbers",
    response_model=VehicleNumberResponse,
    status_code=201,
    summary="Register a vehicle",
    responses={404: {"model": ErrorResponse, "description": "Vehicle type not found"}},
)
async def register_vehicle_number(
    vehicle: VehicleNumberCreate,
    service: FerryService = Depends(_get_ferry_service),
) -> VehicleNumberResponse:
    return await service.register_vehicle_number(vehicle)


# ── Bookings ──


@router.get("/bookings", response_model=List[BookingResponse], summary="List bookings")
async def list_bookings(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    service: FerryService = Depends(_get_ferry_service),
) -> List[BookingResponse]:
    return await service.list_bookings(skip=skip, limit=limit)


@router.post(
    "/bookings",
    response_model=BookingResponse,
    status_code=201,
    summary="Create a booking",
    description="New bookings default to ``Pending`` / ``Unpaid``.",
)
async def create_booking(
    booking: BookingCreate,
    service: FerryService = Depends(_get_ferry_service),
) -> BookingResponse:
    return await service.create_booking(booking)


@router.put(
    "/bookings/{booking_id}",
    response_model=BookingResponse,
    summary="Edit a booking",
    responses=_NOT_FOUND,
)
async def update_booking(
    booking_id: UUID,
    booking: BookingCreate,
    service: FerryService = Depends(_get_ferry_service),
) -> BookingResponse:
    return await service.update_booking(booking_id, booking)


@router.put(
    "/bookings/{booking_id}/status",
    response_model=BookingResponse,
    summary="Change booking and/or payment status",
    responses={
        400: {"model": ErrorResponse, "description": "Neither status supplied"},
        **_NOT_FOUND,
    },
)
async def update_booking_status(
    booking_id: UUID,
    status: BookingStatusUpdate,
    service: FerryService = Depends(_get_ferry_service),
) -> BookingResponse:
    return await service.update_status(booking_id, status)


@router.put(
    "/bookings/{booking_id}/payment",
    response_model=BookingResponse,
    summary="Record a payment status change",
    responses=_NOT_FOUND,
)
async def update_booking_payment(
    booking_id: UUID,
    payment: BookingPaymentUpdate,
    service: FerryService = Depends(_get_ferry_service),
) -> BookingResponse:
    return await service.update_payment(booking_id, payment)


@router.delete(
    "/bookings/{booking_id}",
    response_model=MessageResponse,
    summary="Delete a booking",
    responses=_NOT_FOUND,
)
async def delete_booking(
    booking_id: UUID,
    service: FerryService = Depends(_get_ferry_service),
) -> MessageResponse:
    await service.delete_booking(booking_id)
    return MessageResponse(message="Booking deleted successfully")
