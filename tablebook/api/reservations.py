"""Reservation API endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from tablebook.api.auth import get_current_actor
from tablebook.api.deps import (
    get_availability_projector,
    get_reservation_service,
    unwrap,
)
from tablebook.reservations.availability import AvailabilityProjector
from tablebook.reservations.service import (
    ReservationChanges,
    ReservationDraft,
    ReservationService,
    UNCHANGED,
)
from tablebook.reservations.types import Actor, CustomerId, ReferenceId, ReservationId, TableId
from tablebook.schemas.reservation import (
    AvailabilityResponse,
    ReassignRequest,
    ReservationCreate,
    ReservationListResponse,
    ReservationResponse,
    ReservationUpdate,
    TableAvailabilityResponse,
)
from tablebook.schemas.table import TableResponse
from tablebook.utils.time import combine_local, parse_date, parse_time

router = APIRouter()


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    reservation_data: ReservationCreate,
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """Create a new reservation"""
    draft = ReservationDraft(
        customer_name=reservation_data.customer_name,
        contact=reservation_data.contact,
        table_id=TableId(reservation_data.table_id),
        date_time=reservation_data.date_time,
        party_size=reservation_data.party_size,
        notes=reservation_data.notes,
        customer_id=CustomerId(reservation_data.customer_id) if reservation_data.customer_id else None,
    )
    return unwrap(await service.create(draft, actor))


@router.get("", response_model=ReservationListResponse)
async def list_reservations(
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """List all reservations, or one day's (staff only)"""
    if date:
        try:
            day = parse_date(date)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD.")
        reservations = unwrap(await service.list_by_date(day, actor))
    else:
        reservations = unwrap(await service.list_all(actor))

    return ReservationListResponse(items=reservations, total=len(reservations))


@router.get("/mine", response_model=ReservationListResponse)
async def list_my_reservations(
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """List the calling customer's reservations"""
    reservations = unwrap(await service.list_for_customer(CustomerId(actor.id), actor))
    return ReservationListResponse(items=reservations, total=len(reservations))


@router.get("/customer/{customer_id}", response_model=ReservationListResponse)
async def list_customer_reservations(
    customer_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """List one customer's reservations"""
    reservations = unwrap(await service.list_for_customer(CustomerId(customer_id), actor))
    return ReservationListResponse(items=reservations, total=len(reservations))


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    date: str,
    time: str,
    party_size: Optional[int] = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    projector: AvailabilityProjector = Depends(get_availability_projector),
):
    """Table layout with availability at a date and time"""
    try:
        requested_datetime = combine_local(parse_date(date), parse_time(time))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date or time format")

    projection = await projector.project(requested_datetime, party_size)

    return AvailabilityResponse(
        date=date,
        time=time,
        party_size=party_size,
        tables=[
            TableAvailabilityResponse(
                table=TableResponse.model_validate(entry.table),
                available=entry.available,
            )
            for entry in projection
        ],
    )


@router.get("/{reference_id}", response_model=ReservationResponse)
async def get_reservation(
    reference_id: str,
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """Look up a reservation by its reference id"""
    return unwrap(await service.get_by_reference(ReferenceId(reference_id), actor))


@router.put("/{reference_id}", response_model=ReservationResponse)
async def update_reservation(
    reference_id: str,
    reservation_data: ReservationUpdate,
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """Change table, time, party size or notes"""
    changes = ReservationChanges(
        table_id=TableId(reservation_data.table_id) if reservation_data.table_id is not None else None,
        date_time=reservation_data.date_time,
        party_size=reservation_data.party_size,
        notes=reservation_data.notes if "notes" in reservation_data.model_fields_set else UNCHANGED,
    )
    return unwrap(await service.modify(ReferenceId(reference_id), changes, actor))


@router.post("/{reference_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reference_id: str,
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """Cancel a reservation"""
    return unwrap(await service.cancel(ReferenceId(reference_id), actor))


@router.post("/by-id/{reservation_id}/reassign", response_model=ReservationResponse)
async def reassign_reservation(
    reservation_id: int,
    request: ReassignRequest,
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """Move a reservation to another table or time (staff)"""
    return unwrap(
        await service.reassign(
            ReservationId(reservation_id),
            TableId(request.table_id),
            request.date_time,
            actor,
        )
    )


@router.post("/by-id/{reservation_id}/seat", response_model=ReservationResponse)
async def mark_seated(
    reservation_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """Mark a party as seated (staff)"""
    return unwrap(await service.mark_seated(ReservationId(reservation_id), actor))


@router.post("/by-id/{reservation_id}/no-show", response_model=ReservationResponse)
async def mark_no_show(
    reservation_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """Mark a party as a no-show (staff)"""
    return unwrap(await service.mark_no_show(ReservationId(reservation_id), actor))


@router.post("/by-id/{reservation_id}/complete", response_model=ReservationResponse)
async def complete_reservation(
    reservation_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """Close out a seated party (staff)"""
    return unwrap(await service.complete(ReservationId(reservation_id), actor))
