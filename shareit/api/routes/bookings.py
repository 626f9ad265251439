import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from shareit.api.deps import get_store, get_user_id
from shareit.core.config import settings
from shareit.repositories.base import Storage
from shareit.schemas.booking import BookingCreate, BookingOut
from shareit.services import booking_service

log = logging.getLogger(__name__)

router = APIRouter(tags=["bookings"])

@router.post("/bookings", response_model=BookingOut)
def create_booking(body: BookingCreate, user_id: int = Depends(get_user_id), store: Storage = Depends(get_store)):
    log.info("POST /bookings by user_id=%s", user_id)
    booking = booking_service.create_booking(store, body.itemId, body.start, body.end, user_id)
    return BookingOut.from_domain(booking)

@router.patch("/bookings/{booking_id}", response_model=BookingOut)
def approve_booking(booking_id: int, approved: bool, user_id: int = Depends(get_user_id),
                    store: Storage = Depends(get_store)):
    log.info("PATCH /bookings/%s?approved=%s by user_id=%s", booking_id, approved, user_id)
    booking = booking_service.set_approval(store, booking_id, user_id, approved)
    return BookingOut.from_domain(booking)

# /owner must be registered before /{booking_id}
@router.get("/bookings/owner", response_model=List[BookingOut])
def list_owner_bookings(
    state: str = "ALL",
    from_: int = Query(0, alias="from"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE),
    user_id: int = Depends(get_user_id),
    store: Storage = Depends(get_store),
):
    log.info("GET /bookings/owner by user_id=%s state=%s from=%s size=%s", user_id, state, from_, size)
    bookings = booking_service.list_by_owner(store, user_id, state, from_, size)
    return [BookingOut.from_domain(b) for b in bookings]

@router.get("/bookings/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: int, user_id: int = Depends(get_user_id), store: Storage = Depends(get_store)):
    log.info("GET /bookings/%s by user_id=%s", booking_id, user_id)
    return BookingOut.from_domain(booking_service.get_booking(store, booking_id, user_id))

@router.get("/bookings", response_model=List[BookingOut])
def list_booker_bookings(
    state: str = "ALL",
    from_: int = Query(0, alias="from"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE),
    user_id: int = Depends(get_user_id),
    store: Storage = Depends(get_store),
):
    log.info("GET /bookings by user_id=%s state=%s from=%s size=%s", user_id, state, from_, size)
    bookings = booking_service.list_by_booker(store, user_id, state, from_, size)
    return [BookingOut.from_domain(b) for b in bookings]
