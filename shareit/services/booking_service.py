import logging
from datetime import datetime
from typing import List, Optional, Union

from shareit.core.errors import ConflictError, NotFoundError, ValidationError
from shareit.domain import Booking, BookingState, BookingStatus, utcnow
from shareit.repositories.base import Storage
from shareit.services.common import page_window, require_item, require_user

log = logging.getLogger(__name__)


def create_booking(store: Storage, item_id: int, start: Optional[datetime], end: Optional[datetime],
                   booker_id: int) -> Booking:
    """Book `item_id` for [start, end). The new booking always starts out WAITING.

    Overlapping bookings of the same item are accepted; availability is not
    touched.
    """
    with store.transaction():
        booker = require_user(store, booker_id)
        item = require_item(store, item_id)

        if not item.available:
            log.warning("booking of unavailable item: item_id=%s", item.id)
            raise ValidationError("Item is not available for booking")

        if item.owner_id == booker_id:
            log.warning("owner tried to book own item: user_id=%s item_id=%s", booker_id, item.id)
            raise ValidationError("Owner cannot book own item")

        if start is None or end is None or not end > start:
            log.warning("invalid booking dates: start=%s end=%s", start, end)
            raise ValidationError("Invalid booking dates")

        booking = store.bookings.add(
            Booking(start=start, end=end, item=item, booker=booker, status=BookingStatus.WAITING)
        )

    log.info("booking created: id=%s item_id=%s booker_id=%s start=%s end=%s",
             booking.id, item.id, booker_id, start, end)
    return booking


def _get_booking(store: Storage, booking_id: int, for_update: bool = False) -> Booking:
    booking = store.bookings.get(booking_id, for_update=for_update)
    if booking is None:
        log.warning("booking not found: id=%s", booking_id)
        raise NotFoundError("Booking not found")
    return booking


def set_approval(store: Storage, booking_id: int, acting_user_id: int, approved: bool) -> Booking:
    """Owner's one-time decision on a WAITING booking."""
    with store.transaction():
        booking = _get_booking(store, booking_id, for_update=True)

        if booking.item.owner_id != acting_user_id:
            log.warning("non-owner decision: user_id=%s booking_id=%s", acting_user_id, booking_id)
            raise ValidationError("Only the item owner may approve or reject a booking")

        if booking.status is not BookingStatus.WAITING:
            log.warning("booking already processed: id=%s status=%s", booking_id, booking.status.value)
            raise ConflictError("Booking has already been processed")

        booking.decide(approved)
        if not store.bookings.transition(booking.id, BookingStatus.WAITING, booking.status):
            log.warning("booking decided concurrently: id=%s", booking_id)
            raise ConflictError("Booking has already been processed")

    log.info("booking decided: id=%s owner_id=%s status=%s", booking.id, acting_user_id, booking.status.value)
    return booking


def get_booking(store: Storage, booking_id: int, user_id: int) -> Booking:
    booking = _get_booking(store, booking_id)
    if user_id not in (booking.booker.id, booking.item.owner_id):
        log.warning("booking access denied: user_id=%s booking_id=%s", user_id, booking_id)
        raise ValidationError("Access denied")
    return booking


def list_by_booker(store: Storage, booker_id: int, state: Union[str, BookingState], from_: int, size: int,
                   now: Optional[datetime] = None) -> List[Booking]:
    require_user(store, booker_id)
    booking_state = BookingState.parse(state)
    offset, limit = page_window(from_, size)
    now = now or utcnow()
    bookings = store.bookings.find_by_booker(booker_id, booking_state, now, offset, limit)
    log.info("bookings by booker: booker_id=%s state=%s from=%s size=%s -> %s",
             booker_id, booking_state.value, from_, size, len(bookings))
    return bookings


def list_by_owner(store: Storage, owner_id: int, state: Union[str, BookingState], from_: int, size: int,
                  now: Optional[datetime] = None) -> List[Booking]:
    require_user(store, owner_id)
    booking_state = BookingState.parse(state)
    offset, limit = page_window(from_, size)
    now = now or utcnow()
    bookings = store.bookings.find_by_owner(owner_id, booking_state, now, offset, limit)
    log.info("bookings by owner: owner_id=%s state=%s from=%s size=%s -> %s",
             owner_id, booking_state.value, from_, size, len(bookings))
    return bookings
