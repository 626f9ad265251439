from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from shareit.core.errors import ValidationError


def utcnow() -> datetime:
    """Naive UTC; every stored timestamp uses the same convention."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BookingStatus(str, Enum):
    """Persisted lifecycle of a booking. WAITING is the only non-terminal value."""

    WAITING = "WAITING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELED = "CANCELED"


class BookingState(str, Enum):
    """Query-only filter; never written to a booking."""

    ALL = "ALL"
    CURRENT = "CURRENT"
    PAST = "PAST"
    FUTURE = "FUTURE"
    WAITING = "WAITING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @classmethod
    def parse(cls, value: Union[str, "BookingState", None]) -> "BookingState":
        if isinstance(value, cls):
            return value
        try:
            return cls[value.upper()]  # type: ignore[union-attr]
        except (KeyError, AttributeError):
            raise ValidationError(f"Unknown state: {value}")

    @property
    def status(self) -> Optional[BookingStatus]:
        """The persisted status this state selects on, if it is a status filter."""
        if self in (BookingState.WAITING, BookingState.APPROVED, BookingState.REJECTED):
            return BookingStatus(self.value)
        return None

    def matches(self, booking: "Booking", now: datetime) -> bool:
        if self is BookingState.ALL:
            return True
        if self is BookingState.CURRENT:
            return booking.start <= now < booking.end
        if self is BookingState.PAST:
            return booking.end < now
        if self is BookingState.FUTURE:
            return booking.start > now
        return booking.status == self.status


@dataclass
class User:
    name: str
    email: str
    id: Optional[int] = None


@dataclass
class Item:
    name: str
    description: str
    available: bool
    owner_id: int
    request_id: Optional[int] = None
    id: Optional[int] = None


@dataclass
class ItemRequest:
    description: str
    requestor_id: int
    created: datetime
    id: Optional[int] = None


@dataclass
class Booking:
    """Reservation of `item` by `booker` for the half-open interval [start, end).

    `item` and `booker` are snapshots taken when the booking is read.
    """

    start: datetime
    end: datetime
    item: Item
    booker: User
    status: BookingStatus = BookingStatus.WAITING
    id: Optional[int] = None

    def decide(self, approved: bool) -> None:
        self.status = BookingStatus.APPROVED if approved else BookingStatus.REJECTED


@dataclass
class Comment:
    text: str
    item_id: int
    author: User
    created: datetime
    id: Optional[int] = None


@dataclass
class ItemDetails:
    item: Item
    comments: List[Comment] = field(default_factory=list)
    last_booking: Optional[Booking] = None
    next_booking: Optional[Booking] = None


@dataclass
class ItemRequestDetails:
    request: ItemRequest
    items: List[Item] = field(default_factory=list)
