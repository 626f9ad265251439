from datetime import datetime
from pydantic import BaseModel, field_validator
from typing import Optional

from shareit.domain import Booking
from shareit.schemas.common import naive_utc
from shareit.schemas.user import UserOut

class BookingCreate(BaseModel):
    itemId: int
    # dates are checked by the booking service so a missing one gets the same error as a bad one
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @field_validator("start", "end", mode="after")
    @classmethod
    def to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(v)

class BookedItemOut(BaseModel):
    id: int
    name: str
    description: str
    available: bool
    ownerId: int
    requestId: Optional[int] = None

class BookingOut(BaseModel):
    id: int
    start: datetime
    end: datetime
    status: str
    item: BookedItemOut
    booker: UserOut

    @classmethod
    def from_domain(cls, b: Booking) -> "BookingOut":
        return cls(
            id=b.id,
            start=b.start,
            end=b.end,
            status=b.status.value,
            item=BookedItemOut(
                id=b.item.id,
                name=b.item.name,
                description=b.item.description,
                available=b.item.available,
                ownerId=b.item.owner_id,
                requestId=b.item.request_id,
            ),
            booker=UserOut.from_domain(b.booker),
        )

class BookingShortOut(BaseModel):
    id: int
    bookerId: int
    start: datetime
    end: datetime

    @classmethod
    def from_domain(cls, b: Optional[Booking]) -> Optional["BookingShortOut"]:
        if b is None:
            return None
        return cls(id=b.id, bookerId=b.booker.id, start=b.start, end=b.end)
