from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from shareit.domain import Comment, Item, ItemDetails
from shareit.schemas.booking import BookingShortOut

class ItemIn(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    available: bool
    requestId: Optional[int] = None

class ItemPatch(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    available: Optional[bool] = None

class CommentIn(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("text must not be blank")
        return v

class CommentOut(BaseModel):
    id: int
    text: str
    authorName: str
    created: datetime

    @classmethod
    def from_domain(cls, c: Comment) -> "CommentOut":
        return cls(id=c.id, text=c.text, authorName=c.author.name, created=c.created)

class ItemOut(BaseModel):
    id: int
    name: str
    description: str
    available: bool
    ownerId: int
    requestId: Optional[int] = None
    lastBooking: Optional[BookingShortOut] = None
    nextBooking: Optional[BookingShortOut] = None
    comments: List[CommentOut] = []

    @classmethod
    def from_item(cls, i: Item) -> "ItemOut":
        return cls(
            id=i.id,
            name=i.name,
            description=i.description,
            available=i.available,
            ownerId=i.owner_id,
            requestId=i.request_id,
        )

    @classmethod
    def from_details(cls, d: ItemDetails) -> "ItemOut":
        out = cls.from_item(d.item)
        out.lastBooking = BookingShortOut.from_domain(d.last_booking)
        out.nextBooking = BookingShortOut.from_domain(d.next_booking)
        out.comments = [CommentOut.from_domain(c) for c in d.comments]
        return out
