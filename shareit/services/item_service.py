import logging
from datetime import datetime
from typing import List, Optional

from shareit.core.errors import ForbiddenError, ValidationError
from shareit.domain import Booking, Comment, Item, ItemDetails, utcnow
from shareit.repositories.base import Storage
from shareit.services.common import require_item, require_user

log = logging.getLogger(__name__)


def create_item(store: Storage, owner_id: int, name: str, description: str, available: bool,
                request_id: Optional[int] = None) -> Item:
    with store.transaction():
        require_user(store, owner_id)
        # an unknown request id is dropped, not rejected
        if request_id is not None and store.requests.get(request_id) is None:
            request_id = None
        item = store.items.add(Item(
            name=name,
            description=description,
            available=available,
            owner_id=owner_id,
            request_id=request_id,
        ))
    log.info("item created: id=%s owner_id=%s request_id=%s", item.id, owner_id, request_id)
    return item


def update_item(store: Storage, item_id: int, owner_id: int, name: Optional[str] = None,
                description: Optional[str] = None, available: Optional[bool] = None) -> Item:
    with store.transaction():
        item = require_item(store, item_id)
        if item.owner_id != owner_id:
            log.warning("non-owner item update: user_id=%s item_id=%s", owner_id, item_id)
            raise ForbiddenError("Only the owner can edit an item")
        if name is not None:
            item.name = name
        if description is not None:
            item.description = description
        if available is not None:
            item.available = available
        item = store.items.save(item)
    log.info("item updated: id=%s", item.id)
    return item


def get_item(store: Storage, item_id: int, user_id: int) -> ItemDetails:
    item = require_item(store, item_id)
    return ItemDetails(item=item, comments=store.comments.list_by_item(item_id))


def last_booking(bookings: List[Booking], now: datetime) -> Optional[Booking]:
    """Most recently finished booking; status is not considered."""
    return max((b for b in bookings if b.end < now), key=lambda b: b.end, default=None)


def next_booking(bookings: List[Booking], now: datetime) -> Optional[Booking]:
    """Soonest upcoming booking, WAITING ones included."""
    return min((b for b in bookings if b.start > now), key=lambda b: b.start, default=None)


def list_items_by_owner(store: Storage, owner_id: int, now: Optional[datetime] = None) -> List[ItemDetails]:
    require_user(store, owner_id)
    now = now or utcnow()
    out: List[ItemDetails] = []
    for item in store.items.list_by_owner(owner_id):
        bookings = store.bookings.find_by_item(item.id)
        out.append(ItemDetails(
            item=item,
            comments=store.comments.list_by_item(item.id),
            last_booking=last_booking(bookings, now),
            next_booking=next_booking(bookings, now),
        ))
    return out


def search_items(store: Storage, text: Optional[str]) -> List[Item]:
    if text is None or not text.strip():
        return []
    return store.items.search_available(text)


def add_comment(store: Storage, item_id: int, user_id: int, text: str,
                now: Optional[datetime] = None) -> Comment:
    """Feedback from someone who has had the item; any finished booking counts."""
    now = now or utcnow()
    with store.transaction():
        item = require_item(store, item_id)
        author = require_user(store, user_id)
        rented = any(b.booker.id == user_id and b.end < now for b in store.bookings.find_by_item(item.id))
        if not rented:
            log.warning("comment without past booking: user_id=%s item_id=%s", user_id, item_id)
            raise ValidationError("Only users who have rented the item can leave a comment")
        comment = store.comments.add(Comment(text=text, item_id=item.id, author=author, created=now))
    log.info("comment added: id=%s item_id=%s author_id=%s", comment.id, item_id, user_id)
    return comment
