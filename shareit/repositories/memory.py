from __future__ import annotations
import functools
import itertools
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from shareit.domain import Booking, BookingState, BookingStatus, Comment, Item, ItemRequest, User
from shareit.repositories.base import (
    BookingRepository,
    CommentRepository,
    ItemRepository,
    ItemRequestRepository,
    Storage,
    UserRepository,
)

# Stored objects are private copies; callers get copies back and write changes through the repository.


def locked(method):
    """Run a repository method under the store-wide lock."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class MemoryUserRepository(UserRepository):
    def __init__(self, lock: Optional[threading.RLock] = None) -> None:
        self._users: Dict[int, User] = {}
        self._ids = itertools.count(1)
        self._lock = lock if lock is not None else threading.RLock()

    @locked
    def get(self, user_id: int) -> Optional[User]:
        u = self._users.get(user_id)
        return replace(u) if u else None

    @locked
    def get_by_email(self, email: str) -> Optional[User]:
        return next((replace(u) for u in self._users.values() if u.email == email), None)

    @locked
    def list_all(self) -> List[User]:
        return [replace(u) for u in self._users.values()]

    @locked
    def add(self, user: User) -> User:
        stored = replace(user, id=next(self._ids))
        self._users[stored.id] = stored
        return replace(stored)

    @locked
    def save(self, user: User) -> User:
        self._users[user.id] = replace(user)
        return replace(user)

    @locked
    def delete(self, user_id: int) -> None:
        self._users.pop(user_id, None)


class MemoryItemRepository(ItemRepository):
    def __init__(self, lock: Optional[threading.RLock] = None) -> None:
        self._items: Dict[int, Item] = {}
        self._ids = itertools.count(1)
        self._lock = lock if lock is not None else threading.RLock()

    @locked
    def get(self, item_id: int) -> Optional[Item]:
        i = self._items.get(item_id)
        return replace(i) if i else None

    @locked
    def add(self, item: Item) -> Item:
        stored = replace(item, id=next(self._ids))
        self._items[stored.id] = stored
        return replace(stored)

    @locked
    def save(self, item: Item) -> Item:
        self._items[item.id] = replace(item)
        return replace(item)

    @locked
    def list_by_owner(self, owner_id: int) -> List[Item]:
        return [replace(i) for i in sorted(self._items.values(), key=lambda i: i.id) if i.owner_id == owner_id]

    @locked
    def search_available(self, text: str) -> List[Item]:
        t = text.lower()

        def matches(i: Item) -> bool:
            return i.available and (t in i.name.lower() or t in i.description.lower())

        return [replace(i) for i in self._items.values() if matches(i)]

    @locked
    def list_by_request(self, request_id: int) -> List[Item]:
        return [replace(i) for i in self._items.values() if i.request_id == request_id]


class MemoryItemRequestRepository(ItemRequestRepository):
    def __init__(self, lock: Optional[threading.RLock] = None) -> None:
        self._requests: Dict[int, ItemRequest] = {}
        self._ids = itertools.count(1)
        self._lock = lock if lock is not None else threading.RLock()

    @locked
    def get(self, request_id: int) -> Optional[ItemRequest]:
        r = self._requests.get(request_id)
        return replace(r) if r else None

    @locked
    def add(self, request: ItemRequest) -> ItemRequest:
        stored = replace(request, id=next(self._ids))
        self._requests[stored.id] = stored
        return replace(stored)

    def _newest_first(self) -> List[ItemRequest]:
        return sorted(self._requests.values(), key=lambda r: (r.created, r.id), reverse=True)

    @locked
    def list_by_requestor(self, user_id: int) -> List[ItemRequest]:
        return [replace(r) for r in self._newest_first() if r.requestor_id == user_id]

    @locked
    def list_others(self, user_id: int, offset: int, limit: int) -> List[ItemRequest]:
        others = [r for r in self._newest_first() if r.requestor_id != user_id]
        return [replace(r) for r in others[offset:offset + limit]]


class MemoryBookingRepository(BookingRepository):
    """Bookings keep item/booker ids only; snapshots are rebuilt on every read."""

    def __init__(self, users: MemoryUserRepository, items: MemoryItemRepository,
                 lock: Optional[threading.RLock] = None) -> None:
        self._bookings: Dict[int, Booking] = {}
        self._ids = itertools.count(1)
        self._users = users
        self._items = items
        self._lock = lock if lock is not None else threading.RLock()

    def _hydrate(self, b: Booking) -> Booking:
        return replace(
            b,
            item=self._items.get(b.item.id) or replace(b.item),
            booker=self._users.get(b.booker.id) or replace(b.booker),
        )

    @locked
    def get(self, booking_id: int, for_update: bool = False) -> Optional[Booking]:
        # for_update is covered by the storage-wide transaction lock
        b = self._bookings.get(booking_id)
        return self._hydrate(b) if b else None

    @locked
    def add(self, booking: Booking) -> Booking:
        stored = replace(booking, id=next(self._ids))
        self._bookings[stored.id] = stored
        return self._hydrate(stored)

    @locked
    def transition(self, booking_id: int, from_status: BookingStatus, to_status: BookingStatus) -> bool:
        b = self._bookings.get(booking_id)
        if b is None or b.status is not from_status:
            return False
        self._bookings[booking_id] = replace(b, status=to_status)
        return True

    def _select(self, keep, state: BookingState, now: datetime, offset: int, limit: int) -> List[Booking]:
        rows = [self._hydrate(b) for b in self._bookings.values()]
        rows = [b for b in rows if keep(b) and state.matches(b, now)]
        rows.sort(key=lambda b: (b.start, b.id), reverse=True)
        return rows[offset:offset + limit]

    @locked
    def find_by_booker(self, booker_id: int, state: BookingState, now: datetime,
                       offset: int, limit: int) -> List[Booking]:
        return self._select(lambda b: b.booker.id == booker_id, state, now, offset, limit)

    @locked
    def find_by_owner(self, owner_id: int, state: BookingState, now: datetime,
                      offset: int, limit: int) -> List[Booking]:
        return self._select(lambda b: b.item.owner_id == owner_id, state, now, offset, limit)

    @locked
    def find_by_item(self, item_id: int) -> List[Booking]:
        rows = [self._hydrate(b) for b in self._bookings.values() if b.item.id == item_id]
        return sorted(rows, key=lambda b: (b.start, b.id))


class MemoryCommentRepository(CommentRepository):
    def __init__(self, users: MemoryUserRepository, lock: Optional[threading.RLock] = None) -> None:
        self._comments: Dict[int, Comment] = {}
        self._ids = itertools.count(1)
        self._users = users
        self._lock = lock if lock is not None else threading.RLock()

    @locked
    def add(self, comment: Comment) -> Comment:
        stored = replace(comment, id=next(self._ids))
        self._comments[stored.id] = stored
        return replace(stored)

    @locked
    def list_by_item(self, item_id: int) -> List[Comment]:
        return [
            replace(c, author=self._users.get(c.author.id) or replace(c.author))
            for c in sorted(self._comments.values(), key=lambda c: c.id)
            if c.item_id == item_id
        ]


class MemoryStorage(Storage):
    """Process-local store. One lock guards every read and serializes all transactions."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.users = MemoryUserRepository(self._lock)
        self.items = MemoryItemRepository(self._lock)
        self.requests = MemoryItemRequestRepository(self._lock)
        self.bookings = MemoryBookingRepository(self.users, self.items, self._lock)
        self.comments = MemoryCommentRepository(self.users, self._lock)

    def _tables(self) -> List[dict]:
        return [
            self.users._users,
            self.items._items,
            self.requests._requests,
            self.bookings._bookings,
            self.comments._comments,
        ]

    @contextmanager
    def transaction(self) -> Iterator["MemoryStorage"]:
        with self._lock:
            snapshot = [dict(t) for t in self._tables()]
            try:
                yield self
            except Exception:
                for table, saved in zip(self._tables(), snapshot):
                    table.clear()
                    table.update(saved)
                raise
