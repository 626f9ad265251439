"""Storage contract the services are written against.

Two implementations exist: `MemoryStorage` (tests, throwaway runs) and
`SqlStorage` (durable). Services never touch a concrete store.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import List, Optional

from shareit.domain import Booking, BookingState, BookingStatus, Comment, Item, ItemRequest, User


class UserRepository(ABC):
    @abstractmethod
    def get(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    def list_all(self) -> List[User]: ...

    @abstractmethod
    def add(self, user: User) -> User:
        """Persist a new user and return it with its id assigned."""

    @abstractmethod
    def save(self, user: User) -> User: ...

    @abstractmethod
    def delete(self, user_id: int) -> None: ...


class ItemRepository(ABC):
    @abstractmethod
    def get(self, item_id: int) -> Optional[Item]: ...

    @abstractmethod
    def add(self, item: Item) -> Item: ...

    @abstractmethod
    def save(self, item: Item) -> Item: ...

    @abstractmethod
    def list_by_owner(self, owner_id: int) -> List[Item]:
        """Owner's items ordered by id."""

    @abstractmethod
    def search_available(self, text: str) -> List[Item]:
        """Available items whose name or description contains `text`, ignoring case."""

    @abstractmethod
    def list_by_request(self, request_id: int) -> List[Item]: ...


class ItemRequestRepository(ABC):
    @abstractmethod
    def get(self, request_id: int) -> Optional[ItemRequest]: ...

    @abstractmethod
    def add(self, request: ItemRequest) -> ItemRequest: ...

    @abstractmethod
    def list_by_requestor(self, user_id: int) -> List[ItemRequest]:
        """Newest first."""

    @abstractmethod
    def list_others(self, user_id: int, offset: int, limit: int) -> List[ItemRequest]:
        """Requests made by anyone but `user_id`, newest first."""


class BookingRepository(ABC):
    @abstractmethod
    def get(self, booking_id: int, for_update: bool = False) -> Optional[Booking]:
        """Fetch one booking. `for_update` locks it until the transaction ends."""

    @abstractmethod
    def add(self, booking: Booking) -> Booking: ...

    @abstractmethod
    def transition(self, booking_id: int, from_status: BookingStatus, to_status: BookingStatus) -> bool:
        """Move a booking to `to_status` only if it is still in `from_status`.

        Returns False when the booking is missing or another transaction
        changed its status first.
        """

    @abstractmethod
    def find_by_booker(self, booker_id: int, state: BookingState, now: datetime,
                       offset: int, limit: int) -> List[Booking]:
        """Booker's bookings matching `state` at `now`, start descending."""

    @abstractmethod
    def find_by_owner(self, owner_id: int, state: BookingState, now: datetime,
                      offset: int, limit: int) -> List[Booking]:
        """Bookings of the owner's items matching `state` at `now`, start descending."""

    @abstractmethod
    def find_by_item(self, item_id: int) -> List[Booking]:
        """All bookings of one item, start ascending."""


class CommentRepository(ABC):
    @abstractmethod
    def add(self, comment: Comment) -> Comment: ...

    @abstractmethod
    def list_by_item(self, item_id: int) -> List[Comment]: ...


class Storage(ABC):
    users: UserRepository
    items: ItemRepository
    requests: ItemRequestRepository
    bookings: BookingRepository
    comments: CommentRepository

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """Atomic unit for a read-check-write sequence.

        Changes become visible on normal exit and are discarded when the block
        raises.
        """
