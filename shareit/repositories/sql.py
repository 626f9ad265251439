from __future__ import annotations
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from shareit.domain import Booking, BookingState, BookingStatus, Comment, Item, ItemRequest, User
from shareit.models.booking import BookingRow
from shareit.models.comment import CommentRow
from shareit.models.item import ItemRow
from shareit.models.item_request import ItemRequestRow
from shareit.models.user import UserRow
from shareit.repositories.base import (
    BookingRepository,
    CommentRepository,
    ItemRepository,
    ItemRequestRepository,
    Storage,
    UserRepository,
)


def _user(row: UserRow) -> User:
    return User(id=row.id, name=row.name, email=row.email)


def _item(row: ItemRow) -> Item:
    return Item(
        id=row.id,
        name=row.name,
        description=row.description,
        available=row.available,
        owner_id=row.owner_id,
        request_id=row.request_id,
    )


def _request(row: ItemRequestRow) -> ItemRequest:
    return ItemRequest(id=row.id, description=row.description, requestor_id=row.requestor_id, created=row.created)


def _booking(row: BookingRow, item: ItemRow, booker: UserRow) -> Booking:
    return Booking(
        id=row.id,
        start=row.start_date,
        end=row.end_date,
        item=_item(item),
        booker=_user(booker),
        status=BookingStatus(row.status),
    )


class SqlUserRepository(UserRepository):
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        row = self.db.get(UserRow, user_id)
        return _user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self.db.execute(select(UserRow).where(UserRow.email == email)).scalar_one_or_none()
        return _user(row) if row else None

    def list_all(self) -> List[User]:
        return [_user(r) for r in self.db.execute(select(UserRow).order_by(UserRow.id)).scalars()]

    def add(self, user: User) -> User:
        row = UserRow(name=user.name, email=user.email)
        self.db.add(row)
        self.db.flush()
        return _user(row)

    def save(self, user: User) -> User:
        row = self.db.get(UserRow, user.id)
        row.name = user.name
        row.email = user.email
        self.db.flush()
        return _user(row)

    def delete(self, user_id: int) -> None:
        row = self.db.get(UserRow, user_id)
        if row:
            self.db.delete(row)
            self.db.flush()


class SqlItemRepository(ItemRepository):
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, item_id: int) -> Optional[Item]:
        row = self.db.get(ItemRow, item_id)
        return _item(row) if row else None

    def add(self, item: Item) -> Item:
        row = ItemRow(
            name=item.name,
            description=item.description,
            available=item.available,
            owner_id=item.owner_id,
            request_id=item.request_id,
        )
        self.db.add(row)
        self.db.flush()
        return _item(row)

    def save(self, item: Item) -> Item:
        row = self.db.get(ItemRow, item.id)
        row.name = item.name
        row.description = item.description
        row.available = item.available
        self.db.flush()
        return _item(row)

    def list_by_owner(self, owner_id: int) -> List[Item]:
        q = select(ItemRow).where(ItemRow.owner_id == owner_id).order_by(ItemRow.id)
        return [_item(r) for r in self.db.execute(q).scalars()]

    def search_available(self, text: str) -> List[Item]:
        tl = f"%{text.lower()}%"
        q = (
            select(ItemRow)
            .where(ItemRow.available.is_(True))
            .where(func.lower(ItemRow.name).like(tl) | func.lower(ItemRow.description).like(tl))
            .order_by(ItemRow.id)
        )
        return [_item(r) for r in self.db.execute(q).scalars()]

    def list_by_request(self, request_id: int) -> List[Item]:
        q = select(ItemRow).where(ItemRow.request_id == request_id).order_by(ItemRow.id)
        return [_item(r) for r in self.db.execute(q).scalars()]


class SqlItemRequestRepository(ItemRequestRepository):
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, request_id: int) -> Optional[ItemRequest]:
        row = self.db.get(ItemRequestRow, request_id)
        return _request(row) if row else None

    def add(self, request: ItemRequest) -> ItemRequest:
        row = ItemRequestRow(description=request.description, requestor_id=request.requestor_id, created=request.created)
        self.db.add(row)
        self.db.flush()
        return _request(row)

    def list_by_requestor(self, user_id: int) -> List[ItemRequest]:
        q = (
            select(ItemRequestRow)
            .where(ItemRequestRow.requestor_id == user_id)
            .order_by(ItemRequestRow.created.desc(), ItemRequestRow.id.desc())
        )
        return [_request(r) for r in self.db.execute(q).scalars()]

    def list_others(self, user_id: int, offset: int, limit: int) -> List[ItemRequest]:
        q = (
            select(ItemRequestRow)
            .where(ItemRequestRow.requestor_id != user_id)
            .order_by(ItemRequestRow.created.desc(), ItemRequestRow.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [_request(r) for r in self.db.execute(q).scalars()]


class SqlBookingRepository(BookingRepository):
    def __init__(self, db: Session) -> None:
        self.db = db

    def _select(self):
        return (
            select(BookingRow, ItemRow, UserRow)
            .join(ItemRow, ItemRow.id == BookingRow.item_id)
            .join(UserRow, UserRow.id == BookingRow.booker_id)
        )

    @staticmethod
    def _with_state(q, state: BookingState, now: datetime):
        if state is BookingState.CURRENT:
            return q.where(BookingRow.start_date <= now, BookingRow.end_date > now)
        if state is BookingState.PAST:
            return q.where(BookingRow.end_date < now)
        if state is BookingState.FUTURE:
            return q.where(BookingRow.start_date > now)
        if state.status is not None:
            return q.where(BookingRow.status == state.status.value)
        return q

    def _page(self, q, state: BookingState, now: datetime, offset: int, limit: int) -> List[Booking]:
        q = self._with_state(q, state, now)
        q = q.order_by(BookingRow.start_date.desc(), BookingRow.id.desc()).offset(offset).limit(limit)
        return [_booking(b, i, u) for b, i, u in self.db.execute(q).all()]

    def get(self, booking_id: int, for_update: bool = False) -> Optional[Booking]:
        q = self._select().where(BookingRow.id == booking_id)
        if for_update:
            # Row lock so concurrent decisions on one booking serialize
            q = q.with_for_update(of=BookingRow)
        row = self.db.execute(q).one_or_none()
        return _booking(*row) if row else None

    def add(self, booking: Booking) -> Booking:
        row = BookingRow(
            start_date=booking.start,
            end_date=booking.end,
            item_id=booking.item.id,
            booker_id=booking.booker.id,
            status=booking.status.value,
        )
        self.db.add(row)
        self.db.flush()
        return self.get(row.id)

    def transition(self, booking_id: int, from_status: BookingStatus, to_status: BookingStatus) -> bool:
        # The status guard in WHERE holds even where FOR UPDATE is ignored (SQLite)
        result = self.db.execute(
            update(BookingRow)
            .where(BookingRow.id == booking_id, BookingRow.status == from_status.value)
            .values(status=to_status.value)
        )
        return result.rowcount == 1

    def find_by_booker(self, booker_id: int, state: BookingState, now: datetime,
                       offset: int, limit: int) -> List[Booking]:
        q = self._select().where(BookingRow.booker_id == booker_id)
        return self._page(q, state, now, offset, limit)

    def find_by_owner(self, owner_id: int, state: BookingState, now: datetime,
                      offset: int, limit: int) -> List[Booking]:
        q = self._select().where(ItemRow.owner_id == owner_id)
        return self._page(q, state, now, offset, limit)

    def find_by_item(self, item_id: int) -> List[Booking]:
        q = self._select().where(BookingRow.item_id == item_id).order_by(BookingRow.start_date, BookingRow.id)
        return [_booking(b, i, u) for b, i, u in self.db.execute(q).all()]


class SqlCommentRepository(CommentRepository):
    def __init__(self, db: Session) -> None:
        self.db = db

    def add(self, comment: Comment) -> Comment:
        row = CommentRow(text=comment.text, item_id=comment.item_id, author_id=comment.author.id, created=comment.created)
        self.db.add(row)
        self.db.flush()
        author = self.db.get(UserRow, row.author_id)
        return Comment(id=row.id, text=row.text, item_id=row.item_id, author=_user(author), created=row.created)

    def list_by_item(self, item_id: int) -> List[Comment]:
        q = (
            select(CommentRow, UserRow)
            .join(UserRow, UserRow.id == CommentRow.author_id)
            .where(CommentRow.item_id == item_id)
            .order_by(CommentRow.id)
        )
        return [
            Comment(id=c.id, text=c.text, item_id=c.item_id, author=_user(u), created=c.created)
            for c, u in self.db.execute(q).all()
        ]


class SqlStorage(Storage):
    """Durable store over one SQLAlchemy session (one per request)."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.users = SqlUserRepository(db)
        self.items = SqlItemRepository(db)
        self.requests = SqlItemRequestRepository(db)
        self.bookings = SqlBookingRepository(db)
        self.comments = SqlCommentRepository(db)

    @contextmanager
    def transaction(self) -> Iterator["SqlStorage"]:
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
