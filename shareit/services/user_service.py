import logging
from typing import List, Optional

from shareit.core.errors import ConflictError
from shareit.domain import BookingState, User, utcnow
from shareit.repositories.base import Storage
from shareit.services.common import require_user

log = logging.getLogger(__name__)


def create_user(store: Storage, name: str, email: str) -> User:
    with store.transaction():
        if store.users.get_by_email(email) is not None:
            log.warning("duplicate email on create: %s", email)
            raise ConflictError(f"User with email {email} already exists")
        user = store.users.add(User(name=name, email=email))
    log.info("user created: id=%s", user.id)
    return user


def update_user(store: Storage, user_id: int, name: Optional[str] = None, email: Optional[str] = None) -> User:
    with store.transaction():
        user = require_user(store, user_id)
        if email is not None and email != user.email:
            taken = store.users.get_by_email(email)
            if taken is not None and taken.id != user_id:
                log.warning("duplicate email on update: user_id=%s", user_id)
                raise ConflictError("Email is already used by another user")
            user.email = email
        if name is not None:
            user.name = name
        user = store.users.save(user)
    log.info("user updated: id=%s", user.id)
    return user


def get_user(store: Storage, user_id: int) -> User:
    return require_user(store, user_id)


def list_users(store: Storage) -> List[User]:
    return store.users.list_all()


def delete_user(store: Storage, user_id: int) -> None:
    """Remove a user with no items, bookings or requests. Missing users are ignored."""
    with store.transaction():
        if store.users.get(user_id) is None:
            return
        # comments need a finished booking, so the booking check covers them
        in_use = (
            store.items.list_by_owner(user_id)
            or store.bookings.find_by_booker(user_id, BookingState.ALL, utcnow(), 0, 1)
            or store.requests.list_by_requestor(user_id)
        )
        if in_use:
            log.warning("delete of user with dependent records: id=%s", user_id)
            raise ConflictError("User still has items, bookings or requests")
        store.users.delete(user_id)
    log.info("user deleted: id=%s", user_id)
