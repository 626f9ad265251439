import logging
from typing import Tuple

from shareit.core.errors import NotFoundError, ValidationError
from shareit.domain import Item, User
from shareit.repositories.base import Storage

log = logging.getLogger(__name__)


def require_user(store: Storage, user_id: int) -> User:
    user = store.users.get(user_id)
    if user is None:
        log.warning("user not found: id=%s", user_id)
        raise NotFoundError("User not found")
    return user


def require_item(store: Storage, item_id: int) -> Item:
    item = store.items.get(item_id)
    if item is None:
        log.warning("item not found: id=%s", item_id)
        raise NotFoundError("Item not found")
    return item


def page_window(from_: int, size: int) -> Tuple[int, int]:
    """(offset, limit) for a `from`/`size` pair.

    `from_` selects the page that contains it (page = from_ // size), so an
    offset that is not a multiple of `size` snaps back to the page start.
    """
    if from_ < 0:
        raise ValidationError("Parameter 'from' must not be negative")
    if size <= 0:
        raise ValidationError("Parameter 'size' must be positive")
    page = from_ // size
    return page * size, size
