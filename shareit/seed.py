import logging
from typing import Optional

from shareit.core.errors import ConflictError
from shareit.db.session import SessionLocal
from shareit.domain import User
from shareit.repositories.base import Storage
from shareit.repositories.sql import SqlStorage
from shareit.services import item_service, user_service

log = logging.getLogger(__name__)


def ensure_user(store: Storage, name: str, email: str) -> User:
    try:
        return user_service.create_user(store, name, email)
    except ConflictError:
        return store.users.get_by_email(email)


def run(store: Optional[Storage] = None) -> None:
    """Demo owner and borrower with a couple of listed items. Idempotent."""
    db = None
    if store is None:
        db = SessionLocal()
        store = SqlStorage(db)
    try:
        owner = ensure_user(store, "Olga Owner", "owner@shareit.local")
        ensure_user(store, "Boris Booker", "booker@shareit.local")

        if not store.items.list_by_owner(owner.id):
            item_service.create_item(store, owner.id, "Drill", "Cordless drill, two batteries", True)
            item_service.create_item(store, owner.id, "Tent", "Four-person tent", True)
            item_service.create_item(store, owner.id, "Kayak", "Single kayak, needs repair", False)

        log.info("[seed] users: %s", [u.email for u in store.users.list_all()])
    finally:
        if db is not None:
            db.close()
