import logging
from datetime import datetime
from typing import List, Optional

from shareit.core.errors import NotFoundError
from shareit.domain import ItemRequest, ItemRequestDetails, utcnow
from shareit.repositories.base import Storage
from shareit.services.common import page_window, require_user

log = logging.getLogger(__name__)


def _with_items(store: Storage, request: ItemRequest) -> ItemRequestDetails:
    return ItemRequestDetails(request=request, items=store.items.list_by_request(request.id))


def create_request(store: Storage, user_id: int, description: str,
                   now: Optional[datetime] = None) -> ItemRequestDetails:
    with store.transaction():
        require_user(store, user_id)
        request = store.requests.add(ItemRequest(
            description=description,
            requestor_id=user_id,
            created=now or utcnow(),
        ))
    log.info("item request created: id=%s requestor_id=%s", request.id, user_id)
    return ItemRequestDetails(request=request)


def list_own_requests(store: Storage, user_id: int) -> List[ItemRequestDetails]:
    require_user(store, user_id)
    return [_with_items(store, r) for r in store.requests.list_by_requestor(user_id)]


def list_other_requests(store: Storage, user_id: int, from_: int, size: int) -> List[ItemRequestDetails]:
    require_user(store, user_id)
    offset, limit = page_window(from_, size)
    return [_with_items(store, r) for r in store.requests.list_others(user_id, offset, limit)]


def get_request(store: Storage, user_id: int, request_id: int) -> ItemRequestDetails:
    require_user(store, user_id)
    request = store.requests.get(request_id)
    if request is None:
        log.warning("item request not found: id=%s", request_id)
        raise NotFoundError("Request not found")
    return _with_items(store, request)
