import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from shareit.api.deps import get_store, get_user_id
from shareit.core.config import settings
from shareit.repositories.base import Storage
from shareit.schemas.request import ItemRequestIn, ItemRequestOut
from shareit.services import request_service

log = logging.getLogger(__name__)

router = APIRouter(tags=["requests"])

@router.post("/requests", response_model=ItemRequestOut)
def create_request(body: ItemRequestIn, user_id: int = Depends(get_user_id), store: Storage = Depends(get_store)):
    log.info("POST /requests by user_id=%s", user_id)
    return ItemRequestOut.from_domain(request_service.create_request(store, user_id, body.description))

@router.get("/requests", response_model=List[ItemRequestOut])
def list_own_requests(user_id: int = Depends(get_user_id), store: Storage = Depends(get_store)):
    log.info("GET /requests by user_id=%s", user_id)
    return [ItemRequestOut.from_domain(d) for d in request_service.list_own_requests(store, user_id)]

@router.get("/requests/all", response_model=List[ItemRequestOut])
def list_other_requests(
    from_: int = Query(0, alias="from"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE),
    user_id: int = Depends(get_user_id),
    store: Storage = Depends(get_store),
):
    log.info("GET /requests/all by user_id=%s from=%s size=%s", user_id, from_, size)
    details = request_service.list_other_requests(store, user_id, from_, size)
    return [ItemRequestOut.from_domain(d) for d in details]

@router.get("/requests/{request_id}", response_model=ItemRequestOut)
def get_request(request_id: int, user_id: int = Depends(get_user_id), store: Storage = Depends(get_store)):
    log.info("GET /requests/%s by user_id=%s", request_id, user_id)
    return ItemRequestOut.from_domain(request_service.get_request(store, user_id, request_id))
