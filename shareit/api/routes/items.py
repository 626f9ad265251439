import logging
from typing import List

from fastapi import APIRouter, Depends

from shareit.api.deps import get_store, get_user_id
from shareit.repositories.base import Storage
from shareit.schemas.item import CommentIn, CommentOut, ItemIn, ItemOut, ItemPatch
from shareit.services import item_service

log = logging.getLogger(__name__)

router = APIRouter(tags=["items"])

@router.post("/items", response_model=ItemOut)
def create_item(body: ItemIn, user_id: int = Depends(get_user_id), store: Storage = Depends(get_store)):
    log.info("POST /items by user_id=%s", user_id)
    item = item_service.create_item(store, user_id, body.name, body.description, body.available, body.requestId)
    return ItemOut.from_item(item)

@router.patch("/items/{item_id}", response_model=ItemOut)
def update_item(item_id: int, body: ItemPatch, user_id: int = Depends(get_user_id),
                store: Storage = Depends(get_store)):
    log.info("PATCH /items/%s by user_id=%s", item_id, user_id)
    item = item_service.update_item(store, item_id, user_id, body.name, body.description, body.available)
    return ItemOut.from_item(item)

@router.get("/items", response_model=List[ItemOut])
def list_own_items(user_id: int = Depends(get_user_id), store: Storage = Depends(get_store)):
    log.info("GET /items by user_id=%s", user_id)
    return [ItemOut.from_details(d) for d in item_service.list_items_by_owner(store, user_id)]

@router.get("/items/search", response_model=List[ItemOut])
def search_items(text: str = "", store: Storage = Depends(get_store)):
    log.info("GET /items/search text=%r", text)
    return [ItemOut.from_item(i) for i in item_service.search_items(store, text)]

@router.get("/items/{item_id}", response_model=ItemOut)
def get_item(item_id: int, user_id: int = Depends(get_user_id), store: Storage = Depends(get_store)):
    log.info("GET /items/%s by user_id=%s", item_id, user_id)
    return ItemOut.from_details(item_service.get_item(store, item_id, user_id))

@router.post("/items/{item_id}/comment", response_model=CommentOut)
def add_comment(item_id: int, body: CommentIn, user_id: int = Depends(get_user_id),
                store: Storage = Depends(get_store)):
    log.info("POST /items/%s/comment by user_id=%s", item_id, user_id)
    return CommentOut.from_domain(item_service.add_comment(store, item_id, user_id, body.text))
