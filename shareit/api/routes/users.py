import logging
from typing import List

from fastapi import APIRouter, Depends

from shareit.api.deps import get_store
from shareit.repositories.base import Storage
from shareit.schemas.user import UserIn, UserOut, UserPatch
from shareit.services import user_service

log = logging.getLogger(__name__)

router = APIRouter(tags=["users"])

@router.post("/users", response_model=UserOut)
def create_user(body: UserIn, store: Storage = Depends(get_store)):
    log.info("POST /users")
    return UserOut.from_domain(user_service.create_user(store, body.name, body.email))

@router.patch("/users/{user_id}", response_model=UserOut)
def update_user(user_id: int, body: UserPatch, store: Storage = Depends(get_store)):
    log.info("PATCH /users/%s", user_id)
    return UserOut.from_domain(user_service.update_user(store, user_id, body.name, body.email))

@router.get("/users", response_model=List[UserOut])
def list_users(store: Storage = Depends(get_store)):
    return [UserOut.from_domain(u) for u in user_service.list_users(store)]

@router.get("/users/{user_id}", response_model=UserOut)
def get_user(user_id: int, store: Storage = Depends(get_store)):
    return UserOut.from_domain(user_service.get_user(store, user_id))

@router.delete("/users/{user_id}")
def delete_user(user_id: int, store: Storage = Depends(get_store)):
    log.info("DELETE /users/%s", user_id)
    user_service.delete_user(store, user_id)
    return {"ok": True}
