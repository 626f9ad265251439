from fastapi import APIRouter
from shareit.api.routes.users import router as users_router
from shareit.api.routes.items import router as items_router
from shareit.api.routes.requests import router as requests_router
from shareit.api.routes.bookings import router as bookings_router

api_router = APIRouter()
api_router.include_router(users_router)
api_router.include_router(items_router)
api_router.include_router(requests_router)
api_router.include_router(bookings_router)
