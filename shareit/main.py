import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shareit.core.config import settings
from shareit.core.errors import ShareItError
from shareit.core.logging_config import configure_logging
from shareit.api.router import api_router

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.STORAGE_BACKEND == "sql":
        from shareit.db.session import create_tables
        create_tables()
    log.info("%s started (env=%s, storage=%s)", settings.APP_NAME, settings.ENV, settings.STORAGE_BACKEND)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# CORS: use CORS_ORIGINS from env in production; default to localhost for dev
_default_origins = ["http://127.0.0.1:8080", "http://localhost:8080"]
_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_body(error: str, message: str) -> dict:
    return {"error": error, "message": message, "timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S")}


@app.exception_handler(ShareItError)
async def handle_shareit_error(request: Request, exc: ShareItError):
    log.warning("%s %s -> %s: %s", request.method, request.url.path, exc.error_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.error_code, exc.message))


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    log.error("%s %s failed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=error_body("INTERNAL_SERVER_ERROR", "Internal server error"))


app.include_router(api_router)


@app.get("/health")
def health():
    return {"status": "ok"}
