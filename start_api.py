#!/usr/bin/env python3
"""
Wait for the database, create tables, seed, then uvicorn.
"""
import logging
import os
import sys
import time

from sqlalchemy import text

from shareit.core.config import settings
from shareit.core.logging_config import configure_logging

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger("start_api")


def wait_for_db(timeout_s: int) -> None:
    from shareit.db.session import engine

    start = time.time()
    log.info("Waiting for database (timeout=%ss)", timeout_s)
    while True:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            log.info("Database is ready.")
            return
        except Exception:
            if time.time() - start > timeout_s:
                log.error("Timed out waiting for database.")
                raise
            time.sleep(1)


if settings.STORAGE_BACKEND == "sql":
    # 1) Wait for DB
    wait_for_db(int(os.getenv("DB_WAIT_TIMEOUT", "60")))

    # 2) Tables
    from shareit.db.session import create_tables
    create_tables()

    # 3) Seed
    from shareit.seed import run as run_seed
    run_seed()

# 4) Start uvicorn (replace current process)
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "shareit.main:app", "--host", "0.0.0.0", "--port", os.getenv("PORT", "8000")],
)
