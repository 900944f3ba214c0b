"""
vouchbook.database.engine — SQLite Engines & Async Helper
=========================================================

Discord bots run on an ``asyncio`` event loop, but SQLAlchemy + sqlite3
are **synchronous**.  Calling the store straight from a command handler
would freeze the bot until the query returns, so every store call goes
through :func:`run_db`, which ships the synchronous function to a worker
thread via ``asyncio.to_thread()``.

Usage::

    from vouchbook.database.engine import create_store_engine, init_db, run_db

    engine = create_store_engine(Path("data/guild_42.db"))
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    # Inside an async handler:
    ranking = await run_db(ranked_list, store)
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from vouchbook.config import DEFAULT_BUSY_TIMEOUT
from vouchbook.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_store_engine(path: Path, busy_timeout: float = DEFAULT_BUSY_TIMEOUT) -> Engine:
    """Build a SQLAlchemy :class:`Engine` for one community's SQLite file.

    * ``timeout`` — a writer waits this many seconds on a locked file
      before sqlite3 raises ``database is locked``.
    * ``check_same_thread=False`` — connections are handed between the
      thread-pool workers used by :func:`run_db`.
    """
    engine = create_engine(
        f"sqlite:///{path}",
        echo=False,  # Set True for SQL debugging
        connect_args={"timeout": busy_timeout, "check_same_thread": False},
    )
    logger.debug("Store engine created → %s", path)
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create the ``users`` and ``vouches`` tables if they don't exist.

    Safe to call on every open — existing tables and rows are left alone.
    """
    Base.metadata.create_all(engine)


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    """One store primitive = one transaction.

    Commits when the block exits cleanly, rolls back if it raises.  Loaded
    rows stay readable after the commit so callers can hand them out.
    """
    with Session(engine, expire_on_commit=False) as session, session.begin():
        yield session


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
# Discord gives an interaction 3 s before it must be answered
SLOW_CALL_SECONDS = 2.0


async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Await synchronous store work on the default thread pool.

    Calls that get close to Discord's response window are logged, since
    the usual cause is another writer holding the community's file.
    """
    started = time.monotonic()
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    finally:
        elapsed = time.monotonic() - started
        if elapsed >= SLOW_CALL_SECONDS:
            logger.warning(
                "%s took %.2fs on a worker thread",
                getattr(func, "__qualname__", func), elapsed,
            )
