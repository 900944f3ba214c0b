"""
vouchbook.database.store — Per-Community Ledger Store
=====================================================

Each Discord server owns an isolated SQLite file (``guild_<id>.db``).
:class:`StoreRegistry` opens those files lazily and caches one
:class:`LedgerStore` per server for the lifetime of the process.

Every primitive on :class:`LedgerStore` is a **single statement in its own
transaction**, so concurrent command handlers touching the same member can
interleave between primitives but never inside one.  Counter updates rely
on SQLite's native ``INSERT … ON CONFLICT DO UPDATE`` and conditional
``UPDATE … WHERE`` rather than read-modify-write, so no update is lost.

SQLAlchemy failures are re-raised as :class:`StoreWriteError` (mutations)
or :class:`StoreReadError` (queries) with the original chained.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import Engine, delete, func, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from vouchbook.config import DEFAULT_BUSY_TIMEOUT
from vouchbook.database.engine import create_store_engine, get_session, init_db
from vouchbook.database.models import UserAggregate, Vouch
from vouchbook.errors import StoreReadError, StoreWriteError, ValidationError

logger = logging.getLogger(__name__)

UserId = int | str


def is_snowflake(value: object) -> bool:
    """True for a non-empty run of ASCII digits (``"²"`` and ``"٣"`` don't count)."""
    if value is None:
        return False
    text = str(value).strip()
    return text.isascii() and text.isdigit()


def normalize_user_id(user_id: UserId) -> str:
    """Return a Discord snowflake as the TEXT key used in the store."""
    if not is_snowflake(user_id):
        raise ValidationError(f"Invalid user id: {user_id!r}")
    return str(user_id).strip()


def normalize_community_id(community_id: UserId) -> int:
    """Return a server id as an int, rejecting anything that isn't one."""
    if not is_snowflake(community_id):
        raise ValidationError(f"Invalid community id: {community_id!r}")
    return int(str(community_id).strip())


@contextmanager
def _writing(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreWriteError(f"Failed to {action}: {exc}") from exc


@contextmanager
def _reading(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreReadError(f"Failed to {action}: {exc}") from exc


class LedgerStore:
    """Handle on one community's vouch ledger."""

    def __init__(self, community_id: int, engine: Engine) -> None:
        self.community_id = community_id
        self.engine = engine

    def __repr__(self) -> str:
        return f"<LedgerStore community_id={self.community_id}>"

    # -------------------------------------------------------------------
    # Event log
    # -------------------------------------------------------------------
    def insert_event(self, vouched_for: UserId, vouched_by: UserId, referral: UserId) -> int:
        """Append one vouch to the journal and return its id."""
        row = Vouch(
            vouched_for=normalize_user_id(vouched_for),
            vouched_by=normalize_user_id(vouched_by),
            referral=normalize_user_id(referral),
        )
        with _writing("insert vouch event"), get_session(self.engine) as session:
            session.add(row)
            session.flush()
            return row.id

    def delete_events_for(self, user_id: UserId) -> int:
        """Delete every event where *user_id* was vouched for.

        Events where the user only appears as voucher or referral stay.
        Returns the number of deleted rows (0 is not an error).
        """
        uid = normalize_user_id(user_id)
        with _writing("delete vouch events"), get_session(self.engine) as session:
            result = session.execute(
                delete(Vouch)
                .where(Vouch.vouched_for == uid)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount

    def count_events_for(self, user_id: UserId) -> int:
        uid = normalize_user_id(user_id)
        with _reading("count vouch events"), get_session(self.engine) as session:
            return session.scalar(
                select(func.count(Vouch.id)).where(Vouch.vouched_for == uid)
            ) or 0

    def list_events_for(self, user_id: UserId) -> list[Vouch]:
        """Every event received by *user_id*, oldest first (detached rows)."""
        uid = normalize_user_id(user_id)
        with _reading("list vouch events"), get_session(self.engine) as session:
            rows = session.scalars(
                select(Vouch).where(Vouch.vouched_for == uid).order_by(Vouch.id)
            ).all()
            session.expunge_all()
            return list(rows)

    # -------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------
    def upsert_aggregate_increment(
        self, user_id: UserId, vouch_delta: int, referral_delta: int,
    ) -> None:
        """Add the deltas to the user's counters, creating the row if absent.

        One ``INSERT … ON CONFLICT(user_id) DO UPDATE`` statement, so two
        concurrent increments for the same user both land.
        """
        if vouch_delta < 0 or referral_delta < 0:
            raise ValueError("Aggregate increments must be non-negative")
        uid = normalize_user_id(user_id)
        stmt = sqlite_insert(UserAggregate).values(
            user_id=uid,
            vouch_count=vouch_delta,
            referral_count=referral_delta,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserAggregate.user_id],
            set_={
                "vouch_count": UserAggregate.vouch_count + vouch_delta,
                "referral_count": UserAggregate.referral_count + referral_delta,
            },
        )
        with _writing("update aggregate counters"), get_session(self.engine) as session:
            session.execute(stmt)

    def decrement_aggregate_if_positive(self, user_id: UserId) -> bool:
        """Take one vouch away if the user has any.  Returns whether it did.

        The event log is not touched.
        """
        uid = normalize_user_id(user_id)
        with _writing("decrement vouch count"), get_session(self.engine) as session:
            result = session.execute(
                update(UserAggregate)
                .where(UserAggregate.user_id == uid, UserAggregate.vouch_count > 0)
                .values(vouch_count=UserAggregate.vouch_count - 1)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def zero_aggregate(self, user_id: UserId) -> bool:
        """Zero both counters.  Returns ``False`` when the user has no row."""
        uid = normalize_user_id(user_id)
        with _writing("reset aggregate counters"), get_session(self.engine) as session:
            result = session.execute(
                update(UserAggregate)
                .where(UserAggregate.user_id == uid)
                .values(vouch_count=0, referral_count=0)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    def overwrite_aggregate(
        self, user_id: UserId, vouch_count: int, referral_count: int,
    ) -> None:
        """Set both counters to exact values, creating the row if absent."""
        if vouch_count < 0 or referral_count < 0:
            raise ValueError("Aggregate counters must be non-negative")
        uid = normalize_user_id(user_id)
        stmt = sqlite_insert(UserAggregate).values(
            user_id=uid, vouch_count=vouch_count, referral_count=referral_count,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserAggregate.user_id],
            set_={"vouch_count": vouch_count, "referral_count": referral_count},
        )
        with _writing("overwrite aggregate counters"), get_session(self.engine) as session:
            session.execute(stmt)

    def get_aggregate(self, user_id: UserId) -> tuple[int, int] | None:
        """Return ``(vouch_count, referral_count)`` or ``None`` if unknown."""
        uid = normalize_user_id(user_id)
        with _reading("read aggregate counters"), get_session(self.engine) as session:
            row = session.execute(
                select(UserAggregate.vouch_count, UserAggregate.referral_count)
                .where(UserAggregate.user_id == uid)
            ).first()
            return (row[0], row[1]) if row is not None else None

    def list_aggregates_descending(self) -> list[tuple[str, int]]:
        """Members with at least one vouch, most vouched first.

        Ties are ordered by user id so repeated queries agree.
        """
        with _reading("list aggregate counters"), get_session(self.engine) as session:
            rows = session.execute(
                select(UserAggregate.user_id, UserAggregate.vouch_count)
                .where(UserAggregate.vouch_count > 0)
                .order_by(UserAggregate.vouch_count.desc(), UserAggregate.user_id)
            ).all()
            return [(r[0], r[1]) for r in rows]


class StoreRegistry:
    """Lazily opens and caches one :class:`LedgerStore` per community.

    Parameters
    ----------
    data_dir:
        Directory holding the ``guild_<id>.db`` files.  Created on demand.
    busy_timeout:
        Seconds a writer waits on a locked file (see
        :func:`~vouchbook.database.engine.create_store_engine`).
    """

    def __init__(self, data_dir: Path, busy_timeout: float = DEFAULT_BUSY_TIMEOUT) -> None:
        self.data_dir = Path(data_dir)
        self.busy_timeout = busy_timeout
        self._stores: dict[int, LedgerStore] = {}
        self._lock = threading.Lock()

    def path_for(self, community_id: UserId) -> Path:
        return self.data_dir / f"guild_{normalize_community_id(community_id)}.db"

    def open(self, community_id: UserId) -> LedgerStore:
        """Return the store for *community_id*, creating it on first use.

        Idempotent and safe to call from several worker threads at once:
        both tables are guaranteed to exist when this returns.  Existing
        files are opened unchanged.
        """
        cid = normalize_community_id(community_id)
        store = self._stores.get(cid)
        if store is not None:
            return store

        with self._lock:
            store = self._stores.get(cid)
            if store is not None:
                return store

            path = self.path_for(cid)
            with _writing(f"open store for community {cid}"):
                try:
                    self.data_dir.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    raise StoreWriteError(f"Cannot create {self.data_dir}: {exc}") from exc
                engine = create_store_engine(path, self.busy_timeout)
                try:
                    init_db(engine)
                except SQLAlchemyError:
                    engine.dispose()
                    raise

            store = LedgerStore(cid, engine)
            self._stores[cid] = store
            logger.info("Opened vouch store for community %d → %s", cid, path)
            return store

    def __contains__(self, community_id: object) -> bool:
        try:
            return normalize_community_id(community_id) in self._stores  # type: ignore[arg-type]
        except ValidationError:
            return False

    def __len__(self) -> int:
        return len(self._stores)

    def close_all(self) -> None:
        """Dispose every cached engine.  Call once at shutdown."""
        with self._lock:
            for store in self._stores.values():
                store.engine.dispose()
            count = len(self._stores)
            self._stores.clear()
        logger.info("Closed %d vouch store(s)", count)
