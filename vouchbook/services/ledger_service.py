"""
vouchbook.services.ledger_service — Vouch Mutations
===================================================

Composes :class:`~vouchbook.database.store.LedgerStore` primitives into
the domain operations.  All functions are synchronous; call them from
async code through :func:`~vouchbook.database.engine.run_db`.

Counters vs. journal:
    A vouch writes one journal row and bumps the target's counters.  A
    decrement only touches ``vouch_count`` — the journal keeps the row —
    so after a decrement the count can sit below the number of events.
    :func:`rebuild_aggregate` recomputes counters from the journal and
    therefore discards earlier decrements.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from vouchbook.database.store import LedgerStore, UserId, normalize_user_id
from vouchbook.errors import PartialFailure, StoreWriteError

logger = logging.getLogger(__name__)


class DecrementOutcome(enum.StrEnum):
    DECREMENTED = "decremented"
    ALREADY_ZERO = "already_zero"


@dataclass(frozen=True, slots=True)
class VouchReceipt:
    """What :func:`record_vouch` wrote."""
    event_id: int
    vouched_for: str
    vouched_by: str
    referral: str


def record_vouch(
    store: LedgerStore,
    target: UserId,
    referral: UserId,
    issuer: UserId,
) -> VouchReceipt:
    """Journal a vouch for *target* and bump its vouch + referral counters.

    If the journal insert fails, the counters are left alone and
    :class:`StoreWriteError` propagates.  If the insert succeeds but the
    counter update fails, :class:`PartialFailure` is raised with the
    orphan event id — nothing is rolled back.
    """
    target_id = normalize_user_id(target)
    referral_id = normalize_user_id(referral)
    issuer_id = normalize_user_id(issuer)

    event_id = store.insert_event(target_id, issuer_id, referral_id)
    try:
        store.upsert_aggregate_increment(target_id, 1, 1)
    except StoreWriteError as exc:
        raise PartialFailure(event_id, target_id) from exc

    logger.info(
        "Community %d: %s vouched for %s (referral %s) → event %d",
        store.community_id, issuer_id, target_id, referral_id, event_id,
    )
    return VouchReceipt(
        event_id=event_id,
        vouched_for=target_id,
        vouched_by=issuer_id,
        referral=referral_id,
    )


def reset_user(store: LedgerStore, target: UserId) -> int:
    """Delete every vouch received by *target* and zero its counters.

    Journal first, counters second: a crash in between leaves counters
    stale-high, never a journal that was silently truncated.
    Returns the number of deleted events.
    """
    target_id = normalize_user_id(target)
    deleted = store.delete_events_for(target_id)
    store.zero_aggregate(target_id)
    logger.info(
        "Community %d: reset %s (%d event(s) deleted)",
        store.community_id, target_id, deleted,
    )
    return deleted


def decrement_user(store: LedgerStore, target: UserId) -> DecrementOutcome:
    """Take one vouch from *target*; a zero count is a no-op, not an error."""
    target_id = normalize_user_id(target)
    if not store.decrement_aggregate_if_positive(target_id):
        logger.debug("Community %d: %s already at 0 vouches", store.community_id, target_id)
        return DecrementOutcome.ALREADY_ZERO

    logger.info("Community %d: decremented %s", store.community_id, target_id)
    return DecrementOutcome.DECREMENTED


def rebuild_aggregate(store: LedgerStore, user_id: UserId) -> int:
    """Recompute *user_id*'s counters from the journal.  Returns the count.

    Repairs the orphan event left behind by a :class:`PartialFailure`.
    Every journal row counts once toward both ``vouch_count`` and
    ``referral_count``, matching :func:`record_vouch`.

    Operators run it through ``vouchbook-rebuild`` (see
    :mod:`vouchbook.tools.rebuild_counts`); the bot exposes no command for it.
    """
    uid = normalize_user_id(user_id)
    count = store.count_events_for(uid)
    store.overwrite_aggregate(uid, count, count)
    logger.info(
        "Community %d: rebuilt counters for %s from %d event(s)",
        store.community_id, uid, count,
    )
    return count
