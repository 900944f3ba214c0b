"""
vouchbook.errors — Error Taxonomy
==================================

Every failure a command can hit maps onto one of these classes.  The
dispatcher turns them into a single ephemeral reply; nothing is retried.

* :class:`ValidationError` — bad or missing input, nothing was persisted.
* :class:`OutOfScopeError` — command arrived outside a server (DMs).
* :class:`StoreWriteError` / :class:`StoreReadError` — SQLite I/O failed.
* :class:`PartialFailure` — the vouch event was written but the counter
  update was not.  The counters can be rebuilt from the event log with
  :func:`vouchbook.services.ledger_service.rebuild_aggregate`.
"""

from __future__ import annotations


class VouchbookError(Exception):
    """Base class for all Vouchbook errors."""


class ValidationError(VouchbookError):
    """A request is missing a required field or carries an invalid one."""


class OutOfScopeError(ValidationError):
    """A request arrived without a community (server) context."""


class StoreError(VouchbookError):
    """The underlying community store failed."""


class StoreWriteError(StoreError):
    """A mutation against the community store failed."""


class StoreReadError(StoreError):
    """A query against the community store failed."""


class PartialFailure(StoreError):
    """The vouch event was recorded but the aggregate update failed."""

    def __init__(self, event_id: int, user_id: str) -> None:
        super().__init__(
            f"Vouch event {event_id} recorded for user {user_id} "
            "but the aggregate counters were not updated"
        )
        self.event_id = event_id
        self.user_id = user_id
