"""
vouchbook.services.dispatcher — Command Request → Reply
=======================================================

The only entry point the bot layer calls.  One request in, exactly one
:class:`Reply` out — success, "no data", no-op, or error.  The dispatcher
validates, routes to the ledger/ranking services through
:func:`~vouchbook.database.engine.run_db`, and phrases the reply; it never
touches SQL itself.

Pipeline:
1. Gate: no community → ``OutOfScopeError`` (DMs are not supported).
2. Gate: the command kind's required targets must be present.
3. Open (or reuse) the community store.
4. Run the operation and build the reply text.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from vouchbook.constants import LIST_HEADER, CommandKind
from vouchbook.database.engine import run_db
from vouchbook.database.store import LedgerStore, is_snowflake
from vouchbook.errors import (
    OutOfScopeError,
    PartialFailure,
    StoreError,
    ValidationError,
)
from vouchbook.services.ledger_service import (
    DecrementOutcome,
    decrement_user,
    record_vouch,
    reset_user,
)
from vouchbook.services.ranking_service import ranked_list

if TYPE_CHECKING:
    from vouchbook.context import AppContext

logger = logging.getLogger(__name__)

OUT_OF_SCOPE_TEXT = "This bot can only be used in servers."
NO_VOUCHES_TEXT = "No users have received any vouches yet."
OPEN_FAILED_TEXT = "An error occurred while opening this server's vouch records."

# Per-command text for store failures
FAILURE_TEXT: dict[CommandKind, str] = {
    CommandKind.RECORD_ENDORSEMENT: "An error occurred while saving the vouch.",
    CommandKind.LIST_RANKING: "An error occurred while retrieving the vouch list.",
    CommandKind.RESET_USER: "An error occurred while resetting vouches.",
    CommandKind.DECREMENT_USER: "An error occurred while decreasing the vouch count.",
}


class ReplyStatus(enum.StrEnum):
    SUCCESS = "success"
    NO_DATA = "no_data"
    NOOP = "noop"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class CommandRequest:
    """A command as resolved by the chat platform.

    ``community_id`` is ``None`` when the command came from a DM.
    """
    kind: CommandKind
    issuing_user_id: int | str
    community_id: int | str | None
    target_user_id: int | str | None = None
    referral_user_id: int | str | None = None


@dataclass(frozen=True, slots=True)
class Reply:
    """Text to send back plus whether only the invoker should see it."""
    content: str
    status: ReplyStatus = ReplyStatus.SUCCESS
    ephemeral: bool = False
    data: Any = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.status is not ReplyStatus.ERROR


def mention(user_id: int | str) -> str:
    return f"<@{user_id}>"


def error_reply(text: str) -> Reply:
    return Reply(content=text, status=ReplyStatus.ERROR, ephemeral=True)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
REQUIRED_TARGETS: dict[CommandKind, tuple[str, ...]] = {
    CommandKind.RECORD_ENDORSEMENT: ("target_user_id", "referral_user_id"),
    CommandKind.LIST_RANKING: (),
    CommandKind.RESET_USER: ("target_user_id",),
    CommandKind.DECREMENT_USER: ("target_user_id",),
}

_FIELD_LABELS = {"target_user_id": "user", "referral_user_id": "referral"}


def validate_request(request: CommandRequest) -> None:
    """Raise if *request* can't be routed.  Nothing is persisted here."""
    if request.community_id is None:
        raise OutOfScopeError(OUT_OF_SCOPE_TEXT)
    if not is_snowflake(request.community_id):
        raise ValidationError("This server could not be identified.")

    try:
        kind = CommandKind(request.kind)
    except ValueError:
        raise ValidationError(f"Unknown command: {request.kind}") from None

    if not is_snowflake(request.issuing_user_id):
        raise ValidationError("The invoking user could not be resolved.")

    for name in REQUIRED_TARGETS[kind]:
        value = getattr(request, name)
        if not is_snowflake(value):
            raise ValidationError(
                f"Please specify a valid {_FIELD_LABELS[name]} for this command."
            )


# ---------------------------------------------------------------------------
# Handlers, one per command kind
# ---------------------------------------------------------------------------
async def _handle_record(store: LedgerStore, request: CommandRequest) -> Reply:
    receipt = await run_db(
        record_vouch,
        store,
        request.target_user_id,
        request.referral_user_id,
        request.issuing_user_id,
    )
    return Reply(
        content=(
            f"{mention(receipt.vouched_by)} vouched for {mention(receipt.vouched_for)} "
            f"(Referral: {mention(receipt.referral)})!"
        ),
        data=receipt,
    )


async def _handle_list(store: LedgerStore, request: CommandRequest) -> Reply:
    ranking = await run_db(ranked_list, store)
    if ranking.is_empty:
        return Reply(content=NO_VOUCHES_TEXT, status=ReplyStatus.NO_DATA, data=ranking)

    lines = [
        f"{e.rank}. {mention(e.user_id)}: {e.vouch_count} vouches"
        for e in ranking.entries
    ]
    return Reply(content=f"{LIST_HEADER}\n" + "\n".join(lines), data=ranking)


async def _handle_reset(store: LedgerStore, request: CommandRequest) -> Reply:
    deleted = await run_db(reset_user, store, request.target_user_id)
    return Reply(
        content=f"Vouches for {mention(request.target_user_id)} have been reset.",
        data=deleted,
    )


async def _handle_decrement(store: LedgerStore, request: CommandRequest) -> Reply:
    outcome = await run_db(decrement_user, store, request.target_user_id)
    target = mention(request.target_user_id)
    if outcome is DecrementOutcome.ALREADY_ZERO:
        return Reply(
            content=f"{target} already has 0 vouches.",
            status=ReplyStatus.NOOP,
            data=outcome,
        )
    return Reply(content=f"Decreased 1 vouch from {target}.", data=outcome)


_HANDLERS: dict[CommandKind, Callable[[LedgerStore, CommandRequest], Awaitable[Reply]]] = {
    CommandKind.RECORD_ENDORSEMENT: _handle_record,
    CommandKind.LIST_RANKING: _handle_list,
    CommandKind.RESET_USER: _handle_reset,
    CommandKind.DECREMENT_USER: _handle_decrement,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
async def dispatch(ctx: AppContext, request: CommandRequest) -> Reply:
    """Validate *request*, run it against its community store, and reply."""
    try:
        validate_request(request)
    except OutOfScopeError as exc:
        logger.debug("Rejected %s outside a server from %s", request.kind, request.issuing_user_id)
        return error_reply(str(exc))
    except ValidationError as exc:
        logger.debug("Rejected %s: %s", request.kind, exc)
        return error_reply(f"❌ {exc}")

    kind = CommandKind(request.kind)

    try:
        store = await run_db(ctx.stores.open, request.community_id)
    except ValidationError as exc:
        return error_reply(f"❌ {exc}")
    except StoreError:
        logger.exception("Could not open store for community %s", request.community_id)
        return error_reply(OPEN_FAILED_TEXT)

    try:
        return await _HANDLERS[kind](store, request)
    except PartialFailure as exc:
        logger.error(
            "Partial vouch in community %d: event %d recorded for %s, counters not updated",
            store.community_id, exc.event_id, exc.user_id,
            exc_info=exc.__cause__,
        )
        return error_reply(FAILURE_TEXT[kind])
    except StoreError:
        logger.exception(
            "Store failure handling %s in community %d", kind, store.community_id,
        )
        return error_reply(FAILURE_TEXT[kind])
    except ValidationError as exc:
        return error_reply(f"❌ {exc}")
