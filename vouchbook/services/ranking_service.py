"""
vouchbook.services.ranking_service — Vouch Leaderboard
======================================================

Ranks are positions in the ordering returned by
:meth:`LedgerStore.list_aggregates_descending`; they are never stored.
"""

from __future__ import annotations

from dataclasses import dataclass

from vouchbook.database.store import LedgerStore


@dataclass(frozen=True, slots=True)
class RankedEntry:
    rank: int
    user_id: str
    vouch_count: int


@dataclass(frozen=True, slots=True)
class Ranking:
    """A community's leaderboard.  Empty when nobody has a vouch."""
    community_id: int
    entries: tuple[RankedEntry, ...]

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def __len__(self) -> int:
        return len(self.entries)


def ranked_list(store: LedgerStore) -> Ranking:
    """Members with at least one vouch, most vouched first, ranked from 1."""
    rows = store.list_aggregates_descending()
    return Ranking(
        community_id=store.community_id,
        entries=tuple(
            RankedEntry(rank=i, user_id=user_id, vouch_count=count)
            for i, (user_id, count) in enumerate(rows, 1)
        ),
    )
