"""Inspect and repair a server's vouch counters from its vouch journal.

A ``PartialFailure`` leaves a journal row whose counter bump never landed.
``show`` compares counters with the journal; ``rebuild`` recomputes them.

    python -m vouchbook.tools.rebuild_counts --community 123 show 456 789
    python -m vouchbook.tools.rebuild_counts --community 123 rebuild 456
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from vouchbook.config import load_config
from vouchbook.database.store import LedgerStore, StoreRegistry
from vouchbook.errors import VouchbookError
from vouchbook.services.ledger_service import rebuild_aggregate

logger = logging.getLogger("vouchbook.tools.rebuild_counts")


def _user_rows(store: LedgerStore, user_ids: list[str]) -> list[dict]:
    rows = []
    for user_id in user_ids:
        counters = store.get_aggregate(user_id) or (0, 0)
        rows.append({
            "user_id": user_id,
            "vouch_count": counters[0],
            "referral_count": counters[1],
            "events": store.count_events_for(user_id),
        })
    return rows


def cmd_show(store: LedgerStore, args: argparse.Namespace) -> None:
    rows = _user_rows(store, args.users)
    if args.json:
        print(json.dumps(rows, indent=2))
        return
    for row in rows:
        flag = "" if row["vouch_count"] == row["events"] else "  (differs)"
        print(
            f"{row['user_id']}: {row['vouch_count']} vouches, "
            f"{row['referral_count']} referrals, {row['events']} events{flag}"
        )


def cmd_rebuild(store: LedgerStore, args: argparse.Namespace) -> None:
    for user_id in args.users:
        count = rebuild_aggregate(store, user_id)
        print(f"{user_id}: counters set to {count}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect or rebuild vouch counters for one server.")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config.yaml (default: ./config.yaml).",
    )
    parser.add_argument("--community", required=True, help="Discord server id.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Compare counters with the journal.")
    show.add_argument("users", nargs="+", help="Discord user ids.")
    show.add_argument("--json", action="store_true", help="Output JSON for automation.")
    show.set_defaults(func=cmd_show)

    rebuild = subparsers.add_parser("rebuild", help="Recompute counters from the journal.")
    rebuild.add_argument("users", nargs="+", help="Discord user ids.")
    rebuild.set_defaults(func=cmd_rebuild)

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s │ %(name)s │ %(message)s")
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config)
    registry = StoreRegistry(cfg.data_dir, busy_timeout=cfg.busy_timeout)
    try:
        # Never create a store for a server that has none.
        if not registry.path_for(args.community).exists():
            print(f"No vouch store for community {args.community} in {cfg.data_dir}", file=sys.stderr)
            return 1
        store = registry.open(args.community)
        args.func(store, args)
    except VouchbookError as exc:
        logger.error("%s", exc)
        return 1
    finally:
        registry.close_all()
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
