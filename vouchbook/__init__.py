"""
Vouchbook — Per-Community Vouch Ledger for Discord
===================================================
Tracks who vouched for whom inside each Discord server, keeps running
vouch/referral counts next to an append-only audit trail, and answers
leaderboard queries.  Every server gets its own SQLite file.

Package layout::

    vouchbook/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Command vocabulary + presentation constants
    ├── errors.py          # Error taxonomy shared by every layer
    ├── context.py         # Process-wide AppContext
    ├── database/
    │   ├── engine.py      # SQLite engine, session + async helper
    │   ├── models.py      # users + vouches tables
    │   └── store.py       # LedgerStore primitives + StoreRegistry
    ├── services/
    │   ├── ledger_service.py   # record / reset / decrement / rebuild
    │   ├── ranking_service.py  # Ranked vouch list
    │   └── dispatcher.py       # CommandRequest → Reply
    ├── bot/
    │   ├── core.py        # Bot subclass, cog loader
    │   └── cogs/
    │       └── vouches.py # /vouch, /vouch-list, /reset-vouch, /decrease-vouch
    └── tools/
        └── rebuild_counts.py   # vouchbook-rebuild operator CLI
"""

__version__ = "0.1.0"
