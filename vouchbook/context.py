"""
vouchbook.context — Process-Wide Application Context
====================================================

Built once at startup and handed to the dispatcher.  Holds the Discord
client (the chat-platform session) and the cache of open community stores,
so nothing in the core reaches for module-level globals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from vouchbook.config import VouchConfig
from vouchbook.database.store import StoreRegistry


@dataclass(slots=True)
class AppContext:
    cfg: VouchConfig
    stores: StoreRegistry
    client: Any | None = None  # discord.Client once the bot is built

    @classmethod
    def from_config(cls, cfg: VouchConfig, client: Any | None = None) -> AppContext:
        stores = StoreRegistry(cfg.data_dir, busy_timeout=cfg.busy_timeout)
        return cls(cfg=cfg, stores=stores, client=client)

    def close(self) -> None:
        """Release every open store handle."""
        self.stores.close_all()
