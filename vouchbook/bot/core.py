"""
vouchbook.bot.core — Bot Instance & Cog Loader
===============================================

Defines :class:`VouchBot`, a ``commands.Bot`` subclass that:

1. Carries the shared config (``bot.cfg``) and the process-wide
   :class:`~vouchbook.context.AppContext` (``bot.context``) so cogs and
   command callbacks can reach the store registry.
2. Loads every extension listed in :data:`EXTENSIONS`.
3. Syncs the slash-command tree on startup (guild-scoped for dev, global
   for production — controlled by the ``DEV_GUILD_ID`` env var).
4. Disposes every open community store on shutdown.
"""

from __future__ import annotations

import logging
import os

import discord
from discord.ext import commands

from vouchbook.config import VouchConfig
from vouchbook.context import AppContext

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "vouchbook.bot.cogs.vouches",
]


class VouchBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`VouchConfig` from ``config.yaml``.
    """

    def __init__(self, cfg: VouchConfig) -> None:
        # Slash commands only, so no privileged intents.
        intents = discord.Intents.default()

        super().__init__(
            command_prefix=cfg.bot_prefix,
            intents=intents,
            description="Vouch ledger for your server",
        )

        self.cfg = cfg
        self.context = AppContext.from_config(cfg, client=self)

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load all cog extensions before connecting.

        A broken extension is logged and skipped.
        """
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)

        dev_guild_id = os.getenv("DEV_GUILD_ID")
        try:
            if dev_guild_id:
                guild = discord.Object(id=int(dev_guild_id))
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
            else:
                synced = await self.tree.sync()
                logger.info("Synced %d commands globally", len(synced))
        except discord.HTTPException:
            logger.exception("Failed to sync slash commands")

    async def close(self) -> None:
        """Graceful shutdown — release every community store."""
        logger.info("Bot shutting down…")
        self.context.close()
        await super().close()
