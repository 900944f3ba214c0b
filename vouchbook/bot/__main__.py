"""
vouchbook.bot.__main__ — Entry point for ``python -m vouchbook.bot``
====================================================================

Reads ``DISCORD_TOKEN`` from ``.env``, soft settings from the file named
by ``VOUCHBOOK_CONFIG`` (default ``config.yaml``), then runs the bot until
interrupted.  Community stores are opened lazily on the first command
from each server, so nothing touches the data directory here.
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from vouchbook.bot.core import VouchBot
from vouchbook.config import VouchConfig, load_config

logger = logging.getLogger("vouchbook")

TOKEN_PLACEHOLDER = "your-discord-bot-token-here"


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    )


def read_token() -> str | None:
    """The bot token from the environment, or ``None`` if it's unusable."""
    token = os.getenv("DISCORD_TOKEN", "").strip()
    if not token or token == TOKEN_PLACEHOLDER:
        return None
    return token


def describe(cfg: VouchConfig) -> str:
    existing = len(list(cfg.data_dir.glob("guild_*.db"))) if cfg.data_dir.is_dir() else 0
    aliases = "on" if cfg.legacy_aliases else "off"
    return (
        f"stores in {cfg.data_dir.resolve()} ({existing} existing), "
        f"busy timeout {cfg.busy_timeout:g}s, legacy aliases {aliases}"
    )


def main() -> None:
    configure_logging()
    load_dotenv()

    token = read_token()
    if token is None:
        logger.critical("DISCORD_TOKEN is not set.  Copy .env.example → .env and paste your bot token.")
        sys.exit(1)

    cfg = load_config(os.getenv("VOUCHBOOK_CONFIG", "config.yaml"))
    logger.info("Config loaded: %s", describe(cfg))

    try:
        VouchBot(cfg=cfg).run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Interrupted, stores closed")


if __name__ == "__main__":
    main()
