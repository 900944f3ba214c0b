"""
vouchbook.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for soft settings (where community stores live,
SQLite lock timeout, which command spellings to register).  Secrets such
as the bot token stay in ``.env`` and are read in :mod:`vouchbook.bot.__main__`.

Usage::

    from vouchbook.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.data_dir)          # PosixPath('data')
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

# Stays under the 3 s Discord allows before an interaction must be answered
DEFAULT_BUSY_TIMEOUT = 2.0


@dataclass(frozen=True, slots=True)
class VouchConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Discord
    bot_prefix: str

    # Storage: one ``guild_<id>.db`` file per server under this directory
    data_dir: Path

    # Seconds a writer waits on a locked SQLite file before failing
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT

    # Also register the older ``vouche``-style command names
    legacy_aliases: bool = True


def load_config(path: str | Path = "config.yaml") -> VouchConfig:
    """Read *path* and return a :class:`VouchConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return VouchConfig(
        bot_prefix=raw["bot_prefix"],
        data_dir=Path(raw["data_dir"]),
        busy_timeout=float(raw.get("busy_timeout", DEFAULT_BUSY_TIMEOUT)),
        legacy_aliases=bool(raw.get("legacy_aliases", True)),
    )
