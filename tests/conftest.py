"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from vouchbook.config import VouchConfig
from vouchbook.context import AppContext
from vouchbook.database.store import LedgerStore, StoreRegistry

COMMUNITY_ID = 100
OTHER_COMMUNITY_ID = 200


def run_async(coro):
    """Run an async coroutine to completion without a pytest plugin."""
    return asyncio.run(coro)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "stores"


@pytest.fixture
def stores(data_dir: Path):
    """A registry writing ``guild_<id>.db`` files under a temp directory."""
    registry = StoreRegistry(data_dir, busy_timeout=10.0)
    yield registry
    registry.close_all()


@pytest.fixture
def store(stores: StoreRegistry) -> LedgerStore:
    return stores.open(COMMUNITY_ID)


@pytest.fixture
def cfg(data_dir: Path) -> VouchConfig:
    return VouchConfig(bot_prefix="!", data_dir=data_dir, busy_timeout=10.0)


@pytest.fixture
def ctx(cfg: VouchConfig):
    context = AppContext.from_config(cfg)
    yield context
    context.close()
