"""
tests/test_config.py — config.yaml Loader Tests
================================================
"""

from __future__ import annotations

from pathlib import Path

import pytest

from vouchbook.config import DEFAULT_BUSY_TIMEOUT, load_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_loads_required_and_defaults(tmp_path):
    cfg = load_config(_write(tmp_path, 'bot_prefix: "!"\ndata_dir: "stores"\n'))
    assert cfg.bot_prefix == "!"
    assert cfg.data_dir == Path("stores")
    assert cfg.busy_timeout == DEFAULT_BUSY_TIMEOUT
    assert cfg.legacy_aliases is True


def test_loads_optional_keys(tmp_path):
    cfg = load_config(_write(
        tmp_path,
        'bot_prefix: "?"\ndata_dir: "/var/lib/vouch"\nbusy_timeout: 2\nlegacy_aliases: false\n',
    ))
    assert cfg.busy_timeout == 2.0
    assert cfg.legacy_aliases is False


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="config.yaml.example"):
        load_config(tmp_path / "nope.yaml")


def test_missing_required_key(tmp_path):
    with pytest.raises(KeyError):
        load_config(_write(tmp_path, 'bot_prefix: "!"\n'))


def test_example_config_is_valid():
    example = Path(__file__).resolve().parent.parent / "config.yaml.example"
    cfg = load_config(example)
    assert cfg.data_dir == Path("data")


def test_config_is_frozen(tmp_path):
    cfg = load_config(_write(tmp_path, 'bot_prefix: "!"\ndata_dir: "stores"\n'))
    with pytest.raises(AttributeError):
        cfg.bot_prefix = "?"  # type: ignore[misc]


def test_default_busy_timeout_fits_interaction_window():
    # Discord drops an interaction that isn't answered within 3 s
    assert DEFAULT_BUSY_TIMEOUT < 3
    example = Path(__file__).resolve().parent.parent / "config.yaml.example"
    assert load_config(example).busy_timeout < 3
