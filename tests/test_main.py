"""
tests/test_main.py — Bot Entry Point Tests
===========================================
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from vouchbook.bot import __main__ as entry


@pytest.mark.parametrize("value", ["", "   ", entry.TOKEN_PLACEHOLDER])
def test_unusable_token(monkeypatch, value):
    monkeypatch.setenv("DISCORD_TOKEN", value)
    assert entry.read_token() is None


def test_token_is_stripped(monkeypatch):
    monkeypatch.setenv("DISCORD_TOKEN", " abc.def \n")
    assert entry.read_token() == "abc.def"


def test_describe_counts_existing_stores(cfg, data_dir):
    data_dir.mkdir()
    (data_dir / "guild_1.db").touch()
    (data_dir / "notes.txt").touch()
    text = entry.describe(cfg)
    assert "(1 existing)" in text
    assert "legacy aliases on" in text


def test_describe_without_data_dir(cfg):
    assert "(0 existing)" in entry.describe(cfg)


def test_main_exits_without_token(monkeypatch):
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)
    with patch.object(entry, "load_dotenv"), patch.object(entry, "VouchBot") as bot_cls:
        with pytest.raises(SystemExit) as excinfo:
            entry.main()
    assert excinfo.value.code == 1
    bot_cls.assert_not_called()


def test_main_runs_bot(monkeypatch, tmp_path, data_dir):
    config = tmp_path / "config.yaml"
    config.write_text(f'bot_prefix: "!"\ndata_dir: "{data_dir.as_posix()}"\n', encoding="utf-8")
    monkeypatch.setenv("DISCORD_TOKEN", "abc.def")
    monkeypatch.setenv("VOUCHBOOK_CONFIG", str(config))
    with patch.object(entry, "load_dotenv"), patch.object(entry, "VouchBot") as bot_cls:
        entry.main()
    bot_cls.return_value.run.assert_called_once_with("abc.def", log_handler=None)
    assert not data_dir.exists()
