"""
tests/test_vouch_cog.py — Slash Command Glue Tests
===================================================

Exercises the command callbacks with mock interactions; the dispatcher
and stores underneath are real.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

from conftest import COMMUNITY_ID, run_async
from vouchbook.bot.cogs.vouches import (
    GENERIC_ERROR_TEXT,
    Vouches,
    build_commands,
    decrease_vouch_callback,
    reset_vouch_callback,
    vouch_callback,
    vouch_list_callback,
)
from vouchbook.constants import CommandKind, command_names
from vouchbook.services.dispatcher import OUT_OF_SCOPE_TEXT


def _interaction(ctx, *, guild_id: int | None = COMMUNITY_ID, user_id: int = 3) -> MagicMock:
    interaction = MagicMock()
    interaction.client = SimpleNamespace(context=ctx)
    interaction.guild_id = guild_id
    interaction.user = SimpleNamespace(id=user_id)
    interaction.response.send_message = AsyncMock()
    return interaction


def _member(user_id: int) -> SimpleNamespace:
    return SimpleNamespace(id=user_id)


class TestCommandNames:

    def test_canonical_and_legacy_names(self):
        names = {cmd.name for cmd in build_commands(include_legacy=True)}
        assert names == {
            "vouch", "vouch-list", "reset-vouch", "decrease-vouch",
            "vouche", "reset-vouche", "decrease-vouche",
        }

    def test_legacy_names_optional(self):
        names = {cmd.name for cmd in build_commands(include_legacy=False)}
        assert names == {"vouch", "vouch-list", "reset-vouch", "decrease-vouch"}

    def test_aliases_share_a_kind(self):
        names = command_names()
        assert names["vouche"] is names["vouch"] is CommandKind.RECORD_ENDORSEMENT
        assert names["reset-vouche"] is names["reset-vouch"] is CommandKind.RESET_USER
        assert names["decrease-vouche"] is names["decrease-vouch"] is CommandKind.DECREMENT_USER

    def test_vouch_command_has_two_user_options(self):
        vouch = next(c for c in build_commands() if c.name == "vouch")
        assert [p.name for p in vouch.parameters] == ["user", "referral"]


class TestCallbacks:

    def test_vouch_sends_public_reply(self, ctx):
        interaction = _interaction(ctx)
        run_async(vouch_callback(interaction, _member(1), _member(2)))
        interaction.response.send_message.assert_awaited_once_with(
            "<@3> vouched for <@1> (Referral: <@2>)!", ephemeral=False,
        )
        assert ctx.stores.open(COMMUNITY_ID).get_aggregate(1) == (1, 1)

    def test_list_after_vouch(self, ctx):
        run_async(vouch_callback(_interaction(ctx), _member(1), _member(2)))
        interaction = _interaction(ctx)
        run_async(vouch_list_callback(interaction))
        content = interaction.response.send_message.await_args.args[0]
        assert content.endswith("1. <@1>: 1 vouches")

    def test_reset_and_decrease(self, ctx):
        run_async(vouch_callback(_interaction(ctx), _member(1), _member(2)))

        interaction = _interaction(ctx)
        run_async(decrease_vouch_callback(interaction, _member(1)))
        interaction.response.send_message.assert_awaited_once_with(
            "Decreased 1 vouch from <@1>.", ephemeral=False,
        )

        interaction = _interaction(ctx)
        run_async(reset_vouch_callback(interaction, _member(1)))
        interaction.response.send_message.assert_awaited_once_with(
            "Vouches for <@1> have been reset.", ephemeral=False,
        )

    def test_dm_gets_ephemeral_refusal(self, ctx):
        interaction = _interaction(ctx, guild_id=None)
        run_async(vouch_list_callback(interaction))
        interaction.response.send_message.assert_awaited_once_with(
            OUT_OF_SCOPE_TEXT, ephemeral=True,
        )

    def test_unexpected_error_still_replies_once(self, ctx):
        interaction = _interaction(ctx)
        with patch(
            "vouchbook.bot.cogs.vouches.dispatch",
            AsyncMock(side_effect=RuntimeError("boom")),
        ):
            run_async(vouch_list_callback(interaction))
        interaction.response.send_message.assert_awaited_once_with(
            GENERIC_ERROR_TEXT, ephemeral=True,
        )


class TestCogRegistration:

    def test_cog_load_adds_and_unload_removes(self, ctx, cfg):
        bot = MagicMock()
        bot.cfg = cfg
        cog = Vouches(bot)
        run_async(cog.cog_load())
        added = {c.args[0].name for c in bot.tree.add_command.call_args_list}
        assert "vouch" in added and "vouche" in added

        run_async(cog.cog_unload())
        removed = {c.args[0] for c in bot.tree.remove_command.call_args_list}
        assert removed == added
