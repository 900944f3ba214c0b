"""
vouchbook.bot.cogs.vouches — Vouch Slash Commands
=================================================

Registers one slash command per spelling in
:func:`vouchbook.constants.command_names`:

- /vouch (/vouche)                  — vouch for a member, citing a referral
- /vouch-list                       — server leaderboard
- /reset-vouch (/reset-vouche)      — wipe a member's vouches
- /decrease-vouch (/decrease-vouche) — take one vouch away

Each callback only turns the interaction into a
:class:`~vouchbook.services.dispatcher.CommandRequest` and sends back the
:class:`~vouchbook.services.dispatcher.Reply`.  Commands are deliberately
not ``guild_only`` so DMs reach the dispatcher and get its refusal.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from vouchbook.constants import COMMAND_DESCRIPTIONS, CommandKind, command_names
from vouchbook.services.dispatcher import CommandRequest, Reply, dispatch, error_reply

if TYPE_CHECKING:
    from vouchbook.bot.core import VouchBot

logger = logging.getLogger(__name__)

GENERIC_ERROR_TEXT = "An unexpected error occurred. Please try again later."


async def respond(interaction: discord.Interaction, request: CommandRequest) -> Reply:
    """Dispatch *request* and send exactly one response to *interaction*."""
    bot: VouchBot = interaction.client  # type: ignore[assignment]
    try:
        reply = await dispatch(bot.context, request)
    except Exception:
        logger.exception(
            "Unhandled error in %s from user %s",
            request.kind, request.issuing_user_id,
            extra={"command": str(request.kind), "user_id": request.issuing_user_id},
        )
        reply = error_reply(GENERIC_ERROR_TEXT)

    await interaction.response.send_message(reply.content, ephemeral=reply.ephemeral)
    return reply


# ---------------------------------------------------------------------------
# Callbacks, shared by the canonical name and its legacy alias
# ---------------------------------------------------------------------------
@app_commands.describe(
    user="The user you are vouching for",
    referral="The referral user",
)
async def vouch_callback(
    interaction: discord.Interaction,
    user: discord.User,
    referral: discord.User,
) -> None:
    await respond(interaction, CommandRequest(
        kind=CommandKind.RECORD_ENDORSEMENT,
        issuing_user_id=interaction.user.id,
        community_id=interaction.guild_id,
        target_user_id=user.id,
        referral_user_id=referral.id,
    ))


async def vouch_list_callback(interaction: discord.Interaction) -> None:
    await respond(interaction, CommandRequest(
        kind=CommandKind.LIST_RANKING,
        issuing_user_id=interaction.user.id,
        community_id=interaction.guild_id,
    ))


@app_commands.describe(user="The user whose vouches to reset")
async def reset_vouch_callback(interaction: discord.Interaction, user: discord.User) -> None:
    await respond(interaction, CommandRequest(
        kind=CommandKind.RESET_USER,
        issuing_user_id=interaction.user.id,
        community_id=interaction.guild_id,
        target_user_id=user.id,
    ))


@app_commands.describe(user="The user whose vouch count to decrease")
async def decrease_vouch_callback(interaction: discord.Interaction, user: discord.User) -> None:
    await respond(interaction, CommandRequest(
        kind=CommandKind.DECREMENT_USER,
        issuing_user_id=interaction.user.id,
        community_id=interaction.guild_id,
        target_user_id=user.id,
    ))


CALLBACKS = {
    CommandKind.RECORD_ENDORSEMENT: vouch_callback,
    CommandKind.LIST_RANKING: vouch_list_callback,
    CommandKind.RESET_USER: reset_vouch_callback,
    CommandKind.DECREMENT_USER: decrease_vouch_callback,
}


def build_commands(include_legacy: bool = True) -> list[app_commands.Command]:
    """One :class:`app_commands.Command` per registered spelling."""
    return [
        app_commands.Command(
            name=name,
            description=COMMAND_DESCRIPTIONS[kind],
            callback=CALLBACKS[kind],
        )
        for name, kind in command_names(include_legacy).items()
    ]


class Vouches(commands.Cog, name="Vouches"):
    """Vouch, list, reset, and decrease commands."""

    def __init__(self, bot: VouchBot) -> None:
        self.bot = bot
        self._commands = build_commands(bot.cfg.legacy_aliases)

    async def cog_load(self) -> None:
        """Add every vouch command to the bot's tree."""
        for cmd in self._commands:
            self.bot.tree.add_command(cmd, override=True)
        logger.info("Registered %d vouch command(s)", len(self._commands))

    async def cog_unload(self) -> None:
        for cmd in self._commands:
            self.bot.tree.remove_command(cmd.name)


async def setup(bot: VouchBot) -> None:
    await bot.add_cog(Vouches(bot))
