"""
vouchbook.constants — Command Vocabulary & Presentation Constants
=================================================================

Single source of truth for the four command kinds and every slash-command
spelling that maps onto them.  The core only ever sees :class:`CommandKind`;
names and aliases are a presentation concern handled by the bot layer.
"""

from __future__ import annotations

import enum


class CommandKind(enum.StrEnum):
    """The four operations the dispatcher understands."""
    RECORD_ENDORSEMENT = "record-endorsement"
    LIST_RANKING = "list-ranking"
    RESET_USER = "reset-user"
    DECREMENT_USER = "decrement-user"


# Canonical slash-command name per kind.
COMMAND_NAMES: dict[CommandKind, str] = {
    CommandKind.RECORD_ENDORSEMENT: "vouch",
    CommandKind.LIST_RANKING: "vouch-list",
    CommandKind.RESET_USER: "reset-vouch",
    CommandKind.DECREMENT_USER: "decrease-vouch",
}

# Older spellings still in use on existing servers.
LEGACY_ALIASES: dict[str, CommandKind] = {
    "vouche": CommandKind.RECORD_ENDORSEMENT,
    "reset-vouche": CommandKind.RESET_USER,
    "decrease-vouche": CommandKind.DECREMENT_USER,
}

COMMAND_DESCRIPTIONS: dict[CommandKind, str] = {
    CommandKind.RECORD_ENDORSEMENT: "Add a vouch for a user",
    CommandKind.LIST_RANKING: "View the list of users with their vouch counts",
    CommandKind.RESET_USER: "Reset vouches for a specific user",
    CommandKind.DECREMENT_USER: "Decrease a vouch for a specific user",
}


def command_names(include_legacy: bool = True) -> dict[str, CommandKind]:
    """Every slash-command name to register, mapped to its kind."""
    names = {name: kind for kind, name in COMMAND_NAMES.items()}
    if include_legacy:
        names.update(LEGACY_ALIASES)
    return names


LIST_HEADER = "\U0001f3c6 **Vouch List** \U0001f3c6"  # 🏆
