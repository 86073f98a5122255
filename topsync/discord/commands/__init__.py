from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from . import core

if TYPE_CHECKING:
    import discord
    from discord import app_commands

logger = logging.getLogger(__name__)

# Commands the bot syncs to Discord and lists on Top.gg.
COMMAND_NAMES: Sequence[str] = ("ping", "info")

__all__ = ["register_all", "COMMAND_NAMES"]


def register_all(bot: "discord.Client", tree: "app_commands.CommandTree") -> None:
    """
    Register the bot's slash commands on the shared CommandTree.

    Fails closed (RuntimeError) if registration raises or any name in
    COMMAND_NAMES is missing from the tree afterwards.
    """
    try:
        core.register(bot, tree)
    except Exception as e:
        logger.exception("command registration failed")
        raise RuntimeError(f"Command registration failed: {e}") from e

    registered = {c.name for c in tree.get_commands()}
    missing = [n for n in COMMAND_NAMES if n not in registered]
    logger.info("discord commands registered: %s", ", ".join(f"/{n}" for n in sorted(registered)) or "(none)")

    if missing:
        msg = "Required commands missing after registration: " + ", ".join(missing)
        logger.error(msg)
        raise RuntimeError(msg)
