from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord import app_commands

from .shared import format_latency

if TYPE_CHECKING:
    from ..bot import TopSyncBot


def _publishing_status(bot: "discord.Client") -> str:
    publisher = getattr(bot, "publisher", None)
    if publisher is None:
        return "OFF"
    return "ON (running)" if publisher.is_running() else "ON (idle)"


def build_info_embed(bot: "discord.Client", tree: app_commands.CommandTree) -> discord.Embed:
    names = sorted(c.name for c in tree.get_commands())
    embed = discord.Embed(
        title="Bot info",
        description="Slash commands, republished to Top.gg every 24 hours.",
        color=discord.Color.blurple(),
    )
    embed.add_field(name="Bot", value=str(bot.user) if bot.user else "(not logged in)", inline=True)
    embed.add_field(name="Guilds", value=str(len(bot.guilds)), inline=True)
    embed.add_field(name="Latency", value=format_latency(bot.latency), inline=True)
    embed.add_field(name="Commands", value=", ".join(f"/{n}" for n in names) or "(none)", inline=False)
    embed.add_field(name="Top.gg publishing", value=_publishing_status(bot), inline=True)
    return embed


def register(bot: "TopSyncBot", tree: app_commands.CommandTree) -> None:
    """
    Example commands:
      - /ping  liveness + gateway latency
      - /info  bot summary embed
    """

    @tree.command(name="ping", description="Check that the bot is alive.")
    async def ping(interaction: discord.Interaction) -> None:
        await interaction.response.send_message(f"🏓 Pong! Latency: {format_latency(bot.latency)}")

    @tree.command(name="info", description="Show information about the bot.")
    async def info(interaction: discord.Interaction) -> None:
        await interaction.response.send_message(embed=build_info_embed(bot, tree))
