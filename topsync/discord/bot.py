from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional

import discord
import httpx
from discord import app_commands

from ..config import Settings, settings
from ..context import BotContext, DiscordCommandRegistry, SyncScope
from ..logging_setup import configure_logging
from ..services.topgg import TopGGPublisher
from .commands import register_all
from .sync import CommandSynchronizer

logger = logging.getLogger(__name__)


class TopSyncBot(discord.Client):
    """
    Slash-command bot that keeps its command list published on Top.gg.

    Notes:
    - discord.Client uses its own internal HTTP client for Discord; command
      registration goes through it (DiscordCommandRegistry).
    - We keep a separate httpx.AsyncClient as self.api for Top.gg calls.
    - Sync + publisher start run once, on the first on_ready.
    """

    def __init__(self, config: Settings = settings) -> None:
        intents = discord.Intents.default()
        intents.guilds = True

        super().__init__(intents=intents)

        self.config = config
        self.tree = app_commands.CommandTree(self)
        self.api: Optional[httpx.AsyncClient] = None

        self.context: Optional[BotContext] = None
        self.synchronizer: Optional[CommandSynchronizer] = None
        self.publisher: Optional[TopGGPublisher] = None

        self.fatal_fault: Optional[str] = None
        self._startup_done = False

    # -----------------------------
    # Lifecycle
    # -----------------------------

    def desired_commands(self) -> List[Dict[str, Any]]:
        """The bot's own commands, serialized as Discord application-command JSON."""
        return [cmd.to_dict(self.tree) for cmd in self.tree.get_commands()]

    @property
    def sync_scope(self) -> SyncScope:
        return SyncScope(guild_id=self.config.sync_guild_id)

    async def setup_hook(self) -> None:
        asyncio.get_running_loop().set_exception_handler(self._on_loop_exception)

        if self.api is None:
            limits = httpx.Limits(max_connections=10, max_keepalive_connections=5)
            self.api = httpx.AsyncClient(
                timeout=float(self.config.topgg_http_timeout_s),
                headers={"User-Agent": self.config.http_user_agent},
                limits=limits,
                follow_redirects=True,
            )

        register_all(self, self.tree)

        application_id = self.config.application_id or self.application_id
        if application_id is None:
            raise RuntimeError("Application id is unknown (set APPLICATION_ID).")
        if self.config.application_id and self.application_id and self.config.application_id != self.application_id:
            logger.warning(
                "APPLICATION_ID=%s does not match the logged-in application %s; using APPLICATION_ID",
                self.config.application_id,
                self.application_id,
            )

        self.context = BotContext(
            application_id=int(application_id),
            registry=DiscordCommandRegistry(self.http, int(application_id)),
            api=self.api,
        )
        self.synchronizer = CommandSynchronizer(self.context, self.desired_commands)

        if self.config.topgg_enabled:
            self.publisher = TopGGPublisher(
                self.context,
                self.config.commands_token,
                timeout=self.config.topgg_http_timeout_s,
                interval_s=self.config.topgg_publish_interval_s,
                initial_delay_s=self.config.topgg_initial_delay_s,
            )
        else:
            logger.warning("COMMANDS_TK not found - Top.gg command updates disabled")

    async def close(self) -> None:
        if self.publisher is not None:
            self.publisher.stop_periodic_updates()

        if self.api is not None:
            try:
                await self.api.aclose()
            except Exception:
                logger.exception("Error closing Top.gg http client")
            self.api = None
        await super().close()

    async def on_ready(self) -> None:
        logger.info("Bot logged in as %s (ID: %s)", str(self.user), getattr(self.user, "id", "?"))
        logger.info("Connected to %s guilds", len(self.guilds))

        # on_ready fires again after a resume/reconnect
        if self._startup_done:
            return
        self._startup_done = True

        if self.synchronizer is not None:
            synced = await self.synchronizer.sync(self.sync_scope)
            logger.info("Command sync completed: %s commands", synced)

        if self.publisher is not None:
            self.publisher.start_periodic_updates()
            logger.info("Top.gg integration started")

    async def on_guild_join(self, guild: discord.Guild) -> None:
        logger.info("Joined guild: %s (ID: %s)", guild.name, guild.id)

    async def on_guild_remove(self, guild: discord.Guild) -> None:
        logger.info("Left guild: %s (ID: %s)", guild.name, guild.id)

    async def on_error(self, event_method: str, /, *args: Any, **kwargs: Any) -> None:
        logger.exception("Client error in %s", event_method)

    # -----------------------------
    # Fault policy
    # -----------------------------

    def _on_loop_exception(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        """
        Unhandled asynchronous faults: log, then shut the bot down so run_bot
        can exit non-zero (same policy as uncaught synchronous exceptions).
        """
        exc = context.get("exception")
        message = context.get("message") or "Unhandled exception in event loop"
        logger.error("Unhandled async fault: %s", message, exc_info=exc)

        if self.fatal_fault is None:
            self.fatal_fault = f"{message}: {exc}" if exc else message
            if not self.is_closed():
                loop.create_task(self.close())


def _log_uncaught(exc_type, exc, tb) -> None:  # noqa: ANN001
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc, tb))


# ---------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------


def run_bot(config: Settings = settings) -> None:
    """
    Start the bot and block until it stops.

    Configuration problems and invalid credentials are logged and return
    without connecting. An unhandled async fault raises SystemExit(1).
    """
    configure_logging(config.log_level, config.log_dir, config.log_retention_days, config.log_max_bytes)
    sys.excepthook = _log_uncaught

    try:
        config.validate_startup()
    except RuntimeError as e:
        logger.error("Invalid configuration: %s", e)
        return

    bot = TopSyncBot(config)
    try:
        logger.info("Starting bot...")
        bot.run(config.bot_token, log_handler=None)
    except discord.LoginFailure:
        logger.error("Invalid bot token")
        return

    if bot.fatal_fault:
        logger.critical("Bot stopped after an unhandled fault: %s", bot.fatal_fault)
        raise SystemExit(1)


if __name__ == "__main__":
    run_bot()
