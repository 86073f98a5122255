from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

import httpx
from discord.ext import tasks

from ..context import GLOBAL, BotContext
from ..utils import describe_error, truncate
from .topgg_format import convert_commands

logger = logging.getLogger(__name__)

TOPGG_COMMANDS_URL = "https://top.gg/api/v1/projects/@me/commands"
SUCCESS_CODES = (200, 204)

DEFAULT_TIMEOUT_S = 20.0
DEFAULT_INTERVAL_S = 24 * 60 * 60.0
DEFAULT_INITIAL_DELAY_S = 2.0


class TopGGPublisher:
    """
    Republishes the bot's registered global commands to Top.gg.

    publish() never raises: every failure is logged and reported as False.
    The periodic loop waits `initial_delay_s` (lets a fresh sync settle),
    publishes, then repeats every `interval_s` until stopped.
    """

    def __init__(
        self,
        context: BotContext,
        token: str,
        *,
        url: str = TOPGG_COMMANDS_URL,
        timeout: float = DEFAULT_TIMEOUT_S,
        interval_s: float = DEFAULT_INTERVAL_S,
        initial_delay_s: float = DEFAULT_INITIAL_DELAY_S,
    ) -> None:
        self.context = context
        self.token = (token or "").strip()
        self.url = url
        self.timeout = float(timeout)
        self.initial_delay_s = max(0.0, float(initial_delay_s))

        self._loop = tasks.loop(seconds=float(interval_s))(self._publish_tick)
        self._loop.before_loop(self._wait_initial_delay)

    # -----------------------------
    # One-shot publish
    # -----------------------------

    async def collect_commands(self) -> List[Dict[str, Any]]:
        """Fetch global commands and convert them; failed conversions are skipped."""
        try:
            raw = await self.context.registry.fetch(GLOBAL)
        except Exception as e:
            logger.error("Error fetching bot commands: %s", describe_error(e))
            return []

        results = convert_commands(raw, self.context.application_id)
        skipped = [r.name for r in results if not r.ok]
        if skipped:
            logger.warning("Skipped %s command(s) that could not be converted: %s", len(skipped), ", ".join(skipped))
        return [r.payload.to_json() for r in results if r.payload is not None]

    async def _post(self, client: httpx.AsyncClient, batch: List[Dict[str, Any]]) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        return await client.post(self.url, json=batch, headers=headers, timeout=self.timeout)

    async def publish(self) -> bool:
        if not self.token:
            logger.error("Commands token not found. Set COMMANDS_TK in environment.")
            return False

        try:
            batch = await self.collect_commands()
            if not batch:
                logger.warning("No commands found to post to Top.gg")
                return False

            if self.context.api is not None:
                r = await self._post(self.context.api, batch)
            else:
                async with httpx.AsyncClient() as client:
                    r = await self._post(client, batch)
        except httpx.TimeoutException:
            logger.error("Error posting commands to Top.gg: request timed out after %ss", self.timeout)
            return False
        except Exception as e:
            logger.error("Error posting commands to Top.gg: %s", describe_error(e))
            return False

        if r.status_code in SUCCESS_CODES:
            logger.info("Successfully posted %s commands to Top.gg", len(batch))
            return True

        logger.error("Failed to post commands to Top.gg: %s - %s", r.status_code, truncate(r.text, 500))
        if r.status_code == 401:
            logger.error("Top.gg authentication failed. Check that COMMANDS_TK is valid and not expired.")
        return False

    # -----------------------------
    # Periodic updates
    # -----------------------------

    async def _wait_initial_delay(self) -> None:
        if self.initial_delay_s:
            await asyncio.sleep(self.initial_delay_s)

    async def _publish_tick(self) -> None:
        try:
            await self.publish()
        except Exception:
            # publish() already swallows errors; keep the loop alive regardless
            logger.exception("Error in periodic Top.gg command update")

    def is_running(self) -> bool:
        return self._loop.is_running()

    def start_periodic_updates(self) -> None:
        """Requires a running event loop."""
        if self._loop.is_running():
            logger.info("Periodic Top.gg command updates already running")
            return
        self._loop.start()
        logger.info(
            "Started periodic Top.gg command updates (first in %ss, then every %ss)",
            self.initial_delay_s,
            self._loop.seconds,
        )

    def stop_periodic_updates(self) -> None:
        """Idempotent; safe to call when never started."""
        if not self._loop.is_running():
            return
        self._loop.cancel()
        logger.info("Stopped periodic Top.gg command updates")


__all__ = [
    "TOPGG_COMMANDS_URL",
    "SUCCESS_CODES",
    "TopGGPublisher",
]
