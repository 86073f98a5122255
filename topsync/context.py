from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, runtime_checkable

import httpx

if TYPE_CHECKING:
    from discord.http import HTTPClient


@dataclass(frozen=True)
class SyncScope:
    """Where commands are registered: globally (guild_id=None) or in one guild."""

    guild_id: Optional[int] = None

    @property
    def is_global(self) -> bool:
        return self.guild_id is None

    def __str__(self) -> str:
        return "global" if self.guild_id is None else f"guild {self.guild_id}"


GLOBAL = SyncScope()


@runtime_checkable
class CommandRegistry(Protocol):
    """
    The three platform calls the synchronizer and publisher need.

    Payloads are Discord's raw application-command JSON dicts.
    """

    async def fetch(self, scope: SyncScope) -> List[Dict[str, Any]]: ...

    async def bulk_overwrite(self, scope: SyncScope, payload: List[Dict[str, Any]]) -> List[Dict[str, Any]]: ...

    async def create(self, scope: SyncScope, payload: Dict[str, Any]) -> Dict[str, Any]: ...


class DiscordCommandRegistry:
    """
    CommandRegistry backed by discord.py's HTTP client (the bot's own session,
    rate limiting and auth).
    """

    def __init__(self, http: "HTTPClient", application_id: int) -> None:
        self.http = http
        self.application_id = application_id

    async def fetch(self, scope: SyncScope) -> List[Dict[str, Any]]:
        if scope.is_global:
            data = await self.http.get_global_commands(self.application_id)
        else:
            data = await self.http.get_guild_commands(self.application_id, scope.guild_id)
        return list(data or [])

    async def bulk_overwrite(self, scope: SyncScope, payload: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if scope.is_global:
            data = await self.http.bulk_upsert_global_commands(self.application_id, payload=payload)
        else:
            data = await self.http.bulk_upsert_guild_commands(self.application_id, scope.guild_id, payload=payload)
        return list(data or [])

    async def create(self, scope: SyncScope, payload: Dict[str, Any]) -> Dict[str, Any]:
        if scope.is_global:
            return await self.http.upsert_global_command(self.application_id, payload=payload)
        return await self.http.upsert_guild_command(self.application_id, scope.guild_id, payload=payload)


@dataclass(frozen=True)
class BotContext:
    """
    Connection context handed to every component at construction.

    - application_id: the bot application (used in Top.gg payloads)
    - registry: Discord command endpoints
    - api: shared httpx client for non-Discord HTTP (Top.gg)
    """

    application_id: int
    registry: CommandRegistry
    api: Optional[httpx.AsyncClient] = None


__all__ = [
    "SyncScope",
    "GLOBAL",
    "CommandRegistry",
    "DiscordCommandRegistry",
    "BotContext",
]
