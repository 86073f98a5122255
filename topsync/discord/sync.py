from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..context import GLOBAL, BotContext, SyncScope
from ..utils import describe_error

logger = logging.getLogger(__name__)

ENTRY_POINT_MARKER = "Entry Point"
ALREADY_EXISTS_MARKER = "already exists"

CommandPayload = Dict[str, Any]


class SyncMode(str, Enum):
    """How a sync run registered the commands."""

    BULK = "bulk"
    INDIVIDUAL = "individual"
    FAILED = "failed"


@dataclass(frozen=True)
class CreateOutcome:
    """Result of one individual create during the entry point fallback."""

    name: str
    created: bool
    error: Optional[str] = None

    @property
    def already_exists(self) -> bool:
        return bool(self.error) and ALREADY_EXISTS_MARKER in (self.error or "").lower()


@dataclass
class SyncReport:
    scope: SyncScope
    mode: SyncMode = SyncMode.BULK
    count: int = 0
    existing: int = 0
    outcomes: List[CreateOutcome] = field(default_factory=list)

    def summary(self) -> str:
        if self.mode is SyncMode.INDIVIDUAL:
            skipped = sum(1 for o in self.outcomes if o.already_exists)
            failed = sum(1 for o in self.outcomes if not o.created and not o.already_exists)
            return f"{self.count} created individually, {skipped} already existed, {failed} failed ({self.scope})"
        if self.mode is SyncMode.FAILED:
            return f"sync failed ({self.scope})"
        return f"{self.count} commands registered ({self.scope})"


def merge_commands(existing: Sequence[CommandPayload], desired: Sequence[CommandPayload]) -> List[CommandPayload]:
    """
    Upsert desired commands into the existing list by name.

    - same name: replaced at the existing position
    - new name: appended (desired order)
    - existing commands not in desired are kept (e.g. entry point commands)
    """
    merged: List[CommandPayload] = [dict(c) for c in existing]
    index = {c.get("name"): i for i, c in enumerate(merged)}

    for cmd in desired:
        name = cmd.get("name")
        pos = index.get(name)
        if pos is None:
            index[name] = len(merged)
            merged.append(dict(cmd))
        else:
            merged[pos] = dict(cmd)

    return merged


class CommandSynchronizer:
    """
    Reconciles the bot's own slash commands with what Discord has registered.

    Discord is the source of truth: nothing is cached between syncs and a
    failed sync leaves the registration as it was.
    """

    def __init__(self, context: BotContext, desired_commands: Callable[[], Sequence[CommandPayload]]) -> None:
        self.context = context
        self._desired_commands = desired_commands

    async def _fetch_existing(self, scope: SyncScope) -> List[CommandPayload]:
        try:
            existing = await self.context.registry.fetch(scope)
        except Exception as e:
            logger.error("Error fetching existing commands (%s): %s", scope, describe_error(e))
            return []
        logger.info("Found %s existing commands (%s)", len(existing), scope)
        return list(existing)

    async def _create_individually(self, scope: SyncScope, desired: Sequence[CommandPayload]) -> List[CreateOutcome]:
        outcomes: List[CreateOutcome] = []
        for cmd in desired:
            name = str(cmd.get("name") or "?")
            try:
                await self.context.registry.create(scope, dict(cmd))
            except Exception as e:
                outcome = CreateOutcome(name=name, created=False, error=describe_error(e))
                if outcome.already_exists:
                    logger.warning("Command /%s already exists (%s); skipping", name, scope)
                else:
                    logger.error("Error creating command /%s (%s): %s", name, scope, outcome.error)
                outcomes.append(outcome)
                continue
            logger.info("Created command /%s (%s)", name, scope)
            outcomes.append(CreateOutcome(name=name, created=True))
        return outcomes

    async def sync_with_report(self, scope: SyncScope = GLOBAL) -> SyncReport:
        report = SyncReport(scope=scope)

        existing = await self._fetch_existing(scope)
        report.existing = len(existing)

        desired = list(self._desired_commands())
        merged = merge_commands(existing, desired)

        try:
            synced = await self.context.registry.bulk_overwrite(scope, merged)
        except Exception as e:
            message = describe_error(e)
            if ENTRY_POINT_MARKER not in message:
                logger.error("Error syncing commands (%s): %s", scope, message)
                report.mode = SyncMode.FAILED
                return report

            logger.warning(
                "Bulk overwrite rejected by an Entry Point command (%s); registering %s commands individually",
                scope,
                len(desired),
            )
            report.mode = SyncMode.INDIVIDUAL
            report.outcomes = await self._create_individually(scope, desired)
            report.count = sum(1 for o in report.outcomes if o.created)
            return report

        report.count = len(synced)
        return report

    async def sync(self, scope: SyncScope = GLOBAL) -> int:
        """Returns the number of commands now registered (or created) in `scope`."""
        report = await self.sync_with_report(scope)
        logger.info("Command sync: %s", report.summary())
        return report.count


__all__ = [
    "ENTRY_POINT_MARKER",
    "ALREADY_EXISTS_MARKER",
    "SyncMode",
    "CreateOutcome",
    "SyncReport",
    "merge_commands",
    "CommandSynchronizer",
]
