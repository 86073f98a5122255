"""
Discord integration package.

Design goals:
- Keep topsync.discord.bot as the stable entrypoint (TopSyncBot + run_bot).
- Command modules live in topsync.discord.commands.*; sync logic in .sync.
"""

from .bot import TopSyncBot, run_bot  # re-export for convenience

__all__ = [
    "TopSyncBot",
    "run_bot",
]
