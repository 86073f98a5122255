"""
Data models.

Everything here is a plain pydantic model (no discord.py import).
"""

from .command import (  # re-export for convenience
    CONTEXT_MENU_TYPES,
    CommandDescriptor,
    CommandType,
    DirectoryCommandPayload,
    DirectoryOptionPayload,
    OptionChoice,
    OptionDescriptor,
    OptionType,
)

__all__ = [
    "CONTEXT_MENU_TYPES",
    "CommandDescriptor",
    "CommandType",
    "DirectoryCommandPayload",
    "DirectoryOptionPayload",
    "OptionChoice",
    "OptionDescriptor",
    "OptionType",
]
