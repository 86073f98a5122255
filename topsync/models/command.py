from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_serializer

# NOTE:
# These models mirror Discord's raw application-command JSON (what the HTTP
# API returns) and the Top.gg command payload. Keep this module free of
# discord.py imports so the converter can be exercised without a client.


class CommandType(IntEnum):
    CHAT_INPUT = 1
    USER = 2
    MESSAGE = 3
    PRIMARY_ENTRY_POINT = 4


class OptionType(IntEnum):
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


CONTEXT_MENU_TYPES = (CommandType.USER, CommandType.MESSAGE)


def _snowflake_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    return str(v)


class OptionChoice(BaseModel):
    # Extra keys (name_localizations, ...) are kept so choices copy verbatim.
    model_config = ConfigDict(extra="allow")

    name: str
    value: Union[int, float, str]

    @model_serializer(mode="plain")
    def _verbatim(self) -> Dict[str, Any]:
        # exclude_none on the enclosing payload must not strip null extras here.
        return {"name": self.name, "value": self.value, **(self.model_extra or {})}


class OptionDescriptor(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    description: Optional[str] = None
    type: int
    required: Optional[bool] = None
    choices: Optional[List[OptionChoice]] = None
    options: Optional[List["OptionDescriptor"]] = None


class CommandDescriptor(BaseModel):
    """
    A registered application command as fetched from Discord.

    Snowflakes and the permissions bitmask arrive as strings from the HTTP API
    but may be ints when built by hand; both are normalized to str.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: Optional[str] = None
    application_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    type: int = CommandType.CHAT_INPUT
    options: Optional[List[OptionDescriptor]] = None
    default_member_permissions: Optional[str] = None

    @field_validator("id", "application_id", "default_member_permissions", mode="before")
    @classmethod
    def _norm_str(cls, v: Any) -> Optional[str]:
        return _snowflake_str(v)

    @property
    def is_context_menu(self) -> bool:
        return self.type in CONTEXT_MENU_TYPES


class DirectoryOptionPayload(BaseModel):
    name: str
    description: str
    type: int
    required: bool = False
    choices: Optional[List[OptionChoice]] = None
    options: Optional[List["DirectoryOptionPayload"]] = None


class DirectoryCommandPayload(BaseModel):
    """
    One command in the shape Top.gg expects on /projects/@me/commands.
    Optional keys are dropped from the JSON when unset (see to_json()).
    """

    id: Optional[str] = None
    application_id: Optional[str] = None
    name: str
    version: str = "1"
    type: int
    description: str
    options: Optional[List[DirectoryOptionPayload]] = None
    default_member_permissions: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


OptionDescriptor.model_rebuild()
DirectoryOptionPayload.model_rebuild()

__all__ = [
    "CommandType",
    "OptionType",
    "CONTEXT_MENU_TYPES",
    "OptionChoice",
    "OptionDescriptor",
    "CommandDescriptor",
    "DirectoryOptionPayload",
    "DirectoryCommandPayload",
]
