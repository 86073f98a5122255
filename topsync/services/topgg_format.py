from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..models.command import (
    CommandDescriptor,
    CommandType,
    DirectoryCommandPayload,
    DirectoryOptionPayload,
    OptionDescriptor,
)

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description"
OPTION_PLACEHOLDER = "Parameter"

CommandInput = Union[CommandDescriptor, Mapping[str, Any]]


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one command: a payload or the reason it failed."""

    name: str
    payload: Optional[DirectoryCommandPayload] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


def _as_descriptor(command: CommandInput) -> CommandDescriptor:
    if isinstance(command, CommandDescriptor):
        return command
    return CommandDescriptor.model_validate(dict(command))


def _command_name(command: CommandInput) -> str:
    if isinstance(command, CommandDescriptor):
        return command.name
    try:
        return str(command.get("name") or "?")
    except Exception:
        return "?"


def convert_option(option: OptionDescriptor) -> DirectoryOptionPayload:
    """
    Convert one option, recursing into subcommand/group options.

    Choices and nested options are only emitted when non-empty.
    """
    data: Dict[str, Any] = {
        "name": option.name,
        "description": option.description or OPTION_PLACEHOLDER,
        "type": option.type,
        "required": bool(option.required),
    }
    if option.choices:
        data["choices"] = list(option.choices)
    if option.options:
        data["options"] = [convert_option(sub) for sub in option.options]
    return DirectoryOptionPayload(**data)


def _convert(command: CommandDescriptor, application_id: Optional[Union[int, str]]) -> DirectoryCommandPayload:
    app_id = application_id if application_id is not None else command.application_id
    data: Dict[str, Any] = {
        "id": command.id,
        "application_id": None if app_id is None else str(app_id),
        "name": command.name,
    }

    if command.is_context_menu:
        # Top.gg requires the key; context menu commands have no description.
        data["type"] = int(command.type)
        data["description"] = ""
    else:
        data["type"] = int(CommandType.CHAT_INPUT)
        data["description"] = command.description or NO_DESCRIPTION
        if command.options:
            data["options"] = [convert_option(o) for o in command.options]

    if command.default_member_permissions is not None:
        data["default_member_permissions"] = str(command.default_member_permissions)

    return DirectoryCommandPayload(**data)


def convert_command(
    command: CommandInput,
    application_id: Optional[Union[int, str]] = None,
) -> Optional[DirectoryCommandPayload]:
    """
    Convert a Discord command (descriptor or raw API dict) to Top.gg's format.

    Returns None (and logs) if this one command cannot be converted.
    """
    return convert_with_result(command, application_id).payload


def convert_with_result(
    command: CommandInput,
    application_id: Optional[Union[int, str]] = None,
) -> ConversionResult:
    name = _command_name(command)
    try:
        payload = _convert(_as_descriptor(command), application_id)
    except Exception as e:
        logger.error("Error converting command %s to Top.gg format: %s", name, e)
        return ConversionResult(name=name, error=str(e))
    return ConversionResult(name=name, payload=payload)


def convert_commands(
    commands: Iterable[CommandInput],
    application_id: Optional[Union[int, str]] = None,
) -> List[ConversionResult]:
    """One ConversionResult per input command, in order. Never raises."""
    return [convert_with_result(c, application_id) for c in commands]


__all__ = [
    "NO_DESCRIPTION",
    "OPTION_PLACEHOLDER",
    "ConversionResult",
    "convert_option",
    "convert_command",
    "convert_with_result",
    "convert_commands",
]
