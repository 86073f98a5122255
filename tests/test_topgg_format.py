from __future__ import annotations

import pytest

from topsync.models import CommandDescriptor, CommandType, OptionType
from topsync.services.topgg_format import (
    NO_DESCRIPTION,
    OPTION_PLACEHOLDER,
    convert_command,
    convert_commands,
)


@pytest.mark.parametrize("ctype", [CommandType.USER, CommandType.MESSAGE])
def test_context_menu_commands_get_empty_description_and_keep_type(ctype):
    raw = {"id": "1", "name": "Report", "type": int(ctype), "description": "ignored"}

    out = convert_command(raw, application_id=42).to_json()

    assert out["type"] == int(ctype)
    assert out["description"] == ""
    assert "options" not in out


def test_chat_input_without_description_uses_placeholder():
    out = convert_command({"id": "1", "name": "ping", "type": 1}, application_id=42).to_json()

    assert out == {
        "id": "1",
        "application_id": "42",
        "name": "ping",
        "version": "1",
        "type": 1,
        "description": NO_DESCRIPTION,
    }


def test_chat_input_description_copied_verbatim():
    out = convert_command({"id": "1", "name": "ping", "description": "Pong!"}).to_json()
    assert out["description"] == "Pong!"


def test_entry_point_type_is_published_as_chat_input():
    raw = {"id": "9", "name": "launch", "type": int(CommandType.PRIMARY_ENTRY_POINT), "description": "Launch"}
    assert convert_command(raw, 42).type == 1


def test_options_placeholder_choices_and_subcommands():
    raw = {
        "id": "7",
        "application_id": "42",
        "name": "config",
        "description": "Configure things",
        "options": [
            {
                "name": "set",
                "description": "Set a value",
                "type": int(OptionType.SUB_COMMAND),
                "options": [
                    {
                        "name": "mode",
                        "type": int(OptionType.STRING),
                        "required": True,
                        "choices": [
                            {"name": "Fast", "value": "fast"},
                            {"name": "Slow", "value": "slow", "name_localizations": {"de": "Langsam"}},
                        ],
                    },
                    {"name": "count", "description": "", "type": int(OptionType.INTEGER)},
                ],
            },
        ],
    }

    out = convert_command(raw).to_json()

    sub = out["options"][0]
    assert sub["name"] == "set"
    assert sub["description"] == "Set a value"
    assert sub["required"] is False
    assert "choices" not in sub

    mode, count = sub["options"]
    assert mode["description"] == OPTION_PLACEHOLDER
    assert mode["required"] is True
    assert mode["choices"] == [
        {"name": "Fast", "value": "fast"},
        {"name": "Slow", "value": "slow", "name_localizations": {"de": "Langsam"}},
    ]
    assert "options" not in mode

    assert count["description"] == OPTION_PLACEHOLDER
    assert "choices" not in count
    assert "options" not in count


def test_choice_extras_with_null_values_are_kept():
    raw = {
        "name": "speed",
        "description": "Pick a speed",
        "options": [
            {
                "name": "mode",
                "description": "Mode",
                "type": int(OptionType.STRING),
                "choices": [{"name": "Fast", "value": "fast", "name_localizations": None}],
            },
        ],
    }

    out = convert_command(raw).to_json()

    assert out["options"][0]["choices"] == [{"name": "Fast", "value": "fast", "name_localizations": None}]
    assert "id" not in out


def test_empty_option_and_choice_lists_are_omitted():
    raw = {
        "id": "1",
        "name": "echo",
        "description": "Echo",
        "options": [{"name": "text", "description": "Text", "type": 3, "choices": [], "options": []}],
    }

    out = convert_command(raw).to_json()

    assert out["options"] == [{"name": "text", "description": "Text", "type": 3, "required": False}]


def test_permissions_only_when_present():
    with_perms = convert_command(CommandDescriptor(id=1, name="ban", default_member_permissions=8)).to_json()
    without = convert_command(CommandDescriptor(id=1, name="ping")).to_json()

    assert with_perms["default_member_permissions"] == "8"
    assert "default_member_permissions" not in without


def test_application_id_falls_back_to_command():
    out = convert_command({"id": "1", "application_id": "77", "name": "ping"}).to_json()
    assert out["application_id"] == "77"


def test_malformed_command_returns_none_without_raising():
    assert convert_command({"id": "1", "description": "no name"}) is None
    assert convert_command(None) is None  # type: ignore[arg-type]


def test_convert_commands_isolates_failures():
    results = convert_commands(
        [
            {"id": "1", "name": "ping"},
            {"id": "2", "name": "bad", "options": [{"name": "x"}]},  # option without type
            {"id": "3", "name": "info", "description": "Info"},
        ],
        application_id=42,
    )

    assert [r.name for r in results] == ["ping", "bad", "info"]
    assert [r.ok for r in results] == [True, False, True]
    assert results[1].error
