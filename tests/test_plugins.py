import pytest

from goblin import plugins
from goblin.memorydb import MemoryDB
from goblin.plugins import (
    HELP_COMMANDS,
    Command,
    CommandOption,
    OptionType,
    Plugin,
    get_admin_help,
    get_help,
    list_plugins,
    register_plugin,
    version_message,
)


def _handler(interaction):
    interaction.append("handled")


class SamplePlugin(Plugin):
    name = "bank"
    admin_commands = (
        Command(
            "bank-admin",
            "Admin commands.",
            (
                CommandOption("name", "Set the name of the bank for the server.", OptionType.SUB_COMMAND),
                CommandOption("balance", "Set the default balance for the bank for the server.", OptionType.SUB_COMMAND),
                CommandOption("info", "Get information about the banking system configuration.", OptionType.SUB_COMMAND),
            ),
        ),
    )
    member_commands = (
        Command(
            "bank",
            "Member commands.",
            (CommandOption("account", "Bank account balance for the member.", OptionType.SUB_COMMAND),),
        ),
    )
    command_handlers = {"bank": _handler}
    component_handlers = {"button": _handler}


@pytest.fixture
def empty_registry(monkeypatch):
    monkeypatch.setattr(plugins, "_plugins", [])


def test_member_help():
    assert Plugin.get_help(SamplePlugin()) == [
        "**Bank**\n",
        "- **/bank account**:  Bank account balance for the member.\n",
    ]


def test_admin_help_is_sorted_after_title():
    lines = Plugin.get_admin_help(SamplePlugin())
    assert lines[0] == "**Bank**\n"
    assert lines[1:] == sorted(lines[1:])
    assert len(lines) == 4
    assert all(line.startswith("- **/bank-admin ") for line in lines[1:])


def test_commands_admin_then_member():
    commands = Plugin.get_commands(SamplePlugin())
    assert [command.name for command in commands] == ["bank-admin", "bank"]


def test_handlers_are_copies():
    plugin = SamplePlugin()
    handlers = Plugin.get_command_handlers(plugin)
    handlers["other"] = _handler
    assert set(Plugin.get_command_handlers(plugin)) == {"bank"}
    assert set(Plugin.get_component_handlers(plugin)) == {"button"}


def test_handler_runs():
    seen = []
    Plugin.get_command_handlers(SamplePlugin())["bank"](seen)
    assert seen == ["handled"]


def test_initialize_keeps_db():
    plugin = SamplePlugin()
    db = MemoryDB()
    plugin.initialize("bot", db)
    assert plugin.db is db
    assert plugin.bot == "bot"


def test_register_and_list(empty_registry):
    first, second = SamplePlugin(), SamplePlugin()
    register_plugin(first)
    register_plugin(second)
    listed = list_plugins()
    assert listed[0] is first
    assert listed[1] is second
    assert len(listed) == 2


def test_list_is_a_copy(empty_registry):
    register_plugin(SamplePlugin())
    list_plugins().clear()
    assert len(list_plugins()) == 1


def test_get_help_joins_plugins(empty_registry):
    plugin = SamplePlugin()
    register_plugin(plugin)
    register_plugin(plugin)
    single = "".join(plugin.get_help())
    assert get_help() == single + single


def test_get_admin_help_joins_plugins(empty_registry):
    plugin = SamplePlugin()
    register_plugin(plugin)
    assert get_admin_help() == "".join(plugin.get_admin_help())


def test_help_empty_without_plugins(empty_registry):
    assert get_help() == ""
    assert get_admin_help() == ""


def test_version_message():
    assert version_message("Goblin", "dev", "test") == "You are running Goblin version dev-test."


def test_help_command_names():
    names = [Command.to_dict(command)["name"] for command in HELP_COMMANDS]
    assert names == ["help", "adminhelp", "version"]


def test_command_to_dict_round_trip():
    command = Command(
        "bank",
        "Member commands.",
        (CommandOption("account", "Bank account balance for the member.", OptionType.SUB_COMMAND),),
    )
    payload = command.to_dict()
    assert payload["name"] == "bank"
    assert payload["options"][0]["type"] == int(OptionType.SUB_COMMAND)
    assert payload["options"][0]["name"] == "account"
    assert "required" not in payload["options"][0]


def test_required_option_in_payload():
    option = CommandOption("id", "The member ID.", OptionType.STRING, required=True)
    assert option.to_dict()["required"] is True
    assert option.to_dict()["type"] == OptionType.STRING