"""Plugins that add slash commands to the bot, and the registry that holds them."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, ClassVar, Optional

Handler = Callable[[Any], None]

NO_PERMISSION_MESSAGE = "You do not have permission to use this command."


class OptionType(IntEnum):
    """Kinds of option a slash command can take."""

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


@dataclass(frozen=True)
class CommandOption:
    """An option, or sub-command, of a slash command."""

    name: str
    description: str
    type: OptionType
    required: bool = False
    options: tuple["CommandOption", ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the option as a command registration payload."""
        payload: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "type": int(self.type),
        }
        if self.required:
            payload["required"] = True
        if self.options:
            payload["options"] = [option.to_dict() for option in self.options]
        return payload


@dataclass(frozen=True)
class Command:
    """A slash command offered by a plugin."""

    name: str
    description: str
    options: tuple[CommandOption, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the command as a command registration payload."""
        payload: dict[str, Any] = {"name": self.name, "description": self.description}
        if self.options:
            payload["options"] = [option.to_dict() for option in self.options]
        return payload


HELP_COMMANDS: tuple[Command, ...] = (
    Command("help", "Provides a description of commands for this server."),
    Command("adminhelp", "Provides a description of admin commands for this server."),
    Command("version", "Returns the version of heist running on the server."),
)


def _help_lines(name: str, commands: tuple[Command, ...]) -> list[str]:
    lines = sorted(
        f"- **/{command.name} {option.name}**:  {option.description}\n"
        for command in commands
        for option in command.options
    )
    return [f"**{name.title()}**\n", *lines]


@dataclass
class Plugin:
    """A game or service registered to run on the bot.

    Subclasses set the name, their commands and their handlers as class attributes.
    """

    name: ClassVar[str] = ""
    admin_commands: ClassVar[tuple[Command, ...]] = ()
    member_commands: ClassVar[tuple[Command, ...]] = ()
    command_handlers: ClassVar[Mapping[str, Handler]] = {}
    component_handlers: ClassVar[Mapping[str, Handler]] = {}

    bot: Any = field(default=None, repr=False)
    db: Any = field(default=None, repr=False)

    def initialize(self, bot: Any, db: Any) -> None:
        """Keep the bot and the database the plugin works with."""
        self.bot = bot
        self.db = db

    def get_commands(self) -> list[Command]:
        """Return the admin commands followed by the member commands."""
        return [*self.admin_commands, *self.member_commands]

    def get_command_handlers(self) -> dict[str, Handler]:
        """Return the handlers keyed by command name."""
        return dict(self.command_handlers)

    def get_component_handlers(self) -> dict[str, Handler]:
        """Return the handlers keyed by component ID."""
        return dict(self.component_handlers)

    def get_help(self) -> list[str]:
        """Return a title line and one sorted line per member sub-command."""
        return _help_lines(self.name, self.member_commands)

    def get_admin_help(self) -> list[str]:
        """Return a title line and one sorted line per admin sub-command."""
        return _help_lines(self.name, self.admin_commands)


_plugins: list[Plugin] = []
_lock = threading.Lock()


def register_plugin(plugin: Plugin) -> None:
    """Add a plugin to those run by the bot."""
    with _lock:
        _plugins.append(plugin)


def list_plugins() -> list[Plugin]:
    """Return the registered plugins in the order they were registered."""
    with _lock:
        return list(_plugins)


def get_help() -> str:
    """Return the member help of every registered plugin."""
    return "".join(line for plugin in list_plugins() for line in plugin.get_help())


def get_admin_help() -> str:
    """Return the admin help of every registered plugin."""
    return "".join(line for plugin in list_plugins() for line in plugin.get_admin_help())


def version_message(bot_name: str, version: str, revision: Optional[str]) -> str:
    """Return the reply to the version command."""
    return f"You are running {bot_name} version {version}-{revision or ''}."