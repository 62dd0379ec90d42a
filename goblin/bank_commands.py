"""Slash commands for the banking system, and the plugin that offers them."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

from goblin import bank as banking
from goblin.plugins import (
    NO_PERMISSION_MESSAGE,
    Command,
    CommandOption,
    Handler,
    OptionType,
    Plugin,
    register_plugin,
)

log = logging.getLogger(__name__)

PLUGIN_NAME = "bank"


@dataclass(frozen=True)
class Response:
    """A reply sent back for an interaction."""

    content: str
    ephemeral: bool = False


@dataclass
class Interaction:
    """A slash command invoked by a guild member.

    ``options`` holds the sub-command's option values by name, and
    ``guild_members`` maps the ID of each member of the guild to their name.
    Replies are collected in ``responses``.
    """

    guild_id: str
    member_id: str
    subcommand: str
    command: str = ""
    options: Mapping[str, Any] = field(default_factory=dict)
    is_admin: bool = False
    guild_members: Mapping[str, str] = field(default_factory=dict)
    responses: list[Response] = field(default_factory=list)

    def respond(self, content: str, ephemeral: bool = False) -> None:
        """Send a reply visible to the whole channel, or only to the member."""
        self.responses.append(Response(content, ephemeral))

    def option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)

    def string_option(self, name: str) -> str:
        return str(self.option(name, "")).strip()


def _amount(value: int) -> str:
    return f"{value:,}"


def _parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _account(interaction: Interaction) -> None:
    account = banking.get_account(interaction.guild_id, interaction.member_id)
    interaction.respond(
        f"**Current Balance**: {_amount(account.current_balance)}\n"
        f"**Monthly Balance**: {_amount(account.monthly_balance)}\n"
        f"**Lifetime Balance**: {_amount(account.lifetime_balance)}\n"
        f"**Created**: {account.created_at}\n",
        ephemeral=True,
    )


def _set_account_balance(interaction: Interaction) -> None:
    member_id = interaction.string_option("id")
    amount = _parse_int(interaction.option("amount", 0))
    if member_id not in interaction.guild_members:
        interaction.respond(
            f"An account with ID `{member_id}` is not a member of this server",
            ephemeral=True,
        )
        return
    if amount is None:
        interaction.respond(
            f"`{interaction.option('amount')}` is not a valid amount", ephemeral=True
        )
        return

    name = interaction.guild_members[member_id]
    account = banking.get_account(interaction.guild_id, member_id)
    account.set_balance(amount)
    log.debug(
        "/bank-admin account: guild %s, member %s (%s), balance %d",
        interaction.guild_id, member_id, name, amount,
    )
    interaction.respond(
        f"Account balance for {name} was set to {_amount(account.current_balance)}"
    )


def _set_default_balance(interaction: Interaction) -> None:
    balance = _parse_int(interaction.option("value", ""))
    if balance is None:
        interaction.respond(
            f"`{interaction.option('value')}` is not a valid balance", ephemeral=True
        )
        return
    bank = banking.get_bank(interaction.guild_id)
    bank.set_default_balance(balance)
    log.debug("/bank-admin balance: guild %s, balance %d", interaction.guild_id, balance)
    interaction.respond(
        f"Bank default balance was set to {_amount(bank.default_balance)}"
    )


def _set_bank_name(interaction: Interaction) -> None:
    name = interaction.string_option("value")
    bank = banking.get_bank(interaction.guild_id)
    bank.set_name(name)
    log.debug("/bank-admin name: guild %s, name %s", interaction.guild_id, name)
    interaction.respond(f"Bank name was set to {bank.name}")


def _set_bank_currency(interaction: Interaction) -> None:
    currency = interaction.string_option("value")
    bank = banking.get_bank(interaction.guild_id)
    bank.set_currency(currency)
    log.debug("/bank-admin currency: guild %s, currency %s", interaction.guild_id, currency)
    interaction.respond(f"Bank currency was set to {bank.currency}")


def _get_bank_info(interaction: Interaction) -> None:
    bank = banking.get_bank(interaction.guild_id)
    interaction.respond(
        f"**Bank Name**: {bank.name}\n"
        f"**Currency**: {bank.currency}\n"
        f"**Default Balance**: {_amount(bank.default_balance)}\n",
        ephemeral=True,
    )


_ADMIN_SUBCOMMANDS: Mapping[str, Handler] = {
    "balance": _set_default_balance,
    "name": _set_bank_name,
    "currency": _set_bank_currency,
    "account": _set_account_balance,
    "info": _get_bank_info,
}

_MEMBER_SUBCOMMANDS: Mapping[str, Handler] = {
    "account": _account,
}


def bank_admin(interaction: Interaction) -> None:
    """Route a /bank-admin command to its handler; only admins may use it."""
    if not interaction.is_admin:
        interaction.respond(NO_PERMISSION_MESSAGE, ephemeral=True)
        return
    handler = _ADMIN_SUBCOMMANDS.get(interaction.subcommand)
    if handler is None:
        log.warning("unknown bank-admin command %s", interaction.subcommand)
        return
    handler(interaction)


def bank(interaction: Interaction) -> None:
    """Route a /bank command to its handler."""
    handler = _MEMBER_SUBCOMMANDS.get(interaction.subcommand)
    if handler is None:
        log.warning("unknown bank command %s", interaction.subcommand)
        return
    handler(interaction)


ADMIN_COMMANDS: tuple[Command, ...] = (
    Command(
        "bank-admin",
        "Commands used to interact with the economy for this server.",
        (
            CommandOption(
                "account",
                "Sets the amount of credits for a given member.",
                OptionType.SUB_COMMAND,
                options=(
                    CommandOption("id", "The member ID.", OptionType.STRING, True),
                    CommandOption(
                        "amount", "The amount to set the account to.", OptionType.INTEGER, True
                    ),
                ),
            ),
            CommandOption(
                "balance",
                "Set the default balance for the bank for the server.",
                OptionType.SUB_COMMAND,
                options=(
                    CommandOption(
                        "value",
                        "The the default balance for the bank for the server.",
                        OptionType.STRING,
                        True,
                    ),
                ),
            ),
            CommandOption(
                "name",
                "Set the name of the bank for the server.",
                OptionType.SUB_COMMAND,
                options=(
                    CommandOption(
                        "value", "The the name of the bank for the server.", OptionType.STRING, True
                    ),
                ),
            ),
            CommandOption(
                "currency",
                "Set the currency for the server.",
                OptionType.SUB_COMMAND,
                options=(
                    CommandOption(
                        "value", "The currency to set for the server.", OptionType.STRING, True
                    ),
                ),
            ),
            CommandOption(
                "info",
                "Get information about the banking system configuration.",
                OptionType.SUB_COMMAND,
            ),
        ),
    ),
)

MEMBER_COMMANDS: tuple[Command, ...] = (
    Command(
        "bank",
        "Commands used to interact with the economy for this server.",
        (
            CommandOption(
                "account", "Bank account balance for the member.", OptionType.SUB_COMMAND
            ),
        ),
    ),
)

COMMAND_HANDLERS: Mapping[str, Handler] = {
    "bank-admin": bank_admin,
    "bank": bank,
}


class BankPlugin(Plugin):
    """The plugin for the banking system."""

    name: ClassVar[str] = PLUGIN_NAME
    admin_commands: ClassVar[tuple[Command, ...]] = ADMIN_COMMANDS
    member_commands: ClassVar[tuple[Command, ...]] = MEMBER_COMMANDS
    command_handlers: ClassVar[Mapping[str, Handler]] = COMMAND_HANDLERS
    component_handlers: ClassVar[Mapping[str, Handler]] = COMMAND_HANDLERS

    def initialize(self, bot: Any, db: Any) -> None:
        """Keep the bot and make the database the one the banking system uses."""
        super().initialize(bot, db)
        banking.set_db(db)

    def get_commands(self) -> list[Command]:
        """Return the admin commands followed by the member commands."""
        return super().get_commands()

    def get_command_handlers(self) -> dict[str, Handler]:
        """Return the handlers keyed by command name."""
        return super().get_command_handlers()

    def get_component_handlers(self) -> dict[str, Handler]:
        """Return the handlers keyed by component ID."""
        return super().get_component_handlers()

    def get_help(self) -> list[str]:
        """Return the help for the member commands."""
        return super().get_help()

    def get_admin_help(self) -> list[str]:
        """Return the help for the admin commands."""
        return super().get_admin_help()


plugin: Optional[BankPlugin] = None


def start() -> BankPlugin:
    """Create the banking plugin and register it with the bot."""
    global plugin
    plugin = BankPlugin()
    register_plugin(plugin)
    return plugin