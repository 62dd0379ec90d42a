# goblin

The economy core of a Discord game bot. Each guild (server) gets a bank
with a name, a currency and a default opening balance. Each member of the
guild gets an account that tracks a current, a monthly and a lifetime
balance. Banks and accounts are stored in MongoDB, or in memory for tests
and experiments.

## Storage

There are two stores, and either can be used in place of the other:

- `goblin.mongo.MongoDB` talks to a MongoDB server. `MongoDB.from_env()`
  reads the connection string from `MONGODB_URI` and the database name from
  `MONGODB_DATABASE`, then pings the server. It raises
  `DatabaseInaccessibleError` if the server cannot be reached.
- `goblin.memorydb.MemoryDB` keeps documents in memory.

Both stores support the same operations: `find_one`, `find_many`,
`find_all_ids`, `update_or_insert`, `update_many`, `count`, `delete`,
`delete_many` and `close`.

- Filters are mappings of field to value, or sequences of such pairs.
- A sort is given as field to direction, where 1 means ascending and -1 means descending.
- A limit of 0 means no limit.

A lookup that finds nothing raises `goblin.mongo.DocumentNotFoundError`. All
storage errors derive from `goblin.mongo.DatabaseError`. After `MemoryDB.close()`,
every further operation raises `DatabaseInaccessibleError`.

## Banks and accounts

```python
from goblin import bank
from goblin.memorydb import MemoryDB

bank.set_db(MemoryDB())

treasury = bank.get_bank("12345")        # created on first use
treasury.set_name("Vault")
treasury.set_currency("Gold")
treasury.set_default_balance(1000)

account = bank.get_account("12345", "54321")
account.deposit(100)
account.withdraw(50)                     # raises bank.InsufficientFundsError if short
account.set_balance(500)                 # admin correction

richest = bank.get_accounts("12345", {"guild_id": "12345"}, {"current_balance": -1}, 10)

bank.reset_monthly_balances()            # start of a new month
```

A new bank starts with these settings:

- name: "Treasury"
- currency: "Coins"
- default balance: 20,000

A new account opens with the bank's default balance.

How the balances change:

- `deposit` adds the amount to all three balances.
- `withdraw` takes the amount from all three balances.
- `set_balance` sets the current balance. It raises the monthly and lifetime balances to the new value when they are lower.

Errors from the banking functions:

- `bank.BankError` is raised when an account cannot be saved.
- `bank.BankError` is also raised when no store has been set with `bank.set_db`.

## Plugins and help

Each feature of the bot is a `goblin.plugins.Plugin`. A plugin declares:

- its slash commands, as `Command` and `CommandOption`;
- their handlers;
- its member help text and its admin help text.

```python
from goblin import bank_commands, plugins

bank_commands.start()                    # registers the bank plugin

print(plugins.get_help())
print(plugins.get_admin_help())
print(plugins.version_message("Goblin", "1.0.0", "abc123"))
```

The banking commands are handled by `bank_commands.bank` (`/bank account`)
and `bank_commands.bank_admin`. The admin sub-commands are:

- `/bank-admin account`
- `/bank-admin balance`
- `/bank-admin name`
- `/bank-admin currency`
- `/bank-admin info`

Each handler takes a `bank_commands.Interaction` and records its replies as
`Response` objects in `interaction.responses`:

```python
from goblin.bank_commands import Interaction, bank_admin

interaction = Interaction(
    guild_id="12345",
    member_id="11111",
    subcommand="account",
    options={"id": "54321", "amount": 750},
    is_admin=True,
    guild_members={"54321": "Alice"},
)
bank_admin(interaction)
print(interaction.responses[-1].content)  # Account balance for Alice was set to 750
```

Members who are not admins get a permission message from `/bank-admin`.

`goblin.env.getenv_bool(key)` reads a boolean setting from the
environment. A value that is unset, empty or not recognised counts as false.

## What this package does not do

The package does not connect to Discord, and it has no command that starts a bot.

It does not register slash commands with Discord. Instead, `Command.to_dict()`
gives the registration payload for a command.

It does not work out whether a member is an admin, or who belongs to a guild.
The caller supplies these in the `Interaction`.

## Tests

The test suite uses pytest and runs against the in-memory store, so no
MongoDB server is needed.