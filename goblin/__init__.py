"""Guild economy core for a Discord game bot: banks, accounts, plugins and storage."""

__version__ = "0.1.0"

__all__ = ["bank", "bank_commands", "env", "memorydb", "mongo", "plugins"]