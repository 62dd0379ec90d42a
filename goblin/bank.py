"""Guild banks and the members' accounts held in them."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId

from goblin.mongo import DatabaseError, Filter, SortSpec

log = logging.getLogger(__name__)

DEFAULT_BANK_NAME = "Treasury"
DEFAULT_CURRENCY = "Coins"
DEFAULT_BALANCE = 20000

BANK_COLLECTION = "banks"
ACCOUNT_COLLECTION = "bank_accounts"

_NIL_ID_HEX = "0" * 24

_db: Any = None


class BankError(Exception):
    """Base class for banking failures."""

    default_message = "bank error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class InsufficientFundsError(BankError):
    """A withdrawal asked for more than the account holds."""

    default_message = "insufficient funds in account for withdrawl"


_UNABLE_TO_SAVE_ACCOUNT = "unable to save bank account to the database"
_UNABLE_TO_SAVE_BANK = "unable to save bank to the database"


def set_db(db: Any) -> None:
    """Set the document store used by the banking system."""
    global _db
    _db = db


def _store() -> Any:
    if _db is None:
        raise BankError("no database has been set for the banking system")
    return _db


def _id_hex(doc_id: Optional[ObjectId]) -> str:
    return str(doc_id) if doc_id is not None else _NIL_ID_HEX


@dataclass
class Bank:
    """The repository of all accounts for one guild."""

    guild_id: str
    name: str = DEFAULT_BANK_NAME
    currency: str = DEFAULT_CURRENCY
    default_balance: int = DEFAULT_BALANCE
    id: Optional[ObjectId] = None

    def _to_document(self) -> dict[str, Any]:
        return {
            "guild_id": self.guild_id,
            "bank_name": self.name,
            "currency": self.currency,
            "default_balance": self.default_balance,
        }

    @classmethod
    def _from_document(cls, doc: Mapping[str, Any]) -> "Bank":
        return cls(
            guild_id=str(doc.get("guild_id", "")),
            name=str(doc.get("bank_name", "")),
            currency=str(doc.get("currency", "")),
            default_balance=int(doc.get("default_balance", 0)),
            id=doc.get("_id"),
        )

    def _save_quietly(self) -> None:
        try:
            _write_bank(self)
        except BankError as err:
            log.error("%s: %s", err, self.guild_id)

    def set_default_balance(self, balance: int) -> None:
        """Set the balance that new accounts start with."""
        if balance != self.default_balance:
            self.default_balance = balance
            self._save_quietly()
            log.info("set default balance for guild %s to %d", self.guild_id, balance)

    def set_name(self, name: str) -> None:
        """Set the name of the bank."""
        if name != self.name:
            self.name = name
            self._save_quietly()
            log.info("set bank name for guild %s to %s", self.guild_id, name)

    def set_currency(self, currency: str) -> None:
        """Set the name of the currency used by the bank."""
        if currency != self.currency:
            self.currency = currency
            self._save_quietly()
            log.info("set currency for guild %s to %s", self.guild_id, currency)

    def __str__(self) -> str:
        return (
            f"Bank{{Bank{{ID: {_id_hex(self.id)}, GuildID: {self.guild_id}, "
            f"Name: {self.name}, Currency: {self.currency}, "
            f"DefaultBalance: {self.default_balance}}}"
        )


@dataclass
class Account:
    """A member's account, tracking in-game currency."""

    guild_id: str
    member_id: str
    current_balance: int = 0
    monthly_balance: int = 0
    lifetime_balance: int = 0
    created_at: Optional[datetime] = field(default=None)
    id: Optional[ObjectId] = None

    def _to_document(self) -> dict[str, Any]:
        return {
            "guild_id": self.guild_id,
            "member_id": self.member_id,
            "created_at": self.created_at,
            "current_balance": self.current_balance,
            "monthly_balance": self.monthly_balance,
            "lifetime_balance": self.lifetime_balance,
        }

    @classmethod
    def _from_document(cls, doc: Mapping[str, Any]) -> "Account":
        return cls(
            guild_id=str(doc.get("guild_id", "")),
            member_id=str(doc.get("member_id", "")),
            current_balance=int(doc.get("current_balance", 0)),
            monthly_balance=int(doc.get("monthly_balance", 0)),
            lifetime_balance=int(doc.get("lifetime_balance", 0)),
            created_at=doc.get("created_at"),
            id=doc.get("_id"),
        )

    def deposit(self, amount: int) -> None:
        """Add the amount to every balance of the account and save it."""
        self.current_balance += amount
        self.monthly_balance += amount
        self.lifetime_balance += amount
        _write_account(self)
        log.info(
            "deposit %d into account of member %s in guild %s, balance %d",
            amount, self.member_id, self.guild_id, self.current_balance,
        )

    def withdraw(self, amount: int) -> None:
        """Take the amount from every balance of the account and save it.

        Raises InsufficientFundsError if the amount exceeds the current balance.
        """
        if amount > self.current_balance:
            log.warning(
                "insufficient funds for withdrawal of %d by member %s in guild %s",
                amount, self.member_id, self.guild_id,
            )
            raise InsufficientFundsError()
        self.current_balance -= amount
        self.monthly_balance -= amount
        self.lifetime_balance -= amount
        _write_account(self)
        log.info(
            "withdraw %d from account of member %s in guild %s, balance %d",
            amount, self.member_id, self.guild_id, self.current_balance,
        )

    def set_balance(self, balance: int) -> None:
        """Set the current balance, raising the monthly and lifetime balances to match if lower."""
        self.current_balance = balance
        if balance > self.lifetime_balance:
            self.lifetime_balance = balance
        if balance > self.monthly_balance:
            self.monthly_balance = balance
        _write_account(self)
        log.info(
            "set balance of member %s in guild %s to %d",
            self.member_id, self.guild_id, balance,
        )

    def __str__(self) -> str:
        return (
            f"Account{{ID: {_id_hex(self.id)}, GuildID: {self.guild_id}, "
            f"MemberID: {self.member_id}, Balance: {self.current_balance}, "
            f"MonthlyBalance: {self.monthly_balance}, "
            f"LifetimeBalance: {self.lifetime_balance}}}"
        )


def _read_bank(guild_id: str) -> Optional[Bank]:
    try:
        doc = _store().find_one(BANK_COLLECTION, {"guild_id": guild_id})
        bank = Bank._from_document(doc)
    except (DatabaseError, KeyError, TypeError, ValueError):
        log.debug("bank for guild %s not found in the database", guild_id)
        return None
    log.debug("read bank for guild %s from the database", guild_id)
    return bank


def _write_bank(bank: Bank) -> None:
    try:
        _store().update_or_insert(
            BANK_COLLECTION, {"guild_id": bank.guild_id}, bank._to_document()
        )
    except DatabaseError as err:
        raise BankError(_UNABLE_TO_SAVE_BANK) from err
    log.debug("saved bank for guild %s to the database", bank.guild_id)


def _read_account(guild_id: str, member_id: str) -> Optional[Account]:
    try:
        doc = _store().find_one(
            ACCOUNT_COLLECTION, {"guild_id": guild_id, "member_id": member_id}
        )
        account = Account._from_document(doc)
    except (DatabaseError, KeyError, TypeError, ValueError):
        log.debug("account for member %s in guild %s not found", member_id, guild_id)
        return None
    log.debug("read account for member %s in guild %s", member_id, guild_id)
    return account


def _read_accounts(
    guild_id: str, filter: Filter, sort_by: SortSpec, limit: int
) -> list[Account]:
    try:
        docs = _store().find_many(ACCOUNT_COLLECTION, filter, sort_by, limit)
        accounts = [Account._from_document(doc) for doc in docs]
    except (DatabaseError, KeyError, TypeError, ValueError):
        log.error("unable to read accounts for guild %s from the database", guild_id)
        return []
    log.debug("read %d accounts for guild %s", len(accounts), guild_id)
    return accounts


def _write_account(account: Account) -> None:
    if account.id is not None:
        filter: dict[str, Any] = {"_id": account.id}
    else:
        filter = {"guild_id": account.guild_id, "member_id": account.member_id}
    try:
        _store().update_or_insert(ACCOUNT_COLLECTION, filter, account._to_document())
    except DatabaseError as err:
        log.error("unable to save bank account %s: %s", account, err)
        raise BankError(_UNABLE_TO_SAVE_ACCOUNT) from err
    log.debug("saved bank account %s", account)


def _new_bank(guild_id: str) -> Bank:
    bank = Bank(guild_id=guild_id)
    bank._save_quietly()
    log.info("created new bank for guild %s", guild_id)
    return bank


def _new_account(guild_id: str, member_id: str) -> Account:
    bank = get_bank(guild_id)
    account = Account(
        guild_id=guild_id,
        member_id=member_id,
        current_balance=bank.default_balance,
        lifetime_balance=bank.default_balance,
        created_at=datetime.now(timezone.utc),
    )
    try:
        _write_account(account)
    except BankError as err:
        log.error("%s", err)
    log.info("created new bank account for member %s in guild %s", member_id, guild_id)
    return account


def get_bank(guild_id: str) -> Bank:
    """Return the guild's bank, creating it with default settings if it does not exist."""
    bank = _read_bank(guild_id)
    return bank if bank is not None else _new_bank(guild_id)


def get_account(guild_id: str, member_id: str) -> Account:
    """Return the member's account, opening one with the bank's default balance if needed."""
    account = _read_account(guild_id, member_id)
    return account if account is not None else _new_account(guild_id, member_id)


def get_accounts(
    guild_id: str, filter: Filter = None, sort_by: SortSpec = None, limit: int = 0
) -> list[Account]:
    """Return the accounts matching the filter, sorted and limited as asked."""
    return _read_accounts(guild_id, filter, sort_by, limit)


def reset_monthly_balances() -> None:
    """Set the monthly balance of every account in every bank to zero."""
    try:
        _store().update_many(ACCOUNT_COLLECTION, {}, {"monthly_balance": 0})
    except DatabaseError as err:
        log.error("unable to reset monthly balances for all accounts: %s", err)