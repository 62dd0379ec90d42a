import pytest
from bson import ObjectId

from goblin.memorydb import MemoryDB
from goblin.mongo import DatabaseInaccessibleError, DocumentNotFoundError


@pytest.fixture
def db():
    return MemoryDB()


def test_insert_then_find_one(db):
    db.update_or_insert("banks", {"guild_id": "12345"}, {"guild_id": "12345", "bank_name": "Treasury"})
    doc = db.find_one("banks", {"guild_id": "12345"})
    assert doc["bank_name"] == "Treasury"
    assert doc["guild_id"] == "12345"
    assert isinstance(doc["_id"], ObjectId)


def test_find_one_missing(db):
    with pytest.raises(DocumentNotFoundError):
        db.find_one("banks", {"guild_id": "12345"})


def test_upsert_keeps_filter_fields(db):
    db.update_or_insert("bank_accounts", [("guild_id", "12345"), ("member_id", "54321")], {"current_balance": 5})
    doc = db.find_one("bank_accounts", {"member_id": "54321"})
    assert doc["guild_id"] == "12345"
    assert doc["current_balance"] == 5


def test_update_existing_does_not_duplicate(db):
    flt = {"guild_id": "12345"}
    db.update_or_insert("banks", flt, {"currency": "Coins"})
    first_id = db.find_one("banks", flt)["_id"]
    db.update_or_insert("banks", flt, {"currency": "Gold", "_id": None})
    assert db.count("banks", flt) == 1
    doc = db.find_one("banks", flt)
    assert doc["currency"] == "Gold"
    assert doc["_id"] == first_id


def test_returned_documents_are_copies(db):
    db.update_or_insert("banks", {"guild_id": "1"}, {"tags": ["a"]})
    doc = db.find_one("banks", {"guild_id": "1"})
    doc["tags"].append("b")
    assert db.find_one("banks", {"guild_id": "1"})["tags"] == ["a"]


def test_find_many_sort_and_limit(db):
    ids = ["c", "a", "d", "b"]
    for member in ids:
        db.update_or_insert("bank_accounts", {"guild_id": "g", "member_id": member}, {})
    ascending = db.find_many("bank_accounts", {"guild_id": "g"}, {"member_id": 1}, 0)
    assert [d["member_id"] for d in ascending] == sorted(ids)
    descending = db.find_many("bank_accounts", {"guild_id": "g"}, [("member_id", -1)], 2)
    assert [d["member_id"] for d in descending] == sorted(ids, reverse=True)[:2]


def test_find_many_multi_key_sort(db):
    rows = [("x", 1), ("y", 5), ("x", 3), ("y", 2)]
    for number, (group, score) in enumerate(rows):
        db.update_or_insert("scores", {"n": number}, {"group": group, "score": score})
    docs = db.find_many("scores", None, [("group", 1), ("score", -1)], 0)
    assert [(d["group"], d["score"]) for d in docs] == [("x", 3), ("x", 1), ("y", 5), ("y", 2)]


def test_find_many_filters(db):
    db.update_or_insert("bank_accounts", {"guild_id": "1", "member_id": "a"}, {})
    db.update_or_insert("bank_accounts", {"guild_id": "2", "member_id": "b"}, {})
    docs = db.find_many("bank_accounts", {"guild_id": "2"}, None, 0)
    assert [d["member_id"] for d in docs] == ["b"]


def test_update_many_sets_every_match(db):
    members = ["a", "b", "c"]
    for member in members:
        db.update_or_insert("bank_accounts", {"member_id": member}, {"monthly_balance": 750})
    db.update_many("bank_accounts", {}, {"monthly_balance": 0})
    balances = [d["monthly_balance"] for d in db.find_many("bank_accounts", {}, None, 0)]
    assert balances == [0] * len(members)


def test_update_many_upserts_when_nothing_matches(db):
    db.update_many("bank_accounts", {"member_id": "z"}, {"monthly_balance": 0})
    assert db.find_one("bank_accounts", {"member_id": "z"})["monthly_balance"] == 0


def test_find_all_ids(db):
    db.update_or_insert("banks", {"guild_id": "1"}, {"_id": "first"})
    db.update_or_insert("banks", {"guild_id": "2"}, {"_id": "second"})
    assert db.find_all_ids("banks", {}) == ["first", "second"]


def test_delete_removes_one(db):
    members = ["a", "b"]
    for member in members:
        db.update_or_insert("bank_accounts", {"member_id": member}, {"guild_id": "g"})
    assert db.delete("bank_accounts", {"guild_id": "g"}) == 1
    assert db.count("bank_accounts", {"guild_id": "g"}) == len(members) - 1
    assert db.delete("bank_accounts", {"guild_id": "missing"}) == 0


def test_delete_many_removes_all_matches(db):
    members = ["a", "b", "c"]
    for member in members:
        db.update_or_insert("bank_accounts", {"member_id": member}, {"guild_id": "g"})
    db.update_or_insert("bank_accounts", {"member_id": "other"}, {"guild_id": "h"})
    assert db.delete_many("bank_accounts", {"guild_id": "g"}) == len(members)
    assert db.find_all_ids("bank_accounts", {"guild_id": "g"}) == []
    assert db.count("bank_accounts", {}) == 1


def test_closed_store_raises(db):
    db.close()
    with pytest.raises(DatabaseInaccessibleError):
        db.count("banks", {})


def test_str(db):
    assert str(db) == "memory"