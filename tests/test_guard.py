from __future__ import annotations

from bson import ObjectId

import pytest

from errors import ForbiddenError, InvalidIdentifierError, NotFoundError
from guard import ensure_owner, load_owned, parse_object_id


def test_parse_canonical_object_id() -> None:
    oid = ObjectId()
    assert parse_object_id(str(oid)) == oid


@pytest.mark.parametrize("value", [None, "", "123", "x" * 24, "abcdefghijkl", 42, str(ObjectId()) + "0"])
def test_parse_rejects_non_canonical(value) -> None:
    with pytest.raises(InvalidIdentifierError):
        parse_object_id(value, "vehicle")


def test_owner_must_match_exactly() -> None:
    doc = {"_id": ObjectId(), "userId": "user_1"}
    assert ensure_owner(doc, "user_1") is doc
    for caller in ("user_2", "USER_1", "user_1 ", ""):
        with pytest.raises(ForbiddenError):
            ensure_owner(doc, caller)


def test_document_without_owner_is_refused() -> None:
    with pytest.raises(ForbiddenError):
        ensure_owner({"_id": ObjectId()}, "user_1")


def test_load_owned_order(db) -> None:
    inserted = db["vehicles"].insert_one({"name": "Truck A", "userId": "user_1"}).inserted_id

    with pytest.raises(InvalidIdentifierError):
        load_owned(db["vehicles"], "bad", "user_1", "vehicle")
    with pytest.raises(NotFoundError) as missing:
        load_owned(db["vehicles"], str(ObjectId()), "user_2", "vehicle")
    assert missing.value.message == "Vehicle not found"
    with pytest.raises(ForbiddenError):
        load_owned(db["vehicles"], str(inserted), "user_2", "vehicle")
    assert load_owned(db["vehicles"], str(inserted), "user_1", "vehicle")["name"] == "Truck A"
