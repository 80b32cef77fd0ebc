"""
Common-expense documents.

Every write that touches `payments` or `amounts.total` goes through
`compare_and_set`, which only applies when the stored `version` is still the one
that was read. The caller retries on a lost race.
"""
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from neighbora.core.errors import Conflict
from neighbora.database import COMMON_EXPENSES as COL
from neighbora.utils.documents import db_now, parse_object_id


def get(db: Database, expense_id: Any) -> Optional[Dict[str, Any]]:
    return db[COL].find_one({"_id": parse_object_id(expense_id, "expense ID")})


def find(db: Database, query: Dict[str, Any], skip: int = 0, limit: int = 0) -> List[Dict[str, Any]]:
    cursor = db[COL].find(query).sort("period", DESCENDING)
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def count(db: Database, query: Dict[str, Any]) -> int:
    return db[COL].count_documents(query)


def create(db: Database, doc: Dict[str, Any]) -> Dict[str, Any]:
    now = db_now()
    doc = {**doc, "payments": [], "status": "pending", "version": 0, "createdAt": now, "updatedAt": now}
    try:
        doc["_id"] = db[COL].insert_one(doc).inserted_id
    except DuplicateKeyError:
        raise Conflict("A common expense already exists for this property and period")
    return doc


def compare_and_set(db: Database, current: Dict[str, Any], update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Apply `update` only if the document still has the version it was read with.
    Returns the updated document, or None when another writer got there first.
    """
    version_filter: Dict[str, Any]
    if "version" in current:
        version_filter = {"version": current["version"]}
    else:
        version_filter = {"version": {"$exists": False}}

    update = dict(update)
    update.setdefault("$set", {})["updatedAt"] = db_now()
    update["$inc"] = {"version": 1}
    return db[COL].find_one_and_update(
        {"_id": current["_id"], **version_filter},
        update,
        return_document=ReturnDocument.AFTER,
    )


def delete(db: Database, expense_id: str) -> Optional[Dict[str, Any]]:
    return db[COL].find_one_and_delete({"_id": parse_object_id(expense_id, "expense ID")})
