from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database

from neighbora.database import PUBLICATIONS as COL
from neighbora.utils.documents import db_now, parse_object_id


def find(db: Database, query: Dict[str, Any], skip: int = 0, limit: int = 0) -> List[Dict[str, Any]]:
    cursor = db[COL].find(query).sort("publishDate", DESCENDING)
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def count(db: Database, query: Dict[str, Any]) -> int:
    return db[COL].count_documents(query)


def create(db: Database, doc: Dict[str, Any]) -> Dict[str, Any]:
    now = db_now()
    doc = {
        "views": 0,
        "reactions": [],
        "comments": [],
        "isVisible": True,
        "isActive": True,
        "publishDate": now,
        **doc,
        "createdAt": now,
        "updatedAt": now,
    }
    doc["_id"] = db[COL].insert_one(doc).inserted_id
    return doc


def update(db: Database, publication_id: str, fields: Dict[str, Any], modified_by: Optional[str]) -> Optional[Dict[str, Any]]:
    changes = {**fields, "lastModifiedBy": modified_by, "updatedAt": db_now()}
    return db[COL].find_one_and_update(
        {"_id": parse_object_id(publication_id, "publication ID")},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )


def record_view(db: Database, publication_id: Any) -> Optional[Dict[str, Any]]:
    """Count a read of an active publication; None when missing or soft-deleted."""
    return db[COL].find_one_and_update(
        {"_id": parse_object_id(publication_id, "publication ID"), "isActive": True},
        {"$inc": {"views": 1}},
        return_document=ReturnDocument.AFTER,
    )


def push(db: Database, publication_id: str, field: str, entry: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Append a reaction or a comment."""
    return db[COL].find_one_and_update(
        {"_id": parse_object_id(publication_id, "publication ID")},
        {"$push": {field: entry}},
        return_document=ReturnDocument.AFTER,
    )
