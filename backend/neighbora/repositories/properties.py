from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from neighbora.core.errors import Conflict
from neighbora.database import PROPERTIES as COL
from neighbora.utils.documents import db_now, parse_object_id

DUPLICATE_NUMBER = "Property number already exists in this condominium"


def _user_filter(uid: str) -> Dict[str, Any]:
    return {"$or": [{"owner.firebaseUid": uid}, {"residents.firebaseUid": uid}]}


def get(db: Database, property_id: Any) -> Optional[Dict[str, Any]]:
    return db[COL].find_one({"_id": parse_object_id(property_id, "property ID")})


def find_for_user(db: Database, uid: str) -> Optional[Dict[str, Any]]:
    """First active property where the user is owner or resident."""
    return db[COL].find_one({"isActive": True, **_user_filter(uid)})


def list_for_user(db: Database, uid: str) -> List[Dict[str, Any]]:
    cursor = db[COL].find({"isActive": True, **_user_filter(uid)})
    return list(cursor.sort("number", ASCENDING))


def list_by_condominium(db: Database, condominium_id: str, skip: int = 0, limit: int = 0) -> List[Dict[str, Any]]:
    cursor = db[COL].find(
        {"condominiumId": parse_object_id(condominium_id, "condominium ID"), "isActive": True}
    ).sort("number", ASCENDING)
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def create(db: Database, condominium_id: str, data: Dict[str, Any], created_by: str) -> Dict[str, Any]:
    now = db_now()
    doc = {
        **data,
        "condominiumId": parse_object_id(condominium_id, "condominium ID"),
        "residents": data.get("residents") or [],
        "isActive": True,
        "createdBy": created_by,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        doc["_id"] = db[COL].insert_one(doc).inserted_id
    except DuplicateKeyError:
        raise Conflict(DUPLICATE_NUMBER)
    return doc


def update(db: Database, property_id: str, fields: Dict[str, Any], modified_by: str) -> Optional[Dict[str, Any]]:
    changes = {**fields, "lastModifiedBy": modified_by, "updatedAt": db_now()}
    try:
        return db[COL].find_one_and_update(
            {"_id": parse_object_id(property_id, "property ID")},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        raise Conflict(DUPLICATE_NUMBER)


def deactivate(db: Database, property_id: str, modified_by: str) -> Optional[Dict[str, Any]]:
    return update(db, property_id, {"isActive": False}, modified_by)


# --------- Residents (embedded) --------- #

def push_resident(db: Database, property_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Append a new active resident; None when the property does not exist."""
    resident = {
        "firebaseUid": data.get("firebaseUid") or "",
        "name": data["name"],
        "email": data["email"],
        "phone": data.get("phone") or "",
        "relationship": data["relationship"],
        "startDate": db_now(),
        "isActive": True,
    }
    return db[COL].find_one_and_update(
        {"_id": parse_object_id(property_id, "property ID")},
        {"$push": {"residents": resident}, "$set": {"updatedAt": db_now()}},
        return_document=ReturnDocument.AFTER,
    )


def update_resident(db: Database, property_id: str, email: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Update the resident matched by email; None when no such resident."""
    changes = {f"residents.$.{key}": value for key, value in fields.items()}
    changes["updatedAt"] = db_now()
    oid = parse_object_id(property_id, "property ID")
    result = db[COL].update_one({"_id": oid, "residents.email": email}, {"$set": changes})
    if not result.matched_count:
        return None
    return db[COL].find_one({"_id": oid})


def pull_resident(db: Database, property_id: str, email: str) -> Optional[Dict[str, Any]]:
    """Remove the resident matched by email; None when no such resident."""
    return db[COL].find_one_and_update(
        {"_id": parse_object_id(property_id, "property ID"), "residents.email": email},
        {"$pull": {"residents": {"email": email}}, "$set": {"updatedAt": db_now()}},
        return_document=ReturnDocument.AFTER,
    )
