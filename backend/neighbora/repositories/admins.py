from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from neighbora.core.errors import Conflict
from neighbora.database import ADMINS as COL
from neighbora.utils.documents import db_now, parse_object_id


def find_active_by_uid(db: Database, uid: str) -> Optional[Dict[str, Any]]:
    return db[COL].find_one({"firebaseUid": uid, "isActive": True})


def find_by_uid(db: Database, uid: str) -> Optional[Dict[str, Any]]:
    return db[COL].find_one({"firebaseUid": uid})


def get(db: Database, admin_id: str) -> Optional[Dict[str, Any]]:
    return db[COL].find_one({"_id": parse_object_id(admin_id)})


def list_active(db: Database) -> List[Dict[str, Any]]:
    # createdBy / lastModifiedBy are internal
    cursor = db[COL].find({"isActive": True}, {"createdBy": 0, "lastModifiedBy": 0})
    return list(cursor.sort("createdAt", DESCENDING))


def create(db: Database, data: Dict[str, Any], created_by: Optional[str]) -> Dict[str, Any]:
    now = db_now()
    doc = {
        "firebaseUid": data["firebaseUid"],
        "email": data["email"].lower(),
        "name": data.get("name"),
        "role": data.get("role") or "admin",
        "condominiumId": data.get("condominiumId"),
        "permissions": sorted(set(data.get("permissions") or [])),
        "isActive": True,
        "createdBy": created_by,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        result = db[COL].insert_one(doc)
    except DuplicateKeyError:
        raise Conflict("Admin already exists")
    doc["_id"] = result.inserted_id
    return doc


def update(db: Database, admin_id: str, fields: Dict[str, Any], modified_by: Optional[str]) -> Optional[Dict[str, Any]]:
    changes = dict(fields)
    if "permissions" in changes and changes["permissions"] is not None:
        changes["permissions"] = sorted(set(changes["permissions"]))
    changes.update({"lastModifiedBy": modified_by, "updatedAt": db_now()})
    return db[COL].find_one_and_update(
        {"_id": parse_object_id(admin_id)},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )


def deactivate(db: Database, admin_id: str, modified_by: Optional[str]) -> Optional[Dict[str, Any]]:
    """Soft delete: the record stays, but the admin gate treats it as absent."""
    return update(db, admin_id, {"isActive": False}, modified_by)


def deactivate_by_uid(db: Database, uid: str, modified_by: Optional[str] = None) -> Optional[Dict[str, Any]]:
    return db[COL].find_one_and_update(
        {"firebaseUid": uid},
        {"$set": {"isActive": False, "lastModifiedBy": modified_by, "updatedAt": db_now()}},
        return_document=ReturnDocument.AFTER,
    )
