from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database

from neighbora.database import CONDOMINIUMS as COL
from neighbora.utils.documents import db_now, parse_object_id


def get(db: Database, condominium_id: Any) -> Optional[Dict[str, Any]]:
    return db[COL].find_one({"_id": parse_object_id(condominium_id, "condominium ID")})


def list_for_user(db: Database, uid: str) -> List[Dict[str, Any]]:
    cursor = db[COL].find({"isActive": True, "createdBy": uid})
    return list(cursor.sort("createdAt", DESCENDING))


def create(db: Database, data: Dict[str, Any], created_by: str) -> Dict[str, Any]:
    now = db_now()
    doc = {**data, "isActive": True, "createdBy": created_by, "createdAt": now, "updatedAt": now}
    doc["_id"] = db[COL].insert_one(doc).inserted_id
    return doc


def update(db: Database, condominium_id: str, fields: Dict[str, Any], modified_by: str) -> Optional[Dict[str, Any]]:
    changes = {**fields, "lastModifiedBy": modified_by, "updatedAt": db_now()}
    return db[COL].find_one_and_update(
        {"_id": parse_object_id(condominium_id, "condominium ID")},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )


def deactivate(db: Database, condominium_id: str, modified_by: str) -> Optional[Dict[str, Any]]:
    return update(db, condominium_id, {"isActive": False}, modified_by)
