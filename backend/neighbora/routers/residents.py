"""
# neighbora/routers/residents.py - Residents embedded in properties

Residents are not a collection of their own: each lives in `properties.residents`
and is addressed by `(propertyId, email)`.
"""
import logging
from typing import Any, Dict, List, Literal

from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database

from neighbora.core.auth import get_principal
from neighbora.core.errors import NotFound
from neighbora.core.security import require_admin
from neighbora.database import get_db, store_errors
from neighbora.repositories import properties as properties_repo
from neighbora.schemas.common import ok
from neighbora.schemas.principal import Principal
from neighbora.schemas.property import ResidentCreate, ResidentUpdate
from neighbora.utils.documents import page_params, pagination, serialize

logger = logging.getLogger("neighbora.residents")

router = APIRouter(prefix="/admin/residents", tags=["Admin: Residents"])


def _flatten(properties: List[Dict[str, Any]], only_active: bool) -> List[Dict[str, Any]]:
    residents = []
    for prop in properties:
        for resident in prop.get("residents") or []:
            if only_active and not resident.get("isActive"):
                continue
            residents.append({
                **serialize(resident),
                "propertyId": str(prop["_id"]),
                "propertyNumber": prop.get("number"),
                "propertyBlock": prop.get("block"),
                "propertyType": prop.get("type"),
            })
    return residents


def _require_property(db: Database, property_id: str) -> None:
    if not properties_repo.get(db, property_id):
        raise NotFound("Property not found")


@router.get("/condominium/{condominium_id}")
def list_residents(
    condominium_id: str,
    status_: Literal["active", "all"] = Query("active", alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_db),
    _: Principal = Depends(get_principal),
):
    """Residents flattened across the condominium's active properties; pages count properties."""
    paging = page_params(page, limit)
    with store_errors("Error retrieving residents"):
        found = properties_repo.list_by_condominium(db, condominium_id, paging["skip"], paging["limit"])
    residents = _flatten(found, only_active=status_ == "active")
    return ok({"residents": residents, "pagination": pagination(page, limit, len(residents))})


@router.get("/condominium/{condominium_id}/stats")
def resident_stats(condominium_id: str, db: Database = Depends(get_db), _: Principal = Depends(get_principal)):
    with store_errors("Error retrieving statistics"):
        found = properties_repo.list_by_condominium(db, condominium_id)

    total = active = 0
    by_relationship: Dict[str, int] = {}
    for prop in found:
        for resident in prop.get("residents") or []:
            total += 1
            if resident.get("isActive"):
                active += 1
            rel = resident.get("relationship")
            by_relationship[rel] = by_relationship.get(rel, 0) + 1

    return ok({
        "totalResidents": total,
        "activeResidents": active,
        "inactiveResidents": total - active,
        "byRelationship": by_relationship,
        "totalProperties": len(found),
    })


@router.get("/property/{property_id}")
def property_residents(property_id: str, db: Database = Depends(get_db), _: Principal = Depends(get_principal)):
    with store_errors("Error retrieving residents"):
        prop = properties_repo.get(db, property_id)
    if not prop:
        raise NotFound("Property not found")
    return ok({
        "residents": [serialize(r) for r in prop.get("residents") or []],
        "propertyNumber": prop.get("number"),
        "propertyBlock": prop.get("block"),
    })


@router.post("/property/{property_id}", status_code=status.HTTP_201_CREATED)
def add_resident(
    property_id: str,
    body: ResidentCreate,
    db: Database = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    with store_errors("Error adding resident"):
        prop = properties_repo.push_resident(db, property_id, body.model_dump())
    if not prop:
        raise NotFound("Property not found")
    logger.info("Resident added to property %s", property_id)
    return ok([serialize(r) for r in prop["residents"]], message="Resident added successfully")


@router.put("/property/{property_id}/{resident_email}")
def update_resident(
    property_id: str,
    resident_email: str,
    body: ResidentUpdate,
    db: Database = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    fields = body.model_dump(exclude_unset=True)
    with store_errors("Error updating resident"):
        prop = properties_repo.update_resident(db, property_id, resident_email, fields)
        if not prop:
            _require_property(db, property_id)
            raise NotFound("Resident not found")
    return ok([serialize(r) for r in prop["residents"]], message="Resident updated successfully")


@router.delete("/property/{property_id}/{resident_email}")
def remove_resident(
    property_id: str,
    resident_email: str,
    db: Database = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    with store_errors("Error removing resident"):
        prop = properties_repo.pull_resident(db, property_id, resident_email)
        if not prop:
            _require_property(db, property_id)
            raise NotFound("Resident not found")
    logger.info("Resident removed from property %s", property_id)
    return ok([serialize(r) for r in prop["residents"]], message="Resident removed successfully")
