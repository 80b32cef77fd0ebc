# neighbora/routers/properties.py
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from pymongo.database import Database

from neighbora.core.auth import get_principal
from neighbora.core.errors import NotFound
from neighbora.core.security import require_admin
from neighbora.database import get_db, store_errors
from neighbora.repositories import properties as properties_repo
from neighbora.repositories.properties import DUPLICATE_NUMBER
from neighbora.schemas.common import ok
from neighbora.schemas.principal import Principal
from neighbora.schemas.property import PropertyCreate, PropertyUpdate, ResidentCreate
from neighbora.utils.documents import serialize, store_dt

logger = logging.getLogger("neighbora.properties")

router = APIRouter(prefix="/admin/properties", tags=["Admin: Properties"])

_SUMMARY_KEYS = ("number", "block", "type", "bedrooms", "bathrooms", "squareMeters")


def _encode(data: Dict[str, Any]) -> Dict[str, Any]:
    owner = data.get("owner")
    if owner and owner.get("startDate"):
        data["owner"] = {**owner, "startDate": store_dt(owner["startDate"])}
    return data


@router.get("/user/current")
def current_user_properties(db: Database = Depends(get_db), principal: Principal = Depends(get_principal)):
    with store_errors("Error retrieving properties"):
        found = properties_repo.list_for_user(db, principal.uid)
    summaries = [{"id": str(p["_id"]), **{k: p.get(k) for k in _SUMMARY_KEYS}} for p in found]
    return ok({"properties": summaries})


@router.get("/condominium/{condominium_id}")
def list_properties(condominium_id: str, db: Database = Depends(get_db), _: Principal = Depends(get_principal)):
    with store_errors("Error retrieving properties"):
        items = [serialize(p) for p in properties_repo.list_by_condominium(db, condominium_id)]
    return ok(items)


@router.get("/{property_id}")
def get_property(property_id: str, db: Database = Depends(get_db), _: Principal = Depends(get_principal)):
    with store_errors("Error retrieving property"):
        prop = properties_repo.get(db, property_id)
    if not prop:
        raise NotFound("Property not found")
    return ok(serialize(prop))


@router.post("/condominium/{condominium_id}", status_code=status.HTTP_201_CREATED)
def create_property(
    condominium_id: str,
    body: PropertyCreate,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    with store_errors("Error creating property", DUPLICATE_NUMBER):
        prop = properties_repo.create(db, condominium_id, _encode(body.model_dump()), principal.uid)
    logger.info("Property %s created in condominium %s", prop["number"], condominium_id)
    return ok(serialize(prop), message="Property created successfully")


@router.put("/{property_id}")
def update_property(
    property_id: str,
    body: PropertyUpdate,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    fields = _encode(body.model_dump(exclude_unset=True))
    with store_errors("Error updating property", DUPLICATE_NUMBER):
        prop = properties_repo.update(db, property_id, fields, principal.uid)
    if not prop:
        raise NotFound("Property not found")
    return ok(serialize(prop), message="Property updated successfully")


@router.delete("/{property_id}")
def delete_property(property_id: str, db: Database = Depends(get_db), principal: Principal = Depends(require_admin)):
    with store_errors("Error deleting property"):
        prop = properties_repo.deactivate(db, property_id, principal.uid)
    if not prop:
        raise NotFound("Property not found")
    logger.info("Property deactivated: %s", property_id)
    return ok(message="Property deleted successfully")


@router.post("/{property_id}/residents", status_code=status.HTTP_201_CREATED)
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
    return ok(serialize(prop), message="Resident added successfully")
