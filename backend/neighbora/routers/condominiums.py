# neighbora/routers/condominiums.py
import logging

from fastapi import APIRouter, Depends, Request, status
from pymongo.database import Database

from neighbora.core.auth import get_principal
from neighbora.core.errors import NotFound
from neighbora.core.security import get_admin_gate, require_admin
from neighbora.database import get_db, store_errors
from neighbora.repositories import condominiums as condominiums_repo
from neighbora.repositories import properties as properties_repo
from neighbora.schemas.common import ok
from neighbora.schemas.condominium import CondominiumCreate, CondominiumUpdate
from neighbora.schemas.principal import Principal
from neighbora.utils.documents import serialize

logger = logging.getLogger("neighbora.condominiums")

router = APIRouter(prefix="/admin/condominiums", tags=["Admin: Condominiums"])


@router.get("/verify-admin")
def verify_admin(request: Request, principal: Principal = Depends(get_principal)):
    grant = get_admin_gate(request).resolve(principal)
    return ok(isAdmin=grant is not None, role=grant.role if grant else "user")


@router.get("/user/current")
def current_user_condominium(db: Database = Depends(get_db), principal: Principal = Depends(get_principal)):
    """The caller's property (as owner or resident) and the condominium it belongs to."""
    with store_errors("Error fetching condominium and property"):
        prop = properties_repo.find_for_user(db, principal.uid)
        if not prop:
            raise NotFound("No property found for this user")
        condominium = condominiums_repo.get(db, prop["condominiumId"])
    if not condominium:
        raise NotFound("Condominium not found")
    return ok({"condominium": serialize(condominium), "property": serialize(prop)})


@router.get("")
def list_condominiums(db: Database = Depends(get_db), principal: Principal = Depends(get_principal)):
    with store_errors("Error fetching condominiums"):
        items = [serialize(c) for c in condominiums_repo.list_for_user(db, principal.uid)]
    return ok(items)


@router.get("/{condominium_id}")
def get_condominium(condominium_id: str, db: Database = Depends(get_db), _: Principal = Depends(get_principal)):
    with store_errors("Error fetching condominium"):
        condominium = condominiums_repo.get(db, condominium_id)
    if not condominium:
        raise NotFound("Condominium not found")
    return ok(serialize(condominium))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_condominium(
    body: CondominiumCreate,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    with store_errors("Error creating condominium"):
        condominium = condominiums_repo.create(db, body.model_dump(), principal.uid)
    logger.info("Condominium created: %s by %s", condominium["_id"], principal.uid)
    return ok(serialize(condominium), message="Condominium created successfully")


@router.put("/{condominium_id}")
def update_condominium(
    condominium_id: str,
    body: CondominiumUpdate,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    with store_errors("Error updating condominium"):
        condominium = condominiums_repo.update(db, condominium_id, body.model_dump(exclude_unset=True), principal.uid)
    if not condominium:
        raise NotFound("Condominium not found")
    return ok(serialize(condominium), message="Condominium updated successfully")


@router.delete("/{condominium_id}")
def delete_condominium(
    condominium_id: str,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    with store_errors("Error deleting condominium"):
        condominium = condominiums_repo.deactivate(db, condominium_id, principal.uid)
    if not condominium:
        raise NotFound("Condominium not found")
    logger.info("Condominium deactivated: %s", condominium_id)
    return ok(message="Condominium deleted successfully")
