"""
# neighbora/routers/admins.py - Admin records (`admins` collection)

Records here are what the record-backed admin gate reads. Creating or
removing one also mirrors the `admin` / `superadmin` custom claims on the
Firebase user, so the claims-backed gate agrees. A failure to mirror only
logs a warning; the record is the write that counts.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from firebase_admin.exceptions import FirebaseError
from pymongo.database import Database

from neighbora.core.auth import get_principal
from neighbora.core.errors import AppError, NotFound
from neighbora.core.security import get_admin_gate, require_admin
from neighbora.database import get_db, store_errors
from neighbora.repositories import admins as admins_repo
from neighbora.schemas.admin import AdminCreate, AdminUpdate
from neighbora.schemas.common import ok
from neighbora.schemas.principal import Principal
from neighbora.utils.documents import parse_object_id, serialize

logger = logging.getLogger("neighbora.admins")

router = APIRouter(prefix="/admin/admins", tags=["Admin: Admins"])


def _mirror_claims(request: Request, uid: str, claims: Optional[Dict[str, Any]]) -> None:
    identity = getattr(request.app.state, "identity", None)
    if identity is None:
        logger.warning("Identity provider not configured; custom claims for %s not updated", uid)
        return
    try:
        identity.set_custom_claims(uid, claims)
    except (AppError, FirebaseError) as e:
        logger.warning("Could not update custom claims for %s: %s", uid, e)


def _claims_for(record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if not record.get("isActive"):
        return None
    return {"admin": True, "superadmin": record.get("role") == "superadmin"}


@router.get("/verify-admin-db")
def verify_admin_db(request: Request, principal: Principal = Depends(get_principal)):
    """Admin status from the configured source, without raising Forbidden."""
    grant = get_admin_gate(request).resolve(principal)
    if grant is None:
        return ok(isAdmin=False, role="user")
    return ok(isAdmin=True, role=grant.role, permissions=sorted(grant.permissions))


@router.get("")
def list_admins(db: Database = Depends(get_db), _: Principal = Depends(require_admin)):
    with store_errors("Error retrieving admins"):
        admins = [serialize(a) for a in admins_repo.list_active(db)]
    return ok(admins, total=len(admins))


@router.get("/{admin_id}")
def get_admin(admin_id: str, db: Database = Depends(get_db), _: Principal = Depends(require_admin)):
    with store_errors("Error retrieving admin"):
        record = admins_repo.get(db, admin_id)
    if not record:
        raise NotFound("Admin not found")
    return ok(serialize(record))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_admin(
    body: AdminCreate,
    request: Request,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    data = body.model_dump()
    if data.get("condominiumId"):
        data["condominiumId"] = parse_object_id(data["condominiumId"], "condominium ID")

    with store_errors("Error creating admin", "Admin already exists"):
        record = admins_repo.create(db, data, principal.uid)
    logger.info("Admin created: %s (%s) by %s", record["email"], record["role"], principal.uid)

    _mirror_claims(request, record["firebaseUid"], _claims_for(record))
    return ok(serialize(record), message="Admin created successfully")


@router.put("/{admin_id}")
def update_admin(
    admin_id: str,
    body: AdminUpdate,
    request: Request,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    fields = body.model_dump(exclude_unset=True)
    with store_errors("Error updating admin"):
        record = admins_repo.update(db, admin_id, fields, principal.uid)
    if not record:
        raise NotFound("Admin not found")
    logger.info("Admin updated: %s", admin_id)

    _mirror_claims(request, record["firebaseUid"], _claims_for(record))
    return ok(serialize(record), message="Admin updated successfully")


@router.delete("/{admin_id}")
def delete_admin(
    admin_id: str,
    request: Request,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    with store_errors("Error deleting admin"):
        record = admins_repo.deactivate(db, admin_id, principal.uid)
    if not record:
        raise NotFound("Admin not found")
    logger.info("Admin deactivated: %s", record.get("email"))

    _mirror_claims(request, record["firebaseUid"], None)
    return ok(message="Admin deleted successfully")
