# neighbora/routers/publications.py
import logging
from typing import Any, Dict, Optional, get_args

from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database

from neighbora.core.auth import get_principal
from neighbora.core.errors import NotFound, ValidationFailure
from neighbora.core.security import require_admin
from neighbora.database import get_db, store_errors
from neighbora.repositories import publications as publications_repo
from neighbora.schemas.common import ok
from neighbora.schemas.principal import Principal
from neighbora.schemas.publication import (
    Category,
    CommentCreate,
    Priority,
    PublicationCreate,
    PublicationUpdate,
    ReactionCreate,
    ReactionType,
)
from neighbora.utils.documents import db_now, page_params, pagination, parse_object_id, serialize, store_dt

logger = logging.getLogger("neighbora.publications")

router = APIRouter(prefix="/admin/publications", tags=["Admin: Publications"])

REACTION_TYPES = get_args(ReactionType)


def _visible(db: Database, condominium_id: Optional[str], category: Optional[str],
             priority: Optional[str], page: int, limit: int) -> Dict[str, Any]:
    if not condominium_id:
        raise ValidationFailure("condominiumId is required")
    query: Dict[str, Any] = {
        "condominiumId": parse_object_id(condominium_id, "condominium ID"),
        "isVisible": True,
        "isActive": True,
    }
    if category:
        query["category"] = category
    if priority:
        query["priority"] = priority

    paging = page_params(page, limit)
    with store_errors("Error retrieving publications"):
        items = publications_repo.find(db, query, paging["skip"], paging["limit"])
        total = publications_repo.count(db, query)
    return ok({"publications": [serialize(p) for p in items], "pagination": pagination(page, limit, total)})


def _pushed(db: Database, publication_id: str, field: str, entry: Dict[str, Any]) -> Dict[str, Any]:
    with store_errors(f"Error adding {field}"):
        publication = publications_repo.push(db, publication_id, field, entry)
    if not publication:
        raise NotFound("Publication not found")
    return publication


@router.get("")
def list_publications(
    condominiumId: Optional[str] = Query(None),
    category: Optional[Category] = Query(None),
    priority: Optional[Priority] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_db),
    _: Principal = Depends(get_principal),
):
    return _visible(db, condominiumId, category, priority, page, limit)


@router.get("/condominium/{condominium_id}/stats")
def publication_stats(condominium_id: str, db: Database = Depends(get_db), _: Principal = Depends(require_admin)):
    query = {"condominiumId": parse_object_id(condominium_id, "condominium ID"), "isActive": True}
    with store_errors("Error retrieving statistics"):
        items = publications_repo.find(db, query)

    by_category: Dict[str, Dict[str, Any]] = {}
    for pub in items:
        bucket = by_category.setdefault(pub.get("category"), {"count": 0, "totalViews": 0, "reactions": 0})
        bucket["count"] += 1
        bucket["totalViews"] += pub.get("views", 0)
        bucket["reactions"] += len(pub.get("reactions") or [])

    return ok({
        "totalPublications": len(items),
        "totalViews": sum(p.get("views", 0) for p in items),
        "byCategory": [
            {
                "_id": category,
                "count": b["count"],
                "totalViews": b["totalViews"],
                "avgReactions": b["reactions"] / b["count"],
            }
            for category, b in sorted(by_category.items())
        ],
    })


@router.get("/condominium/{condominium_id}")
def condominium_publications(
    condominium_id: str,
    category: Optional[Category] = Query(None),
    priority: Optional[Priority] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_db),
    _: Principal = Depends(get_principal),
):
    return _visible(db, condominium_id, category, priority, page, limit)


@router.get("/{publication_id}")
def get_publication(publication_id: str, db: Database = Depends(get_db), _: Principal = Depends(get_principal)):
    with store_errors("Error retrieving publication"):
        publication = publications_repo.record_view(db, publication_id)
    if not publication:
        raise NotFound("Publication not found")
    return ok(serialize(publication))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_publication(
    body: PublicationCreate,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    data = body.model_dump()
    doc = {
        **data,
        "condominiumId": parse_object_id(data["condominiumId"], "condominium ID"),
        "expirationDate": store_dt(data.get("expirationDate")),
        "author": {"firebaseUid": principal.uid, "name": principal.name or "Admin", "role": principal.role},
        "createdBy": principal.uid,
    }
    with store_errors("Error creating publication"):
        publication = publications_repo.create(db, doc)
    logger.info("Publication created: %s", publication["_id"])
    return ok(serialize(publication), message="Publication created successfully")


@router.put("/{publication_id}")
def update_publication(
    publication_id: str,
    body: PublicationUpdate,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    with store_errors("Error updating publication"):
        publication = publications_repo.update(db, publication_id, body.model_dump(exclude_unset=True), principal.uid)
    if not publication:
        raise NotFound("Publication not found")
    return ok(serialize(publication), message="Publication updated successfully")


@router.delete("/{publication_id}")
def delete_publication(
    publication_id: str,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    with store_errors("Error deleting publication"):
        publication = publications_repo.update(db, publication_id, {"isActive": False}, principal.uid)
    if not publication:
        raise NotFound("Publication not found")
    logger.info("Publication deactivated: %s", publication_id)
    return ok(serialize(publication), message="Publication deleted successfully")


@router.post("/{publication_id}/reaction")
def add_reaction(
    publication_id: str,
    body: ReactionCreate,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    if body.type not in REACTION_TYPES:
        raise ValidationFailure("Invalid reaction type")
    entry = {"firebaseUid": principal.uid, "type": body.type, "date": db_now()}
    publication = _pushed(db, publication_id, "reactions", entry)
    return ok(serialize(publication), message="Reaction added successfully")


@router.post("/{publication_id}/comment")
def add_comment(
    publication_id: str,
    body: CommentCreate,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    if not body.content:
        raise ValidationFailure("Comment content is required")
    entry = {
        "firebaseUid": principal.uid,
        "userName": principal.name or "Usuario",
        "content": body.content,
        "date": db_now(),
        "isEdited": False,
    }
    publication = _pushed(db, publication_id, "comments", entry)
    return ok(serialize(publication), message="Comment added successfully")
