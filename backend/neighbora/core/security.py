"""
# `neighbora/core/security.py` - Admin gate

Role-based authorization on top of the auth gate. Endpoints use it through
`Depends(require_admin)` / `Depends(require_superadmin)`.

## How it works

- **Authentication first:** `require_admin` depends on `get_principal`, so a request
  without a valid token never reaches the admin check.
- **One authorization source per deployment:** `ADMIN_AUTH_SOURCE` picks exactly one of
  - `record` → `RecordBackedSource`: active document in the `admins` collection
    (`firebaseUid == uid`, `isActive == true`);
  - `claims` → `ClaimsBackedSource`: Firebase custom claims `admin` / `superadmin`.
  The two are never consulted together for the same decision.
- **No caching:** every request performs a fresh lookup, so a revoked admin loses
  access on the very next request.
- **Role overwrite:** on success the principal's `role` is replaced with the role held by
  the source; whatever the token carried is ignored.

| Situation                        | Result              |
|----------------------------------|---------------------|
| no principal                     | 401 UNAUTHENTICATED |
| no active grant                  | 403 FORBIDDEN       |
| grant found                      | principal with role |
"""
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Protocol

from fastapi import Depends, Request
from pymongo.database import Database

from neighbora.core.auth import get_principal
from neighbora.core.errors import Forbidden, NotFound, Unauthenticated
from neighbora.core.identity import IdentityProvider
from neighbora.repositories import admins as admins_repo
from neighbora.schemas.principal import AdminRole, Principal

logger = logging.getLogger("neighbora.security")


@dataclass(frozen=True)
class AdminGrant:
    role: AdminRole
    permissions: FrozenSet[str] = field(default_factory=frozenset)


class AdminAuthorizationSource(Protocol):
    name: str

    def lookup(self, uid: str) -> Optional[AdminGrant]: ...


class RecordBackedSource:
    """Admin role mirrored in MongoDB (`admins` collection)."""

    name = "record"

    def __init__(self, db: Database):
        self.db = db

    def lookup(self, uid: str) -> Optional[AdminGrant]:
        record = admins_repo.find_active_by_uid(self.db, uid)
        if not record:
            return None
        return AdminGrant(
            role=record.get("role", "admin"),
            permissions=frozenset(record.get("permissions") or []),
        )


class ClaimsBackedSource:
    """Admin role read from Firebase custom claims."""

    name = "claims"

    def __init__(self, identity: IdentityProvider):
        self.identity = identity

    def lookup(self, uid: str) -> Optional[AdminGrant]:
        try:
            user = self.identity.fetch_user(uid)
        except NotFound:
            return None
        claims = user.get("customClaims") or {}
        if claims.get("superadmin") is True:
            return AdminGrant(role="superadmin")
        if claims.get("admin") is True:
            return AdminGrant(role="admin")
        return None


class AdminGate:
    def __init__(self, source: AdminAuthorizationSource):
        self.source = source

    def resolve(self, principal: Principal) -> Optional[AdminGrant]:
        return self.source.lookup(principal.uid)

    def authorize(self, principal: Optional[Principal]) -> Principal:
        if principal is None:
            raise Unauthenticated()

        grant = self.resolve(principal)
        if grant is None:
            logger.info("User is not admin: %s (source=%s)", principal.uid, self.source.name)
            raise Forbidden()

        logger.info("Admin verified: %s role=%s", principal.uid, grant.role)
        return principal.model_copy(update={"role": grant.role})


def build_admin_source(kind: str, db: Database, identity: Optional[IdentityProvider]) -> AdminAuthorizationSource:
    if kind == "record":
        return RecordBackedSource(db)
    if kind == "claims":
        if identity is None:
            raise ValueError("ADMIN_AUTH_SOURCE=claims requires a configured Firebase identity provider")
        return ClaimsBackedSource(identity)
    raise ValueError(f"Unknown admin auth source: {kind!r}")


# --------- FastAPI Dependencies --------- #

def get_admin_gate(request: Request) -> AdminGate:
    return request.app.state.admin_gate


def require_admin(request: Request, principal: Principal = Depends(get_principal)) -> Principal:
    """
    Admin or superadmin only. The elevated principal replaces the one on request.state.
    """
    elevated = get_admin_gate(request).authorize(principal)
    request.state.principal = elevated
    return elevated


def require_superadmin(principal: Principal = Depends(require_admin)) -> Principal:
    if principal.role != "superadmin":
        raise Forbidden("Superadmin privilege required")
    return principal
