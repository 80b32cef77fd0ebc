"""
neighbora/schemas/principal.py
Roles and the request-scoped Principal model.
"""
from typing import Literal, Optional
from pydantic import BaseModel, Field

Role = Literal["user", "admin", "superadmin"]
AdminRole = Literal["admin", "superadmin"]


class Principal(BaseModel):
    uid: str = Field(..., description="Firebase UID")
    role: Role = Field("user", description="user | admin | superadmin")
    email: Optional[str] = Field(None, description="Email (if present)")
    name: Optional[str] = Field(None, description="Display name (if present)")

    @property
    def is_admin(self) -> bool:
        return self.role in ("admin", "superadmin")


class InsecureDevPrincipal(Principal):
    """
    Built from a token payload that was NOT verified.
    Only produced when ALLOW_INSECURE_DEV_AUTH is on outside production.
    """
    insecure: Literal[True] = True
