"""
neighbora/schemas/admin.py - Pydantic models for admin records (`admins` collection).
"""
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field

from neighbora.schemas.principal import AdminRole


class AdminCreate(BaseModel):
    firebaseUid: str            = Field(..., min_length=1, description="Firebase UID of the user")
    email:       EmailStr       = Field(..., description="Admin email (stored lowercase)")
    name:        Optional[str]  = Field(None, description="Display name")
    role:        AdminRole      = Field("admin", description="admin | superadmin")
    condominiumId: Optional[str] = Field(None, description="Condominium scope (null = global access)")
    permissions: List[str]      = Field(default_factory=list, description="Specific permissions")


class AdminUpdate(BaseModel):
    name:        Optional[str]       = None
    role:        Optional[AdminRole] = None
    permissions: Optional[List[str]] = None
    isActive:    Optional[bool]      = None
