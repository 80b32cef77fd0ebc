"""
neighbora/schemas/condominium.py - Pydantic models for condominiums.
"""
from typing import Literal, Optional
from pydantic import BaseModel, Field

CondominiumType = Literal["residential", "commercial", "mixed"]


class CondominiumSettings(BaseModel):
    billingCutoffDay: int = Field(1, ge=1, le=28, description="Day of month for billing cutoff")
    paymentDueDays:   int = Field(10, ge=1, description="Days after cutoff for payment")
    currency:         str = "CLP"
    timezone:         str = "America/Santiago"
    language:         str = "es"


class Contact(BaseModel):
    phone:   Optional[str] = None
    email:   Optional[str] = None
    website: Optional[str] = None


class Management(BaseModel):
    companyName:    Optional[str] = None
    companyTaxId:   Optional[str] = None
    companyContact: Optional[str] = None


class CondominiumCreate(BaseModel):
    name:       str = Field(..., min_length=1)
    address:    str = Field(..., min_length=1)
    city:       str = Field(..., min_length=1)
    region:     str = Field(..., min_length=1)
    country:    str = "Chile"
    totalUnits: int = Field(..., ge=1)
    type:       CondominiumType = "residential"
    settings:   CondominiumSettings = Field(default_factory=CondominiumSettings)
    contact:    Contact = Field(default_factory=Contact)
    management: Management = Field(default_factory=Management)


class CondominiumUpdate(BaseModel):
    """All fields optional; nested objects are replaced as a whole."""
    name:       Optional[str] = Field(None, min_length=1)
    address:    Optional[str] = None
    city:       Optional[str] = None
    region:     Optional[str] = None
    country:    Optional[str] = None
    totalUnits: Optional[int] = Field(None, ge=1)
    type:       Optional[CondominiumType] = None
    settings:   Optional[CondominiumSettings] = None
    contact:    Optional[Contact] = None
    management: Optional[Management] = None
