"""
neighbora/schemas/property.py - Pydantic models for properties (units) and their residents.
"""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field

PropertyType = Literal["apartment", "house", "commercial", "storage", "parking"]
Relationship = Literal["owner", "tenant", "family", "other"]


class Owner(BaseModel):
    firebaseUid: Optional[str] = None
    name:        Optional[str] = None
    email:       Optional[EmailStr] = None
    phone:       Optional[str] = None
    taxId:       Optional[str] = None
    startDate:   Optional[datetime] = None


class FinancialSettings(BaseModel):
    commonExpensePercentage: float = Field(1, ge=0, le=100, description="Share of the condominium total")
    isExempt: bool = False
    notes:    Optional[str] = None


class ResidentCreate(BaseModel):
    name:         str = Field(..., min_length=1)
    email:        EmailStr
    relationship: Relationship
    phone:        Optional[str] = None
    firebaseUid:  Optional[str] = None


class ResidentUpdate(BaseModel):
    name:         Optional[str] = Field(None, min_length=1)
    phone:        Optional[str] = None
    relationship: Optional[Relationship] = None
    isActive:     Optional[bool] = None


class PropertyCreate(BaseModel):
    number:       str = Field(..., min_length=1, description="Unit number")
    floor:        Optional[int] = None
    block:        Optional[str] = None
    type:         PropertyType = "apartment"
    squareMeters: Optional[float] = Field(None, ge=0)
    bedrooms:     Optional[int] = Field(None, ge=0)
    bathrooms:    Optional[int] = Field(None, ge=0)
    owner:        Optional[Owner] = None
    financialSettings: FinancialSettings = Field(default_factory=FinancialSettings)


class PropertyUpdate(BaseModel):
    number:       Optional[str] = Field(None, min_length=1)
    floor:        Optional[int] = None
    block:        Optional[str] = None
    type:         Optional[PropertyType] = None
    squareMeters: Optional[float] = Field(None, ge=0)
    bedrooms:     Optional[int] = Field(None, ge=0)
    bathrooms:    Optional[int] = Field(None, ge=0)
    owner:        Optional[Owner] = None
    financialSettings: Optional[FinancialSettings] = None
