"""
neighbora/schemas/publication.py - Pydantic models for condominium publications (notice board).
"""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

Category = Literal["notice", "emergency", "maintenance", "event", "general"]
Priority = Literal["low", "medium", "high", "urgent"]
ReactionType = Literal["like", "important", "useful"]


class Attachment(BaseModel):
    type: Literal["image", "document", "video"]
    url:  str
    name: str = Field(..., min_length=1)
    size: int = Field(..., ge=0, description="bytes")


class PublicationCreate(BaseModel):
    condominiumId:  str
    title:          str = Field(..., min_length=1, max_length=200)
    content:        str = Field(..., min_length=1)
    category:       Category
    priority:       Priority = "medium"
    attachments:    List[Attachment] = Field(default_factory=list)
    expirationDate: Optional[datetime] = None


class PublicationUpdate(BaseModel):
    title:      Optional[str] = Field(None, min_length=1, max_length=200)
    content:    Optional[str] = Field(None, min_length=1)
    category:   Optional[Category] = None
    priority:   Optional[Priority] = None
    isVisible:  Optional[bool] = None


class ReactionCreate(BaseModel):
    type: str


class CommentCreate(BaseModel):
    content: Optional[str] = None
