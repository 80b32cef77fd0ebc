from typing import Optional
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Firebase ID token obtained by the client SDK (email + password sign-in)."""
    idToken: Optional[str] = Field(None, description="Firebase ID token")
