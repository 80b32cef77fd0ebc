# neighbora/schemas/common.py
"""Response envelope shared by every endpoint."""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class Envelope(BaseModel):
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(extra="allow")


def ok(data: Any = None, message: Optional[str] = None, **extra: Any) -> dict:
    """`{"success": true, "data": ..., "message": ...}` with empty keys left out."""
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    body.update(extra)
    return body
