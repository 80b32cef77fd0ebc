# neighbora/routers/health.py
from fastapi import APIRouter, Request

from neighbora.schemas.common import ok
from neighbora.utils.documents import now_utc

router = APIRouter(tags=["Health"])


@router.get("/health")
def health(request: Request):
    return ok(
        message="Neighbora API is running",
        timestamp=now_utc().isoformat(),
        environment=request.app.state.settings.app_env,
    )
