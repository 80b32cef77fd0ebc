"""
# `neighbora/main.py` - Application entry point

## Overview
`create_app(settings)` builds the FastAPI application: CORS, envelope error
handlers, the MongoDB database, the Firebase identity provider and the two
gates, then mounts every router under `/api`.

Nothing is connected at import time. Run with:

    uvicorn neighbora.main:create_app --factory
    python -m neighbora.main

---

## Routers
**Public:**
- `/health`

**Auth (`/api/auth`):** login, verify, me

**Admin (`/api/admin/...`):**
- `/admins`
- `/condominiums`
- `/properties`
- `/residents`
- `/common-expenses`
- `/publications`

Read endpoints need a valid token; writes additionally pass the admin gate
(`require_admin`).

---

## Gates
- `app.state.auth_gate`: `AuthGate` around the identity provider. Without
  Firebase credentials every request is refused, unless
  `ALLOW_INSECURE_DEV_AUTH` is on (never in production).
- `app.state.admin_gate`: `AdminGate` over the source picked by
  `ADMIN_AUTH_SOURCE` (`record` or `claims`).
"""
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database

from neighbora.config import Settings, build_firebase_app, get_settings
from neighbora.core.auth import AuthGate
from neighbora.core.errors import register_exception_handlers
from neighbora.core.identity import FirebaseIdentityProvider, IdentityProvider
from neighbora.core.security import AdminGate, build_admin_source
from neighbora.database import connect, ensure_indexes
from neighbora.routers import (
    admins,
    auth,
    common_expenses,
    condominiums,
    health,
    properties,
    publications,
    residents,
)

logger = logging.getLogger("neighbora")


def create_app(
    settings: Optional[Settings] = None,
    *,
    db: Optional[Database] = None,
    identity: Optional[IdentityProvider] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Neighbora API",
        description="Condominium management backend: condominiums, properties, residents, "
                    "common expenses and publications.",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, show_traces=settings.debug and not settings.is_production)

    owns_db = db is None
    if owns_db:
        db = connect(settings)
    ensure_indexes(db)

    if identity is None:
        firebase_app = build_firebase_app(settings)
        if firebase_app is not None:
            identity = FirebaseIdentityProvider(firebase_app)

    if identity is None and settings.allow_insecure_dev_auth:
        logger.warning("ALLOW_INSECURE_DEV_AUTH is on: tokens are decoded WITHOUT verification")

    app.state.settings = settings
    app.state.db = db
    app.state.identity = identity
    app.state.auth_gate = AuthGate(identity, insecure_dev_mode=settings.allow_insecure_dev_auth)
    app.state.admin_gate = AdminGate(build_admin_source(settings.admin_auth_source, db, identity))

    app.include_router(health.router)
    for module in (auth, admins, condominiums, properties, residents, common_expenses, publications):
        app.include_router(module.router, prefix="/api")

    @app.on_event("shutdown")
    def _close_mongo():
        if owns_db:
            db.client.close()

    logger.info(
        "Neighbora API ready (env=%s, admin source=%s)", settings.app_env, settings.admin_auth_source
    )
    return app


# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("neighbora.main:create_app", factory=True, host="0.0.0.0", port=get_settings().port)
