"""
# neighbora/routers/auth.py - Authentication endpoints

The client signs in with the Firebase SDK and sends the resulting ID token here.

### POST /api/auth/login
Body `{idToken}`. The token is verified and the Firebase user record returned.

### GET /api/auth/verify
Token required. Confirms the token is valid and returns the profile.

### GET /api/auth/me
Token required. Full profile (phone, disabled flag, last sign-in).
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from neighbora.core.auth import get_identity, get_principal
from neighbora.core.errors import ValidationFailure
from neighbora.core.identity import IdentityProvider
from neighbora.schemas.auth import LoginRequest
from neighbora.schemas.common import ok
from neighbora.schemas.principal import Principal

logger = logging.getLogger("neighbora.auth")

router = APIRouter(prefix="/auth", tags=["Auth"])

_PROFILE_KEYS = ("uid", "email", "displayName", "photoURL", "emailVerified", "createdAt")


def _profile(user: Dict[str, Any], keys=_PROFILE_KEYS) -> Dict[str, Any]:
    return {k: user.get(k) for k in keys}


def _dev_profile(principal: Principal) -> Dict[str, Any]:
    # no provider to ask; only what the unverified token carried
    return {"uid": principal.uid, "email": principal.email, "displayName": principal.name}


@router.post("/login")
def login(body: LoginRequest, identity: IdentityProvider = Depends(get_identity)):
    if not body.idToken:
        raise ValidationFailure("idToken is required. Please authenticate with Firebase first.")

    decoded = identity.verify_credential(body.idToken)
    user = identity.fetch_user(decoded.get("uid") or decoded.get("sub"))
    logger.info("Login for user %s", user.get("uid"))
    return ok(user=_profile(user))


@router.get("/verify")
def verify(request: Request, principal: Principal = Depends(get_principal)):
    if getattr(principal, "insecure", False):
        return ok(message="Token is valid", user=_dev_profile(principal))
    user = get_identity(request).fetch_user(principal.uid)
    return ok(message="Token is valid", user={**_profile(user), "email": principal.email or user.get("email")})


@router.get("/me")
def me(request: Request, principal: Principal = Depends(get_principal)):
    if getattr(principal, "insecure", False):
        return ok(user=_dev_profile(principal))
    user = get_identity(request).fetch_user(principal.uid)
    return ok(user=_profile(user, _PROFILE_KEYS + ("phoneNumber", "disabled", "lastSignInTime")))
