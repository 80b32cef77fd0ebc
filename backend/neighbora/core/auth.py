# neighbora/core/auth.py
"""
Auth gate: turns `Authorization: Bearer <id_token>` into a Principal.

- Verified path: the identity provider checks the token; claims map to a
  Principal with role='user'. Elevated roles come only from the admin gate.
- Degraded path: without a configured provider every request is refused with
  ProviderUnavailable, unless ALLOW_INSECURE_DEV_AUTH is on (never in
  production), in which case the token payload is decoded WITHOUT signature
  verification into an InsecureDevPrincipal.
"""
import logging
from typing import Optional

import jwt
from fastapi import Request

from neighbora.core.errors import InvalidCredential, MissingCredential, ProviderUnavailable
from neighbora.core.identity import IdentityProvider
from neighbora.schemas.principal import InsecureDevPrincipal, Principal

logger = logging.getLogger("neighbora.auth")

DEV_UID = "dev-user-123"
DEV_EMAIL = "dev@example.com"
DEV_NAME = "Development User"


def extract_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """
    Take the token out of `Bearer <id_token>`.
    Returns None when the header is missing or malformed.
    """
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_unverified_payload(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.DecodeError:
        return None


def insecure_dev_principal(token: str) -> InsecureDevPrincipal:
    """
    Development-only escape hatch: read uid/email/name from the token payload
    without verifying its signature. Falls back to a fixed dev identity.
    """
    payload = _decode_unverified_payload(token)
    if payload is None:
        logger.warning("Insecure dev auth: could not decode token, using default dev user")
        return InsecureDevPrincipal(uid=DEV_UID, email=DEV_EMAIL, name=DEV_NAME)

    principal = InsecureDevPrincipal(
        uid=payload.get("sub") or payload.get("uid") or payload.get("user_id") or DEV_UID,
        email=payload.get("email") or DEV_EMAIL,
        name=payload.get("name") or DEV_NAME,
    )
    logger.warning("Insecure dev auth: UID %s taken from an unverified token", principal.uid)
    return principal


def claims_to_principal(decoded: dict) -> Principal:
    uid = decoded.get("uid") or decoded.get("user_id") or decoded.get("sub")
    if not uid:
        raise InvalidCredential("Token missing uid")
    return Principal(
        uid=uid,
        role="user",
        email=decoded.get("email"),
        name=decoded.get("name"),
    )


class AuthGate:
    def __init__(self, identity: Optional[IdentityProvider], *, insecure_dev_mode: bool = False):
        self.identity = identity
        self.insecure_dev_mode = insecure_dev_mode

    def authenticate(self, token: Optional[str]) -> Principal:
        if not token:
            raise MissingCredential()

        if self.identity is None:
            if self.insecure_dev_mode:
                return insecure_dev_principal(token)
            logger.error("Rejecting request: identity provider is not configured")
            raise ProviderUnavailable()

        decoded = self.identity.verify_credential(token)
        return claims_to_principal(decoded)


# --------- FastAPI Dependencies --------- #

def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


def get_principal(request: Request) -> Principal:
    """
    Token required: verifies it and returns the Principal.
    Declared sync so the blocking provider call runs in the threadpool.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    principal = get_auth_gate(request).authenticate(token)
    request.state.principal = principal
    return principal


def get_identity(request: Request) -> IdentityProvider:
    """Configured identity provider, or ProviderUnavailable."""
    identity = getattr(request.app.state, "identity", None)
    if identity is None:
        raise ProviderUnavailable()
    return identity
