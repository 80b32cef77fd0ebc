# neighbora/core/identity.py
"""
Firebase Admin wrapper used by the gates, the auth router and the admin CLI.

The provider is constructed explicitly around a Firebase app and passed to whoever
needs it; tests swap it for a fake with the same methods.
"""
import logging
from typing import Any, Dict, Optional, Protocol

import firebase_admin
from firebase_admin import auth as fb_auth
from firebase_admin import exceptions as fb_exceptions

from neighbora.core.errors import (
    ExpiredCredential,
    InvalidCredential,
    NotFound,
    Unexpected,
    VerificationFailed,
)

logger = logging.getLogger("neighbora.identity")


class IdentityProvider(Protocol):
    def verify_credential(self, token: str) -> Dict[str, Any]: ...

    def fetch_user(self, uid: str) -> Dict[str, Any]: ...

    def set_custom_claims(self, uid: str, claims: Optional[Dict[str, Any]]) -> None: ...


def _user_to_dict(user: fb_auth.UserRecord) -> Dict[str, Any]:
    meta = user.user_metadata
    return {
        "uid": user.uid,
        "email": user.email,
        "displayName": user.display_name,
        "photoURL": user.photo_url,
        "phoneNumber": user.phone_number,
        "emailVerified": bool(user.email_verified),
        "disabled": bool(user.disabled),
        "customClaims": user.custom_claims or {},
        # Firebase reports milliseconds since epoch
        "createdAt": meta.creation_timestamp if meta else None,
        "lastSignInTime": meta.last_sign_in_timestamp if meta else None,
    }


class FirebaseIdentityProvider:
    """Firebase Admin SDK calls, bound to one explicitly built app."""

    def __init__(self, app: firebase_admin.App, check_revoked: bool = True):
        self.app = app
        self.check_revoked = check_revoked

    def verify_credential(self, token: str) -> Dict[str, Any]:
        """
        Verify an ID token and return its claims.
        Raises ExpiredCredential / InvalidCredential / VerificationFailed.
        """
        try:
            return fb_auth.verify_id_token(token, app=self.app, check_revoked=self.check_revoked)
        except fb_auth.ExpiredIdTokenError:
            raise ExpiredCredential("Token expired")
        except fb_auth.RevokedIdTokenError:
            raise ExpiredCredential("Session revoked")
        except fb_auth.UserDisabledError:
            raise InvalidCredential("User account is disabled")
        except fb_auth.InvalidIdTokenError as exc:
            raise InvalidCredential("Invalid token", details=str(exc))
        except ValueError as exc:
            # Malformed token (wrong segment count, bad encoding, empty string)
            raise InvalidCredential("Invalid token format", details=str(exc))
        except (fb_auth.CertificateFetchError, fb_exceptions.FirebaseError) as exc:
            logger.warning("Token verification failed: %s", exc)
            raise VerificationFailed(details=str(exc))

    def fetch_user(self, uid: str) -> Dict[str, Any]:
        try:
            return _user_to_dict(fb_auth.get_user(uid, app=self.app))
        except fb_auth.UserNotFoundError:
            raise NotFound("User not found")
        except fb_exceptions.FirebaseError as exc:
            raise Unexpected("Could not fetch user", details=str(exc))

    def get_user_by_email(self, email: str) -> Dict[str, Any]:
        try:
            return _user_to_dict(fb_auth.get_user_by_email(email, app=self.app))
        except fb_auth.UserNotFoundError:
            raise NotFound(f"User not found: {email}")

    def set_custom_claims(self, uid: str, claims: Optional[Dict[str, Any]]) -> None:
        # None removes all custom claims
        fb_auth.set_custom_user_claims(uid, claims, app=self.app)
