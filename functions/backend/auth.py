"""
Bearer-token verification against Firebase Auth.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from backend.errors import Unauthorized

logger = logging.getLogger(__name__)

MISSING_AUTHORIZATION_MESSAGE = "Missing/Incorrect Authorization header"


class TokenVerifier(Protocol):
    """Verifies an ID token and returns its decoded claims."""

    def verify(self, token: str) -> dict:
        ...


@dataclass
class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens with the Admin SDK."""

    app: Any = None
    check_revoked: bool = False

    def verify(self, token: str) -> dict:
        try:
            return firebase_auth.verify_id_token(
                token, app=self.app, check_revoked=self.check_revoked
            )
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            # Invalid, expired, revoked tokens and certificate fetch failures.
            raise Unauthorized(str(e)) from e


@dataclass
class InMemoryTokenVerifier:
    """Test double mapping static tokens to claims."""

    tokens: dict = field(default_factory=dict)

    def verify(self, token: str) -> dict:
        claims = self.tokens.get(token)
        if claims is None:
            raise Unauthorized("Invalid ID token")
        return claims


def extract_bearer_token(authorization_header: Optional[str]) -> str:
    """Returns the token from an `Authorization: Bearer <token>` header."""
    if not authorization_header:
        raise Unauthorized(MISSING_AUTHORIZATION_MESSAGE)

    parts = authorization_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise Unauthorized(MISSING_AUTHORIZATION_MESSAGE)
    return parts[1]


def authorize_user(
    authorization_header: Optional[str], verifier: TokenVerifier
) -> dict:
    """
    Verifies the caller's bearer token.

    Raises:
        Unauthorized: If the header is missing or malformed, or the token
            fails verification.
    """
    token = extract_bearer_token(authorization_header)
    return verifier.verify(token)


def try_authorize_user(
    authorization_header: Optional[str], verifier: TokenVerifier
) -> Optional[dict]:
    """Like `authorize_user`, but returns None for anonymous callers."""
    try:
        return authorize_user(authorization_header, verifier)
    except Unauthorized as e:
        logger.debug("Treating caller as anonymous: %s", e)
        return None
