"""Admin gate for the Orders API.

Tokens and their roles come from settings (``BOUTIQUE_API_TOKENS``); how
tokens are issued is somebody else's concern.
"""

from __future__ import annotations

from typing import Mapping

from fastapi import HTTPException, Request

ADMIN_ROLE = "admin"


class AuthenticationError(Exception):
    """No token, or a token nobody issued."""


class AuthorizationError(Exception):
    """A known token whose role may not perform the operation."""


class AdminGate:

    def __init__(self, tokens: Mapping[str, str]) -> None:
        self._tokens = dict(tokens)

    def authorize(self, bearer_token: str | None) -> str:
        """Return the token's role, or raise if it is not an admin token."""
        if not bearer_token:
            raise AuthenticationError("Missing access token")
        role = self._tokens.get(bearer_token)
        if role is None:
            raise AuthenticationError("Invalid access token")
        if role != ADMIN_ROLE:
            raise AuthorizationError("Admin access required")
        return role


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_admin(request: Request) -> None:
    """FastAPI dependency guarding admin-only routes."""
    gate: AdminGate = request.app.state.admin_gate
    try:
        gate.authorize(bearer_token(request.headers.get("Authorization")))
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=401, detail=str(exc), headers={"WWW-Authenticate": "Bearer"}
        ) from exc
    except AuthorizationError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
