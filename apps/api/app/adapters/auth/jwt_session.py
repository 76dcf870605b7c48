"""Signed session token (JWT) verifier adapter."""

from __future__ import annotations

from typing import Any

import jwt
from pydantic import ValidationError

from app.adapters.auth.base import AuthVerificationError, TokenVerifier
from app.schemas.auth import AuthPrincipal


class JwtSessionVerifier(TokenVerifier):
    """Verifies externally issued session JWTs and normalizes principal data.

    Expected claims: ``id`` (or ``sub``), ``role``, ``displayName`` and ``exp``.
    """

    def __init__(self, secret: str | None, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    def verify_token(self, token: str) -> AuthPrincipal:
        if not self._secret:
            raise AuthVerificationError("Session secret is not configured")

        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
        except jwt.PyJWTError as exc:
            raise AuthVerificationError("Invalid session token") from exc

        user_id = str(claims.get("id") or claims.get("sub") or "").strip()
        if not user_id:
            raise AuthVerificationError("Session token missing user identity")

        try:
            return AuthPrincipal(
                user_id=user_id,
                role=claims.get("role"),
                display_name=str(claims.get("displayName") or ""),
            )
        except ValidationError as exc:
            raise AuthVerificationError("Session token has an invalid role") from exc


__all__ = ["JwtSessionVerifier"]
