"""Mock auth verifier for local development and tests."""

from pydantic import ValidationError

from app.adapters.auth.base import AuthVerificationError, TokenVerifier
from app.schemas.auth import AuthPrincipal


class MockTokenVerifier(TokenVerifier):
    """Accepts deterministic test tokens only.

    Expected token format:
    - ``test:<user_id>``
    - ``test:<user_id>:<role>``
    - ``test:<user_id>:<role>:<display name>``
    """

    def verify_token(self, token: str) -> AuthPrincipal:
        parts = token.split(":", 3)
        if len(parts) < 2 or parts[0] != "test":
            raise AuthVerificationError("Invalid session token")

        user_id = parts[1].strip()
        role = parts[2].strip() if len(parts) >= 3 else "user"
        display_name = parts[3].strip() if len(parts) == 4 else user_id

        if not user_id:
            raise AuthVerificationError("Session token missing user identity")

        try:
            return AuthPrincipal(user_id=user_id, role=role, display_name=display_name)
        except ValidationError as exc:
            raise AuthVerificationError("Session token has an invalid role") from exc


__all__ = ["MockTokenVerifier"]
