"""Session token verification interfaces."""

from abc import ABC, abstractmethod

from app.schemas.auth import AuthPrincipal


class AuthVerificationError(Exception):
    """Raised when a token cannot be verified or normalized."""


class TokenVerifier(ABC):
    """Provider-neutral session token verification interface."""

    @abstractmethod
    def verify_token(self, token: str) -> AuthPrincipal:
        """Verify token and return normalized principal."""


def decode_session(verifier: TokenVerifier, raw_token: str | None) -> AuthPrincipal | None:
    """Decode a raw session token, failing closed.

    Any verification failure yields ``None``; nothing raised by the verifier
    for a bad token crosses this boundary.
    """
    if not raw_token:
        return None
    try:
        return verifier.verify_token(raw_token)
    except AuthVerificationError:
        return None


__all__ = ["AuthVerificationError", "TokenVerifier", "decode_session"]
