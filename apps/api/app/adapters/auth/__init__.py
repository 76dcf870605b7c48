"""Session token verifier adapters."""

from .base import AuthVerificationError, TokenVerifier, decode_session
from .jwt_session import JwtSessionVerifier
from .mock_auth import MockTokenVerifier

__all__ = [
    "AuthVerificationError",
    "TokenVerifier",
    "decode_session",
    "JwtSessionVerifier",
    "MockTokenVerifier",
]
