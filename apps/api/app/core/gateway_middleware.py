"""ASGI middleware applying the authorization gateway to every request."""

from __future__ import annotations

import logging
from uuid import uuid4

from fastapi.responses import JSONResponse, RedirectResponse
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Receive, Scope, Send

from app.adapters.auth import JwtSessionVerifier, MockTokenVerifier, TokenVerifier, decode_session
from app.core.config import Settings, get_settings
from app.core.logging_safety import redact_path, safe_log_identifier
from app.domain.gateway import GatewayDecision, authorize_request, is_intercepted
from app.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

_STATUS_PAYLOADS: dict[int, ErrorResponse] = {
    401: ErrorResponse(code="UNAUTHORIZED", message="Authentication required"),
    403: ErrorResponse(code="FORBIDDEN", message="Insufficient permissions"),
}


def build_token_verifier(settings: Settings) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "jwt":
        return JwtSessionVerifier(secret=settings.session_secret, algorithm=settings.session_algorithm)
    return MockTokenVerifier()


def extract_session_token(connection: HTTPConnection, cookie_name: str) -> str | None:
    """Read the session token from its cookie, falling back to a bearer header."""
    cookie_token = connection.cookies.get(cookie_name)
    if cookie_token:
        return cookie_token

    authorization = connection.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


class AuthorizationGatewayMiddleware:
    """Decode the session once, classify the path and short-circuit if needed.

    Continue decisions hand the request to the app with ``auth_principal`` and
    ``correlation_id`` stored on request state.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        connection = HTTPConnection(scope)
        state = scope.setdefault("state", {})
        correlation_id = connection.headers.get("x-correlation-id") or f"req-{uuid4()}"
        state["correlation_id"] = correlation_id

        path = scope["path"]
        if not is_intercepted(path):
            await self.app(scope, receive, send)
            return

        settings = get_settings()
        raw_token = extract_session_token(connection, settings.session_cookie_name)
        principal = decode_session(build_token_verifier(settings), raw_token)
        state["auth_principal"] = principal

        decision = authorize_request(path, principal)
        if decision.action == "continue":
            await self.app(scope, receive, send)
            return

        logger.warning(
            "gateway.rejected correlation_id=%s method=%s path=%s principal_id=%s outcome=%s",
            safe_log_identifier(correlation_id, prefix="cid"),
            scope["method"],
            redact_path(path),
            safe_log_identifier(principal.user_id if principal else None, prefix="pid"),
            decision.location or decision.status_code,
        )
        response = _decision_response(decision)
        await response(scope, receive, send)


def _decision_response(decision: GatewayDecision) -> JSONResponse | RedirectResponse:
    if decision.action == "redirect":
        return RedirectResponse(url=decision.location or "/", status_code=307)

    status_code = decision.status_code or 401
    payload = _STATUS_PAYLOADS[status_code]
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


__all__ = ["AuthorizationGatewayMiddleware", "build_token_verifier", "extract_session_token"]
