"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request

from app.core.config import Settings, get_settings
from app.core.logging_safety import redact_path, safe_log_identifier
from app.domain.desktop_auth import DesktopAuthContext, is_desktop_request_authorized
from app.errors import ApiError
from app.repositories.memory import InMemoryStore
from app.schemas.auth import AuthPrincipal
from app.services.library import LibraryService
from app.services.library_events import LibraryUpdateChannel
from app.services.sharing import CollectionShareService, ShareTokenResolver

logger = logging.getLogger(__name__)

_LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "[::1]", "::1"})


def _auth_error(message: str) -> ApiError:
    return ApiError(status_code=401, code="UNAUTHORIZED", message=message)


def _forbidden_error() -> ApiError:
    return ApiError(status_code=403, code="FORBIDDEN", message="Forbidden")


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_request_correlation_id(request: Request) -> str:
    return _request_correlation_id(request)


def get_optional_principal(request: Request) -> AuthPrincipal | None:
    """Principal decoded by the gateway for this request, if any."""
    principal = getattr(request.state, "auth_principal", None)
    return principal if isinstance(principal, AuthPrincipal) else None


async def get_authenticated_principal(
    request: Request,
    principal: Annotated[AuthPrincipal | None, Depends(get_optional_principal)],
) -> AuthPrincipal:
    """Require the gateway-decoded principal on handlers that act for a user."""
    if principal is None:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=missing_principal",
            safe_log_identifier(_request_correlation_id(request), prefix="cid"),
            request.method,
            redact_path(request.url.path),
        )
        raise _auth_error("Authentication required")
    return principal


async def require_admin(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
) -> AuthPrincipal:
    if not principal.is_admin:
        raise _forbidden_error()
    return principal


def get_desktop_auth_context(settings: Annotated[Settings, Depends(get_settings)]) -> DesktopAuthContext:
    return DesktopAuthContext.from_settings(settings)


async def require_desktop_caller(
    request: Request,
    context: Annotated[DesktopAuthContext, Depends(get_desktop_auth_context)],
) -> None:
    """Authorize desktop IPC calls by loopback origin and shared secret.

    Every failure produces the same 403 body.
    """
    host = (request.url.hostname or "").lower()
    if host not in _LOOPBACK_HOSTS or not is_desktop_request_authorized(request.headers, context):
        logger.warning(
            "desktop.auth_rejected correlation_id=%s method=%s path=%s",
            safe_log_identifier(_request_correlation_id(request), prefix="cid"),
            request.method,
            request.url.path,
        )
        raise _forbidden_error()


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_share_resolver(store: Annotated[InMemoryStore, Depends(get_store)]) -> ShareTokenResolver:
    return ShareTokenResolver(store)


def get_collection_share_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> CollectionShareService:
    return CollectionShareService(store)


def get_library_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> LibraryService:
    return LibraryService(store)


def get_library_update_channel(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    store: Annotated[InMemoryStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LibraryUpdateChannel:
    return LibraryUpdateChannel(
        store.get_library_version,
        poll_interval=settings.library_poll_interval_seconds,
        keepalive_interval=settings.library_keepalive_interval_seconds,
        label=safe_log_identifier(principal.user_id, prefix="pid"),
    )
