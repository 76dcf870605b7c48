"""Request classification rules for the authorization gateway.

Every intercepted request is mapped to a :class:`RouteClass` by the first
matching entry of :data:`ROUTE_RULES`, then turned into a
:class:`GatewayDecision` by :func:`decide`. Rule order is part of the
contract: earlier bypass rules shadow the generic API and page rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from app.schemas.auth import AuthPrincipal

LOGIN_PAGE = "/login"
DEFAULT_PAGE = "/library"


class RouteClass(str, Enum):
    PUBLIC_PAGE = "public_page"
    SHARED_PAGE = "shared_page"
    AUTH_PROVIDER = "auth_provider"
    SHARED_API = "shared_api"
    DESKTOP_API = "desktop_api"
    ADMIN_API = "admin_api"
    API = "api"
    ADMIN_PAGE = "admin_page"
    PAGE = "page"


@dataclass(frozen=True, slots=True)
class RouteRule:
    """Match a path exactly, by raw prefix, or by whole-segment prefix."""

    route_class: RouteClass
    exact: frozenset[str] = frozenset()
    prefix: str | None = None
    segment: str | None = None

    def matches(self, path: str) -> bool:
        if path in self.exact:
            return True
        if self.prefix is not None and path.startswith(self.prefix):
            return True
        if self.segment is not None:
            return path == self.segment or path.startswith(self.segment + "/")
        return False


ROUTE_RULES: tuple[RouteRule, ...] = (
    RouteRule(RouteClass.PUBLIC_PAGE, exact=frozenset({"/login", "/setup"})),
    RouteRule(RouteClass.SHARED_PAGE, prefix="/shared/"),
    RouteRule(RouteClass.AUTH_PROVIDER, segment="/api/auth"),
    RouteRule(RouteClass.SHARED_API, prefix="/api/shared/"),
    RouteRule(RouteClass.DESKTOP_API, prefix="/api/electron/"),
    RouteRule(RouteClass.ADMIN_API, segment="/api/admin"),
    RouteRule(RouteClass.API, segment="/api"),
    RouteRule(RouteClass.ADMIN_PAGE, segment="/admin"),
)

_BYPASS_CLASSES: frozenset[RouteClass] = frozenset(
    {
        RouteClass.PUBLIC_PAGE,
        RouteClass.SHARED_PAGE,
        RouteClass.AUTH_PROVIDER,
        RouteClass.SHARED_API,
        RouteClass.DESKTOP_API,
    }
)

_API_CLASSES: frozenset[RouteClass] = frozenset({RouteClass.API, RouteClass.ADMIN_API})
_ADMIN_CLASSES: frozenset[RouteClass] = frozenset({RouteClass.ADMIN_API, RouteClass.ADMIN_PAGE})

# Paths the route matcher never hands to the gateway.
_EXCLUDED_PREFIXES: tuple[str, ...] = ("/static/",)
_EXCLUDED_FILES: frozenset[str] = frozenset({"/favicon.ico", "/robots.txt", "/sitemap.xml"})


@dataclass(frozen=True, slots=True)
class GatewayDecision:
    action: Literal["continue", "redirect", "status"]
    location: str | None = None
    status_code: int | None = None

    @classmethod
    def proceed(cls) -> GatewayDecision:
        return cls(action="continue")

    @classmethod
    def redirect_to(cls, location: str) -> GatewayDecision:
        return cls(action="redirect", location=location)

    @classmethod
    def status(cls, status_code: int) -> GatewayDecision:
        return cls(action="status", status_code=status_code)


def is_intercepted(path: str) -> bool:
    """Route matcher: only static assets and well-known files skip the gateway.

    A dot in the path is not a signal on its own; ``/admin/users.json`` is
    still an admin page.
    """
    if path == "/api" or path.startswith("/api/"):
        return True
    return not (path in _EXCLUDED_FILES or path.startswith(_EXCLUDED_PREFIXES))


def classify_route(path: str) -> RouteClass:
    for rule in ROUTE_RULES:
        if rule.matches(path):
            return rule.route_class
    return RouteClass.PAGE


def decide(route_class: RouteClass, principal: AuthPrincipal | None) -> GatewayDecision:
    if route_class in _BYPASS_CLASSES:
        return GatewayDecision.proceed()

    needs_admin = route_class in _ADMIN_CLASSES
    if route_class in _API_CLASSES:
        if principal is None:
            return GatewayDecision.status(401)
        if needs_admin and not principal.is_admin:
            return GatewayDecision.status(403)
        return GatewayDecision.proceed()

    if principal is None:
        return GatewayDecision.redirect_to(LOGIN_PAGE)
    if needs_admin and not principal.is_admin:
        return GatewayDecision.redirect_to(DEFAULT_PAGE)
    return GatewayDecision.proceed()


def authorize_request(path: str, principal: AuthPrincipal | None) -> GatewayDecision:
    """Classify ``path`` and decide what happens to the request."""
    return decide(classify_route(path), principal)


__all__ = [
    "DEFAULT_PAGE",
    "GatewayDecision",
    "LOGIN_PAGE",
    "ROUTE_RULES",
    "RouteClass",
    "RouteRule",
    "authorize_request",
    "classify_route",
    "decide",
    "is_intercepted",
]
