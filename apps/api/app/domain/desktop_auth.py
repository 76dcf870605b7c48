"""Shared-secret authorization for same-machine desktop IPC callers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from secrets import compare_digest

from app.core.config import Settings

DESKTOP_AUTH_HEADER = "x-alex-desktop-auth"


@dataclass(frozen=True, slots=True)
class DesktopAuthContext:
    desktop_mode_enabled: bool
    expected_token: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> DesktopAuthContext:
        return cls(
            desktop_mode_enabled=settings.desktop,
            expected_token=settings.desktop_auth_token,
        )


def is_desktop_mode(context: DesktopAuthContext) -> bool:
    return context.desktop_mode_enabled


def is_desktop_request_authorized(headers: Mapping[str, str], context: DesktopAuthContext) -> bool:
    """Return True only when desktop mode is on and the header matches the secret.

    A missing flag, secret or header and a wrong header value all produce the
    same ``False``.
    """
    if not is_desktop_mode(context):
        return False

    expected = context.expected_token
    if not expected:
        return False

    presented = headers.get(DESKTOP_AUTH_HEADER)
    if not isinstance(presented, str):
        return False

    return compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


__all__ = [
    "DESKTOP_AUTH_HEADER",
    "DesktopAuthContext",
    "is_desktop_mode",
    "is_desktop_request_authorized",
]
