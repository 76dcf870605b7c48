"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
from typing import Any

_SHARE_PATH_PREFIXES = ("/shared/", "/api/shared/")


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def redact_path(path: str) -> str:
    """Replace the share token segment of public share paths.

    A share token is a bearer capability, so it must never reach the logs in
    clear text. ``/api/shared/<token>/books/b1`` becomes
    ``/api/shared/share-<digest>/books/b1``.
    """
    for prefix in _SHARE_PATH_PREFIXES:
        if path.startswith(prefix):
            token, sep, rest = path[len(prefix):].partition("/")
            return f"{prefix}{safe_log_identifier(token, prefix='share')}{sep}{rest}"
    return path
