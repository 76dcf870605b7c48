"""Admin-only library routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.core.logging_safety import safe_log_identifier
from app.routes.dependencies import get_library_service, require_admin
from app.schemas.auth import AuthPrincipal
from app.schemas.error import ForbiddenError, UnauthorizedError
from app.schemas.library import LibraryClearResult
from app.services.library import LibraryService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/library/clear",
    response_model=LibraryClearResult,
    responses={401: {"model": UnauthorizedError}, 403: {"model": ForbiddenError}},
)
async def clear_library(
    principal: Annotated[AuthPrincipal, Depends(require_admin)],
    service: Annotated[LibraryService, Depends(get_library_service)],
) -> LibraryClearResult:
    return service.clear_books(actor=f"admin:{safe_log_identifier(principal.user_id, prefix='pid')}")
