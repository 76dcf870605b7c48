"""Desktop shell IPC routes.

These bypass session checks; callers prove they are the local desktop shell.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.routes.dependencies import get_library_service, require_desktop_caller
from app.schemas.error import ForbiddenError
from app.schemas.library import LibraryClearResult
from app.services.library import LibraryService

router = APIRouter(prefix="/electron", tags=["Desktop"])


@router.post(
    "/clear-books",
    response_model=LibraryClearResult,
    responses={403: {"model": ForbiddenError}},
)
async def clear_books(
    __: Annotated[None, Depends(require_desktop_caller)],
    service: Annotated[LibraryService, Depends(get_library_service)],
) -> LibraryClearResult:
    return service.clear_books(actor="desktop")
