"""Identity-provider passthrough routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.routes.dependencies import get_optional_principal
from app.schemas.auth import AuthPrincipal, SessionResponse, SessionUser

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/session", response_model=SessionResponse, response_model_exclude_none=True)
async def get_session(
    principal: Annotated[AuthPrincipal | None, Depends(get_optional_principal)],
) -> SessionResponse:
    if principal is None:
        return SessionResponse()
    return SessionResponse(
        user=SessionUser(id=principal.user_id, role=principal.role, display_name=principal.display_name)
    )
