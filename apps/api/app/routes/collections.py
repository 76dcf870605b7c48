"""Owner-side collection share management routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request

from app.routes.dependencies import get_authenticated_principal, get_collection_share_service
from app.schemas.auth import AuthPrincipal
from app.schemas.error import NoLeakNotFoundError, UnauthorizedError
from app.schemas.library import ShareLink, ShareRevoked, ShareStatus
from app.services.sharing import CollectionShareService

router = APIRouter(prefix="/collections", tags=["Collections"])

_RESPONSES = {401: {"model": UnauthorizedError}, 404: {"model": NoLeakNotFoundError}}


@router.get("/{collectionId}/share", response_model=ShareStatus, responses=_RESPONSES)
async def get_share_status(
    collection_id: Annotated[str, Path(alias="collectionId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[CollectionShareService, Depends(get_collection_share_service)],
) -> ShareStatus:
    return service.get_share_status(owner_id=principal.user_id, collection_id=collection_id)


@router.post("/{collectionId}/share", response_model=ShareLink, responses=_RESPONSES)
async def enable_sharing(
    request: Request,
    collection_id: Annotated[str, Path(alias="collectionId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[CollectionShareService, Depends(get_collection_share_service)],
) -> ShareLink:
    return service.enable_sharing(
        owner_id=principal.user_id,
        collection_id=collection_id,
        base_url=str(request.base_url),
    )


@router.delete("/{collectionId}/share", response_model=ShareRevoked, responses=_RESPONSES)
async def disable_sharing(
    collection_id: Annotated[str, Path(alias="collectionId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[CollectionShareService, Depends(get_collection_share_service)],
) -> ShareRevoked:
    service.disable_sharing(owner_id=principal.user_id, collection_id=collection_id)
    return ShareRevoked()
