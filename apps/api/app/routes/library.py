"""Live library update stream."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.routes.dependencies import get_library_update_channel
from app.schemas.error import UnauthorizedError
from app.services.library_events import LibraryUpdateChannel

router = APIRouter(prefix="/library", tags=["Library"])

_STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get(
    "/events",
    response_class=StreamingResponse,
    responses={200: {"content": {"text/event-stream": {}}}, 401: {"model": UnauthorizedError}},
)
async def stream_library_events(
    channel: Annotated[LibraryUpdateChannel, Depends(get_library_update_channel)],
) -> StreamingResponse:
    return StreamingResponse(channel.events(), media_type="text/event-stream", headers=_STREAM_HEADERS)
