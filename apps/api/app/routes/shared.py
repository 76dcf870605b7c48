"""Public share-link routes.

No session is required here; every handler resolves the token itself.
"""

from pathlib import Path as FilePath
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import FileResponse

from app.core.config import Settings, get_settings
from app.errors import no_leak_not_found
from app.repositories.memory import BookRecord
from app.routes.dependencies import get_share_resolver
from app.schemas.error import NoLeakNotFoundError
from app.schemas.library import SharedBook, SharedCollectionPage
from app.services.sharing import ShareTokenResolver

router = APIRouter(prefix="/shared", tags=["Shared"])

_CONTENT_TYPES = {"epub": "application/epub+zip", "pdf": "application/pdf"}
_NOT_FOUND = {404: {"model": NoLeakNotFoundError}}


def _require_book(resolver: ShareTokenResolver, token: str, book_id: str) -> BookRecord:
    book = resolver.resolve_book(token, book_id)
    if book is None:
        raise no_leak_not_found()
    return book


def _existing_file(path: str | None) -> FilePath:
    if not path:
        raise no_leak_not_found()
    candidate = FilePath(path)
    if not candidate.is_file():
        raise no_leak_not_found()
    return candidate


@router.get("/{token}", response_model=SharedCollectionPage, responses=_NOT_FOUND)
async def get_shared_collection(
    token: Annotated[str, Path()],
    resolver: Annotated[ShareTokenResolver, Depends(get_share_resolver)],
    settings: Annotated[Settings, Depends(get_settings)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> SharedCollectionPage:
    result = resolver.list_books(token, page=page, limit=limit or settings.shared_page_size)
    if result is None:
        raise no_leak_not_found()
    return result


@router.get("/{token}/books/{bookId}", response_model=SharedBook, responses=_NOT_FOUND)
async def get_shared_book(
    token: str,
    book_id: Annotated[str, Path(alias="bookId")],
    resolver: Annotated[ShareTokenResolver, Depends(get_share_resolver)],
) -> SharedBook:
    book = _require_book(resolver, token, book_id)
    return SharedBook(
        id=book.id,
        title=book.title,
        author=book.author,
        description=book.description,
        file_type=book.file_type,
        file_size=book.file_size,
        page_count=book.page_count,
        added_at=book.added_at,
        updated_at=book.updated_at,
    )


@router.get("/{token}/books/{bookId}/file", response_class=FileResponse, responses=_NOT_FOUND)
@router.get("/{token}/books/{bookId}/book.epub", response_class=FileResponse, responses=_NOT_FOUND)
async def get_shared_book_file(
    token: str,
    book_id: Annotated[str, Path(alias="bookId")],
    resolver: Annotated[ShareTokenResolver, Depends(get_share_resolver)],
) -> FileResponse:
    book = _require_book(resolver, token, book_id)
    file_path = _existing_file(book.file_path)
    # FileResponse honours Range requests (206 / 416).
    return FileResponse(
        file_path,
        media_type=_CONTENT_TYPES.get(book.file_type, "application/octet-stream"),
        filename=f"book.{book.file_type}",
        content_disposition_type="inline",
    )


@router.get("/{token}/books/{bookId}/cover", response_class=FileResponse, responses=_NOT_FOUND)
async def get_shared_book_cover(
    token: str,
    book_id: Annotated[str, Path(alias="bookId")],
    resolver: Annotated[ShareTokenResolver, Depends(get_share_resolver)],
) -> FileResponse:
    book = _require_book(resolver, token, book_id)
    return FileResponse(_existing_file(book.cover_path), headers={"Cache-Control": "public, max-age=86400"})
