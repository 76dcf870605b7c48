"""Minimal HTML page routes.

The real UI lives elsewhere; these pages give the gateway's page rules and
the shared-page token checks something concrete to guard.
"""

from html import escape
from typing import Annotated

from fastapi import APIRouter, Depends, Path
from fastapi.responses import HTMLResponse, RedirectResponse

from app.domain.gateway import LOGIN_PAGE
from app.routes.dependencies import get_authenticated_principal, get_library_service, get_share_resolver
from app.schemas.auth import AuthPrincipal
from app.services.library import LibraryService
from app.services.sharing import ShareTokenResolver

router = APIRouter(include_in_schema=False)


def _page(title: str, body: str = "", status_code: int = 200) -> HTMLResponse:
    html = f"<!doctype html><html><head><title>{escape(title)}</title></head><body>{body}</body></html>"
    return HTMLResponse(html, status_code=status_code)


def _not_found_page() -> HTMLResponse:
    return _page("Not found", "<h1>This link is not available</h1>", status_code=404)


@router.get("/login")
async def login_page() -> HTMLResponse:
    return _page("Sign in", "<h1>Sign in</h1>")


@router.get("/setup", response_model=None)
async def setup_page(
    service: Annotated[LibraryService, Depends(get_library_service)],
) -> HTMLResponse | RedirectResponse:
    if not service.setup_available():
        return RedirectResponse(url=LOGIN_PAGE, status_code=307)
    return _page("Set up", "<h1>Create the first account</h1>")


@router.get("/library")
async def library_page(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
) -> HTMLResponse:
    return _page("Library", f"<h1>{escape(principal.display_name or principal.user_id)}'s library</h1>")


@router.get("/admin")
@router.get("/admin/{section}")
async def admin_page(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    section: str = "general",
) -> HTMLResponse:
    return _page("Admin", f"<h1>Admin: {escape(section)}</h1>")


@router.get("/shared/{token}")
async def shared_collection_page(
    token: str,
    resolver: Annotated[ShareTokenResolver, Depends(get_share_resolver)],
) -> HTMLResponse:
    collection = resolver.resolve_collection(token)
    if collection is None:
        return _not_found_page()
    return _page(collection.name, f"<h1>{escape(collection.name)}</h1>")


@router.get("/shared/{token}/read/{bookId}")
async def shared_reader_page(
    token: str,
    book_id: Annotated[str, Path(alias="bookId")],
    resolver: Annotated[ShareTokenResolver, Depends(get_share_resolver)],
) -> HTMLResponse:
    book = resolver.resolve_book(token, book_id)
    if book is None:
        return _not_found_page()
    return _page(book.title, f"<h1>{escape(book.title)}</h1>")
