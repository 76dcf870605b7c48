"""Library, sharing and live-update schemas."""

from typing import Literal

from pydantic import BaseModel, Field

FileType = Literal["epub", "pdf"]


class SharedCollectionInfo(BaseModel):
    name: str
    description: str | None = None


class SharedBookSummary(BaseModel):
    id: str
    title: str
    author: str | None = None
    file_type: FileType
    page_count: int | None = None
    cover_url: str | None = None


class SharedBook(BaseModel):
    """Public view of a book reachable through a share link.

    Storage details (file path, hash, cover path) stay server-side.
    """

    id: str
    title: str
    author: str | None = None
    description: str | None = None
    file_type: FileType
    file_size: int
    page_count: int | None = None
    added_at: int
    updated_at: int


class SharedCollectionPage(BaseModel):
    collection: SharedCollectionInfo
    books: list[SharedBookSummary]
    total: int
    page: int
    total_pages: int
    has_more: bool


class ShareLink(BaseModel):
    share_token: str
    share_url: str


class ShareStatus(BaseModel):
    is_shared: bool
    share_token: str | None = None
    shared_at: int | None = None


class ShareRevoked(BaseModel):
    success: bool = True


class LibraryClearResult(BaseModel):
    success: bool = True
    deleted: int = Field(ge=0)
    library_version: int


class ConnectedEvent(BaseModel):
    type: Literal["connected"] = "connected"


class LibraryUpdateEvent(BaseModel):
    type: Literal["library-update"] = "library-update"
    timestamp: int
