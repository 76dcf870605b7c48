"""In-memory repositories used by the API scaffold and tests."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable
from uuid import uuid4

from app.schemas.auth import Role
from app.schemas.library import FileType


class StorageError(Exception):
    """Raised when the persistence layer cannot serve a read or write."""


class ShareTokenConflictError(StorageError):
    """Raised when a share token is already bound to another collection."""


def _now(clock: Callable[[], float]) -> int:
    return int(clock())


@dataclass(slots=True)
class UserRecord:
    id: str
    email: str
    display_name: str
    role: Role
    created_at: int


@dataclass(slots=True)
class BookRecord:
    id: str
    title: str
    file_type: FileType
    file_path: str
    file_size: int
    file_hash: str
    added_at: int
    updated_at: int
    author: str | None = None
    description: str | None = None
    cover_path: str | None = None
    page_count: int | None = None


@dataclass(slots=True)
class CollectionRecord:
    id: str
    owner_id: str
    name: str
    created_at: int
    description: str | None = None
    share_token: str | None = None
    shared_at: int | None = None


@dataclass(slots=True)
class InMemoryStore:
    """Simple, deterministic persistence layer for scaffolding and tests.

    ``read_failure_message`` is a failpoint: while set, every read raises
    :class:`StorageError` so callers can be exercised against an unreachable
    database.
    """

    users: dict[str, UserRecord] = field(default_factory=dict)
    books: dict[str, BookRecord] = field(default_factory=dict)
    collections: dict[str, CollectionRecord] = field(default_factory=dict)
    collection_books: set[tuple[str, str]] = field(default_factory=set)
    library_version: int | None = None
    clock: Callable[[], float] = time.time
    read_count: int = 0
    share_write_count: int = 0
    book_write_count: int = 0
    read_failure_message: str | None = None

    def _read(self) -> None:
        if self.read_failure_message is not None:
            raise StorageError(self.read_failure_message)
        self.read_count += 1

    # Users

    def create_user(self, email: str, display_name: str, role: Role = "user", user_id: str | None = None) -> UserRecord:
        user = UserRecord(
            id=user_id or str(uuid4()),
            email=email,
            display_name=display_name,
            role=role,
            created_at=_now(self.clock),
        )
        self.users[user.id] = user
        return user

    def count_users(self) -> int:
        self._read()
        return len(self.users)

    # Books

    def add_book(
        self,
        title: str,
        file_path: str,
        *,
        file_type: FileType = "epub",
        file_size: int = 0,
        book_id: str | None = None,
        author: str | None = None,
        description: str | None = None,
        cover_path: str | None = None,
        page_count: int | None = None,
    ) -> BookRecord:
        now = _now(self.clock)
        book = BookRecord(
            id=book_id or str(uuid4()),
            title=title,
            file_type=file_type,
            file_path=file_path,
            file_size=file_size,
            file_hash=uuid4().hex,
            added_at=now,
            updated_at=now,
            author=author,
            description=description,
            cover_path=cover_path,
            page_count=page_count,
        )
        self.books[book.id] = book
        self.book_write_count += 1
        self.increment_library_version()
        return book

    def clear_books(self) -> int:
        """Delete every book and its collection memberships."""
        deleted = len(self.books)
        self.books.clear()
        self.collection_books.clear()
        self.book_write_count += 1
        self.increment_library_version()
        return deleted

    # Collections

    def create_collection(
        self,
        owner_id: str,
        name: str,
        *,
        description: str | None = None,
        collection_id: str | None = None,
    ) -> CollectionRecord:
        collection = CollectionRecord(
            id=collection_id or str(uuid4()),
            owner_id=owner_id,
            name=name,
            description=description,
            created_at=_now(self.clock),
        )
        self.collections[collection.id] = collection
        return collection

    def add_book_to_collection(self, collection_id: str, book_id: str) -> None:
        if collection_id not in self.collections or book_id not in self.books:
            raise StorageError("Unknown collection or book")
        self.collection_books.add((collection_id, book_id))

    def get_collection_for_owner(self, owner_id: str, collection_id: str) -> CollectionRecord | None:
        self._read()
        collection = self.collections.get(collection_id)
        if collection is None or collection.owner_id != owner_id:
            return None
        return collection

    def get_collection_by_share_token(self, share_token: str) -> CollectionRecord | None:
        self._read()
        for collection in self.collections.values():
            if collection.share_token is not None and collection.share_token == share_token:
                return collection
        return None

    def get_collection_book(self, collection_id: str, book_id: str) -> BookRecord | None:
        self._read()
        if (collection_id, book_id) not in self.collection_books:
            return None
        return self.books.get(book_id)

    def count_collection_books(self, collection_id: str) -> int:
        self._read()
        return sum(1 for member_of, _ in self.collection_books if member_of == collection_id)

    def list_collection_books(self, collection_id: str, *, offset: int, limit: int) -> list[BookRecord]:
        self._read()
        member_ids = [book_id for member_of, book_id in self.collection_books if member_of == collection_id]
        books = [self.books[book_id] for book_id in member_ids if book_id in self.books]
        books.sort(key=lambda book: (book.title.lower(), book.id))
        return books[offset : offset + limit]

    def set_share_token(self, collection_id: str, share_token: str | None) -> CollectionRecord:
        collection = self.collections.get(collection_id)
        if collection is None:
            raise StorageError("Unknown collection")
        if share_token is not None:
            for other in self.collections.values():
                if other.id != collection_id and other.share_token == share_token:
                    raise ShareTokenConflictError("Share token already bound")
        collection.share_token = share_token
        collection.shared_at = _now(self.clock) if share_token is not None else None
        self.share_write_count += 1
        return collection

    # Library version

    def get_library_version(self) -> int:
        self._read()
        if self.library_version is None:
            self.library_version = _now(self.clock)
        return self.library_version

    def increment_library_version(self) -> int:
        now = _now(self.clock)
        current = self.library_version
        self.library_version = now if current is None else max(now, current + 1)
        return self.library_version
