"""Share-link resolution and owner-side share management."""

from __future__ import annotations

import logging
import math
import secrets

from app.core.logging_safety import safe_log_identifier
from app.errors import no_leak_not_found
from app.repositories.memory import (
    BookRecord,
    CollectionRecord,
    InMemoryStore,
    ShareTokenConflictError,
    StorageError,
)
from app.schemas.library import (
    SharedBookSummary,
    SharedCollectionInfo,
    SharedCollectionPage,
    ShareLink,
    ShareStatus,
)

logger = logging.getLogger(__name__)

_TOKEN_BYTES = 24
_MINT_ATTEMPTS = 3


class ShareTokenResolver:
    """Resolves public share tokens to collections and member books.

    Every call re-reads the current binding, so a revoked token stops
    resolving on the very next request. Storage failures resolve to ``None``
    because the callers are anonymous.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def resolve_collection(self, token: object) -> CollectionRecord | None:
        if not isinstance(token, str) or not token:
            return None

        try:
            return self._store.get_collection_by_share_token(token)
        except StorageError:
            logger.warning(
                "share.resolve_failed token=%s stage=collection",
                safe_log_identifier(token, prefix="share"),
                exc_info=True,
            )
            return None

    def resolve_book(self, token: object, book_id: object) -> BookRecord | None:
        if not isinstance(book_id, str) or not book_id:
            return None

        # Binding must be re-validated before membership, on every call.
        collection = self.resolve_collection(token)
        if collection is None:
            return None

        try:
            return self._store.get_collection_book(collection_id=collection.id, book_id=book_id)
        except StorageError:
            logger.warning(
                "share.resolve_failed token=%s stage=membership",
                safe_log_identifier(token, prefix="share"),
                exc_info=True,
            )
            return None

    def list_books(self, token: object, *, page: int, limit: int) -> SharedCollectionPage | None:
        collection = self.resolve_collection(token)
        if collection is None:
            return None

        try:
            total = self._store.count_collection_books(collection.id)
            records = self._store.list_collection_books(collection.id, offset=(page - 1) * limit, limit=limit)
        except StorageError:
            logger.warning(
                "share.list_failed token=%s",
                safe_log_identifier(token, prefix="share"),
                exc_info=True,
            )
            return None

        total_pages = math.ceil(total / limit)
        return SharedCollectionPage(
            collection=SharedCollectionInfo(name=collection.name, description=collection.description),
            books=[
                SharedBookSummary(
                    id=book.id,
                    title=book.title,
                    author=book.author,
                    file_type=book.file_type,
                    page_count=book.page_count,
                    cover_url=f"/api/shared/{token}/books/{book.id}/cover" if book.cover_path else None,
                )
                for book in records
            ],
            total=total,
            page=page,
            total_pages=total_pages,
            has_more=page < total_pages,
        )


class CollectionShareService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def _owned_collection(self, owner_id: str, collection_id: str) -> CollectionRecord:
        record = self._store.get_collection_for_owner(owner_id=owner_id, collection_id=collection_id)
        if record is None:
            raise no_leak_not_found()
        return record

    def enable_sharing(self, *, owner_id: str, collection_id: str, base_url: str) -> ShareLink:
        record = self._owned_collection(owner_id, collection_id)
        if record.share_token is None:
            record = self._mint_token(record)
            logger.info(
                "share.enabled collection_id=%s token=%s",
                record.id,
                safe_log_identifier(record.share_token, prefix="share"),
            )

        token = record.share_token or ""
        return ShareLink(share_token=token, share_url=f"{base_url.rstrip('/')}/shared/{token}")

    def disable_sharing(self, *, owner_id: str, collection_id: str) -> None:
        record = self._owned_collection(owner_id, collection_id)
        if record.share_token is not None:
            logger.info(
                "share.revoked collection_id=%s token=%s",
                record.id,
                safe_log_identifier(record.share_token, prefix="share"),
            )
        self._store.set_share_token(record.id, None)

    def get_share_status(self, *, owner_id: str, collection_id: str) -> ShareStatus:
        record = self._owned_collection(owner_id, collection_id)
        return ShareStatus(
            is_shared=record.share_token is not None,
            share_token=record.share_token,
            shared_at=record.shared_at,
        )

    def _mint_token(self, record: CollectionRecord) -> CollectionRecord:
        for _ in range(_MINT_ATTEMPTS):
            try:
                return self._store.set_share_token(record.id, secrets.token_urlsafe(_TOKEN_BYTES))
            except ShareTokenConflictError:
                continue
        raise StorageError("Could not mint a unique share token")


__all__ = ["CollectionShareService", "ShareTokenResolver"]
