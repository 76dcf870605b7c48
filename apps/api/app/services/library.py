"""Library maintenance service layer."""

import logging

from app.repositories.memory import InMemoryStore
from app.schemas.library import LibraryClearResult

logger = logging.getLogger(__name__)


class LibraryService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def clear_books(self, *, actor: str) -> LibraryClearResult:
        deleted = self._store.clear_books()
        version = self._store.get_library_version()
        logger.info("library.cleared actor=%s deleted=%s library_version=%s", actor, deleted, version)
        return LibraryClearResult(deleted=deleted, library_version=version)

    def setup_available(self) -> bool:
        """Setup is only reachable while no user exists."""
        return self._store.count_users() == 0
