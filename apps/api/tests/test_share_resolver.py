"""Share-token resolution and public share-link API tests."""

from __future__ import annotations

import os
from pathlib import Path
import tempfile
import unittest

from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.main import create_app
from app.repositories.memory import InMemoryStore
from app.services.sharing import ShareTokenResolver


def _seed_shared_collection(store: InMemoryStore, *, file_dir: str | None = None) -> None:
    """Token ``abc123`` bound to ``C1`` holding ``b1`` and ``b2``; ``b3`` lives elsewhere."""
    owner = store.create_user(email="owner@example.com", display_name="Owner", user_id="owner-1")
    file_path = "/missing/b1.epub"
    if file_dir is not None:
        file_path = str(Path(file_dir) / "b1.epub")
        Path(file_path).write_bytes(b"0123456789")

    store.add_book("Book One", file_path, book_id="b1", file_size=10, author="A. Author", cover_path="/missing/b1.jpg")
    store.add_book("Book Two", "/missing/b2.pdf", book_id="b2", file_type="pdf")
    store.add_book("Book Three", "/missing/b3.epub", book_id="b3")

    store.create_collection(owner.id, "Shared shelf", collection_id="C1", description="Favourites")
    store.create_collection(owner.id, "Private shelf", collection_id="C2")
    store.add_book_to_collection("C1", "b1")
    store.add_book_to_collection("C1", "b2")
    store.add_book_to_collection("C2", "b3")
    store.set_share_token("C1", "abc123")


class ShareTokenResolverUnitTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        _seed_shared_collection(self.store)
        self.resolver = ShareTokenResolver(self.store)

    def test_resolve_collection_by_bound_token(self) -> None:
        collection = self.resolver.resolve_collection("abc123")

        self.assertIsNotNone(collection)
        self.assertEqual(collection.id, "C1")

    def test_resolve_collection_rejects_empty_non_string_and_unknown_tokens(self) -> None:
        for token in ("", None, 123, ["abc123"], "C1", "abc1234"):
            with self.subTest(token=token):
                self.assertIsNone(self.resolver.resolve_collection(token))

    def test_scenario_membership_and_revocation(self) -> None:
        self.assertEqual(self.resolver.resolve_book("abc123", "b1").title, "Book One")
        self.assertIsNone(self.resolver.resolve_book("abc123", "b3"))

        self.store.set_share_token("C1", None)

        self.assertIsNone(self.resolver.resolve_book("abc123", "b1"))
        self.assertIsNone(self.resolver.resolve_collection("abc123"))

    def test_resolve_book_returns_full_metadata(self) -> None:
        book = self.resolver.resolve_book("abc123", "b1")

        self.assertEqual(book.file_path, "/missing/b1.epub")
        self.assertEqual(book.author, "A. Author")

    def test_resolve_book_short_circuits_on_invalid_token(self) -> None:
        reads_before = self.store.read_count

        self.assertIsNone(self.resolver.resolve_book("nope", "b1"))

        self.assertEqual(self.store.read_count - reads_before, 1)

    def test_resolve_book_rejects_invalid_book_id_without_query(self) -> None:
        reads_before = self.store.read_count

        for book_id in ("", None, 42):
            with self.subTest(book_id=book_id):
                self.assertIsNone(self.resolver.resolve_book("abc123", book_id))

        self.assertEqual(self.store.read_count, reads_before)

    def test_book_in_another_shared_collection_is_not_reachable(self) -> None:
        self.store.set_share_token("C2", "other-token")

        self.assertIsNone(self.resolver.resolve_book("abc123", "b3"))
        self.assertIsNotNone(self.resolver.resolve_book("other-token", "b3"))
        self.assertIsNone(self.resolver.resolve_book("other-token", "b1"))

    def test_rebinding_after_revocation_invalidates_old_token(self) -> None:
        self.store.set_share_token("C1", "new-token")

        self.assertIsNone(self.resolver.resolve_book("abc123", "b1"))
        self.assertIsNotNone(self.resolver.resolve_book("new-token", "b1"))

    def test_storage_failures_resolve_to_none(self) -> None:
        self.store.read_failure_message = "database is locked"

        self.assertIsNone(self.resolver.resolve_collection("abc123"))
        self.assertIsNone(self.resolver.resolve_book("abc123", "b1"))
        self.assertIsNone(self.resolver.list_books("abc123", page=1, limit=10))

    def test_list_books_paginates_members_only(self) -> None:
        first = self.resolver.list_books("abc123", page=1, limit=1)
        second = self.resolver.list_books("abc123", page=2, limit=1)

        self.assertEqual(first.total, 2)
        self.assertEqual(first.total_pages, 2)
        self.assertTrue(first.has_more)
        self.assertEqual([book.id for book in first.books], ["b1"])
        self.assertEqual([book.id for book in second.books], ["b2"])
        self.assertFalse(second.has_more)
        self.assertEqual(first.collection.name, "Shared shelf")

    def test_cover_url_only_for_books_with_a_cover(self) -> None:
        listing = self.resolver.list_books("abc123", page=1, limit=10)
        covers = {book.id: book.cover_url for book in listing.books}

        self.assertEqual(covers, {"b1": "/api/shared/abc123/books/b1/cover", "b2": None})


class SharedApiTests(unittest.TestCase):
    _env_keys = ("ALEX_AUTH_PROVIDER",)

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["ALEX_AUTH_PROVIDER"] = "mock"
        get_settings.cache_clear()
        self._tmp = tempfile.TemporaryDirectory()
        self.app = create_app()
        self.store = self.app.state.store
        _seed_shared_collection(self.store, file_dir=self._tmp.name)
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        self._tmp.cleanup()
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()

    def test_shared_collection_listing_requires_no_session(self) -> None:
        response = self.client.get("/api/shared/abc123")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["collection"], {"name": "Shared shelf", "description": "Favourites"})
        self.assertEqual({book["id"] for book in body["books"]}, {"b1", "b2"})
        self.assertEqual(body["total"], 2)
        self.assertFalse(body["has_more"])

    def test_book_metadata_hides_storage_fields(self) -> None:
        response = self.client.get("/api/shared/abc123/books/b1")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["title"], "Book One")
        self.assertNotIn("file_path", response.json())
        self.assertNotIn("file_hash", response.json())

    def test_invalid_capability_is_indistinguishable_from_not_found(self) -> None:
        responses = [
            self.client.get("/api/shared/unknown"),
            self.client.get("/api/shared/unknown/books/b1"),
            self.client.get("/api/shared/abc123/books/b3"),
            self.client.get("/api/shared/abc123/books/missing"),
            self.client.get("/api/shared/abc123/books/b3/file"),
            self.client.get("/api/shared/abc123?page=0"),
        ]
        bodies = {(response.status_code, response.text) for response in responses}

        self.assertEqual(len(bodies), 1)
        status_code, _ = bodies.pop()
        self.assertEqual(status_code, 404)
        self.assertEqual(responses[0].json()["code"], "RESOURCE_NOT_FOUND")

    def test_revoked_token_stops_resolving_immediately(self) -> None:
        self.assertEqual(self.client.get("/api/shared/abc123/books/b1").status_code, 200)

        self.store.set_share_token("C1", None)

        self.assertEqual(self.client.get("/api/shared/abc123/books/b1").status_code, 404)
        self.assertEqual(self.client.get("/api/shared/abc123").status_code, 404)

    def test_storage_failure_on_public_route_is_404_not_500(self) -> None:
        self.store.read_failure_message = "database is locked"

        response = self.client.get("/api/shared/abc123/books/b1")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "RESOURCE_NOT_FOUND")

    def test_book_file_is_served_with_range_support(self) -> None:
        full = self.client.get("/api/shared/abc123/books/b1/file")
        partial = self.client.get("/api/shared/abc123/books/b1/book.epub", headers={"Range": "bytes=0-3"})

        self.assertEqual(full.status_code, 200)
        self.assertEqual(full.content, b"0123456789")
        self.assertEqual(full.headers["content-type"], "application/epub+zip")
        self.assertEqual(partial.status_code, 206)
        self.assertEqual(partial.content, b"0123")
        self.assertEqual(partial.headers["content-range"], "bytes 0-3/10")

    def test_member_book_missing_on_disk_is_404(self) -> None:
        response = self.client.get("/api/shared/abc123/books/b2/file")

        self.assertEqual(response.status_code, 404)

    def test_shared_pages_resolve_tokens_without_session(self) -> None:
        collection_page = self.client.get("/shared/abc123", follow_redirects=False)
        reader_page = self.client.get("/shared/abc123/read/b1", follow_redirects=False)
        foreign_book = self.client.get("/shared/abc123/read/b3", follow_redirects=False)
        unknown = self.client.get("/shared/nope", follow_redirects=False)

        self.assertEqual(collection_page.status_code, 200)
        self.assertIn("Shared shelf", collection_page.text)
        self.assertEqual(reader_page.status_code, 200)
        self.assertIn("Book One", reader_page.text)
        self.assertEqual(foreign_book.status_code, 404)
        self.assertEqual(unknown.status_code, 404)


if __name__ == "__main__":
    unittest.main()
