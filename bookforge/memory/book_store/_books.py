"""Book and Version operations for BookStore."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from bookforge.memory.books import Book, Version
from bookforge.memory.narrative import Character, PlotCanvas
from bookforge.memory.patches import Payload, apply_changes, build_entity, coerce_patch
from bookforge.utils.exceptions import EntityValidationError

from ._traversal import (
    find_by_id,
    mutate_book,
    mutate_books,
    mutate_version,
    replace_item,
    resolve_book,
    resolve_version,
)

if TYPE_CHECKING:
    from . import BookStore

logger = logging.getLogger(__name__)


# =========================================================================
# Books
# =========================================================================


def create_book(store: BookStore, data: Payload) -> Book:
    """Build a book and append it to the root list.

    Args:
        store: Target store.
        data: Book fields without id or versions.

    Returns:
        The stored book.

    Raises:
        EntityValidationError: If the title is empty or a value is invalid.
    """
    book = build_entity(Book, data, store.generate_id())
    mutate_books(store, lambda books: (*books, book), f"create book {book.id}")
    logger.info("Created book %s '%s'", book.id, book.title)
    return book


def update_book(store: BookStore, book_id: str, patch: Payload) -> None:
    changes = coerce_patch(Book, patch)
    if not changes:
        logger.debug("update book %s: empty patch", book_id)
        return
    action = f"update book {book_id}"
    mutate_book(store, book_id, lambda book: apply_changes(book, changes), action)


def delete_book(store: BookStore, book_id: str) -> None:
    def delete(books: tuple[Book, ...]) -> tuple[Book, ...] | None:
        if find_by_id(books, book_id) is None:
            return None
        return tuple(book for book in books if book.id != book_id)

    if mutate_books(store, delete, f"delete book {book_id}"):
        logger.info("Deleted book %s", book_id)


def get_book_characters(store: BookStore, book_id: str) -> list[Character]:
    """Characters of the book's latest version; empty if there is none."""
    book = resolve_book(store, book_id)
    latest = book.latest_version if book else None
    return list(latest.characters) if latest else []


# =========================================================================
# Versions
# =========================================================================


def get_versions(store: BookStore, book_id: str) -> list[Version]:
    book = resolve_book(store, book_id)
    return list(book.versions) if book else []


def create_version(store: BookStore, book_id: str, data: Payload) -> Version:
    """Build a version and append it to the book.

    The version is returned even if the book is missing; the store is then
    left unchanged.
    """
    version = build_entity(Version, data, store.generate_id())

    def append(book: Book) -> Book:
        return book.model_copy(update={"versions": (*book.versions, version)})

    if not mutate_book(store, book_id, append, f"create version {version.id}"):
        logger.warning("Cannot create version '%s': book %s not found", version.name, book_id)
    return version


def update_version(store: BookStore, book_id: str, version_id: str, patch: Payload) -> None:
    changes = coerce_patch(Version, patch)
    if not changes:
        logger.debug("update version %s: empty patch", version_id)
        return

    def update(book: Book) -> Book | None:
        versions = replace_item(book.versions, version_id, lambda v: apply_changes(v, changes))
        return book.model_copy(update={"versions": versions}) if versions is not None else None

    mutate_book(store, book_id, update, f"update version {version_id}")


def delete_version(store: BookStore, book_id: str, version_id: str) -> None:
    def delete(book: Book) -> Book | None:
        if find_by_id(book.versions, version_id) is None:
            return None
        return book.model_copy(
            update={"versions": tuple(v for v in book.versions if v.id != version_id)}
        )

    mutate_book(store, book_id, delete, f"delete version {version_id}")


# =========================================================================
# Plot canvas
# =========================================================================


def get_plot_canvas(store: BookStore, book_id: str, version_id: str) -> PlotCanvas | None:
    version = resolve_version(store, book_id, version_id)
    return version.plot_canvas if version else None


def update_plot_canvas(
    store: BookStore,
    book_id: str,
    version_id: str,
    canvas: PlotCanvas | Mapping[str, Any] | None,
) -> None:
    """Replace the version's plot canvas wholesale (None clears it).

    Raises:
        EntityValidationError: If the canvas is malformed.
    """
    if canvas is not None and not isinstance(canvas, PlotCanvas):
        try:
            canvas = PlotCanvas.model_validate(canvas)
        except PydanticValidationError as e:
            raise EntityValidationError(f"Invalid plot canvas: {e}", "plot_canvas") from e

    def replace(version: Version) -> Version:
        return version.model_copy(update={"plot_canvas": canvas})

    mutate_version(store, book_id, version_id, replace, f"update plot canvas of {version_id}")
