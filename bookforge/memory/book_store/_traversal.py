"""Path resolution and copy-on-write rebuilding for BookStore."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, TypeVar

from bookforge.memory.books import Book, Version
from bookforge.memory.entities import StoreEntity
from bookforge.memory.world import World

if TYPE_CHECKING:
    from . import BookStore

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=StoreEntity)

# A step returns the replacement for its input, or None when nothing changed
Step = Callable[[EntityT], EntityT | None]


def find_by_id(items: Sequence[EntityT], item_id: str) -> EntityT | None:
    """First item with the given id, or None."""
    return next((item for item in items if item.id == item_id), None)


def resolve_book(store: BookStore, book_id: str) -> Book | None:
    return find_by_id(store.books, book_id)


def resolve_version(store: BookStore, book_id: str, version_id: str) -> Version | None:
    book = resolve_book(store, book_id)
    return find_by_id(book.versions, version_id) if book else None


def resolve_world(
    store: BookStore, book_id: str, version_id: str, world_id: str
) -> World | None:
    version = resolve_version(store, book_id, version_id)
    return find_by_id(version.worlds, world_id) if version else None


def replace_item(
    items: Sequence[EntityT], item_id: str, step: Step[EntityT]
) -> tuple[EntityT, ...] | None:
    """Apply *step* to the item with *item_id*, keeping its position.

    Returns:
        A new tuple, or None if the item is missing or *step* made no change.
    """
    for index, item in enumerate(items):
        if item.id == item_id:
            replacement = step(item)
            if replacement is None:
                return None
            return (*items[:index], replacement, *items[index + 1 :])
    return None


def mutate_books(
    store: BookStore,
    step: Callable[[tuple[Book, ...]], tuple[Book, ...] | None],
    action: str,
) -> bool:
    """Swap in a new root built by *step* and notify listeners.

    Args:
        store: Store to mutate.
        step: Builds the new root from the current one, or returns None for no change.
        action: Short description for logging.

    Returns:
        True if the root was replaced.
    """
    with store._lock:
        books = step(store._books)
        if books is None:
            logger.debug("%s: nothing changed", action)
            return False
        store._books = books
    logger.debug("%s: committed", action)
    store._notify(books)
    return True


def mutate_book(store: BookStore, book_id: str, step: Step[Book], action: str) -> bool:
    def rebuild(books: tuple[Book, ...]) -> tuple[Book, ...] | None:
        return replace_item(books, book_id, step)

    return mutate_books(store, rebuild, action)


def mutate_version(
    store: BookStore, book_id: str, version_id: str, step: Step[Version], action: str
) -> bool:
    def rebuild(book: Book) -> Book | None:
        versions = replace_item(book.versions, version_id, step)
        return book.model_copy(update={"versions": versions}) if versions is not None else None

    return mutate_book(store, book_id, rebuild, action)


def mutate_world(
    store: BookStore,
    book_id: str,
    version_id: str,
    world_id: str,
    step: Step[World],
    action: str,
) -> bool:
    def rebuild(version: Version) -> Version | None:
        worlds = replace_item(version.worlds, world_id, step)
        return version.model_copy(update={"worlds": worlds}) if worlds is not None else None

    return mutate_version(store, book_id, version_id, rebuild, action)
