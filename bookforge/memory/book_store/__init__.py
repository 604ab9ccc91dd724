"""In-memory store for books and everything nested inside them.

The store holds an immutable tuple of Book snapshots. Every mutation rebuilds
the path from the root to the changed entity and swaps in a new tuple, so
objects previously handed out never change. Writers are serialized with a
re-entrant lock; readers see whichever root was current when they looked.

Lookups for a missing book, version, world or entity return None (or an empty
list); updates and deletes against a missing path are silent no-ops. Creating
under a missing parent returns the built entity without storing it.

Usage:
    store = BookStore.from_seed_file("library.yaml")
    char = store.create_character(book_id, version_id, {"name": "Ayla"})
    store.update_character(book_id, version_id, char.id, CharacterPatch(age=31))
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from bookforge.memory.books import Book, Version
from bookforge.memory.narrative import Chapter, Character, PlotArc, PlotCanvas
from bookforge.memory.patches import Payload
from bookforge.memory.seed import books_from_seed, load_seed_fixture
from bookforge.memory.world import Location, Lore, MagicSystem, World, WorldObject
from bookforge.settings import Settings
from bookforge.utils.exceptions import ConfigError
from bookforge.utils.ids import generate_id

from . import _books, _collections
from ._collections import (
    CHAPTERS,
    CHARACTERS,
    LOCATIONS,
    LORE,
    MAGIC_SYSTEMS,
    PLOT_ARCS,
    WORLD_OBJECTS,
    WORLDS,
)
from ._references import DanglingReference, ReferencePolicy
from ._references import find_dangling_references as _find_dangling
from ._traversal import find_by_id, resolve_version

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[tuple[Book, ...]], None]


class BookStore:
    """Thread-safe, copy-on-write store of books.

    Paths: Book ``()``, Version ``(book_id)``, Character/PlotArc/Chapter/World
    ``(book_id, version_id)``, Location/WorldObject/Lore/MagicSystem
    ``(book_id, version_id, world_id)``.
    """

    def __init__(
        self,
        books: Iterable[Book | Mapping[str, Any]] = (),
        reference_policy: ReferencePolicy | str = ReferencePolicy.ORPHAN,
        id_factory: Callable[[], str] | None = None,
    ):
        """Initialize the store with a seed.

        Args:
            books: Initial books (models or raw mappings); restored by reset().
            reference_policy: What deletes do to id references held elsewhere.
            id_factory: Source of fresh ids; defaults to generate_id.

        Raises:
            SeedFixtureError: If the seed does not validate.
            ConfigError: If the reference policy is unknown.
        """
        try:
            self.reference_policy = ReferencePolicy(reference_policy)
        except ValueError as e:
            raise ConfigError(f"Unknown reference policy: {reference_policy!r}") from e

        self._lock = threading.RLock()
        self._id_factory = id_factory or generate_id
        self._seed: tuple[Book, ...] = tuple(books_from_seed(books, id_factory=self._id_factory))
        self._books: tuple[Book, ...] = self._seed

        # Optional listener for root changes. Set via attach_change_callback().
        self._on_change: ChangeCallback | None = None

        logger.info(
            "BookStore initialized with %d book(s), reference_policy=%s",
            len(self._seed),
            self.reference_policy,
        )

    @classmethod
    def from_seed_file(
        cls,
        path: Path | str,
        reference_policy: ReferencePolicy | str = ReferencePolicy.ORPHAN,
        id_factory: Callable[[], str] | None = None,
    ) -> BookStore:
        """Build a store seeded from a JSON or YAML fixture file."""
        return cls(load_seed_fixture(path), reference_policy, id_factory)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> BookStore:
        """Build a store from application settings.

        Args:
            settings: Settings to use; loaded from settings.json when omitted.

        Returns:
            A store seeded from ``seed_fixture_path`` (empty when unset).
        """
        settings = settings or Settings.load()
        id_factory = functools.partial(generate_id, settings.id_random_length)
        if not settings.seed_fixture_path:
            return cls((), settings.reference_policy, id_factory)
        return cls.from_seed_file(
            settings.seed_fixture_path, settings.reference_policy, id_factory
        )

    # =========================================================================
    # Store-wide
    # =========================================================================

    @property
    def books(self) -> tuple[Book, ...]:
        """Current root snapshot."""
        return self._books

    def list_books(self) -> list[Book]:
        return list(self._books)

    def generate_id(self) -> str:
        """Fresh id in ``<epoch-millis>-<random>`` form."""
        return self._id_factory()

    def reset(self) -> None:
        """Restore the seed the store was built with."""
        with self._lock:
            self._books = self._seed
        logger.info("BookStore reset to seed (%d book(s))", len(self._seed))
        self._notify(self._seed)

    def attach_change_callback(self, callback: ChangeCallback | None) -> None:
        """Register a callback invoked with the new root after each mutation.

        Args:
            callback: Callable taking the books tuple, or None to detach.
        """
        self._on_change = callback
        logger.debug("Change callback %s", "attached" if callback else "detached")

    def _notify(self, books: tuple[Book, ...]) -> None:
        # Called outside the lock
        if self._on_change:
            try:
                self._on_change(books)
            except Exception as e:
                logger.warning("Change callback failed: %s", e)

    def find_dangling_references(self, book_id: str, version_id: str) -> list[DanglingReference]:
        """Id references in a version whose targets no longer exist."""
        version = resolve_version(self, book_id, version_id)
        return _find_dangling(version) if version else []

    # =========================================================================
    # Books
    # =========================================================================

    def get_book(self, book_id: str) -> Book | None:
        return find_by_id(self._books, book_id)

    def create_book(self, data: Payload) -> Book:
        return _books.create_book(self, data)

    def update_book(self, book_id: str, patch: Payload) -> None:
        _books.update_book(self, book_id, patch)

    def delete_book(self, book_id: str) -> None:
        _books.delete_book(self, book_id)

    def get_book_characters(self, book_id: str) -> list[Character]:
        return _books.get_book_characters(self, book_id)

    # =========================================================================
    # Versions
    # =========================================================================

    def get_versions(self, book_id: str) -> list[Version]:
        return _books.get_versions(self, book_id)

    def get_version(self, book_id: str, version_id: str) -> Version | None:
        return resolve_version(self, book_id, version_id)

    def create_version(self, book_id: str, data: Payload) -> Version:
        return _books.create_version(self, book_id, data)

    def update_version(self, book_id: str, version_id: str, patch: Payload) -> None:
        _books.update_version(self, book_id, version_id, patch)

    def delete_version(self, book_id: str, version_id: str) -> None:
        _books.delete_version(self, book_id, version_id)

    def get_plot_canvas(self, book_id: str, version_id: str) -> PlotCanvas | None:
        return _books.get_plot_canvas(self, book_id, version_id)

    def update_plot_canvas(
        self,
        book_id: str,
        version_id: str,
        canvas: PlotCanvas | Mapping[str, Any] | None,
    ) -> None:
        _books.update_plot_canvas(self, book_id, version_id, canvas)

    # =========================================================================
    # Characters
    # =========================================================================

    def get_characters(self, book_id: str, version_id: str) -> list[Character]:
        return _collections.list_in_version(self, CHARACTERS, book_id, version_id)

    def get_character(self, book_id: str, version_id: str, character_id: str) -> Character | None:
        return _collections.get_in_version(self, CHARACTERS, book_id, version_id, character_id)

    def create_character(self, book_id: str, version_id: str, data: Payload) -> Character:
        return _collections.create_in_version(self, CHARACTERS, book_id, version_id, data)

    def update_character(
        self, book_id: str, version_id: str, character_id: str, patch: Payload
    ) -> None:
        _collections.update_in_version(
            self, CHARACTERS, book_id, version_id, character_id, patch
        )

    def delete_character(self, book_id: str, version_id: str, character_id: str) -> None:
        _collections.delete_in_version(self, CHARACTERS, book_id, version_id, character_id)

    # =========================================================================
    # Plot arcs
    # =========================================================================

    def get_plot_arcs(self, book_id: str, version_id: str) -> list[PlotArc]:
        return _collections.list_in_version(self, PLOT_ARCS, book_id, version_id)

    def get_plot_arc(self, book_id: str, version_id: str, plot_arc_id: str) -> PlotArc | None:
        return _collections.get_in_version(self, PLOT_ARCS, book_id, version_id, plot_arc_id)

    def create_plot_arc(self, book_id: str, version_id: str, data: Payload) -> PlotArc:
        return _collections.create_in_version(self, PLOT_ARCS, book_id, version_id, data)

    def update_plot_arc(
        self, book_id: str, version_id: str, plot_arc_id: str, patch: Payload
    ) -> None:
        _collections.update_in_version(self, PLOT_ARCS, book_id, version_id, plot_arc_id, patch)

    def delete_plot_arc(self, book_id: str, version_id: str, plot_arc_id: str) -> None:
        _collections.delete_in_version(self, PLOT_ARCS, book_id, version_id, plot_arc_id)

    # =========================================================================
    # Chapters
    # =========================================================================

    def get_chapters(self, book_id: str, version_id: str) -> list[Chapter]:
        return _collections.list_in_version(self, CHAPTERS, book_id, version_id)

    def get_chapter(self, book_id: str, version_id: str, chapter_id: str) -> Chapter | None:
        return _collections.get_in_version(self, CHAPTERS, book_id, version_id, chapter_id)

    def create_chapter(self, book_id: str, version_id: str, data: Payload) -> Chapter:
        return _collections.create_in_version(self, CHAPTERS, book_id, version_id, data)

    def update_chapter(
        self, book_id: str, version_id: str, chapter_id: str, patch: Payload
    ) -> None:
        _collections.update_in_version(self, CHAPTERS, book_id, version_id, chapter_id, patch)

    def delete_chapter(self, book_id: str, version_id: str, chapter_id: str) -> None:
        _collections.delete_in_version(self, CHAPTERS, book_id, version_id, chapter_id)

    # =========================================================================
    # Worlds
    # =========================================================================

    def get_worlds(self, book_id: str, version_id: str) -> list[World]:
        return _collections.list_in_version(self, WORLDS, book_id, version_id)

    def get_world(self, book_id: str, version_id: str, world_id: str) -> World | None:
        return _collections.get_in_version(self, WORLDS, book_id, version_id, world_id)

    def create_world(self, book_id: str, version_id: str, data: Payload) -> World:
        return _collections.create_in_version(self, WORLDS, book_id, version_id, data)

    def update_world(self, book_id: str, version_id: str, world_id: str, patch: Payload) -> None:
        _collections.update_in_version(self, WORLDS, book_id, version_id, world_id, patch)

    def delete_world(self, book_id: str, version_id: str, world_id: str) -> None:
        """Remove a world together with everything it owns."""
        _collections.delete_in_version(self, WORLDS, book_id, version_id, world_id)

    # =========================================================================
    # Locations
    # =========================================================================

    def get_locations(self, book_id: str, version_id: str, world_id: str) -> list[Location]:
        return _collections.list_in_world(self, LOCATIONS, book_id, version_id, world_id)

    def get_location(
        self, book_id: str, version_id: str, world_id: str, location_id: str
    ) -> Location | None:
        return _collections.get_in_world(
            self, LOCATIONS, book_id, version_id, world_id, location_id
        )

    def create_location(
        self, book_id: str, version_id: str, world_id: str, data: Payload
    ) -> Location:
        return _collections.create_in_world(self, LOCATIONS, book_id, version_id, world_id, data)

    def update_location(
        self, book_id: str, version_id: str, world_id: str, location_id: str, patch: Payload
    ) -> None:
        _collections.update_in_world(
            self, LOCATIONS, book_id, version_id, world_id, location_id, patch
        )

    def delete_location(
        self, book_id: str, version_id: str, world_id: str, location_id: str
    ) -> None:
        _collections.delete_in_world(self, LOCATIONS, book_id, version_id, world_id, location_id)

    # =========================================================================
    # World objects
    # =========================================================================

    def get_world_objects(self, book_id: str, version_id: str, world_id: str) -> list[WorldObject]:
        return _collections.list_in_world(self, WORLD_OBJECTS, book_id, version_id, world_id)

    def get_world_object(
        self, book_id: str, version_id: str, world_id: str, object_id: str
    ) -> WorldObject | None:
        return _collections.get_in_world(
            self, WORLD_OBJECTS, book_id, version_id, world_id, object_id
        )

    def create_world_object(
        self, book_id: str, version_id: str, world_id: str, data: Payload
    ) -> WorldObject:
        return _collections.create_in_world(
            self, WORLD_OBJECTS, book_id, version_id, world_id, data
        )

    def update_world_object(
        self, book_id: str, version_id: str, world_id: str, object_id: str, patch: Payload
    ) -> None:
        _collections.update_in_world(
            self, WORLD_OBJECTS, book_id, version_id, world_id, object_id, patch
        )

    def delete_world_object(
        self, book_id: str, version_id: str, world_id: str, object_id: str
    ) -> None:
        _collections.delete_in_world(
            self, WORLD_OBJECTS, book_id, version_id, world_id, object_id
        )

    # =========================================================================
    # Lore
    # =========================================================================

    def get_lore(self, book_id: str, version_id: str, world_id: str) -> list[Lore]:
        return _collections.list_in_world(self, LORE, book_id, version_id, world_id)

    def get_lore_item(
        self, book_id: str, version_id: str, world_id: str, lore_id: str
    ) -> Lore | None:
        return _collections.get_in_world(self, LORE, book_id, version_id, world_id, lore_id)

    def create_lore(self, book_id: str, version_id: str, world_id: str, data: Payload) -> Lore:
        return _collections.create_in_world(self, LORE, book_id, version_id, world_id, data)

    def update_lore(
        self, book_id: str, version_id: str, world_id: str, lore_id: str, patch: Payload
    ) -> None:
        _collections.update_in_world(self, LORE, book_id, version_id, world_id, lore_id, patch)

    def delete_lore(self, book_id: str, version_id: str, world_id: str, lore_id: str) -> None:
        _collections.delete_in_world(self, LORE, book_id, version_id, world_id, lore_id)

    # =========================================================================
    # Magic systems
    # =========================================================================

    def get_magic_systems(
        self, book_id: str, version_id: str, world_id: str
    ) -> list[MagicSystem]:
        return _collections.list_in_world(self, MAGIC_SYSTEMS, book_id, version_id, world_id)

    def get_magic_system(
        self, book_id: str, version_id: str, world_id: str, magic_system_id: str
    ) -> MagicSystem | None:
        return _collections.get_in_world(
            self, MAGIC_SYSTEMS, book_id, version_id, world_id, magic_system_id
        )

    def create_magic_system(
        self, book_id: str, version_id: str, world_id: str, data: Payload
    ) -> MagicSystem:
        return _collections.create_in_world(
            self, MAGIC_SYSTEMS, book_id, version_id, world_id, data
        )

    def update_magic_system(
        self, book_id: str, version_id: str, world_id: str, magic_system_id: str, patch: Payload
    ) -> None:
        _collections.update_in_world(
            self, MAGIC_SYSTEMS, book_id, version_id, world_id, magic_system_id, patch
        )

    def delete_magic_system(
        self, book_id: str, version_id: str, world_id: str, magic_system_id: str
    ) -> None:
        _collections.delete_in_world(
            self, MAGIC_SYSTEMS, book_id, version_id, world_id, magic_system_id
        )


__all__ = [
    "BookStore",
    "ChangeCallback",
    "DanglingReference",
    "ReferencePolicy",
]
