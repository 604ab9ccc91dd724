"""Seed fixtures - the initial state a BookStore is constructed from.

A fixture is a JSON or YAML document holding either a list of books or a
mapping with a ``books`` list, in the camelCase shape used by the editor
(``plotArcs``, ``parentWorldId``, ...). Snake_case keys are accepted as well.
"""

import json
import logging
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from bookforge.memory.books import Book, Version
from bookforge.memory.narrative import Character, PlotArc
from bookforge.memory.patches import IdFactory, assign_record_ids
from bookforge.memory.world import World
from bookforge.utils.exceptions import SeedFixtureError
from bookforge.utils.ids import generate_id
from bookforge.utils.logging_config import log_performance

logger = logging.getLogger(__name__)

SEED_SUFFIXES = frozenset({".json", ".yaml", ".yml"})

# Derived or duplicate book keys found in older data; recomputed on read instead
LEGACY_BOOK_KEYS = ("collaboratorCount", "collaborator_count", "bookId", "book_id")


def load_seed_fixture(path: Path | str) -> list[Book]:
    """Read and validate a seed fixture file.

    Args:
        path: JSON (.json) or YAML (.yaml/.yml) fixture.

    Returns:
        Validated books in file order.

    Raises:
        SeedFixtureError: If the file cannot be read or parsed, or does not validate.
    """
    path = Path(path)
    if path.suffix.lower() not in SEED_SUFFIXES:
        raise SeedFixtureError(
            f"Unsupported seed fixture type '{path.suffix}', "
            f"expected one of {sorted(SEED_SUFFIXES)}",
            path,
        )

    with log_performance(logger, f"seed load {path.name}"):
        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except json.JSONDecodeError as e:
            raise SeedFixtureError(f"Invalid JSON in seed fixture: {e}", path) from e
        except yaml.YAMLError as e:
            raise SeedFixtureError(f"Invalid YAML in seed fixture: {e}", path) from e
        except OSError as e:
            raise SeedFixtureError(f"Failed to read seed fixture: {e}", path) from e

        if data is None:
            logger.info("Seed fixture %s is empty", path)
            return []
        if isinstance(data, Mapping):
            data = data.get("books", [])
        if not isinstance(data, list):
            raise SeedFixtureError(
                f"Seed fixture must hold a list of books, got {type(data).__name__}", path
            )

        books = books_from_seed(data, source=path)
    logger.info("Loaded %d book(s) from seed fixture %s", len(books), path)
    return books


def books_from_seed(
    entries: Iterable[Book | Mapping[str, Any]],
    source: Path | str | None = None,
    id_factory: IdFactory = generate_id,
) -> list[Book]:
    """Validate seed entries into books ready for a store.

    - Book-level ``characters`` (older data) move to versions without characters
    - Location/object/lore/magic-system ``parent_world_id`` is set to the
      containing world
    - Character arcs and plot scenes without an id get one from *id_factory*
    - Ids must be unique across the whole graph

    Args:
        entries: Book models or raw mappings.
        source: Where the entries came from, for error messages.
        id_factory: Source of ids for copied legacy characters and embedded records.

    Returns:
        Validated books.

    Raises:
        SeedFixtureError: If an entry is not a mapping, fails validation, or ids repeat.
    """
    books: list[Book] = []
    for index, entry in enumerate(entries):
        if isinstance(entry, Book):
            book = entry
        elif isinstance(entry, Mapping):
            book = _book_from_mapping(entry, index, source, id_factory)
        else:
            raise SeedFixtureError(
                f"Book #{index} must be a mapping, got {type(entry).__name__}", source
            )
        books.append(_normalize_versions(book, id_factory))

    duplicates = sorted(
        entity_id for entity_id, count in Counter(iter_entity_ids(books)).items() if count > 1
    )
    if duplicates:
        raise SeedFixtureError(f"Duplicate entity ids in seed: {duplicates}", source)
    return books


def iter_entity_ids(books: Iterable[Book]) -> Iterator[str]:
    """Yield the id of every addressable entity in the given books."""
    for book in books:
        yield book.id
        for version in book.versions:
            yield version.id
            for entity in (*version.characters, *version.plot_arcs, *version.chapters):
                yield entity.id
            for world in version.worlds:
                yield world.id
                children = (*world.locations, *world.objects, *world.lore, *world.magic_systems)
                yield from (child.id for child in children)


def _book_from_mapping(
    entry: Mapping[str, Any], index: int, source: Path | str | None, id_factory: IdFactory
) -> Book:
    data = dict(entry)
    for key in LEGACY_BOOK_KEYS:
        data.pop(key, None)

    legacy_characters = data.pop("characters", None) or []
    versions = [dict(v) if isinstance(v, Mapping) else v for v in data.get("versions") or []]
    if legacy_characters:
        _distribute_legacy_characters(legacy_characters, versions, data.get("id"), id_factory)
    data["versions"] = versions

    try:
        return Book.model_validate(data)
    except PydanticValidationError as e:
        raise SeedFixtureError(f"Book #{index} ({data.get('id')}) is invalid: {e}", source) from e


def _distribute_legacy_characters(
    characters: list[Any], versions: list[Any], book_id: Any, id_factory: IdFactory
) -> None:
    """Give book-level characters to every version that has none of its own.

    The first such version takes them as-is; later ones get copies with fresh
    ids so no character is owned by two versions.
    """
    receivers = [v for v in versions if isinstance(v, dict) and not v.get("characters")]
    if not receivers:
        logger.warning(
            "Dropping %d book-level character(s) of book %s: no version can take them",
            len(characters),
            book_id,
        )
        return

    for position, version in enumerate(receivers):
        if position == 0:
            version["characters"] = list(characters)
        else:
            version["characters"] = [
                {**c, "id": id_factory()} if isinstance(c, Mapping) else c for c in characters
            ]
    logger.info(
        "Moved %d book-level character(s) of book %s into %d version(s)",
        len(characters),
        book_id,
        len(receivers),
    )


def _normalize_versions(book: Book, id_factory: IdFactory) -> Book:
    versions = tuple(_normalize_version(version, id_factory) for version in book.versions)
    return book.model_copy(update={"versions": versions})


def _normalize_version(version: Version, id_factory: IdFactory) -> Version:
    """Claim world children and give arcs and scenes without an id one."""
    characters = tuple(_with_record_ids(c, id_factory) for c in version.characters)
    plot_arcs = tuple(_with_record_ids(arc, id_factory) for arc in version.plot_arcs)
    worlds = tuple(_claim_children(world) for world in version.worlds)
    return version.model_copy(
        update={"characters": characters, "plot_arcs": plot_arcs, "worlds": worlds}
    )


def _with_record_ids(entity: Character | PlotArc, id_factory: IdFactory) -> Character | PlotArc:
    records = {name: getattr(entity, name) for name in entity.embedded_records}
    return entity.model_copy(update=assign_record_ids(records, id_factory))


def _claim_children(world: World) -> World:
    update = {}
    for field in sorted(World.owned_collections):
        children = []
        for child in getattr(world, field):
            if child.parent_world_id != world.id:
                if child.parent_world_id:
                    logger.warning(
                        "%s %s listed parent world %s but is owned by world %s; reassigning",
                        child.entity_type,
                        child.id,
                        child.parent_world_id,
                        world.id,
                    )
                child = child.model_copy(update={"parent_world_id": world.id})
            children.append(child)
        update[field] = tuple(children)
    return world.model_copy(update=update)
