"""Generic CRUD for collections nested under a Version or a World."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from bookforge.memory.books import Version
from bookforge.memory.entities import StoreEntity
from bookforge.memory.narrative import Chapter, Character, PlotArc
from bookforge.memory.patches import Payload, apply_changes, build_entity, coerce_patch
from bookforge.memory.world import Location, Lore, MagicSystem, World, WorldObject

from ._references import ReferencePolicy, scrub_references
from ._traversal import (
    find_by_id,
    mutate_version,
    mutate_world,
    replace_item,
    resolve_version,
    resolve_world,
)

if TYPE_CHECKING:
    from . import BookStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Collection:
    """An entity list held by a parent model under *field*."""

    entity_cls: type[StoreEntity]
    field: str

    @property
    def entity_type(self) -> str:
        return self.entity_cls.entity_type


CHARACTERS = Collection(Character, "characters")
PLOT_ARCS = Collection(PlotArc, "plot_arcs")
CHAPTERS = Collection(Chapter, "chapters")
WORLDS = Collection(World, "worlds")

LOCATIONS = Collection(Location, "locations")
WORLD_OBJECTS = Collection(WorldObject, "objects")
LORE = Collection(Lore, "lore")
MAGIC_SYSTEMS = Collection(MagicSystem, "magic_systems")


def _cascade(store: BookStore, version: Version, removed: set[str]) -> Version:
    if store.reference_policy is ReferencePolicy.CASCADE:
        return scrub_references(version, removed)
    return version


# =========================================================================
# Version-scoped: characters, plot arcs, chapters, worlds
# =========================================================================


def list_in_version(
    store: BookStore, coll: Collection, book_id: str, version_id: str
) -> list[Any]:
    version = resolve_version(store, book_id, version_id)
    return list(getattr(version, coll.field)) if version else []


def get_in_version(
    store: BookStore, coll: Collection, book_id: str, version_id: str, item_id: str
) -> Any | None:
    return find_by_id(list_in_version(store, coll, book_id, version_id), item_id)


def create_in_version(
    store: BookStore, coll: Collection, book_id: str, version_id: str, data: Payload
) -> Any:
    """Build an entity and append it to the Version's list.

    The entity is returned even when the Version does not resolve; the store
    is then left unchanged.
    """
    entity = build_entity(coll.entity_cls, data, store.generate_id(), store.generate_id)

    def append(version: Version) -> Version:
        return version.model_copy(update={coll.field: (*getattr(version, coll.field), entity)})

    action = f"create {coll.entity_type} {entity.id}"
    if not mutate_version(store, book_id, version_id, append, action):
        logger.warning(
            "Cannot create %s '%s': version %s/%s not found",
            coll.entity_type,
            entity.label,
            book_id,
            version_id,
        )
    return entity


def update_in_version(
    store: BookStore,
    coll: Collection,
    book_id: str,
    version_id: str,
    item_id: str,
    patch: Payload,
) -> None:
    changes = coerce_patch(coll.entity_cls, patch, store.generate_id)
    if not changes:
        logger.debug("update %s %s: empty patch", coll.entity_type, item_id)
        return

    def update(version: Version) -> Version | None:
        items = replace_item(
            getattr(version, coll.field), item_id, lambda item: apply_changes(item, changes)
        )
        return version.model_copy(update={coll.field: items}) if items is not None else None

    mutate_version(store, book_id, version_id, update, f"update {coll.entity_type} {item_id}")


def delete_in_version(
    store: BookStore, coll: Collection, book_id: str, version_id: str, item_id: str
) -> None:
    def delete(version: Version) -> Version | None:
        items = getattr(version, coll.field)
        target = find_by_id(items, item_id)
        if target is None:
            return None
        version = version.model_copy(
            update={coll.field: tuple(item for item in items if item.id != item_id)}
        )
        removed = {item_id}
        if isinstance(target, World):
            removed |= target.child_ids()
        return _cascade(store, version, removed)

    mutate_version(store, book_id, version_id, delete, f"delete {coll.entity_type} {item_id}")


# =========================================================================
# World-scoped: locations, objects, lore, magic systems
# =========================================================================


def list_in_world(
    store: BookStore, coll: Collection, book_id: str, version_id: str, world_id: str
) -> list[Any]:
    world = resolve_world(store, book_id, version_id, world_id)
    return list(getattr(world, coll.field)) if world else []


def get_in_world(
    store: BookStore,
    coll: Collection,
    book_id: str,
    version_id: str,
    world_id: str,
    item_id: str,
) -> Any | None:
    return find_by_id(list_in_world(store, coll, book_id, version_id, world_id), item_id)


def create_in_world(
    store: BookStore,
    coll: Collection,
    book_id: str,
    version_id: str,
    world_id: str,
    data: Payload,
) -> Any:
    """Build a world child with ``parent_world_id`` set and append it to the World."""
    entity = build_entity(
        coll.entity_cls, data, store.generate_id(), store.generate_id, parent_world_id=world_id
    )

    def append(world: World) -> World:
        return world.model_copy(update={coll.field: (*getattr(world, coll.field), entity)})

    action = f"create {coll.entity_type} {entity.id}"
    if not mutate_world(store, book_id, version_id, world_id, append, action):
        logger.warning(
            "Cannot create %s '%s': world %s/%s/%s not found",
            coll.entity_type,
            entity.label,
            book_id,
            version_id,
            world_id,
        )
    return entity


def update_in_world(
    store: BookStore,
    coll: Collection,
    book_id: str,
    version_id: str,
    world_id: str,
    item_id: str,
    patch: Payload,
) -> None:
    changes = coerce_patch(coll.entity_cls, patch, store.generate_id)
    if not changes:
        logger.debug("update %s %s: empty patch", coll.entity_type, item_id)
        return

    def update(world: World) -> World | None:
        items = replace_item(
            getattr(world, coll.field), item_id, lambda item: apply_changes(item, changes)
        )
        return world.model_copy(update={coll.field: items}) if items is not None else None

    action = f"update {coll.entity_type} {item_id}"
    mutate_world(store, book_id, version_id, world_id, update, action)


def delete_in_world(
    store: BookStore,
    coll: Collection,
    book_id: str,
    version_id: str,
    world_id: str,
    item_id: str,
) -> None:
    def remove(world: World) -> World | None:
        items = getattr(world, coll.field)
        if find_by_id(items, item_id) is None:
            return None
        return world.model_copy(update={coll.field: tuple(i for i in items if i.id != item_id)})

    # Rebuilt at Version level so a cascade can reach other worlds
    def delete(version: Version) -> Version | None:
        worlds = replace_item(version.worlds, world_id, remove)
        if worlds is None:
            return None
        return _cascade(store, version.model_copy(update={"worlds": worlds}), {item_id})

    mutate_version(store, book_id, version_id, delete, f"delete {coll.entity_type} {item_id}")
