"""Cross-entity id references within a Version.

Entities reference each other by id in plain lists (a plot arc's characters, a
lore entry's locations, ...). Deleting an entity never touches those lists
under ReferencePolicy.ORPHAN; under ReferencePolicy.CASCADE the removed ids are
scrubbed from every referencing list in the same Version.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeVar

from bookforge.memory.books import Version
from bookforge.memory.entities import StoreModel
from bookforge.memory.narrative import Character, PlotArc
from bookforge.memory.world import Location, World

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=StoreModel)


class ReferencePolicy(StrEnum):
    """What a delete does to id references held by other entities."""

    ORPHAN = "orphan"
    CASCADE = "cascade"


@dataclass(frozen=True)
class DanglingReference:
    """An id reference whose target no longer exists in the Version."""

    entity_type: str
    entity_id: str
    field: str
    missing_id: str


def _strip(model: ModelT, fields: Iterable[str], removed: set[str]) -> ModelT:
    """Return *model* with removed ids filtered out of the given list fields.

    The same object is returned when nothing changed.
    """
    update = {}
    for field in fields:
        values = getattr(model, field)
        kept = tuple(value for value in values if value not in removed)
        if len(kept) != len(values):
            update[field] = kept
    return model.model_copy(update=update) if update else model


def _scrub_character(character: Character, removed: set[str]) -> Character:
    character = _strip(character, ("relationships",), removed)
    arcs = tuple(_strip(arc, ("relationships",), removed) for arc in character.arcs)
    if any(new is not old for new, old in zip(arcs, character.arcs, strict=True)):
        character = character.model_copy(update={"arcs": arcs})
    return character


def _scrub_plot_arc(arc: PlotArc, removed: set[str]) -> PlotArc:
    arc = _strip(arc, ("characters",), removed)
    scenes = tuple(_strip(scene, ("characters",), removed) for scene in arc.scenes)
    if any(new is not old for new, old in zip(scenes, arc.scenes, strict=True)):
        arc = arc.model_copy(update={"scenes": scenes})
    return arc


def _scrub_location(location: Location, removed: set[str]) -> Location:
    if location.parent_location in removed:
        return location.model_copy(update={"parent_location": None})
    return location


def _scrub_world(world: World, removed: set[str]) -> World:
    locations = tuple(_scrub_location(loc, removed) for loc in world.locations)
    lore = tuple(
        _strip(item, ("locations_involved", "objects_involved"), removed) for item in world.lore
    )
    magic = tuple(
        _strip(system, ("important_objects", "locations_of_power", "lore_references"), removed)
        for system in world.magic_systems
    )
    update = {}
    if any(new is not old for new, old in zip(locations, world.locations, strict=True)):
        update["locations"] = locations
    if any(new is not old for new, old in zip(lore, world.lore, strict=True)):
        update["lore"] = lore
    if any(new is not old for new, old in zip(magic, world.magic_systems, strict=True)):
        update["magic_systems"] = magic
    return world.model_copy(update=update) if update else world


def scrub_references(version: Version, removed: set[str]) -> Version:
    """Remove the given ids from every referencing list in a Version.

    Args:
        version: Version snapshot after the entities were removed.
        removed: Ids of the deleted entities (including children of a deleted world).

    Returns:
        A new Version when any reference was scrubbed, otherwise the same object.
    """
    if not removed:
        return version

    characters = tuple(_scrub_character(c, removed) for c in version.characters)
    plot_arcs = tuple(_scrub_plot_arc(a, removed) for a in version.plot_arcs)
    worlds = tuple(_scrub_world(w, removed) for w in version.worlds)

    update = {}
    if any(new is not old for new, old in zip(characters, version.characters, strict=True)):
        update["characters"] = characters
    if any(new is not old for new, old in zip(plot_arcs, version.plot_arcs, strict=True)):
        update["plot_arcs"] = plot_arcs
    if any(new is not old for new, old in zip(worlds, version.worlds, strict=True)):
        update["worlds"] = worlds

    if not update:
        return version
    logger.debug(
        "Scrubbed references to %d removed id(s) from version %s: %s",
        len(removed),
        version.id,
        sorted(update),
    )
    return version.model_copy(update=update)


def find_dangling_references(version: Version) -> list[DanglingReference]:
    """List id references in a Version whose targets do not exist.

    Character references are resolved against the Version's characters; location,
    object and lore references against all worlds of the Version.

    Args:
        version: Version to inspect.

    Returns:
        Dangling references in traversal order.
    """
    character_ids = {c.id for c in version.characters}
    location_ids = {loc.id for w in version.worlds for loc in w.locations}
    object_ids = {obj.id for w in version.worlds for obj in w.objects}
    lore_ids = {item.id for w in version.worlds for item in w.lore}

    dangling: list[DanglingReference] = []

    def check(entity_type: str, entity_id: str, field: str, refs: Iterable[str], known: set[str]):
        for ref in refs:
            if ref not in known:
                dangling.append(DanglingReference(entity_type, entity_id, field, ref))

    for character in version.characters:
        check("character", character.id, "relationships", character.relationships, character_ids)
        for arc in character.arcs:
            check("character", character.id, "arcs.relationships", arc.relationships, character_ids)

    for plot_arc in version.plot_arcs:
        check("plot_arc", plot_arc.id, "characters", plot_arc.characters, character_ids)
        for scene in plot_arc.scenes:
            check("plot_arc", plot_arc.id, "scenes.characters", scene.characters, character_ids)

    for world in version.worlds:
        for location in world.locations:
            if location.parent_location:
                parent = [location.parent_location]
                check("location", location.id, "parent_location", parent, location_ids)
        for item in world.lore:
            check("lore", item.id, "locations_involved", item.locations_involved, location_ids)
            check("lore", item.id, "objects_involved", item.objects_involved, object_ids)
        for system in world.magic_systems:
            for field, known in (
                ("important_objects", object_ids),
                ("locations_of_power", location_ids),
                ("lore_references", lore_ids),
            ):
                check("magic_system", system.id, field, getattr(system, field), known)

    return dangling

