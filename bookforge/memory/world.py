"""World-building entities: worlds and the locations, objects, lore and magic
systems they own.

Location, WorldObject, Lore and MagicSystem carry ``parent_world_id``, a
lookup-only back-reference set by the store to the id of the containing World.
Sub-records such as Geography or Culture are plain attribute bags embedded in
their owner and are not addressable on their own.
"""

from typing import ClassVar

from pydantic import Field

from bookforge.memory.entities import HistoryEvent, StoreEntity, StoreModel, WorldScopedEntity


class Geography(StoreModel):
    terrain: str = ""
    climate: str = ""
    flora_fauna: tuple[str, ...] = ()


class Culture(StoreModel):
    traditions: tuple[str, ...] = ()
    language: tuple[str, ...] = ()
    religion: tuple[str, ...] = ()
    governance: str = ""


class Politics(StoreModel):
    alliances: tuple[str, ...] = ()
    conflicts: tuple[str, ...] = ()
    leaders: tuple[str, ...] = ()


class Economy(StoreModel):
    trade: tuple[str, ...] = ()
    resources: tuple[str, ...] = ()
    technology: str = ""


class Location(WorldScopedEntity):
    """A place in a world."""

    name: str = ""
    type: str = ""
    region: str = ""
    description: str = ""
    image: str | None = None
    parent_location: str | None = None  # id of the enclosing location
    history: tuple[HistoryEvent, ...] = ()
    geography: Geography = Field(default_factory=Geography)
    culture: Culture = Field(default_factory=Culture)
    politics: Politics = Field(default_factory=Politics)
    economy: Economy = Field(default_factory=Economy)
    timeline_events: tuple[HistoryEvent, ...] = ()
    beliefs_and_myths: tuple[str, ...] = ()
    landmarks: tuple[str, ...] = ()

    entity_type: ClassVar[str] = "location"


class WorldObject(WorldScopedEntity):
    """An artifact or notable object in a world."""

    name: str = ""
    type: str = ""
    origin: str = ""
    description: str = ""
    image: str | None = None
    powers: tuple[str, ...] = ()
    limitations: tuple[str, ...] = ()
    current_holder: str | None = None
    past_owners: tuple[str, ...] = ()
    timeline_events: tuple[HistoryEvent, ...] = ()

    entity_type: ClassVar[str] = "world_object"


class LoreTimeline(StoreModel):
    start_year: str = ""
    end_year: str = ""
    age: str = ""


class Lore(WorldScopedEntity):
    """A myth, prophecy, legend or historical event."""

    title: str = ""
    category: str = "myth"  # myth, prophecy, historical event, legend
    description: str = ""
    timeline: LoreTimeline = Field(default_factory=LoreTimeline)
    key_figures: tuple[str, ...] = ()
    locations_involved: tuple[str, ...] = ()  # location ids
    objects_involved: tuple[str, ...] = ()  # world object ids
    outcome: str = ""
    cultural_impact: str = ""

    entity_type: ClassVar[str] = "lore"
    label_field: ClassVar[str] = "title"


class MagicSystem(WorldScopedEntity):
    """Rules, sources and practitioners of a world's magic."""

    name: str = ""
    category: str = ""
    source_of_power: str = ""
    practitioners: tuple[str, ...] = ()
    rules: tuple[str, ...] = ()
    limitations: tuple[str, ...] = ()
    notable_users: tuple[str, ...] = ()
    important_objects: tuple[str, ...] = ()  # world object ids
    locations_of_power: tuple[str, ...] = ()  # location ids
    lore_references: tuple[str, ...] = ()  # lore ids
    cultural_impact: str = ""

    entity_type: ClassVar[str] = "magic_system"


class World(StoreEntity):
    """A setting container owning locations, objects, lore and magic systems."""

    name: str = ""
    description: str = ""
    maps: tuple[str, ...] = ()
    themes: tuple[str, ...] = ()
    history: tuple[HistoryEvent, ...] = ()
    tags: tuple[str, ...] = ()
    locations: tuple[Location, ...] = ()
    objects: tuple[WorldObject, ...] = ()
    lore: tuple[Lore, ...] = ()
    magic_systems: tuple[MagicSystem, ...] = ()

    entity_type: ClassVar[str] = "world"
    owned_collections: ClassVar[frozenset[str]] = frozenset(
        {"locations", "objects", "lore", "magic_systems"}
    )

    def child_ids(self) -> set[str]:
        """Ids of every entity owned by this world."""
        return {
            child.id for child in (*self.locations, *self.objects, *self.lore, *self.magic_systems)
        }
