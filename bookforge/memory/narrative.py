"""Narrative entities owned by a Version: characters, plot arcs and chapters."""

from typing import ClassVar

from pydantic import Field

from bookforge.memory.entities import Record, StoreEntity, StoreModel


class CharacterArc(StoreModel):
    """One stage of a character's development, usually tied to a scene."""

    id: str = ""  # assigned by the store when empty
    scene_id: str = ""
    stage: str = ""
    status: str = ""  # Planning, In Progress, Completed
    traits: tuple[str, ...] = ()
    goal: str = ""
    linked_events: tuple[str, ...] = ()
    relationships: tuple[str, ...] = ()  # character ids


class Character(StoreEntity):
    """A character sheet: identity, appearance, personality, relationships and arc."""

    name: str = ""
    full_name: str = ""
    role: str = ""  # Protagonist, Antagonist, Mentor, ...
    character_type: str = ""  # Primary, Secondary, Tertiary
    age: int | None = None
    gender: str = ""
    occupation: str = ""
    image: str = ""
    avatar: str = ""
    quote: str = ""
    description: str = ""
    appearance: str = ""
    personality: tuple[str, ...] = ()
    backstory: str = ""
    motivations: tuple[str, ...] = ()
    goals: tuple[str, ...] = ()
    fears: tuple[str, ...] = ()
    relationships: tuple[str, ...] = ()  # character ids
    arcs: tuple[CharacterArc, ...] = ()
    notes: str = ""

    entity_type: ClassVar[str] = "character"
    embedded_records: ClassVar[frozenset[str]] = frozenset({"arcs"})


class ArcTimeline(StoreModel):
    """Chapter span covered by a plot arc."""

    start_chapter: int | None = None
    end_chapter: int | None = None
    duration: str = ""


class PlotScene(StoreModel):
    """A scene within a plot arc."""

    id: str = ""  # assigned by the store when empty
    title: str = ""
    description: str = ""
    chapter: int | None = None
    word_count: int = 0
    status: str = "DRAFT"  # DRAFT, WRITTEN, EDITED, FINAL
    characters: tuple[str, ...] = ()  # character ids
    plot_points: tuple[str, ...] = ()
    notes: str = ""


class PlotArc(StoreEntity):
    """A storyline made of ordered scenes."""

    title: str = ""
    description: str = ""
    status: str = "PLANNING"  # PLANNING, IN_PROGRESS, COMPLETED
    scenes: tuple[PlotScene, ...] = ()
    characters: tuple[str, ...] = ()  # character ids
    timeline: ArcTimeline = Field(default_factory=ArcTimeline)
    tags: tuple[str, ...] = ()
    created_at: str = ""
    updated_at: str = ""

    entity_type: ClassVar[str] = "plot_arc"
    label_field: ClassVar[str] = "title"
    embedded_records: ClassVar[frozenset[str]] = frozenset({"scenes"})

    @property
    def total_word_count(self) -> int:
        """Sum of the word counts of all scenes in the arc."""
        return sum(scene.word_count for scene in self.scenes)


class Chapter(StoreEntity):
    """A chapter of a version's manuscript.

    Content is a sequence of free-form rich-text blocks produced by the editor.
    """

    title: str = ""
    order: int = 0
    content: tuple[Record, ...] = ()
    word_count: int = 0
    status: str = "DRAFT"

    entity_type: ClassVar[str] = "chapter"
    label_field: ClassVar[str] = "title"


class PlotCanvas(StoreModel):
    """Narrative-flow graph drawn on a version's plot canvas."""

    nodes: tuple[Record, ...] = ()
    edges: tuple[Record, ...] = ()
