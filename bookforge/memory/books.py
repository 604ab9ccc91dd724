"""Book and Version models - the top of the containment hierarchy.

Book → Version → {Character[], PlotArc[], Chapter[], PlotCanvas, World[]}.
A Version is the workspace unit: every nested operation resolves through
``(book_id, version_id)``.
"""

from typing import ClassVar

from pydantic import Field

from bookforge.memory.entities import StoreEntity, StoreModel
from bookforge.memory.narrative import Chapter, Character, PlotArc, PlotCanvas
from bookforge.memory.world import World


class Contributor(StoreModel):
    name: str = ""
    avatar: str = ""


class Collaborator(StoreModel):
    """A person with access to a book."""

    id: str = ""
    name: str = ""
    email: str = ""
    avatar: str = ""
    role: str = "AUTHOR"  # AUTHOR, EDITOR, REVIEWER, ADMIN


class Version(StoreEntity):
    """One authored draft of a book and the narrative entities it owns."""

    name: str = ""
    status: str = "DRAFT"  # DRAFT, IN_REVIEW, FINAL
    word_count: int = 0
    created_at: str = ""
    updated_at: str = ""
    contributor: Contributor = Field(default_factory=Contributor)
    characters: tuple[Character, ...] = ()
    plot_arcs: tuple[PlotArc, ...] = ()
    worlds: tuple[World, ...] = ()
    chapters: tuple[Chapter, ...] = ()
    plot_canvas: PlotCanvas | None = None

    entity_type: ClassVar[str] = "version"
    owned_collections: ClassVar[frozenset[str]] = frozenset(
        {"characters", "plot_arcs", "worlds", "chapters", "plot_canvas"}
    )


class Book(StoreEntity):
    """Top-level authored work.

    The book-level character list of older data is not stored here; it is
    derived from the latest version on read (see BookStore.get_book_characters).
    """

    title: str = ""
    subtitle: str = ""
    author: str = ""
    genre: str = ""
    subgenre: str = ""
    synopsis: str = ""
    description: str = ""
    book_type: str = ""
    prose: str = ""
    language: str = ""
    publisher: str = ""
    published_status: str = "Unpublished"  # Published, Unpublished, Scheduled
    publisher_link: str = ""
    publisher_logo: str = ""
    print_isbn: str = Field(default="", alias="printISBN")
    ebook_isbn: str = Field(default="", alias="ebookISBN")
    cover_image: str = ""
    cover_images: tuple[str, ...] = ()
    progress: float = 0
    word_count: int = 0
    featured: bool = False
    last_modified: str = ""
    collaborators: tuple[Collaborator, ...] = ()
    versions: tuple[Version, ...] = ()

    entity_type: ClassVar[str] = "book"
    label_field: ClassVar[str] = "title"
    owned_collections: ClassVar[frozenset[str]] = frozenset({"versions"})

    @property
    def collaborator_count(self) -> int:
        """Number of collaborators on the book."""
        return len(self.collaborators)

    @property
    def latest_version(self) -> Version | None:
        """Most recently created version (last in the list), or None."""
        return self.versions[-1] if self.versions else None
