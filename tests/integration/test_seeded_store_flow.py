"""Integration tests: seed a store from a YAML fixture and edit it end to end."""

from pathlib import Path

import pytest

from bookforge.memory.book_store import BookStore, DanglingReference
from bookforge.memory.patches import CharacterPatch, LorePatch
from bookforge.settings import Settings

FIXTURE = Path(__file__).parent / "fixtures" / "sample_library.yaml"


@pytest.fixture
def store() -> BookStore:
    return BookStore.from_seed_file(FIXTURE)


class TestSeededStore:
    """The fixture loads with derived and normalized fields in place."""

    def test_books_loaded(self, store):
        assert [b.title for b in store.books] == [
            "There's more to me than meets the eye.",
            "Salt and Iron",
        ]
        assert store.get_book("1").collaborator_count == 2

    def test_nested_entities_resolve(self, store):
        arc = store.get_plot_arc("1", "v1", "plot1")
        assert arc.total_word_count == 5500
        assert arc.timeline.end_chapter == 12

        canvas = store.get_plot_canvas("1", "v1")
        assert [n["id"] for n in canvas.nodes] == ["n1", "n2"]

        undercroft = store.get_location("1", "v1", "world1", "loc2")
        assert undercroft.parent_world_id == "world1"
        assert undercroft.parent_location == "loc1"

    def test_legacy_characters_become_version_characters(self, store):
        assert [c.name for c in store.get_characters("2", "v3")] == ["Captain Oru"]
        assert store.get_book_characters("2") == store.get_characters("2", "v3")

    def test_book_characters_follow_latest_version(self, store):
        assert store.get_book_characters("1") == []

        store.delete_version("1", "v2")

        assert [c.id for c in store.get_book_characters("1")] == ["char1", "char2"]

    def test_fixture_is_consistent(self, store):
        assert store.find_dangling_references("1", "v1") == []


class TestEditingFlow:
    """A writer's session against the seeded store."""

    def test_session(self, store):
        changes = []
        store.attach_change_callback(changes.append)

        # Add a new character and weave them into the existing arc
        rook = store.create_character("1", "v1", {"name": "Rook", "role": "Antagonist"})
        arc = store.get_plot_arc("1", "v1", "plot1")
        store.update_plot_arc("1", "v1", "plot1", {"characters": [*arc.characters, rook.id]})
        store.update_character("1", "v1", rook.id, CharacterPatch(age=45, fears=["the light"]))

        # World-building in the same version
        vault = store.create_location(
            "1", "v1", "world1", {"name": "Vault", "parentLocation": "loc1"}
        )
        lore_patch = LorePatch(locations_involved=["loc1", vault.id])
        store.update_lore("1", "v1", "world1", "lore1", lore_patch)

        # Drop the old chapter and the vault again
        store.delete_chapter("1", "v1", "ch1")
        store.delete_location("1", "v1", "world1", vault.id)

        assert len(changes) == 7
        assert changes[-1] is store.books

        rook = store.get_character("1", "v1", rook.id)
        assert (rook.name, rook.age, rook.fears) == ("Rook", 45, ("the light",))
        assert store.get_plot_arc("1", "v1", "plot1").characters == ("char1", "char2", rook.id)
        assert store.get_chapters("1", "v1") == []
        assert [loc.id for loc in store.get_locations("1", "v1", "world1")] == ["loc1", "loc2"]

        # Orphan policy: the deleted vault is still referenced by the lore entry
        assert store.find_dangling_references("1", "v1") == [
            DanglingReference("lore", "lore1", "locations_involved", vault.id),
        ]

        # Earlier snapshots are untouched and reset brings the seed back
        assert changes[0][0].versions[0].chapters[0].id == "ch1"
        store.reset()
        assert store.get_character("1", "v1", rook.id) is None
        assert len(changes) == 8

    def test_cascade_session(self):
        store = BookStore.from_seed_file(FIXTURE, reference_policy="cascade")

        store.delete_character("1", "v1", "char2")
        store.delete_world_object("1", "v1", "world1", "obj1")

        kaelen = store.get_character("1", "v1", "char1")
        assert kaelen.relationships == ()
        assert kaelen.arcs[0].relationships == ()
        arc = store.get_plot_arc("1", "v1", "plot1")
        assert arc.characters == ("char1",)
        assert [scene.characters for scene in arc.scenes] == [("char1",), ("char1",)]
        assert store.get_lore_item("1", "v1", "world1", "lore1").objects_involved == ()
        assert store.get_magic_system("1", "v1", "world1", "magic1").important_objects == ()
        assert store.find_dangling_references("1", "v1") == []


class TestFromSettings:
    def test_store_from_saved_settings(self):
        Settings(seed_fixture_path=str(FIXTURE), reference_policy="cascade").save()

        store = BookStore.from_settings()

        assert len(store.books) == 2
        assert store.reference_policy == "cascade"
