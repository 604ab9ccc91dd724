"""Tests for seed fixture loading."""

import json
import logging

import pytest
import yaml

from bookforge.memory.book_store import BookStore
from bookforge.memory.books import Book
from bookforge.memory.seed import books_from_seed, iter_entity_ids, load_seed_fixture
from bookforge.settings import Settings
from bookforge.utils.exceptions import SeedFixtureError


class TestBooksFromSeed:
    """Tests for books_from_seed."""

    def test_validates_mappings(self, seed):
        books = books_from_seed(seed)

        assert len(books) == 1
        assert isinstance(books[0], Book)
        assert books[0].print_isbn == "978-0-00-000001-1"
        assert books[0].collaborator_count == 1

    def test_accepts_book_models(self, seed):
        books = books_from_seed(seed)
        assert books_from_seed(books) == books

    def test_sets_parent_world_id(self, seed):
        world = books_from_seed(seed)[0].versions[0].worlds[0]

        children = (*world.locations, *world.objects, *world.lore, *world.magic_systems)
        assert {child.parent_world_id for child in children} == {"w1"}

    def test_wrong_parent_world_id_is_reassigned(self, seed, caplog):
        seed[0]["versions"][0]["worlds"][0]["objects"][0]["parentWorldId"] = "w-stale"

        with caplog.at_level(logging.WARNING):
            books = books_from_seed(seed)

        assert books[0].versions[0].worlds[0].objects[0].parent_world_id == "w1"
        assert "reassigning" in caplog.text

    def test_legacy_book_characters_move_to_versions(self, seed):
        """The first version without characters takes them; later ones get copies."""
        seed[0]["characters"] = [{"id": "lc1", "name": "Old Ayla"}]
        seed[0]["versions"].append({"id": "v3", "name": "Third Draft"})

        book = books_from_seed(seed)[0]

        assert [c.id for c in book.versions[0].characters] == ["c1", "c2"]
        assert [c.id for c in book.versions[1].characters] == ["lc1"]
        copy = book.versions[2].characters[0]
        assert copy.name == "Old Ayla"
        assert copy.id != "lc1"

    def test_legacy_characters_without_receiver_are_dropped(self, seed, caplog):
        seed[0]["characters"] = [{"id": "lc1", "name": "Old Ayla"}]
        seed[0]["versions"] = seed[0]["versions"][:1]

        with caplog.at_level(logging.WARNING):
            book = books_from_seed(seed)[0]

        assert "lc1" not in set(iter_entity_ids([book]))
        assert "Dropping 1 book-level character" in caplog.text

    def test_derived_book_keys_are_ignored(self, seed):
        seed[0]["collaboratorCount"] = 99
        assert books_from_seed(seed)[0].collaborator_count == 1

    def test_duplicate_ids_rejected(self, seed):
        seed[0]["versions"][1]["characters"] = [{"id": "c1", "name": "Twin"}]

        with pytest.raises(SeedFixtureError, match="c1"):
            books_from_seed(seed)

    def test_invalid_book_rejected(self, seed):
        seed[0]["versions"][0]["characters"][0]["age"] = "thirty"

        with pytest.raises(SeedFixtureError, match="Book #0"):
            books_from_seed(seed)

    def test_non_mapping_entry_rejected(self):
        with pytest.raises(SeedFixtureError, match="must be a mapping"):
            books_from_seed(["not a book"])

    def test_iter_entity_ids(self, seed):
        ids = list(iter_entity_ids(books_from_seed(seed)))
        assert ids[:3] == ["b1", "v1", "c1"]
        assert {"w1", "loc2", "obj1", "lore1", "ms1", "v2"} <= set(ids)


class TestLoadSeedFixture:
    """Tests for load_seed_fixture."""

    def test_load_json_list(self, tmp_path, seed):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps(seed), encoding="utf-8")

        books = load_seed_fixture(path)

        assert [b.id for b in books] == ["b1"]

    def test_load_yaml_mapping(self, tmp_path, seed):
        path = tmp_path / "seed.yaml"
        path.write_text(yaml.safe_dump({"books": seed}), encoding="utf-8")

        books = load_seed_fixture(str(path))

        assert books[0].versions[0].worlds[0].name == "Verdance"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "seed.yml"
        path.write_text("", encoding="utf-8")
        assert load_seed_fixture(path) == []

    def test_unsupported_suffix(self, tmp_path):
        with pytest.raises(SeedFixtureError, match="Unsupported"):
            load_seed_fixture(tmp_path / "seed.toml")

    def test_missing_file(self, tmp_path):
        with pytest.raises(SeedFixtureError, match="Failed to read") as exc_info:
            load_seed_fixture(tmp_path / "missing.json")
        assert exc_info.value.path == tmp_path / "missing.json"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SeedFixtureError, match="Invalid JSON"):
            load_seed_fixture(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "seed.yaml"
        path.write_text("books: [unclosed", encoding="utf-8")

        with pytest.raises(SeedFixtureError, match="Invalid YAML"):
            load_seed_fixture(path)

    def test_wrong_top_level_type(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text('"just a string"', encoding="utf-8")

        with pytest.raises(SeedFixtureError, match="list of books"):
            load_seed_fixture(path)


class TestStoreConstruction:
    """Tests for the BookStore factory classmethods."""

    def test_from_seed_file(self, tmp_path, seed):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps(seed), encoding="utf-8")

        store = BookStore.from_seed_file(path, reference_policy="cascade")

        assert store.get_character("b1", "v1", "c1").name == "Ayla"
        assert store.reference_policy == "cascade"

    def test_from_settings_without_fixture(self):
        store = BookStore.from_settings(Settings())
        assert store.books == ()

    def test_from_settings_with_fixture(self, tmp_path, seed):
        path = tmp_path / "seed.yaml"
        path.write_text(yaml.safe_dump(seed), encoding="utf-8")
        settings = Settings(seed_fixture_path=str(path), id_random_length=16)

        store = BookStore.from_settings(settings)

        assert store.get_book("b1") is not None
        assert len(store.generate_id().split("-", 1)[1]) == 16

    def test_from_settings_loads_settings_file(self, isolate_settings_file, tmp_path, seed):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps(seed), encoding="utf-8")
        Settings(seed_fixture_path=str(path), reference_policy="cascade").save()

        store = BookStore.from_settings()

        assert isolate_settings_file.exists()
        assert store.reference_policy == "cascade"
        assert store.get_book("b1") is not None
