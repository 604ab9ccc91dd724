"""Pytest fixtures for Book Forge tests."""

import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from bookforge.memory.book_store import BookStore
from bookforge.settings import Settings


@pytest.fixture(autouse=True)
def clear_settings_cache_per_test():
    """Clear Settings cache before each test to ensure isolation.

    This is autouse because caching can cause test pollution when tests
    modify settings or patch SETTINGS_FILE to different paths.
    """
    Settings.clear_cache()
    yield
    Settings.clear_cache()


@pytest.fixture(autouse=True)
def isolate_settings_file(tmp_path, monkeypatch) -> Path:
    """Redirect SETTINGS_FILE to a temp path so tests never touch the real settings.json."""
    import bookforge.settings._settings as settings_module

    settings_file = tmp_path / "settings.json"
    monkeypatch.setattr(settings_module, "SETTINGS_FILE", settings_file)
    return settings_file


@pytest.fixture
def restore_root_logger() -> Generator[logging.Logger]:
    """Restore root logger handlers and level after a test that calls setup_logging."""
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    yield root_logger
    for handler in root_logger.handlers[:]:
        if handler not in original_handlers:
            handler.close()
    root_logger.handlers = original_handlers
    root_logger.setLevel(original_level)


def make_seed() -> list[dict[str, Any]]:
    """A small library in the camelCase fixture shape.

    One book with two versions; the first version has two characters, a plot
    arc referencing them, a chapter and a world with one of each child kind.
    """
    return [
        {
            "id": "b1",
            "title": "The Glass Orchard",
            "author": "R. Vale",
            "genre": "Fantasy",
            "printISBN": "978-0-00-000001-1",
            "collaborators": [{"id": "u1", "name": "Ines", "role": "EDITOR"}],
            "versions": [
                {
                    "id": "v1",
                    "name": "First Draft",
                    "characters": [
                        {"id": "c1", "name": "Ayla", "age": 30, "relationships": ["c2"]},
                        {"id": "c2", "name": "Bren", "role": "Mentor"},
                    ],
                    "plotArcs": [
                        {
                            "id": "pa1",
                            "title": "The Harvest",
                            "characters": ["c1", "c2"],
                            "scenes": [
                                {"id": "s1", "title": "Arrival", "characters": ["c1"]},
                            ],
                        }
                    ],
                    "chapters": [{"id": "ch1", "title": "Frost", "order": 1}],
                    "worlds": [
                        {
                            "id": "w1",
                            "name": "Verdance",
                            "locations": [
                                {"id": "loc1", "name": "Orchard", "parentWorldId": "w1"},
                                {"id": "loc2", "name": "Cellar", "parentLocation": "loc1"},
                            ],
                            "objects": [{"id": "obj1", "name": "Glass Seed"}],
                            "lore": [
                                {
                                    "id": "lore1",
                                    "title": "The First Frost",
                                    "locationsInvolved": ["loc1"],
                                    "objectsInvolved": ["obj1"],
                                }
                            ],
                            "magicSystems": [
                                {
                                    "id": "ms1",
                                    "name": "Rootcraft",
                                    "importantObjects": ["obj1"],
                                    "locationsOfPower": ["loc1"],
                                    "loreReferences": ["lore1"],
                                }
                            ],
                        }
                    ],
                },
                {"id": "v2", "name": "Second Draft"},
            ],
        }
    ]


@pytest.fixture
def seed() -> list[dict[str, Any]]:
    return make_seed()


@pytest.fixture
def store(seed) -> BookStore:
    """Store seeded with the sample library, orphan reference policy."""
    return BookStore(seed)


@pytest.fixture
def empty_store() -> BookStore:
    return BookStore()
