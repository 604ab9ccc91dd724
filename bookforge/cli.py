"""Book Forge - command-line inspection of a seeded book store.

Loads settings, configures logging, builds a BookStore from the seed fixture
and prints an outline of every book. With ``--check`` it also lists id
references that point at entities no longer present.

Usage:
    book-forge                              # Seed from settings.json
    book-forge --seed library.yaml --check  # Explicit fixture, report dangling ids
"""

import argparse
import logging
import sys
import time
from dataclasses import replace

from bookforge.memory.book_store import BookStore
from bookforge.settings import LOG_LEVELS, REFERENCE_POLICIES, Settings
from bookforge.utils.exceptions import BookForgeError
from bookforge.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def print_outline(store: BookStore) -> None:
    """Print books, their versions and per-version entity counts."""
    if not store.books:
        print("No books in store.")
        return

    for book in store.books:
        print(f"{book.title} [{book.id}]")
        print("-" * 40)
        for version in book.versions:
            world_children = sum(
                len(w.locations) + len(w.objects) + len(w.lore) + len(w.magic_systems)
                for w in version.worlds
            )
            print(f"  {version.name} ({version.status}) [{version.id}]")
            print(
                f"    characters={len(version.characters)} plot_arcs={len(version.plot_arcs)} "
                f"chapters={len(version.chapters)} worlds={len(version.worlds)} "
                f"world_entries={world_children}"
            )
        print()


def print_dangling(store: BookStore) -> int:
    """Print dangling references for every version; return how many were found."""
    total = 0
    for book in store.books:
        for version in book.versions:
            for ref in store.find_dangling_references(book.id, version.id):
                total += 1
                print(
                    f"{book.id}/{version.id}: {ref.entity_type} {ref.entity_id} "
                    f"{ref.field} -> {ref.missing_id}"
                )
    if total == 0:
        print("No dangling references.")
    logger.info("Found %d dangling reference(s)", total)
    return total


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Process exit code: 0 on success, 1 when the store cannot be built or
        ``--check`` found dangling references.
    """
    t0 = time.perf_counter()
    parser = argparse.ArgumentParser(description="Book Forge - inspect a seeded book store")
    parser.add_argument(
        "--seed",
        type=str,
        metavar="PATH",
        help="Seed fixture (.json/.yaml/.yml); overrides seed_fixture_path from settings",
    )
    parser.add_argument(
        "--reference-policy",
        choices=sorted(REFERENCE_POLICIES),
        help="Override the reference policy from settings",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="List id references whose targets do not exist",
    )
    parser.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        help="Logging level (default: from settings)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Log file path (default: from settings, use 'none' to disable)",
    )
    args = parser.parse_args(argv)

    try:
        settings = Settings.load()
    except ValueError as e:
        print(f"Error: invalid settings: {e}", file=sys.stderr)
        return 1

    overrides = {}
    if args.seed is not None:
        overrides["seed_fixture_path"] = args.seed
    if args.reference_policy is not None:
        overrides["reference_policy"] = args.reference_policy
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    if args.log_file is not None:
        overrides["log_file"] = "" if args.log_file.lower() == "none" else args.log_file
    settings = replace(settings, **overrides)

    setup_logging(settings.log_level, settings.log_file)

    try:
        settings.validate()
        store = BookStore.from_settings(settings)
    except (ValueError, BookForgeError) as e:
        logger.error("Cannot build store: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.info("Store ready in %.2fs", time.perf_counter() - t0)
    print_outline(store)
    if args.check and print_dangling(store):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
