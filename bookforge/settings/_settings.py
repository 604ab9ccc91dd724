"""Main Settings dataclass for Book Forge.

Settings are stored in settings.json next to the package.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, ClassVar

from bookforge.settings import _validation as _validation_mod
from bookforge.settings._paths import SETTINGS_FILE

logger = logging.getLogger(__name__)

LOG_LEVELS: dict[str, str] = {
    "DEBUG": "Debug (verbose)",
    "INFO": "Info (default)",
    "WARNING": "Warnings only",
    "ERROR": "Errors only",
    "CRITICAL": "Critical only",
}

REFERENCE_POLICIES: dict[str, str] = {
    "orphan": "Deletes leave id references in other entities untouched",
    "cascade": "Deletes scrub the removed id from referencing entities",
}


def _merge_with_defaults(data: dict[str, Any], settings_cls: type[Settings]) -> bool:
    """Merge loaded JSON data with dataclass defaults.

    - Adds missing keys with their default values
    - Removes keys that no longer exist in the dataclass

    Modifies *data* in place.

    Returns:
        True if any changes were made, False otherwise.
    """
    default_dict = asdict(settings_cls())
    known_fields = {f.name for f in fields(settings_cls)}
    changed = False

    for key in list(data):
        if key not in known_fields:
            logger.info("Removing obsolete setting: %s", key)
            del data[key]
            changed = True

    for key in known_fields:
        if key not in data:
            logger.info("Adding new setting with default: %s", key)
            data[key] = default_dict[key]
            changed = True

    return changed


def _atomic_write_json(path: Path | str, data: dict[str, Any]) -> None:
    """Write JSON to *path* atomically via a temp file + rename."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, str(path))
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError as cleanup_err:
            logger.warning("Failed to remove temp settings file %s: %s", tmp_path, cleanup_err)
        raise


def _backup_corrupt_file(path: Path) -> None:
    """Copy a corrupt settings file aside so defaults can replace it."""
    backup_path = path.with_suffix(".json.corrupt")
    try:
        shutil.copy(path, backup_path)
        logger.info("Backed up corrupted settings to %s", backup_path)
    except OSError as copy_err:
        logger.warning("Failed to backup corrupted settings: %s", copy_err)


@dataclass
class Settings:
    """Application settings."""

    # Logging
    log_level: str = "INFO"
    log_file: str = "default"  # "default", a file path, or "" to disable file logging

    # Store
    seed_fixture_path: str = ""  # JSON/YAML fixture loaded at startup; "" starts empty
    reference_policy: str = "orphan"  # orphan | cascade
    id_random_length: int = 9  # Hex characters after the timestamp in generated ids

    def save(self) -> None:
        """Save settings to JSON file."""
        self.validate()
        _atomic_write_json(SETTINGS_FILE, asdict(self))
        logger.info("Settings saved to %s", SETTINGS_FILE)

    def validate(self) -> None:
        """Validate all settings fields. Delegates to _validation module.

        Raises:
            ValueError: If any field contains an invalid value.
        """
        _validation_mod.validate(self)

    # Class-level cache for settings (speeds up repeated load() calls)
    _cached_instance: ClassVar[Settings | None] = None

    @classmethod
    def load(cls, use_cache: bool = True) -> Settings:
        """Load settings from JSON file, or create defaults.

        New settings get default values and removed settings are cleaned up.
        Customized values are preserved.

        Args:
            use_cache: If True, return cached instance if available. Set to False
                to force reload from disk.

        Returns:
            Settings instance.

        Raises:
            ValueError: If a stored value is invalid.
        """
        if use_cache and cls._cached_instance is not None:
            return cls._cached_instance

        settings_file = SETTINGS_FILE
        loaded_from_file = False
        data: dict[str, Any] = {}

        if settings_file.exists():
            try:
                with open(settings_file) as f:
                    raw = json.load(f)
                if isinstance(raw, dict):
                    data = raw
                    loaded_from_file = True
                else:
                    logger.error(
                        "Corrupted settings file (expected JSON object, got %s)",
                        type(raw).__name__,
                    )
                    _backup_corrupt_file(settings_file)
            except json.JSONDecodeError as e:
                logger.error("Corrupted settings file (invalid JSON): %s", e)
                _backup_corrupt_file(settings_file)
            except OSError as e:
                logger.error("Cannot read settings file (may be locked or inaccessible): %s", e)

        logger.info(
            "Settings load: loaded_from_file=%s, keys_read=%d",
            loaded_from_file,
            len(data),
        )

        changed = _merge_with_defaults(data, cls)

        try:
            settings = cls(**data)
            settings.validate()
        except TypeError as e:
            raise ValueError(f"A setting has an invalid type: {e}") from e

        if changed:
            try:
                _atomic_write_json(settings_file, asdict(settings))
                logger.info("Settings updated during load, saved to %s", settings_file)
            except OSError as write_err:
                logger.warning(
                    "Could not persist updated settings to disk: %s",
                    write_err,
                )

        cls._cached_instance = settings
        return settings

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the cached settings instance.

        Use this in tests that need to verify settings loading behavior,
        or after programmatically modifying settings files.
        """
        cls._cached_instance = None
