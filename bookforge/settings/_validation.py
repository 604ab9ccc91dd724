"""Validation functions for Settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bookforge.utils.validation import validate_in_range, validate_string_in_choices

if TYPE_CHECKING:
    from bookforge.settings._settings import Settings

logger = logging.getLogger(__name__)


def validate(settings: Settings) -> None:
    """Validate all settings fields.

    Raises:
        ValueError: If any field contains an invalid value.
    """
    from bookforge.settings._settings import LOG_LEVELS, REFERENCE_POLICIES

    _validate_log_level(settings, list(LOG_LEVELS))
    _validate_log_file(settings)
    _validate_reference_policy(settings, list(REFERENCE_POLICIES))
    _validate_seed_fixture_path(settings)
    _validate_id_random_length(settings)
    logger.debug("Settings validated")


def _validate_log_level(settings: Settings, levels: list[str]) -> None:
    """Validate log_level is a known logging level."""
    if settings.log_level not in levels:
        raise ValueError(f"log_level must be one of {levels}, got {settings.log_level}")


def _validate_log_file(settings: Settings) -> None:
    """Validate log_file is a string ("default", a path, or empty to disable)."""
    if not isinstance(settings.log_file, str):
        raise ValueError(
            f"log_file must be a string, got {type(settings.log_file).__name__}"
        )


def _validate_reference_policy(settings: Settings, policies: list[str]) -> None:
    """Validate reference_policy names a known policy."""
    try:
        validate_string_in_choices(settings.reference_policy, "reference_policy", policies)
    except TypeError as e:
        raise ValueError(str(e)) from e


def _validate_seed_fixture_path(settings: Settings) -> None:
    """Validate seed_fixture_path is empty or points at a supported file type."""
    path = settings.seed_fixture_path
    if not isinstance(path, str):
        raise ValueError(f"seed_fixture_path must be a string, got {type(path).__name__}")
    if path and not path.lower().endswith((".json", ".yaml", ".yml")):
        raise ValueError(f"seed_fixture_path must be a .json, .yaml or .yml file, got {path}")


def _validate_id_random_length(settings: Settings) -> None:
    """Validate id_random_length is within 6-32."""
    try:
        validate_in_range(settings.id_random_length, "id_random_length", 6, 32)
    except TypeError as e:
        raise ValueError(str(e)) from e
