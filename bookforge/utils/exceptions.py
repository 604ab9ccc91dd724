"""Centralized exception hierarchy for Book Forge.

Exception Hierarchy:

    BookForgeError (base for all application errors)
    ├── ValidationError (validation failures)
    │   └── EntityValidationError (rejected create/update payload)
    ├── ConfigError (configuration parsing/validation failures)
    └── SeedFixtureError (seed fixture could not be read or validated)

Missing books, versions, worlds or entities are not errors: store lookups
return None and mutations against a missing path are no-ops.

Usage:
    from bookforge.utils.exceptions import EntityValidationError

    try:
        store.create_character(book_id, version_id, {"name": ""})
    except EntityValidationError as e:
        logger.warning("Rejected character: %s", e)
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class BookForgeError(Exception):
    """Base exception for all Book Forge errors.

    All custom exceptions should inherit from this class to allow
    catching all application-specific errors with a single except clause.
    """

    pass


class ValidationError(BookForgeError):
    """Base exception for validation errors.

    Raised when input validation fails.
    """

    pass


class EntityValidationError(ValidationError):
    """Raised when a create or update payload is rejected.

    Covers empty required labels (name/title), unknown field names in a patch
    and values of the wrong type.

    Attributes:
        entity_type: Kind of entity the payload was meant for (e.g. "character").
    """

    def __init__(self, message: str, entity_type: str | None = None):
        """Initialize EntityValidationError.

        Args:
            message: Human-readable error message.
            entity_type: Kind of entity the payload was meant for.
        """
        super().__init__(message)
        self.entity_type = entity_type
        logger.debug(
            "EntityValidationError initialized: entity_type=%s, message=%s",
            entity_type,
            message,
        )


class ConfigError(BookForgeError):
    """Raised when configuration parsing or validation fails."""

    pass


class SeedFixtureError(BookForgeError):
    """Raised when a seed fixture cannot be read or does not validate.

    Attributes:
        path: File the fixture was read from, if any.
    """

    def __init__(self, message: str, path: Path | str | None = None):
        """Initialize SeedFixtureError.

        Args:
            message: Human-readable error message.
            path: File the fixture was read from, if any.
        """
        super().__init__(f"{message} ({path})" if path else message)
        self.path = Path(path) if path else None
