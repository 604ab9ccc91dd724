"""Identifier generation for store entities."""

import time
import uuid

DEFAULT_RANDOM_LENGTH = 9


def generate_id(random_length: int = DEFAULT_RANDOM_LENGTH) -> str:
    """Generate an opaque entity id of the form ``<epoch-millis>-<random hex>``.

    The timestamp orders ids roughly by creation time; the random suffix comes
    from uuid4, so collisions within a process do not practically occur.

    Args:
        random_length: Number of hex characters in the random suffix (1-32).

    Returns:
        New identifier string.

    Raises:
        ValueError: If random_length is outside 1-32.
    """
    if not 1 <= random_length <= 32:
        raise ValueError(f"random_length must be between 1 and 32, got {random_length}")
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:random_length]}"
