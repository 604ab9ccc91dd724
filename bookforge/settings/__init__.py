"""Settings package for Book Forge.

- _paths.py: Path constants for the settings file
- _validation.py: Settings validation functions
- _settings.py: Main Settings dataclass
"""

from bookforge.settings._paths import SETTINGS_FILE
from bookforge.settings._settings import LOG_LEVELS, REFERENCE_POLICIES, Settings

__all__ = [
    "LOG_LEVELS",
    "REFERENCE_POLICIES",
    "SETTINGS_FILE",
    "Settings",
]
