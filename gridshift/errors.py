"""Exception taxonomy.

Expected game conditions (blocked moves, collisions, timeouts) are state
transitions and never raise; these cover broken inputs only.
"""


class GridshiftError(Exception):
    """Base class for all gridshift errors."""


class ConfigError(GridshiftError):
    """A config override file or value is invalid."""


class LevelDataError(GridshiftError):
    """Level data is missing, empty or malformed."""


class InvalidSelection(GridshiftError):
    """A map node was selected that is not currently selectable."""
