"""Logger lookup for Tonal Tuner modules."""

import logging
from functools import lru_cache

PACKAGE_LOGGER = "tonal_tuner"


def logger_name(name: str) -> str:
    """Map a module name onto the package logger tree.

    Modules run as scripts report as '__main__'; they are filed under the
    package logger so setup_logging's handler and levels still apply.
    """
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return name
    return f"{PACKAGE_LOGGER}.{name.strip('_') or 'main'}"


@lru_cache(maxsize=None)
def get_logger(name: str) -> logging.Logger:
    """Get the logger for a module.

    Args:
        name: The module's __name__ (e.g., 'tonal_tuner.note_utils')

    Returns:
        The logger under the 'tonal_tuner' tree
    """
    return logging.getLogger(logger_name(name))
