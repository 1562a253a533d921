"""Exceptions raised by Tonal Tuner components."""


class ConfigurationError(ValueError):
    """Raised when a caller hands the engine settings or buffers it cannot work with.

    This is a programming error in the capture or setup code, never an
    ordinary outcome of analysing audio.
    """
