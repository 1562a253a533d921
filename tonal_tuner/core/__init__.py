"""Core components for the Tonal Tuner application."""

# Import interfaces for easier access
from .errors import ConfigurationError
from .interfaces import IAudioInput, IPitchEstimator

__all__ = ["ConfigurationError", "IAudioInput", "IPitchEstimator"]
