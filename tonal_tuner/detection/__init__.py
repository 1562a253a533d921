"""Pitch estimation and per-frame detection."""

from .pitch_estimator import AutocorrelationPitchEstimator
from .selection import SelectionState, TunerContext
from .session import DetectionSession, SessionState

__all__ = [
    "AutocorrelationPitchEstimator",
    "DetectionSession",
    "SelectionState",
    "SessionState",
    "TunerContext",
]
