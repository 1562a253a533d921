"""Tonal Tuner - real-time pitch detection and note tuning."""

from .core.errors import ConfigurationError
from .detection.pitch_estimator import AutocorrelationPitchEstimator
from .detection.selection import SelectionState, TunerContext
from .detection.session import DetectionSession, SessionState
from .note_table import build_note_table, get_note_table, guitar_string_targets
from .note_types import (
    DetectionResult,
    Mode,
    NoSignal,
    NoSignalReason,
    NoteTableEntry,
    OutOfRange,
    StatusKind,
    TunerStatus,
    TunerTarget,
    TuningState,
)
from .note_utils import cents, closest_note, parse_note

__version__ = "0.1.0"

__all__ = [
    "AutocorrelationPitchEstimator",
    "ConfigurationError",
    "DetectionResult",
    "DetectionSession",
    "Mode",
    "NoSignal",
    "NoSignalReason",
    "NoteTableEntry",
    "OutOfRange",
    "SelectionState",
    "SessionState",
    "StatusKind",
    "TunerContext",
    "TunerStatus",
    "TunerTarget",
    "TuningState",
    "build_note_table",
    "cents",
    "closest_note",
    "get_note_table",
    "guitar_string_targets",
    "parse_note",
]
