"""Type definitions for the Tonal Tuner project."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class Mode(Enum):
    """How the target note is chosen for each detection tick."""

    AUTO = auto()  # Nearest note in the table
    MANUAL = auto()  # Pinned TunerTarget


class NoSignalReason(Enum):
    """Why the estimator declined to report a frequency."""

    TOO_QUIET = auto()
    NON_FINITE_INPUT = auto()
    NO_PEAK = auto()
    WEAK_PEAK = auto()
    INVALID_REFINEMENT = auto()


class StatusKind(Enum):
    """Non-result outcomes of a detection tick."""

    NO_SIGNAL = auto()
    NO_TARGET = auto()
    OUT_OF_RANGE = auto()


class TuningState(Enum):
    """Coarse tuning band for a cents deviation."""

    IN_TUNE = auto()
    CLOSE = auto()
    OUT_OF_TUNE = auto()


@dataclass(frozen=True)
class NoteTableEntry:
    """One chromatic step of the equal-tempered note table."""

    name: str  # Pitch class (e.g., 'C#')
    frequency: float  # Reference frequency in Hz
    octave: int  # Octave number, C0 is octave 0

    def __str__(self):
        return f"{self.name}{self.octave}"


@dataclass(frozen=True)
class TunerTarget:
    """A note to tune against, either picked manually or resolved from the table."""

    note_name: str  # Pitch class (e.g., 'E')
    octave: int  # e.g. 2
    frequency: float  # Frequency in Hz the deviation is measured against

    def __str__(self):
        return f"{self.note_name}{self.octave}"


@dataclass(frozen=True)
class NoSignal:
    """The estimator found nothing it trusts in the current frame."""

    reason: NoSignalReason
    rms: float = 0.0

    def __bool__(self):
        return False


@dataclass(frozen=True)
class OutOfRange:
    """A frequency that maps outside the note table."""

    frequency: float

    def __bool__(self):
        return False


@dataclass(frozen=True)
class DetectionResult:
    """Represents a single tick's reading against its target note."""

    frequency: float  # Detected frequency in Hz
    note_name: str  # Target pitch class
    octave: int  # Target octave
    cents: float  # Signed deviation, positive is sharp
    has_signal: bool = True
    target_frequency: Optional[float] = None  # Frequency the cents were measured against

    IN_TUNE_CENTS = 5.0
    CLOSE_CENTS = 20.0
    NEEDLE_MAX_DEGREES = 45.0

    def tuning_state(self, tolerance: float = IN_TUNE_CENTS) -> TuningState:
        """Classify the deviation into a display band.

        Args:
            tolerance: Largest absolute deviation, in cents, counted as in tune

        Returns:
            The tuning band for this result
        """
        deviation = abs(self.cents)
        if deviation <= tolerance:
            return TuningState.IN_TUNE
        if deviation <= self.CLOSE_CENTS:
            return TuningState.CLOSE
        return TuningState.OUT_OF_TUNE

    def needle_angle(self) -> float:
        """Needle rotation in degrees, clamped to the dial."""
        limit = self.NEEDLE_MAX_DEGREES
        return max(-limit, min(limit, self.cents * 0.9))

    def __str__(self):
        sign = "+" if round(self.cents) >= 0 else ""
        return (
            f"{self.note_name}{self.octave} {self.frequency:.1f}Hz "
            f"{sign}{round(self.cents)} cents"
        )


@dataclass(frozen=True)
class TunerStatus:
    """A tick outcome that carries no reading, only something to tell the user."""

    kind: StatusKind
    message: str
    frequency: Optional[float] = None
