"""Per-frame orchestration: estimate, resolve the target, report."""

from __future__ import annotations
import threading
import time
from enum import Enum, auto
from typing import Optional, Union

import numpy as np

from ..core.events import TunerEvents
from ..core.interfaces import IPitchEstimator
from ..logger import get_logger
from ..note_types import (
    DetectionResult,
    Mode,
    NoSignal,
    OutOfRange,
    StatusKind,
    TunerStatus,
)
from ..note_utils import cents, closest_note
from .pitch_estimator import AutocorrelationPitchEstimator
from .selection import SelectionState, TunerContext

logger = get_logger(__name__)

TickOutcome = Union[DetectionResult, TunerStatus]

WAITING_MESSAGE = "Waiting for audio..."
NO_TARGET_MESSAGE = "Select a target note to tune against"
OUT_OF_RANGE_MESSAGE = "Note outside the supported range"


class SessionState(Enum):
    """Lifecycle of a detection session."""

    IDLE = auto()
    LISTENING = auto()


class DetectionSession:
    """Turns audio frames into tuner readings.

    The session is IDLE until start() is called. While LISTENING, each frame
    passed to process_frame() produces exactly one outcome: a DetectionResult,
    or a TunerStatus when there is no signal, no target, or the note is out of
    range. Mode and target are read from a context snapshot taken at the start
    of the tick, so a selection change applies from the next frame on.
    """

    def __init__(
        self,
        estimator: Optional[IPitchEstimator] = None,
        selection: Optional[SelectionState] = None,
        events: Optional[TunerEvents] = None,
    ) -> None:
        """Initialize the detection session.

        Args:
            estimator: Pitch estimator, or None for the autocorrelation default
            selection: Shared mode/target state, or None to create one
            events: Event hub outcomes are published to, or None to create one
        """
        self._estimator = estimator or AutocorrelationPitchEstimator()
        self._selection = selection or SelectionState()
        self._events = events or TunerEvents()
        self._state = SessionState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def selection(self) -> SelectionState:
        return self._selection

    @property
    def events(self) -> TunerEvents:
        return self._events

    @property
    def estimator(self) -> IPitchEstimator:
        return self._estimator

    def is_listening(self) -> bool:
        return self._state is SessionState.LISTENING

    def start(self) -> None:
        """Move to LISTENING; frames are processed from now on."""
        self._transition(SessionState.LISTENING)

    def stop(self) -> None:
        """Move to IDLE; later frames are ignored."""
        self._transition(SessionState.IDLE)

    def capture_lost(self, reason: str = "") -> None:
        """The capture resource went away; stop listening."""
        if self.is_listening():
            logger.warning(f"Audio capture lost{': ' + reason if reason else ''}")
        self._transition(SessionState.IDLE)

    def _transition(self, new_state: SessionState) -> None:
        with self._state_lock:
            old_state = self._state
            if old_state is new_state:
                return
            self._state = new_state
        logger.info(f"Session {old_state.name} -> {new_state.name}")
        self._events.emit_state_changed(old_state, new_state)

    def process_frame(
        self,
        samples: np.ndarray,
        sample_rate: float,
        context: Optional[TunerContext] = None,
        timestamp: Optional[float] = None,
    ) -> Optional[TickOutcome]:
        """Analyze one frame and publish its outcome.

        Args:
            samples: Mono audio buffer
            sample_rate: Sample rate in Hz
            context: Mode/target to use, or None to snapshot the session's selection
            timestamp: Frame time in seconds, or None for now

        Returns:
            The tick's outcome, or None if the session is IDLE

        Raises:
            ConfigurationError: If the buffer or sample rate is unusable
        """
        if not self.is_listening():
            logger.debug("Frame ignored: session is idle")
            return None

        if context is None:
            context = self._selection.snapshot()
        if timestamp is None:
            timestamp = time.time()

        outcome = self.evaluate(samples, sample_rate, context)
        if isinstance(outcome, DetectionResult):
            self._events.emit_result(outcome, timestamp)
        else:
            self._events.emit_status(outcome, timestamp)
        return outcome

    def evaluate(
        self, samples: np.ndarray, sample_rate: float, context: TunerContext
    ) -> TickOutcome:
        """Compute a tick's outcome without publishing it or checking state."""
        estimate = self._estimator.estimate(samples, sample_rate)
        if isinstance(estimate, NoSignal):
            return TunerStatus(StatusKind.NO_SIGNAL, WAITING_MESSAGE)

        frequency = float(estimate)
        if context.mode is Mode.MANUAL:
            target = context.target
            if target is None:
                return TunerStatus(StatusKind.NO_TARGET, NO_TARGET_MESSAGE, frequency)
        else:
            target = closest_note(frequency)
            if isinstance(target, OutOfRange):
                return TunerStatus(StatusKind.OUT_OF_RANGE, OUT_OF_RANGE_MESSAGE, frequency)

        deviation = cents(frequency, target.frequency)
        result = DetectionResult(
            frequency=frequency,
            note_name=target.note_name,
            octave=target.octave,
            cents=deviation,
            has_signal=True,
            target_frequency=target.frequency,
        )
        logger.debug(f"Tick result: {result}")
        return result
