"""Tuner service that integrates audio input and the detection session."""

from __future__ import annotations
from typing import Callable, Optional, Tuple

import numpy as np

from ..core.errors import ConfigurationError
from ..core.events import TunerEvents
from ..core.interfaces import IAudioInput, IPitchEstimator
from ..detection.selection import SelectionState, TunerContext
from ..detection.session import DetectionSession, SessionState, TickOutcome
from ..logger import get_logger
from ..note_table import get_note_table
from ..note_types import Mode, NoteTableEntry, TunerTarget
from .frame_buffer import RollingBuffer

logger = get_logger(__name__)


class TunerService:
    """Service that integrates audio input and pitch detection.

    This class acts as a facade for the capture, buffering and detection
    components, providing a simple interface for clients to use.
    """

    def __init__(
        self,
        audio_input: IAudioInput,
        estimator: Optional[IPitchEstimator] = None,
        selection: Optional[SelectionState] = None,
        buffer_size: int = RollingBuffer.DEFAULT_SIZE,
        events: Optional[TunerEvents] = None,
    ) -> None:
        """Initialize the tuner service.

        Args:
            audio_input: Audio input handler supplying mono blocks
            estimator: Pitch estimator, or None for the autocorrelation default
            selection: Mode/target state, or None to create one
            buffer_size: Samples per analysis frame
            events: Event hub, or None to create one
        """
        self._audio_input = audio_input
        self._session = DetectionSession(estimator, selection, events)
        self._buffer = RollingBuffer(buffer_size)
        self._callback: Optional[Callable[[TickOutcome, float], None]] = None
        self.last_error: Optional[Exception] = None

        if hasattr(self._audio_input, "set_finished_callback"):
            self._audio_input.set_finished_callback(self._session.capture_lost)

    @property
    def session(self) -> DetectionSession:
        return self._session

    @property
    def events(self) -> TunerEvents:
        return self._session.events

    @property
    def note_table(self) -> Tuple[NoteTableEntry, ...]:
        """The static note table, for populating note pickers."""
        return get_note_table()

    def _check_buffer(self, sample_rate: float) -> None:
        required = self._session.estimator.required_length(sample_rate)
        if self._buffer.size < required:
            raise ConfigurationError(
                f"Analysis buffer of {self._buffer.size} samples is too short; "
                f"{required} are needed at {sample_rate} Hz"
            )

    def start(self, callback: Optional[Callable[[TickOutcome, float], None]] = None) -> bool:
        """Start tuning.

        Args:
            callback: Function called with (outcome, elapsed_seconds) for every tick

        Returns:
            True if capture started, False otherwise

        Raises:
            ConfigurationError: If the analysis buffer cannot hold a full frame
        """
        if self._session.is_listening():
            logger.warning("Tuner already running")
            return True

        self._check_buffer(self._audio_input.sample_rate)

        if callback and callback is not self._callback:
            # Only the latest callback receives ticks
            if self._callback is not None:
                self.events.off_result(self._callback)
                self.events.off_status(self._callback)
            self._callback = callback
            self.events.on_result(callback)
            self.events.on_status(callback)

        self._buffer.reset()
        self.last_error = None
        self._session.start()

        if not self._audio_input.start(self._process_audio):
            logger.error("Failed to start audio input")
            self._session.capture_lost("audio input failed to start")
            return False

        # The input may have fallen back to another sample rate
        try:
            self._check_buffer(self._audio_input.sample_rate)
        except ConfigurationError:
            self.stop()
            raise

        logger.info(f"Tuner started at {self._audio_input.sample_rate} Hz")
        return True

    def stop(self) -> None:
        """Stop tuning."""
        self._audio_input.stop()
        self._session.stop()
        self._buffer.reset()

    def is_running(self) -> bool:
        return self._session.state is SessionState.LISTENING

    def _process_audio(self, audio_data: np.ndarray, timestamp: float) -> None:
        """Process one captured block.

        Args:
            audio_data: Audio data as numpy array
            timestamp: Capture timestamp in seconds
        """
        if not self._session.is_listening():
            return

        frame = self._buffer.push(audio_data)
        if frame is None:
            return

        try:
            self._session.process_frame(frame, self._audio_input.sample_rate, timestamp=timestamp)
        except ConfigurationError as e:
            logger.error(f"Tuner misconfigured, stopping: {e}")
            self.last_error = e
            self._session.capture_lost(str(e))
            raise

    # Selection actions
    def set_mode(self, mode: Mode) -> TunerContext:
        return self._session.selection.set_mode(mode)

    def set_target(
        self, note_name: str, octave: int, frequency: Optional[float] = None
    ) -> TunerContext:
        return self._session.selection.set_target(note_name, octave, frequency)

    def select(self, target: TunerTarget) -> TunerContext:
        return self._session.selection.select(target)

    def clear_target(self) -> TunerContext:
        return self._session.selection.clear_target()
