"""Mode and target selection shared between the UI and the audio thread."""

import threading
from dataclasses import dataclass, replace
from typing import Optional

from ..logger import get_logger
from ..note_types import Mode, TunerTarget
from ..note_utils import target_for

logger = get_logger(__name__)


@dataclass(frozen=True)
class TunerContext:
    """The mode and pinned target a detection tick runs against."""

    mode: Mode = Mode.AUTO
    target: Optional[TunerTarget] = None

    def with_mode(self, mode: Mode) -> "TunerContext":
        # Re-entering auto mode drops any pinned target
        if mode is Mode.AUTO:
            return TunerContext(Mode.AUTO, None)
        return replace(self, mode=mode)

    def with_target(self, target: TunerTarget) -> "TunerContext":
        return TunerContext(Mode.MANUAL, target)

    def without_target(self) -> "TunerContext":
        return replace(self, target=None)


class SelectionState:
    """Holds the live TunerContext.

    Writers come from selection actions (UI thread) and the reader is the
    detection tick (often the audio thread). Every write swaps in a new
    immutable context under a lock, so a tick always sees one consistent
    mode/target pair.
    """

    def __init__(self, context: Optional[TunerContext] = None) -> None:
        self._context = context or TunerContext()
        self._lock = threading.Lock()

    def snapshot(self) -> TunerContext:
        """Get the current context."""
        with self._lock:
            return self._context

    @property
    def mode(self) -> Mode:
        return self.snapshot().mode

    @property
    def target(self) -> Optional[TunerTarget]:
        return self.snapshot().target

    def set_mode(self, mode: Mode) -> TunerContext:
        """Switch mode; switching to AUTO clears the target.

        Args:
            mode: The new mode

        Returns:
            The context now in effect
        """
        if not isinstance(mode, Mode):
            raise ValueError(f"Unknown mode: {mode!r}")

        with self._lock:
            self._context = self._context.with_mode(mode)
            context = self._context
        logger.info(f"Mode set to {mode.name}")
        return context

    def set_target(
        self, note_name: str, octave: int, frequency: Optional[float] = None
    ) -> TunerContext:
        """Pin a target note, switching to MANUAL mode.

        Args:
            note_name: Pitch class, sharp or flat (e.g., 'E', 'Bb')
            octave: Octave number
            frequency: Target frequency in Hz, or None for the note table value

        Returns:
            The context now in effect

        Raises:
            ValueError: If the note or frequency is invalid
        """
        target = target_for(note_name, octave, frequency)
        return self.select(target)

    def select(self, target: TunerTarget) -> TunerContext:
        """Pin an already-built target, switching to MANUAL mode."""
        with self._lock:
            self._context = self._context.with_target(target)
            context = self._context
        logger.info(f"Target set to {target} ({target.frequency:.2f} Hz)")
        return context

    def clear_target(self) -> TunerContext:
        """Drop the pinned target without changing mode."""
        with self._lock:
            self._context = self._context.without_target()
            context = self._context
        logger.info("Target cleared")
        return context
