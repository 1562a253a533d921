"""Event system for Tonal Tuner components."""

from enum import Enum, auto
from typing import Any, Callable, Dict, List

from ..logger import get_logger

logger = get_logger(__name__)


class TunerEventType(Enum):
    """Event types published by a detection session."""

    RESULT = auto()
    STATUS = auto()
    STATE_CHANGED = auto()


class EventEmitter:
    """Event emitter for Tonal Tuner components."""

    def __init__(self):
        """Initialize the event emitter."""
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Event type to listen for
            callback: Function to call when the event occurs
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []

        if callback not in self._listeners[event_type]:
            self._listeners[event_type].append(callback)
            logger.debug(f"Added listener for event {event_type}")

    def off(self, event_type: Any, callback: Callable) -> None:
        """Remove a previously registered callback, if present."""
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)
            logger.debug(f"Removed listener for event {event_type}")

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Emit an event.

        A failing listener is logged and skipped so the remaining listeners,
        and the audio thread driving them, keep running.

        Args:
            event_type: Event type to emit
            *args: Positional arguments to pass to listeners
            **kwargs: Keyword arguments to pass to listeners
        """
        for callback in list(self._listeners.get(event_type, [])):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_type}: {e}", exc_info=True)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners = {}
        logger.debug("Cleared all event listeners")


class TunerEvents:
    """Event emitter specifically for tuner session events."""

    def __init__(self):
        """Initialize the tuner events."""
        self._emitter = EventEmitter()

    def on_result(self, callback: Callable) -> None:
        """Register a callback for DetectionResult events.

        Args:
            callback: Function called with (result, timestamp)
        """
        self._emitter.on(TunerEventType.RESULT, callback)

    def on_status(self, callback: Callable) -> None:
        """Register a callback for TunerStatus events.

        Args:
            callback: Function called with (status, timestamp)
        """
        self._emitter.on(TunerEventType.STATUS, callback)

    def on_state_changed(self, callback: Callable) -> None:
        """Register a callback for session state changes.

        Args:
            callback: Function called with (old_state, new_state)
        """
        self._emitter.on(TunerEventType.STATE_CHANGED, callback)

    def off_result(self, callback: Callable) -> None:
        """Remove a DetectionResult callback, if registered."""
        self._emitter.off(TunerEventType.RESULT, callback)

    def off_status(self, callback: Callable) -> None:
        """Remove a TunerStatus callback, if registered."""
        self._emitter.off(TunerEventType.STATUS, callback)

    def emit_result(self, result, timestamp: float) -> None:
        self._emitter.emit(TunerEventType.RESULT, result, timestamp)

    def emit_status(self, status, timestamp: float) -> None:
        self._emitter.emit(TunerEventType.STATUS, status, timestamp)

    def emit_state_changed(self, old_state, new_state) -> None:
        self._emitter.emit(TunerEventType.STATE_CHANGED, old_state, new_state)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._emitter.clear()
