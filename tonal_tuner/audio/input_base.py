"""Shared behaviour for audio input handlers."""

from __future__ import annotations
from abc import ABC
from typing import Callable, Optional

from ..core.interfaces import IAudioInput
from ..logger import get_logger

logger = get_logger(__name__)


class AudioInputHandler(IAudioInput, ABC):
    """Abstract base class for audio input handlers."""

    _running: bool = False
    _on_finished: Optional[Callable[[str], None]] = None

    def is_running(self) -> bool:
        """Check if audio input is running.

        Returns:
            True if audio input is running, False otherwise
        """
        return self._running

    def set_finished_callback(self, callback: Optional[Callable[[str], None]]) -> None:
        """Set a function called with a reason when capture ends on its own.

        Args:
            callback: Callback function or None to remove
        """
        self._on_finished = callback

    def _notify_finished(self, reason: str) -> None:
        self._running = False
        if self._on_finished:
            try:
                self._on_finished(reason)
            except Exception as e:
                logger.error(f"Error in capture finished callback: {e}", exc_info=True)
