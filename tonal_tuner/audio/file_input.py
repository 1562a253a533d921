"""Audio input that replays a sound file, for offline analysis and tests."""

from __future__ import annotations
import threading
import time
from typing import Callable, Optional

import numpy as np
import soundfile as sf

from ..logger import get_logger
from .input_base import AudioInputHandler

logger = get_logger(__name__)


class WavFileInput(AudioInputHandler):
    """Provides audio data by reading a file in blocks on a worker thread."""

    def __init__(
        self,
        file_path: str,
        frames_per_buffer: int = 1024,
        loop: bool = False,
        gain: float = 1.0,
        realtime: bool = True,
    ) -> None:
        """Initialize the file input.

        Args:
            file_path: Path to a file soundfile can read (WAV, FLAC, ...)
            frames_per_buffer: Frames delivered per callback
            loop: Restart from the beginning at end of file
            gain: Linear gain applied to every block
            realtime: Pace delivery at the file's sample rate; False runs as fast as possible
        """
        self._file_path = file_path
        self._frames_per_buffer = frames_per_buffer
        self._loop = loop
        self._gain = gain
        self._realtime = realtime
        self._callback: Optional[Callable[[np.ndarray, float], None]] = None
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self.error: Optional[Exception] = None

        with sf.SoundFile(self._file_path) as f:
            self._sample_rate = f.samplerate
            self._channels = f.channels
            self._frames = f.frames

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def duration(self) -> float:
        """Length of the file in seconds."""
        return self._frames / self._sample_rate

    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        if self._running:
            logger.warning("File input already running")
            return True

        self._callback = callback
        self.error = None
        self._running = True
        self._thread = threading.Thread(target=self._stream_data, daemon=True)
        self._thread.start()
        logger.info(f"Streaming {self._file_path} ({self.duration:.2f}s at {self._sample_rate} Hz)")
        return True

    def stop(self) -> None:
        self._running = False
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the file has been fully delivered.

        Returns:
            True if streaming finished, False if the timeout expired first
        """
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _stream_data(self) -> None:
        position = 0
        try:
            with sf.SoundFile(self._file_path) as f:
                while self._running:
                    data = f.read(self._frames_per_buffer, dtype="float32", always_2d=True)
                    if len(data) == 0:
                        if self._loop:
                            f.seek(0)
                            continue
                        break

                    block = data[:, 0]
                    if self._gain != 1.0:
                        block = block * self._gain

                    if self._callback:
                        self._callback(block, position / self._sample_rate)
                    position += len(block)

                    # Simulate real-time playback speed
                    if self._realtime:
                        time.sleep(len(block) / self._sample_rate)
        except Exception as e:
            logger.error(f"Error streaming {self._file_path}: {e}")
            self.error = e
            self._notify_finished(str(e))
            return

        logger.info(f"Finished streaming {self._file_path}")
        self._running = False
