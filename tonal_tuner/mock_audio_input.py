"""A mock audio input for unit tests. Frames are pushed by hand."""

import numpy as np

from .audio.input_base import AudioInputHandler


class MockAudioInput(AudioInputHandler):
    """Delivers whatever the test pushes, synchronously, on the calling thread."""

    def __init__(self, sample_rate: int = 44100, fail_to_start: bool = False):
        self._sample_rate = sample_rate
        self._fail_to_start = fail_to_start
        self.callback = None
        self._running = False
        self._clock = 0.0

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def start(self, callback):
        if self._fail_to_start:
            return False
        self.callback = callback
        self._running = True
        return True

    def stop(self):
        self._running = False

    def push(self, samples) -> None:
        """Deliver a block to the registered callback, if running."""
        if not self._running or self.callback is None:
            return
        samples = np.asarray(samples, dtype=np.float32)
        self.callback(samples, self._clock)
        self._clock += samples.size / self._sample_rate

    def disconnect(self, reason: str = "device unplugged") -> None:
        """Simulate the capture device going away."""
        self._notify_finished(reason)
