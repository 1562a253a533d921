"""Fixed-length analysis buffer fed by small capture blocks."""

from typing import Optional

import numpy as np

from ..core.errors import ConfigurationError


class RollingBuffer:
    """Keeps the most recent `size` samples of a mono stream.

    Capture devices deliver short blocks; the estimator wants one long buffer.
    Each push shifts the new block in at the end, and once the buffer has been
    filled every push hands out a copy of the latest `size` samples.
    """

    DEFAULT_SIZE = 4096

    def __init__(self, size: int = DEFAULT_SIZE) -> None:
        if int(size) != size or size < 1:
            raise ConfigurationError(f"Buffer size must be a positive integer, got {size}")
        self._size = int(size)
        self._buffer = np.zeros(self._size, dtype=np.float32)
        self._filled = 0

    @property
    def size(self) -> int:
        return self._size

    def is_full(self) -> bool:
        return self._filled >= self._size

    def push(self, block: np.ndarray) -> Optional[np.ndarray]:
        """Append a block of samples.

        Args:
            block: Audio samples; for (frames x channels) input the first
                channel is used

        Returns:
            A copy of the latest full buffer, or None until enough samples
            have arrived
        """
        block = np.asarray(block, dtype=np.float32)
        if block.ndim > 1:
            block = block[:, 0]

        count = block.size
        if count >= self._size:
            self._buffer[:] = block[-self._size :]
        elif count > 0:
            self._buffer[:-count] = self._buffer[count:]
            self._buffer[-count:] = block
        self._filled = min(self._size, self._filled + count)

        if not self.is_full():
            return None
        return self._buffer.copy()

    def reset(self) -> None:
        """Forget all buffered samples."""
        self._buffer.fill(0.0)
        self._filled = 0
