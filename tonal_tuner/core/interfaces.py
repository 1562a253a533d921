"""Defines the core interfaces for the Tonal Tuner application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, Union

import numpy as np

from ..note_types import NoSignal


class IAudioInput(ABC):
    """Interface for audio input handlers."""

    @abstractmethod
    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        """Start capturing audio."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing audio."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if audio is running."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the audio stream."""
        pass


class IPitchEstimator(ABC):
    """Interface for fundamental frequency estimators."""

    @abstractmethod
    def estimate(self, samples: np.ndarray, sample_rate: float) -> Union[float, NoSignal]:
        """Estimate the fundamental frequency of a mono buffer, or report NoSignal."""
        pass

    @abstractmethod
    def required_length(self, sample_rate: float) -> int:
        """Smallest buffer length accepted at the given sample rate."""
        pass
