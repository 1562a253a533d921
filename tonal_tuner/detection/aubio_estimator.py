"""Pitch estimation backed by aubio's YIN detector."""

from __future__ import annotations
import math
from typing import ClassVar, Dict, Union

import aubio
import numpy as np

from ..core.errors import ConfigurationError
from ..core.interfaces import IPitchEstimator
from ..logger import get_logger
from ..note_types import NoSignal, NoSignalReason

logger = get_logger(__name__)


class AubioPitchEstimator(IPitchEstimator):
    """Estimates the fundamental with aubio, behind the same NoSignal contract."""

    DEFAULT_METHOD: ClassVar[str] = "yin"
    DEFAULT_BUFFER_SIZE: ClassVar[int] = 4096
    DEFAULT_TOLERANCE: ClassVar[float] = 0.8
    DEFAULT_MIN_CONFIDENCE: ClassVar[float] = 0.5

    def __init__(
        self,
        method: str = DEFAULT_METHOD,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        tolerance: float = DEFAULT_TOLERANCE,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        min_rms: float = 0.005,
        min_frequency: float = 65.0,
        max_frequency: float = 1000.0,
    ) -> None:
        """Initialize the estimator.

        Args:
            method: aubio pitch method (e.g., 'yin', 'yinfft')
            buffer_size: Samples analysed per call
            tolerance: aubio pitch detection tolerance (0.0 to 1.0)
            min_confidence: Minimum aubio confidence to accept a pitch
            min_rms: RMS level below which a buffer reports NoSignal
            min_frequency: Lowest accepted pitch in Hz
            max_frequency: Highest accepted pitch in Hz
        """
        if buffer_size < 1:
            raise ConfigurationError("buffer_size must be positive")
        if not 0.0 <= tolerance <= 1.0:
            raise ConfigurationError("Tolerance must be between 0.0 and 1.0")
        if not 0 < min_frequency < max_frequency:
            raise ConfigurationError("Frequency bounds must be positive and ordered")

        self._method = method
        self._buffer_size = int(buffer_size)
        self._tolerance = tolerance
        self._min_confidence = min_confidence
        self._min_rms = min_rms
        self._min_frequency = min_frequency
        self._max_frequency = max_frequency

        # One detector per sample rate, created on first use
        self._detectors: Dict[int, "aubio.pitch"] = {}

        logger.info(f"aubio pitch estimator initialized: method={method}, buffer={buffer_size}")

    def _detector_for(self, sample_rate: float) -> "aubio.pitch":
        if not math.isfinite(sample_rate) or sample_rate <= 0:
            raise ConfigurationError(f"Sample rate must be positive, got {sample_rate}")

        rate = int(sample_rate)
        if rate not in self._detectors:
            logger.info(f"Creating aubio '{self._method}' detector at {rate} Hz")
            detector = aubio.pitch(self._method, self._buffer_size, self._buffer_size, rate)
            detector.set_unit("Hz")
            detector.set_tolerance(self._tolerance)
            self._detectors[rate] = detector
        return self._detectors[rate]

    def required_length(self, sample_rate: float) -> int:
        """Smallest buffer length accepted at the given sample rate."""
        self._detector_for(sample_rate)
        return self._buffer_size

    def estimate(self, samples: np.ndarray, sample_rate: float) -> Union[float, NoSignal]:
        """Estimate the fundamental frequency of a buffer with aubio."""
        samples = np.asarray(samples, dtype=np.float32)
        if samples.ndim != 1:
            raise ConfigurationError(
                f"Expected a mono buffer, got an array with shape {samples.shape}"
            )

        detector = self._detector_for(sample_rate)
        if samples.size < self._buffer_size:
            raise ConfigurationError(
                f"Buffer of {samples.size} samples is shorter than {self._buffer_size}"
            )

        frame = np.ascontiguousarray(samples[: self._buffer_size])
        rms = float(np.sqrt(np.mean(frame.astype(np.float64) ** 2)))
        if not np.isfinite(rms):
            return NoSignal(NoSignalReason.NON_FINITE_INPUT, rms)
        if rms < self._min_rms:
            logger.debug(f"Signal too weak: rms={rms:.5f}")
            return NoSignal(NoSignalReason.TOO_QUIET, rms)

        pitch = float(detector(frame)[0])
        confidence = float(detector.get_confidence())

        if confidence < self._min_confidence:
            logger.debug(f"aubio confidence too low: {confidence:.2f} ({pitch:.1f}Hz)")
            return NoSignal(NoSignalReason.WEAK_PEAK, rms)
        if not self._min_frequency <= pitch <= self._max_frequency:
            logger.debug(f"aubio pitch out of range: {pitch:.1f}Hz")
            return NoSignal(NoSignalReason.NO_PEAK, rms)

        logger.debug(f"aubio estimated {pitch:.2f}Hz (conf: {confidence:.2f}, rms: {rms:.4f})")
        return pitch
