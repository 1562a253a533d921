"""Autocorrelation-based fundamental frequency estimation."""

from __future__ import annotations
import math
import numbers
from typing import ClassVar, Optional, Tuple, TypeAlias, Union

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..core.errors import ConfigurationError
from ..core.interfaces import IPitchEstimator
from ..logger import get_logger
from ..note_types import NoSignal, NoSignalReason

logger = get_logger(__name__)


class AutocorrelationPitchEstimator(IPitchEstimator):
    """Estimates the fundamental of a monophonic buffer from its autocorrelation.

    The search is limited to lags between sample_rate / max_frequency and
    sample_rate / min_frequency, so the cost is window_size * (lag span)
    rather than quadratic in the buffer length. The first strong peak is
    refined with a parabola through its neighbours.
    """

    # Type aliases
    Frequency: TypeAlias = float
    Estimate: TypeAlias = Union[float, NoSignal]

    # Detection settings
    DEFAULT_MIN_RMS: ClassVar[float] = 0.005  # Below this the buffer is treated as silence
    DEFAULT_MIN_FREQUENCY: ClassVar[Frequency] = 65.0  # Hz - a little below E2
    DEFAULT_MAX_FREQUENCY: ClassVar[Frequency] = 1000.0  # Hz
    DEFAULT_WINDOW_SIZE: ClassVar[int] = 2048  # Samples correlated per lag
    DEFAULT_MIN_CORRELATION: ClassVar[float] = 0.01  # Absolute floor for the chosen peak
    DEFAULT_EARLY_EXIT_RATIO: ClassVar[float] = 0.9  # Fraction of zero-lag energy

    def __init__(
        self,
        min_rms: float = DEFAULT_MIN_RMS,
        min_frequency: float = DEFAULT_MIN_FREQUENCY,
        max_frequency: float = DEFAULT_MAX_FREQUENCY,
        window_size: int = DEFAULT_WINDOW_SIZE,
        min_correlation: float = DEFAULT_MIN_CORRELATION,
        early_exit_ratio: Optional[float] = DEFAULT_EARLY_EXIT_RATIO,
    ) -> None:
        """Initialize the estimator.

        Args:
            min_rms: RMS level below which a buffer reports NoSignal
            min_frequency: Lowest fundamental searched for, in Hz
            max_frequency: Highest fundamental searched for, in Hz
            window_size: Number of samples correlated at each lag
            min_correlation: Smallest correlation accepted for the chosen peak
            early_exit_ratio: Stop at the first peak above this fraction of the
                zero-lag energy; None scans every lag and keeps the best peak

        Raises:
            ConfigurationError: If any setting is out of range
        """
        self.min_rms = min_rms
        self.window_size = window_size
        self.min_correlation = min_correlation
        self.early_exit_ratio = early_exit_ratio
        self._set_frequency_bounds(min_frequency, max_frequency)

        logger.info(
            f"Pitch estimator initialized: {min_frequency:.1f}Hz - {max_frequency:.1f}Hz, "
            f"window={window_size}, min_rms={min_rms}"
        )

    def estimate(self, samples: np.ndarray, sample_rate: float) -> Estimate:
        """Estimate the fundamental frequency of a buffer.

        Args:
            samples: Mono audio samples; at least required_length(sample_rate) long
            sample_rate: Sample rate in Hz

        Returns:
            The frequency in Hz, or NoSignal when the buffer is too quiet or
            has no usable periodicity

        Raises:
            ConfigurationError: If the sample rate is invalid or the buffer is
                too short or not one-dimensional
        """
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ConfigurationError(
                f"Expected a mono buffer, got an array with shape {samples.shape}"
            )

        min_lag, max_lag = self.lag_range(sample_rate)
        required = self._window_size + max_lag + 1
        if samples.size < required:
            raise ConfigurationError(
                f"Buffer of {samples.size} samples is too short: window {self._window_size} "
                f"and max lag {max_lag} at {sample_rate}Hz need {required}"
            )

        # 1. Energy gate over the whole buffer
        rms = float(np.sqrt(np.mean(samples**2)))
        if not np.isfinite(rms):
            logger.debug("Buffer contains non-finite samples")
            return NoSignal(NoSignalReason.NON_FINITE_INPUT, rms)
        if rms < self._min_rms:
            logger.debug(f"Signal too weak: rms={rms:.5f} < {self._min_rms}")
            return NoSignal(NoSignalReason.TOO_QUIET, rms)

        # 2-3. Correlate one lag either side of the search range so every
        # candidate has real neighbours
        first_lag = min_lag - 1
        correlations = self._correlate(samples, first_lag, max_lag + 1)
        window = samples[: self._window_size]
        zero_lag = float(np.dot(window, window))

        # 4. Peak picking
        peak = self._pick_peak(correlations, zero_lag)
        if peak is None:
            logger.debug(f"No correlation peak between lags {min_lag} and {max_lag}")
            return NoSignal(NoSignalReason.NO_PEAK, rms)

        offset, peak_value = peak
        if peak_value < self._min_correlation:
            logger.debug(f"Correlation peak too weak: {peak_value:.5f}")
            return NoSignal(NoSignalReason.WEAK_PEAK, rms)

        # 5. Parabolic refinement; offset indexes the peak's left neighbour
        best_lag = first_lag + offset + 1
        y1, y2, y3 = correlations[offset : offset + 3]
        refined_lag = self._refine_lag(best_lag, float(y1), float(y2), float(y3))

        # 6. Lag to frequency
        if not math.isfinite(refined_lag) or refined_lag <= 0:
            logger.debug(f"Rejected refined lag {refined_lag} around lag {best_lag}")
            return NoSignal(NoSignalReason.INVALID_REFINEMENT, rms)

        frequency = sample_rate / refined_lag
        if not math.isfinite(frequency) or frequency <= 0:
            return NoSignal(NoSignalReason.INVALID_REFINEMENT, rms)

        logger.debug(
            f"Estimated {frequency:.2f}Hz (lag {best_lag} -> {refined_lag:.3f}, "
            f"peak {peak_value:.4f} / zero-lag {zero_lag:.4f}, rms {rms:.4f})"
        )
        return float(frequency)

    def lag_range(self, sample_rate: float) -> Tuple[int, int]:
        """Get the (min_lag, max_lag) searched at a sample rate.

        Raises:
            ConfigurationError: If the sample rate is not positive or too low
                for the configured maximum frequency
        """
        if not isinstance(sample_rate, numbers.Real) or not math.isfinite(sample_rate):
            raise ConfigurationError(f"Invalid sample rate: {sample_rate!r}")
        if sample_rate <= 0:
            raise ConfigurationError(f"Sample rate must be positive, got {sample_rate}")

        min_lag = int(math.floor(sample_rate / self._max_frequency))
        max_lag = int(math.floor(sample_rate / self._min_frequency))
        if min_lag < 1:
            raise ConfigurationError(
                f"Sample rate {sample_rate}Hz is too low to resolve {self._max_frequency}Hz"
            )
        return min_lag, max_lag

    def required_length(self, sample_rate: float) -> int:
        """Smallest buffer length accepted at the given sample rate."""
        _, max_lag = self.lag_range(sample_rate)
        return self._window_size + max_lag + 1

    def _correlate(self, samples: np.ndarray, first_lag: int, last_lag: int) -> np.ndarray:
        """Unnormalized autocorrelation for each lag in [first_lag, last_lag].

        Element k holds sum(samples[i] * samples[i + first_lag + k]) over the window.
        """
        window = samples[: self._window_size]
        shifted = sliding_window_view(
            samples[first_lag : last_lag + self._window_size], self._window_size
        )
        return shifted @ window

    def _pick_peak(
        self, correlations: np.ndarray, zero_lag: float
    ) -> Optional[Tuple[int, float]]:
        """Choose the correlation peak to use as the period.

        Candidates are strict local maxima, scanned in ascending lag. The scan
        stops at the first candidate above early_exit_ratio * zero_lag, which
        keeps the shortest strong period and avoids picking a multiple of it.

        Returns:
            (offset of the peak's left neighbour, peak value), or None if there
            is no local maximum
        """
        inner = correlations[1:-1]
        is_peak = (inner > correlations[:-2]) & (inner > correlations[2:])

        threshold = None
        if self._early_exit_ratio is not None:
            threshold = self._early_exit_ratio * zero_lag

        best: Optional[Tuple[int, float]] = None
        for offset in np.flatnonzero(is_peak):
            value = float(inner[offset])
            if best is None or value > best[1]:
                best = (int(offset), value)
            if threshold is not None and value > threshold:
                break
        return best

    @staticmethod
    def _refine_lag(lag: int, y1: float, y2: float, y3: float) -> float:
        """Fit a parabola through three correlation values and return its vertex."""
        a = (y1 + y3 - 2.0 * y2) / 2.0
        b = (y3 - y1) / 2.0
        if a == 0:
            return float(lag)
        return lag - b / (2.0 * a)

    def _set_frequency_bounds(self, min_frequency: float, max_frequency: float) -> None:
        if min_frequency <= 0 or max_frequency <= 0:
            raise ConfigurationError("Frequency bounds must be positive")
        if min_frequency >= max_frequency:
            raise ConfigurationError(
                f"min_frequency ({min_frequency}) must be below max_frequency ({max_frequency})"
            )
        self._min_frequency = float(min_frequency)
        self._max_frequency = float(max_frequency)

    # Property getters and setters
    @property
    def min_rms(self) -> float:
        """Get the RMS gate level."""
        return self._min_rms

    @min_rms.setter
    def min_rms(self, value: float) -> None:
        """Set the RMS gate level."""
        if value < 0:
            raise ConfigurationError("min_rms must not be negative")
        self._min_rms = float(value)

    @property
    def min_frequency(self) -> float:
        """Get the lowest fundamental searched for."""
        return self._min_frequency

    @min_frequency.setter
    def min_frequency(self, value: float) -> None:
        self._set_frequency_bounds(value, self._max_frequency)

    @property
    def max_frequency(self) -> float:
        """Get the highest fundamental searched for."""
        return self._max_frequency

    @max_frequency.setter
    def max_frequency(self, value: float) -> None:
        self._set_frequency_bounds(self._min_frequency, value)

    @property
    def window_size(self) -> int:
        """Get the correlation window size in samples."""
        return self._window_size

    @window_size.setter
    def window_size(self, value: int) -> None:
        """Set the correlation window size in samples."""
        if int(value) != value or value < 1:
            raise ConfigurationError("window_size must be a positive integer")
        self._window_size = int(value)

    @property
    def min_correlation(self) -> float:
        """Get the absolute floor for the chosen correlation peak."""
        return self._min_correlation

    @min_correlation.setter
    def min_correlation(self, value: float) -> None:
        self._min_correlation = float(value)

    @property
    def early_exit_ratio(self) -> Optional[float]:
        """Get the early-exit fraction of zero-lag energy, or None if disabled."""
        return self._early_exit_ratio

    @early_exit_ratio.setter
    def early_exit_ratio(self, value: Optional[float]) -> None:
        """Set the early-exit fraction of zero-lag energy."""
        if value is not None and not 0.0 < value <= 1.0:
            raise ConfigurationError("early_exit_ratio must be in (0, 1] or None")
        self._early_exit_ratio = None if value is None else float(value)
