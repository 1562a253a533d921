import numpy as np
import pytest

pytest.importorskip("aubio")

from tonal_tuner.core.errors import ConfigurationError
from tonal_tuner.core.factory import ComponentFactory
from tonal_tuner.core.config import ConfigManager
from tonal_tuner.detection.aubio_estimator import AubioPitchEstimator
from tonal_tuner.note_types import NoSignal, NoSignalReason

from audio_fixtures import BUFFER_SIZE, SAMPLE_RATE, sine


@pytest.fixture
def estimator():
    return AubioPitchEstimator()


@pytest.mark.parametrize("frequency", [82.41, 110.0, 196.0, 440.0])
def test_sine(estimator, frequency):
    assert estimator.estimate(sine(frequency), SAMPLE_RATE) == pytest.approx(frequency, rel=0.01)


def test_silence(estimator):
    result = estimator.estimate(np.zeros(BUFFER_SIZE, dtype=np.float32), SAMPLE_RATE)
    assert isinstance(result, NoSignal)
    assert result.reason is NoSignalReason.TOO_QUIET


def test_short_buffer(estimator):
    with pytest.raises(ConfigurationError):
        estimator.estimate(sine(110.0, length=1024), SAMPLE_RATE)


def test_required_length(estimator):
    assert estimator.required_length(SAMPLE_RATE) == 4096
    with pytest.raises(ConfigurationError):
        estimator.required_length(0)


def test_invalid_settings():
    with pytest.raises(ConfigurationError):
        AubioPitchEstimator(tolerance=2.0)
    with pytest.raises(ConfigurationError):
        AubioPitchEstimator(min_frequency=500.0, max_frequency=100.0)


def test_factory_creates_yin(tmp_path):
    factory = ComponentFactory(ConfigManager(str(tmp_path)))
    assert isinstance(factory.create_pitch_estimator("yin"), AubioPitchEstimator)
