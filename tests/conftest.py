import pytest
import soundfile as sf

from audio_fixtures import SAMPLE_RATE, sine


@pytest.fixture
def make_sine():
    return sine


@pytest.fixture
def sine_wav(tmp_path):
    """Write a mono WAV of a sine wave and return its path."""

    def _write(frequency, seconds=1.0, sample_rate=SAMPLE_RATE, amplitude=0.5):
        path = tmp_path / f"sine_{frequency:g}.wav"
        samples = sine(frequency, int(seconds * sample_rate), sample_rate, amplitude)
        sf.write(str(path), samples, sample_rate)
        return str(path)

    return _write
