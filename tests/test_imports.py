"""Every module in the package imports cleanly."""

import importlib
import pkgutil

import pytest

import tonal_tuner

# Modules whose native backend may be missing on a test machine
NATIVE_BACKENDS = {
    "tonal_tuner.detection.aubio_estimator": "aubio",
    "tonal_tuner.audio.audio_input": "sounddevice",
}


def find_modules():
    return sorted(
        info.name
        for info in pkgutil.walk_packages(tonal_tuner.__path__, prefix="tonal_tuner.")
    )


@pytest.mark.parametrize("module_name", find_modules())
def test_module_imports(module_name):
    backend = NATIVE_BACKENDS.get(module_name)
    if backend is not None:
        try:
            importlib.import_module(backend)
        except (ImportError, OSError) as e:
            pytest.skip(f"{backend} unavailable: {e}")
    importlib.import_module(module_name)


def test_public_api():
    assert tonal_tuner.__version__
    for name in tonal_tuner.__all__:
        assert hasattr(tonal_tuner, name), name
