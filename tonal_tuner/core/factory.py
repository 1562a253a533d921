"""Factory for creating Tonal Tuner components."""

from typing import Any, Dict, Optional, Type

from ..audio.tuner_service import TunerService
from ..detection.pitch_estimator import AutocorrelationPitchEstimator
from ..detection.selection import SelectionState
from ..logger import get_logger
from .config import ConfigManager
from .interfaces import IAudioInput, IPitchEstimator

logger = get_logger(__name__)


# Backends with native dependencies are imported only when requested
def _load_aubio_estimator() -> Type[IPitchEstimator]:
    from ..detection.aubio_estimator import AubioPitchEstimator

    return AubioPitchEstimator


def _load_sounddevice_input() -> Type[IAudioInput]:
    from ..audio.audio_input import SoundDeviceInput

    return SoundDeviceInput


def _load_file_input() -> Type[IAudioInput]:
    from ..audio.file_input import WavFileInput

    return WavFileInput


class ComponentFactory:
    """Factory for creating Tonal Tuner components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        # implementation name -> (config name, class loader)
        self.pitch_estimator_classes: Dict[str, tuple] = {
            "default": ("pitch_estimator", lambda: AutocorrelationPitchEstimator),
            "yin": ("aubio_estimator", _load_aubio_estimator),
        }

        # implementation name -> (config keys used, class loader); None uses every key
        self.audio_input_classes: Dict[str, tuple] = {
            "default": (None, _load_sounddevice_input),
            "wav": (("frames_per_buffer",), _load_file_input),
        }

    def create_pitch_estimator(
        self, implementation: str = "default", **kwargs
    ) -> IPitchEstimator:
        """Create a pitch estimator.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            Pitch estimator instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.pitch_estimator_classes:
            raise ValueError(f"Unknown pitch estimator implementation: {implementation}")

        config_name, loader = self.pitch_estimator_classes[implementation]

        # Get default configuration, then override with provided parameters
        config = self.config_manager.get_config(config_name)
        config.update(kwargs)

        instance = loader()(**config)
        logger.info(f"Created pitch estimator: {implementation}")
        return instance

    def create_audio_input(self, implementation: str = "default", **kwargs) -> IAudioInput:
        """Create an audio input.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            Audio input instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.audio_input_classes:
            raise ValueError(f"Unknown audio input implementation: {implementation}")

        keys, loader = self.audio_input_classes[implementation]

        config = self.config_manager.get_config("audio_input")
        if keys is not None:
            config = {key: config[key] for key in keys if key in config}
        config.update(kwargs)

        instance = loader()(**config)
        logger.info(f"Created audio input: {implementation}")
        return instance

    def create_tuner_service(
        self,
        audio_input: Optional[IAudioInput] = None,
        estimator: Optional[IPitchEstimator] = None,
        selection: Optional[SelectionState] = None,
        **kwargs: Any,
    ) -> TunerService:
        """Create a tuner service.

        Args:
            audio_input: Audio input, or None to create the default one
            estimator: Pitch estimator, or None to create the default one
            selection: Mode/target state, or None to create one
            **kwargs: Overrides for the 'tuner' configuration

        Returns:
            Tuner service instance
        """
        config = self.config_manager.get_config("tuner")
        config.update(kwargs)

        if audio_input is None:
            audio_input = self.create_audio_input()
        if estimator is None:
            estimator = self.create_pitch_estimator()

        instance = TunerService(
            audio_input=audio_input,
            estimator=estimator,
            selection=selection,
            buffer_size=config["buffer_size"],
        )
        logger.info("Created tuner service")
        return instance
