"""Live microphone capture with sounddevice."""

from __future__ import annotations
import time
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

import numpy as np
import sounddevice as sd

from ..logger import get_logger
from .input_base import AudioInputHandler

logger = get_logger(__name__)


def list_input_devices() -> List[Tuple[int, Dict[str, Any]]]:
    """List (device_id, device_info) for every device with input channels."""
    devices = sd.query_devices()
    return [
        (device_id, device)
        for device_id, device in enumerate(devices)
        if device["max_input_channels"] > 0
    ]


class SoundDeviceInput(AudioInputHandler):
    """Audio input handler using sounddevice library."""

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    FRAMES_PER_BUFFER: ClassVar[int] = 1024  # Frames per callback; the rolling buffer assembles analysis frames
    CHANNELS: ClassVar[int] = 1  # Mono audio
    FALLBACK_RATES: ClassVar[List[int]] = [44100, 48000, 22050, 16000]

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frames_per_buffer: Optional[int] = None,
        channels: Optional[int] = None,
        device_name: Optional[str] = None,
    ) -> None:
        """Initialize the audio input handler.

        Args:
            device_id: Audio input device ID, or None to auto-detect
            sample_rate: Sample rate in Hz, or None for default (44100)
            frames_per_buffer: Buffer size in frames, or None for default (1024)
            channels: Number of audio channels, or None for default (1)
            device_name: Substring of a device name to prefer when no ID is given
        """
        self._device_id = device_id
        self._device_name = device_name
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._frames_per_buffer = frames_per_buffer or self.FRAMES_PER_BUFFER
        self._channels = channels or self.CHANNELS

        self._stream: Optional[sd.InputStream] = None
        self._callback: Optional[Callable[[np.ndarray, float], None]] = None
        self._running = False
        self._stopping = False

        if self._device_id is None and self._device_name:
            self._device_id = self._find_device(self._device_name)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def _find_device(self, name: str) -> Optional[int]:
        """Find an input device whose name contains `name`.

        Returns:
            The device ID, or None to fall back to the default input device
        """
        try:
            for device_id, device in list_input_devices():
                if name.lower() in device["name"].lower():
                    logger.info(f"Found input device: {device['name']}")
                    return device_id
        except Exception as e:
            logger.error(f"Error querying audio devices: {e}")
        logger.warning(f"No input device matching '{name}', using default input device")
        return None

    def _candidate_rates(self) -> List[int]:
        rates = [rate for rate in self.FALLBACK_RATES if rate != self._sample_rate]
        return [self._sample_rate] + rates

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info: Any,
        status: sd.CallbackFlags,
    ) -> None:
        """Callback for processing audio data from the input stream.

        Args:
            indata: The input audio data as a numpy array (frames x channels)
            _frames: Number of frames in the buffer
            _time_info: Timing information from PortAudio
            status: Status flags indicating whether input/output underflow or overflow occurred

        Note:
            This is called from a separate audio thread, so it should be fast
            and avoid any blocking operations to prevent audio glitches.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        if self._callback:
            # Extract mono audio data (take first channel if multi-channel)
            audio_data = indata[:, 0] if indata.ndim > 1 else indata
            try:
                self._callback(audio_data.copy(), time.time())
            except Exception as e:
                logger.error(f"Aborting audio stream: {e}")
                raise sd.CallbackAbort from e

    def _stream_finished(self) -> None:
        """Called by sounddevice once the stream is no longer active."""
        if not self._stopping:
            self._notify_finished("audio stream ended")

    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        """Start capturing audio and pass it to the callback.

        Tries the requested sample rate first and falls back to common rates.

        Args:
            callback: Function to call with audio data and timestamp

        Returns:
            True if started successfully, False otherwise
        """
        if self._running:
            logger.warning("Audio input already running")
            return True

        self._callback = callback
        self._stopping = False

        for rate in self._candidate_rates():
            try:
                logger.info(f"Trying to start audio input with sample rate: {rate} Hz")
                self._stream = sd.InputStream(
                    device=self._device_id,
                    samplerate=rate,
                    blocksize=self._frames_per_buffer,
                    channels=self._channels,
                    dtype="float32",
                    callback=self._audio_callback,
                    finished_callback=self._stream_finished,
                )
                self._sample_rate = rate
                self._running = True
                self._stream.start()
                logger.info(f"Audio input started with sample rate {rate} Hz")
                return True
            except Exception as e:
                logger.warning(f"Failed to start audio input with sample rate {rate} Hz: {e}")
                self._running = False
                if self._stream:
                    try:
                        self._stream.close()
                    except sd.PortAudioError:
                        pass
                    self._stream = None

        logger.error("Could not start audio input with any sample rate")
        return False

    def stop(self) -> None:
        """Stop capturing audio."""
        if not self._running:
            return

        self._stopping = True
        try:
            if self._stream:
                self._stream.stop()
                self._stream.close()
                self._stream = None
            logger.info("Audio input stopped")
        except sd.PortAudioError as e:
            logger.error(f"Error stopping audio input: {e}")
        finally:
            self._running = False
