"""Audio capture adapters and the tuner service.

The sounddevice and soundfile backed inputs live in `audio_input` and
`file_input` and are imported on demand.
"""

from .frame_buffer import RollingBuffer
from .tuner_service import TunerService

__all__ = ["RollingBuffer", "TunerService"]
