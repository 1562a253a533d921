"""Configuration management for Tonal Tuner components."""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ..logger import get_logger

logger = get_logger(__name__)

# One JSON file per component; keys are constructor arguments
DEFAULT_CONFIGS: Dict[str, Dict[str, Any]] = {
    "pitch_estimator": {
        "min_rms": 0.005,
        "min_frequency": 65.0,
        "max_frequency": 1000.0,
        "window_size": 2048,
        "min_correlation": 0.01,
        "early_exit_ratio": 0.9,
    },
    "aubio_estimator": {
        "method": "yin",
        "buffer_size": 4096,
        "tolerance": 0.8,
        "min_confidence": 0.5,
        "min_rms": 0.005,
        "min_frequency": 65.0,
        "max_frequency": 1000.0,
    },
    "audio_input": {
        "sample_rate": 44100,
        "frames_per_buffer": 1024,
        "channels": 1,
    },
    "tuner": {
        "buffer_size": 4096,
        "in_tune_cents": 5.0,
    },
}


def default_config_dir() -> Path:
    """~/.config/tonal_tuner"""
    return Path(os.path.expanduser("~")) / ".config" / "tonal_tuner"


class ConfigManager:
    """Keeps component settings in JSON files under a config directory.

    Files are created with the defaults on first use. A file that cannot be
    parsed is reported and ignored, so a bad edit never stops the tuner from
    starting.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory to store configuration files, or None to use default
        """
        self.config_dir = Path(config_dir) if config_dir else default_config_dir()
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.default_configs = copy.deepcopy(DEFAULT_CONFIGS)
        self.configs = {
            name: self.load_config(name, defaults)
            for name, defaults in self.default_configs.items()
        }

    def _path(self, name: str) -> Path:
        return self.config_dir / f"{name}.json"

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Read a component's settings, writing the defaults if there is no file yet.

        Keys missing from the file are taken from the defaults. Keys the
        component does not know are dropped, since the factory passes every
        key to a constructor.

        Args:
            name: Configuration name
            default_config: Settings used for missing keys or an unreadable file

        Returns:
            Configuration dictionary
        """
        config_file = self._path(name)
        if not config_file.exists():
            config = dict(default_config)
            self.save_config(name, config)
            return config

        try:
            with open(config_file, "r") as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError("top-level value is not an object")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration from {config_file}: {e}")
            return dict(default_config)

        unknown = sorted(set(stored) - set(default_config))
        if unknown:
            logger.warning(f"Ignoring unknown keys in {config_file}: {', '.join(unknown)}")

        config = {key: stored.get(key, value) for key, value in default_config.items()}
        logger.info(f"Loaded configuration from {config_file}")
        return config

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Write a component's settings to its file.

        Returns:
            True if saved successfully, False otherwise
        """
        config_file = self._path(name)
        try:
            with open(config_file, "w") as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving configuration to {config_file}: {e}")
            return False
        logger.info(f"Saved configuration to {config_file}")
        return True

    def get_config(self, name: str) -> Dict[str, Any]:
        """Get a copy of a component's settings; unknown names give an empty dict."""
        return dict(self.configs.get(name, {}))

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Update configuration and save to file.

        Args:
            name: Configuration name
            updates: Dictionary of updates to apply

        Returns:
            True if updated and saved successfully, False otherwise
        """
        if name not in self.configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name].update(updates)
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        """Restore a component's defaults and save them."""
        if name not in self.default_configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = dict(self.default_configs[name])
        return self.save_config(name, self.configs[name])
