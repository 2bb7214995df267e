"""Centralized constants and configuration loader.

This module provides access to configuration values and sensible defaults
for enrollment, matching and camera settings. Values are loaded from
config/config.yaml when available, otherwise defaults are used.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"

UNKNOWN_LABEL = "unknown"

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".webp")


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Uses default if None.

    Returns:
        Configuration dictionary.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    try:
        if path.exists():
            with open(path, "r") as f:
                return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")

    return {}


def _get_nested(config: Dict, *keys: str, default: Any = None) -> Any:
    """Get nested config value with default fallback."""
    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
        else:
            return default
        if value is None:
            return default
    return value


# ============================================================
# Enrollment Constants
# ============================================================

@dataclass
class EnrollmentConfig:
    """Gallery enrollment settings."""
    # Root directory with one subdirectory per label
    images_dir: str = "data/images"
    # "full_image" embeds the whole photo, "crop_to_box" embeds the detected face
    mode: str = "full_image"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "EnrollmentConfig":
        """Create from config dictionary."""
        en = _get_nested(config, "enrollment") or {}

        return cls(
            images_dir=en.get("images_dir", "data/images"),
            mode=en.get("mode", "full_image"),
        )


# ============================================================
# Matching Constants
# ============================================================

@dataclass
class MatchingConfig:
    """Embedding matching settings."""
    # "euclidean" or "cosine"
    metric: str = "euclidean"
    # Maximum distance still accepted as a match
    threshold: float = 1.0
    # Path to the FaceNet TFLite model
    model_path: Optional[str] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MatchingConfig":
        """Create from config dictionary."""
        m = _get_nested(config, "matching") or {}

        return cls(
            metric=m.get("metric", "euclidean"),
            threshold=float(m.get("threshold", 1.0)),
            model_path=m.get("model_path"),
        )


# ============================================================
# Camera Constants
# ============================================================

@dataclass
class CameraSettings:
    """Live camera settings."""
    device: int = 0
    resolution: Tuple[int, int] = (640, 480)
    front_facing: bool = False
    # Display rotation in degrees (0, 90, 180, 270)
    rotation: int = 0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "CameraSettings":
        """Create from config dictionary."""
        cam = _get_nested(config, "camera") or {}
        resolution = cam.get("resolution", [640, 480])

        return cls(
            device=cam.get("device", 0),
            resolution=tuple(resolution),
            front_facing=bool(cam.get("front_facing", False)),
            rotation=int(cam.get("rotation", 0)),
        )


# ============================================================
# Global Config Instance (lazy loaded)
# ============================================================

class Config:
    """Global configuration singleton."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load()
        return cls._instance

    def _load(self) -> None:
        """Load configuration from file."""
        self._config = load_config()
        self._enrollment: Optional[EnrollmentConfig] = None
        self._matching: Optional[MatchingConfig] = None
        self._camera: Optional[CameraSettings] = None

    def reload(self, config_path: Optional[Path] = None) -> None:
        """Reload configuration from file."""
        self._config = load_config(config_path)
        # Reset cached configs
        self._enrollment = None
        self._matching = None
        self._camera = None

    @property
    def enrollment(self) -> EnrollmentConfig:
        """Get enrollment config."""
        if self._enrollment is None:
            self._enrollment = EnrollmentConfig.from_config(self._config)
        return self._enrollment

    @property
    def matching(self) -> MatchingConfig:
        """Get matching config."""
        if self._matching is None:
            self._matching = MatchingConfig.from_config(self._config)
        return self._matching

    @property
    def camera(self) -> CameraSettings:
        """Get camera config."""
        if self._camera is None:
            self._camera = CameraSettings.from_config(self._config)
        return self._camera

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a config value by key path."""
        return _get_nested(self._config, *keys, default=default)


def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()


# Convenience accessors
def get_enrollment_config() -> EnrollmentConfig:
    """Get enrollment configuration."""
    return get_config().enrollment


def get_matching_config() -> MatchingConfig:
    """Get matching configuration."""
    return get_config().matching


def get_camera_settings() -> CameraSettings:
    """Get camera configuration."""
    return get_config().camera
