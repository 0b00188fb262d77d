"""Component configuration for the stereo camera and the flow movement sensor.

Configurations are plain dataclasses. They can be built directly, from a
dictionary using the hyphenated keys of the YAML files, or loaded from a
YAML file::

    left: cam-left
    right: cam-right
    distance-meters: 0.12
    focal-length-pixels: 700
    max-disparity: 96
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Map ``focal-length-pixels`` style keys to attribute names."""
    return {str(key).replace("-", "_"): value for key, value in data.items()}


def _read_yaml(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}")
    return data


@dataclass
class StereoCameraConfig:
    """Configuration of the stereo point-cloud camera.

    Attributes:
        left: Name of the left (reference) camera
        right: Name of the right camera
        distance_meters: Stereo baseline in meters
        focal_length_pixels: Focal length in pixels
        min_disparity: Exclusive lower disparity bound (default 1)
        max_disparity: Exclusive upper disparity bound and search radius (default 64)
        disparity_step: Candidate stride (default 1)
        pixel_step: Sampling stride over the image (default 1)
    """

    left: str = ""
    right: str = ""
    distance_meters: float = 0.0
    focal_length_pixels: float = 0.0
    min_disparity: float = 0.0
    max_disparity: float = 0.0
    disparity_step: int = 0
    pixel_step: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StereoCameraConfig":
        """Build config from a mapping, ignoring unknown keys.

        Raises:
            ConfigError: If a value has the wrong type
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in _normalize_keys(data).items() if k in known}
        try:
            config = cls(**values)
            config.distance_meters = float(config.distance_meters)
            config.focal_length_pixels = float(config.focal_length_pixels)
            config.min_disparity = float(config.min_disparity)
            config.max_disparity = float(config.max_disparity)
            config.disparity_step = int(config.disparity_step)
            config.pixel_step = int(config.pixel_step)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid stereo camera config: {e}") from e
        return config

    def validate(self) -> list[str]:
        """Check required fields.

        Returns:
            Names of the cameras this component depends on

        Raises:
            ConfigError: If a camera name is missing or the baseline or
                focal length is not positive
        """
        if not self.left:
            raise ConfigError("need left")
        if not self.right:
            raise ConfigError("need right")
        if self.distance_meters <= 0:
            raise ConfigError("need distance-meters")
        if self.focal_length_pixels <= 0:
            raise ConfigError("need focal-length-pixels")
        return [self.left, self.right]

    def get_min_disparity(self) -> float:
        return self.min_disparity if self.min_disparity > 0 else 1.0

    def get_max_disparity(self) -> float:
        return self.max_disparity if self.max_disparity > 0 else 64.0

    def get_disparity_step(self) -> int:
        return self.disparity_step if self.disparity_step > 0 else 1

    def get_pixel_step(self) -> int:
        return self.pixel_step if self.pixel_step > 0 else 1


@dataclass
class FlowSensorConfig:
    """Configuration of the optical-flow movement sensor.

    Attributes:
        left: Name of the camera whose frames are tracked
        right: Name of the second camera (declared dependency only)
        focal_length: Pixel-to-physical scale for linear velocity (default 30)
    """

    left: str = ""
    right: str = ""
    focal_length: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FlowSensorConfig":
        """Build config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in _normalize_keys(data).items() if k in known}
        try:
            config = cls(**values)
            config.focal_length = float(config.focal_length)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid flow sensor config: {e}") from e
        return config

    def validate(self) -> list[str]:
        """Check required fields and return camera dependencies."""
        if not self.left:
            raise ConfigError("need left")
        if not self.right:
            raise ConfigError("need right")
        return [self.left, self.right]

    def get_focal_length(self) -> float:
        return self.focal_length if self.focal_length > 0 else 30.0


def load_stereo_camera_config(path: str | Path) -> StereoCameraConfig:
    """Load and validate a stereo camera config from YAML.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the contents are invalid
    """
    config = StereoCameraConfig.from_dict(_read_yaml(path))
    config.validate()
    return config


def load_flow_sensor_config(path: str | Path) -> FlowSensorConfig:
    """Load and validate a flow sensor config from YAML.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the contents are invalid
    """
    config = FlowSensorConfig.from_dict(_read_yaml(path))
    config.validate()
    return config
