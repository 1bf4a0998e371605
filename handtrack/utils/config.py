"""
Configuration Management

Handles loading, merging and saving configuration files.

Usage:
    from handtrack.utils.config import load_config

    config = load_config('configs/default.yaml')
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field


@dataclass
class GestureConfig:
    """Pinch gesture thresholds (sensor distance units)."""
    start_pinch_distance: float = 0.04
    stop_pinch_distance: float = 0.05


@dataclass
class PointerConfig:
    """Pointer ray and pointing-pose configuration."""
    backward_tolerance_cosine: float = 0.5  # negative disables the check
    up_tolerance_cosine: float = 0.8        # negative disables the check
    half_life_position: float = 0.01        # seconds
    half_life_direction: float = 0.01       # seconds
    frame_interval: float = 1.0 / 60.0      # seconds per sensor tick
    shoulder_drop: float = 0.15
    shoulder_width: float = 0.15


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_file: Optional[str] = None


@dataclass
class Config:
    """Main configuration container."""
    project_name: str = "handtrack"
    version: str = "1.0.0"

    # Sub-configurations
    gesture: GestureConfig = field(default_factory=GestureConfig)
    pointer: PointerConfig = field(default_factory=PointerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: Optional[Dict[str, Any]]) -> 'Config':
        """Create Config from dictionary. Missing keys keep their defaults."""
        config = cls()
        config_dict = config_dict or {}

        # Project settings
        project = config_dict.get('project', {})
        config.project_name = project.get('name', config.project_name)
        config.version = project.get('version', config.version)

        # Gesture config
        gesture = config_dict.get('gesture', {})
        pinch = gesture.get('pinch', {})
        config.gesture = GestureConfig(
            start_pinch_distance=pinch.get('start_distance', 0.04),
            stop_pinch_distance=pinch.get('stop_distance', 0.05)
        )

        # Pointer config
        pointer = config_dict.get('pointer', {})
        tolerance = pointer.get('tolerance', {})
        stabilization = pointer.get('stabilization', {})
        config.pointer = PointerConfig(
            backward_tolerance_cosine=tolerance.get('backward_cosine', 0.5),
            up_tolerance_cosine=tolerance.get('up_cosine', 0.8),
            half_life_position=stabilization.get('half_life_position', 0.01),
            half_life_direction=stabilization.get('half_life_direction', 0.01),
            frame_interval=stabilization.get('frame_interval', 1.0 / 60.0),
            shoulder_drop=stabilization.get('shoulder_drop', 0.15),
            shoulder_width=stabilization.get('shoulder_width', 0.15)
        )

        # Logging config
        logging_cfg = config_dict.get('logging', {})
        config.logging = LoggingConfig(
            level=logging_cfg.get('level', 'INFO'),
            log_file=logging_cfg.get('log_file')
        )

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Inverse of ``from_dict``."""
        return {
            'project': {
                'name': self.project_name,
                'version': self.version
            },
            'gesture': {
                'pinch': {
                    'start_distance': self.gesture.start_pinch_distance,
                    'stop_distance': self.gesture.stop_pinch_distance
                }
            },
            'pointer': {
                'tolerance': {
                    'backward_cosine': self.pointer.backward_tolerance_cosine,
                    'up_cosine': self.pointer.up_tolerance_cosine
                },
                'stabilization': {
                    'half_life_position': self.pointer.half_life_position,
                    'half_life_direction': self.pointer.half_life_direction,
                    'frame_interval': self.pointer.frame_interval,
                    'shoulder_drop': self.pointer.shoulder_drop,
                    'shoulder_width': self.pointer.shoulder_width
                }
            },
            'logging': {
                'level': self.logging.level,
                'log_file': self.logging.log_file
            }
        }

    def validate(self) -> 'Config':
        """
        Check value ranges.

        Raises:
            ValueError: if the pinch thresholds are inverted or a smoothing
                parameter is not positive
        """
        if self.gesture.start_pinch_distance > self.gesture.stop_pinch_distance:
            raise ValueError(
                f"start_pinch_distance ({self.gesture.start_pinch_distance}) must not "
                f"exceed stop_pinch_distance ({self.gesture.stop_pinch_distance})"
            )
        if self.pointer.frame_interval <= 0:
            raise ValueError(f"frame_interval must be positive, got {self.pointer.frame_interval}")
        for name in ('half_life_position', 'half_life_direction'):
            value = getattr(self.pointer, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        return self


def load_config(config_path: str) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Validated Config object
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r') as f:
        config_dict = yaml.safe_load(f)

    return Config.from_dict(config_dict).validate()


def merge_configs(base: Dict, override: Dict) -> Dict:
    """
    Merge two config dictionaries.

    Args:
        base: Base configuration
        override: Override values

    Returns:
        Merged configuration
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def save_config(config: Config, path: str):
    """Save configuration to YAML file."""
    with open(path, 'w') as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False)
