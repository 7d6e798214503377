"""
Configuration management for skeleton import.

Provides the import configuration dataclass and JSON load/save helpers.
Besides its own flat layout, ``ImportConfig.from_dict`` accepts the nested
layout used by offline import pipeline configuration files:

    {"skeleton": {"import": {"types": {"skeleton": true, "marker": false}}}}
"""

import json
from dataclasses import dataclass, field, asdict
from typing import Dict, Any
from pathlib import Path

from ..core.constants import (
    DEFAULT_SOURCE_COORDINATE_SYSTEM,
    DEFAULT_TARGET_COORDINATE_SYSTEM,
    DEFAULT_UNIT_SCALE,
    MAX_JOINTS,
)
from ..skeleton.errors import ConfigError


def _default_types() -> Dict[str, bool]:
    return {
        'any': False,
        'skeleton': True,
        'marker': False,
        'geometry': False,
        'camera': False,
        'light': False,
    }


@dataclass
class ImportConfig:
    """
    Configuration for skeleton import.

    Attributes:
        # Node selection
        types: Node families accepted as joints (any, skeleton, marker,
            geometry, camera, light)

        # Transform conversion
        source_coordinate_system: 'auto', 'opengl', 'blender' or 'directx';
            'auto' reads the scene's up axis
        target_coordinate_system: Coordinate system of the output skeleton
        unit_scale: Factor applied to scene units

        # Validation
        max_joints: Maximum joint count of an extracted skeleton
    """

    # Node selection
    types: Dict[str, bool] = field(default_factory=_default_types)

    # Transform conversion
    source_coordinate_system: str = DEFAULT_SOURCE_COORDINATE_SYSTEM
    target_coordinate_system: str = DEFAULT_TARGET_COORDINATE_SYSTEM
    unit_scale: float = DEFAULT_UNIT_SCALE

    # Validation
    max_joints: int = MAX_JOINTS

    # Additional fields
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        types = _default_types()
        unknown = set(self.types) - set(types)
        if unknown:
            raise ConfigError(f"Unknown node types: {sorted(unknown)}")
        types.update({key: bool(value) for key, value in self.types.items()})
        self.types = types

        if not self.unit_scale > 0:
            raise ConfigError(f"unit_scale must be positive, got {self.unit_scale}")
        if self.max_joints <= 0:
            raise ConfigError(f"max_joints must be positive, got {self.max_joints}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'ImportConfig':
        """Create config from dictionary."""
        config_dict = dict(config_dict)

        # Nested pipeline layout
        skeleton_section = config_dict.pop('skeleton', None)
        if isinstance(skeleton_section, dict):
            import_section = skeleton_section.get('import', {}) or {}
            if 'types' in import_section:
                config_dict.setdefault('types', import_section['types'])

        # Extract known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        known_kwargs = {k: v for k, v in config_dict.items() if k in known_fields and k != 'extra'}
        extra_kwargs = {k: v for k, v in config_dict.items() if k not in known_fields}
        extra_kwargs.update(config_dict.get('extra', {}) or {})

        config = cls(**known_kwargs)
        config.extra = extra_kwargs
        return config

    def update(self, **kwargs) -> 'ImportConfig':
        """Return a new config with updated values."""
        config_dict = self.to_dict()
        config_dict.update(kwargs)
        return ImportConfig.from_dict(config_dict)

    def node_filter(self):
        """NodeTypeFilter built from ``types``."""
        from ..skeleton.node_filter import NodeTypeFilter

        return NodeTypeFilter.from_dict(self.types)

    def make_converter(self, scene=None):
        """
        SystemConverter for ``scene``.

        Args:
            scene: Scene whose up axis resolves an 'auto' source system;
                without a scene 'auto' falls back to the target system
        """
        from ..skeleton.transform import SystemConverter

        if scene is None and self.source_coordinate_system == 'auto':
            return SystemConverter(
                self.target_coordinate_system,
                self.target_coordinate_system,
                self.unit_scale,
            )
        return SystemConverter.for_scene(
            scene,
            source_system=self.source_coordinate_system,
            target_system=self.target_coordinate_system,
            unit_scale=self.unit_scale,
        )


def load_config(filepath: str) -> ImportConfig:
    """
    Load configuration from JSON file.

    Args:
        filepath: Path to JSON config file

    Returns:
        ImportConfig object
    """
    filepath = Path(filepath)
    with open(filepath, 'r') as f:
        config_dict = json.load(f)
    return ImportConfig.from_dict(config_dict)


def save_config(config: ImportConfig, filepath: str) -> None:
    """
    Save configuration to JSON file.

    Args:
        config: ImportConfig object to save
        filepath: Output file path
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
