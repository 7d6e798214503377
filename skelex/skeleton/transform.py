"""
Local transforms and the transform converter.

The extractor computes every joint's local bind matrix in the source
scene's coordinate system and hands it to a ``TransformConverter``, which
normalizes axis system and units and decomposes the result into a
``LocalTransform``. The converter reports failure as a returned
``ConversionFailure`` value instead of raising.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Union

import numpy as np
import logging

from ..core.constants import (
    DEFAULT_TARGET_COORDINATE_SYSTEM,
    DEFAULT_UNIT_SCALE,
    IDENTITY_QUATERNION,
    UNIT_SCALE,
    ZERO_TRANSLATION,
)
from ..utils.transforms import compose_matrix, decompose_matrix, is_affine
from .errors import ConfigError

logger = logging.getLogger(__name__)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(eq=False)
class LocalTransform:
    """
    Joint transform relative to its parent joint.

    Attributes:
        translation: (3,) translation
        rotation: (4,) unit quaternion [w, x, y, z]
        scale: (3,) scale
    """

    translation: np.ndarray = None
    rotation: np.ndarray = None
    scale: np.ndarray = None

    def __post_init__(self):
        """Default to identity and coerce to float64 arrays."""
        if self.translation is None:
            self.translation = ZERO_TRANSLATION
        if self.rotation is None:
            self.rotation = IDENTITY_QUATERNION
        if self.scale is None:
            self.scale = UNIT_SCALE

        self.translation = np.asarray(self.translation, dtype=np.float64).reshape(3)
        self.rotation = np.asarray(self.rotation, dtype=np.float64).reshape(4)
        self.scale = np.asarray(self.scale, dtype=np.float64).reshape(3)

    @classmethod
    def identity(cls) -> "LocalTransform":
        return cls()

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "LocalTransform":
        """
        Decompose a 4x4 affine matrix.

        Raises:
            ValueError: If the matrix is not finite, not affine or singular
        """
        parts = decompose_matrix(matrix)
        if parts is None:
            raise ValueError("Matrix cannot be decomposed into translation/rotation/scale")
        translation, rotation, scale = parts
        return cls(translation=translation, rotation=rotation, scale=scale)

    def to_matrix(self) -> np.ndarray:
        """Compose back into a (4, 4) matrix (T * R * S)."""
        return compose_matrix(self.translation, self.rotation, self.scale)

    def allclose(self, other: "LocalTransform", atol: float = 1e-6) -> bool:
        """Compare with ``other``, treating q and -q as the same rotation."""
        same_rotation = (
            np.allclose(self.rotation, other.rotation, atol=atol)
            or np.allclose(self.rotation, -other.rotation, atol=atol)
        )
        return (
            same_rotation
            and np.allclose(self.translation, other.translation, atol=atol)
            and np.allclose(self.scale, other.scale, atol=atol)
        )

    def to_dict(self) -> Dict[str, list]:
        return {
            "translation": self.translation.tolist(),
            "rotation": self.rotation.tolist(),
            "scale": self.scale.tolist(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, list]) -> "LocalTransform":
        return cls(
            translation=data.get("translation", ZERO_TRANSLATION),
            rotation=data.get("rotation", IDENTITY_QUATERNION),
            scale=data.get("scale", UNIT_SCALE),
        )

    def __repr__(self) -> str:
        t = np.round(self.translation, 4).tolist()
        r = np.round(self.rotation, 4).tolist()
        s = np.round(self.scale, 4).tolist()
        return f"LocalTransform(t={t}, r={r}, s={s})"


@dataclass(frozen=True)
class ConversionFailure:
    """Returned by a converter that cannot represent a transform."""

    reason: str


ConversionResult = Union[LocalTransform, ConversionFailure]


# =============================================================================
# Coordinate System Handling
# =============================================================================

class CoordinateSystem:
    """Coordinate system conversion matrices."""

    OPENGL = 'opengl'      # Y-up, right-handed
    BLENDER = 'blender'    # Z-up, right-handed
    DIRECTX = 'directx'    # Y-up, left-handed

    KNOWN = (OPENGL, BLENDER, DIRECTX)

    # Conversion matrices to OpenGL (Y-up, right-handed)
    _CONVERSIONS = {
        ('blender', 'opengl'): np.array([
            [1, 0, 0, 0],
            [0, 0, 1, 0],
            [0, -1, 0, 0],
            [0, 0, 0, 1]
        ], dtype=np.float64),
        ('directx', 'opengl'): np.array([
            [1, 0, 0, 0],
            [0, 1, 0, 0],
            [0, 0, -1, 0],
            [0, 0, 0, 1]
        ], dtype=np.float64),
    }

    @staticmethod
    def from_up_axis(up_axis: Optional[str]) -> str:
        """Pick a source system from a scene up axis ('y', 'z' or None)."""
        if up_axis is not None and up_axis.lower() == 'z':
            return CoordinateSystem.BLENDER
        # Default to OpenGL (most interchange files are Y-up)
        return CoordinateSystem.OPENGL

    @staticmethod
    def get_conversion_matrix(
        from_system: str,
        to_system: str = 'opengl'
    ) -> np.ndarray:
        """
        Get 4x4 matrix converting coordinates from one system to another.

        Raises:
            ConfigError: If either system is unknown
        """
        for system in (from_system, to_system):
            if system not in CoordinateSystem.KNOWN:
                raise ConfigError(
                    f"Unknown coordinate system '{system}', "
                    f"expected one of {CoordinateSystem.KNOWN}"
                )

        if from_system == to_system:
            return np.eye(4, dtype=np.float64)

        key = (from_system, to_system)
        if key in CoordinateSystem._CONVERSIONS:
            return CoordinateSystem._CONVERSIONS[key].copy()

        inverse_key = (to_system, from_system)
        if inverse_key in CoordinateSystem._CONVERSIONS:
            return np.linalg.inv(CoordinateSystem._CONVERSIONS[inverse_key])

        # Neither direction is tabulated: go through OpenGL
        to_opengl = CoordinateSystem.get_conversion_matrix(from_system, 'opengl')
        from_opengl = CoordinateSystem.get_conversion_matrix('opengl', to_system)
        return from_opengl @ to_opengl


# =============================================================================
# Converters
# =============================================================================

class TransformConverter(ABC):
    """Turns a source-space local matrix into an output LocalTransform."""

    @abstractmethod
    def convert(self, matrix: np.ndarray) -> ConversionResult:
        pass


class SystemConverter(TransformConverter):
    """
    Axis-system and unit converter.

    A matrix M expressed in the source system becomes C @ M @ inverse(C),
    where C is the axis change scaled by ``unit_scale``. Rotation and scale
    are re-expressed in the target axes and translations are scaled.
    """

    def __init__(
        self,
        source_system: str = DEFAULT_TARGET_COORDINATE_SYSTEM,
        target_system: str = DEFAULT_TARGET_COORDINATE_SYSTEM,
        unit_scale: float = DEFAULT_UNIT_SCALE
    ):
        if not unit_scale > 0:
            raise ConfigError(f"unit_scale must be positive, got {unit_scale}")

        self.source_system = source_system
        self.target_system = target_system
        self.unit_scale = float(unit_scale)

        axes = CoordinateSystem.get_conversion_matrix(source_system, target_system)
        self._convert = axes.copy()
        self._convert[:3, :3] *= self.unit_scale
        self._convert_inv = np.linalg.inv(self._convert)

    @classmethod
    def for_scene(
        cls,
        scene,
        source_system: str = 'auto',
        target_system: str = DEFAULT_TARGET_COORDINATE_SYSTEM,
        unit_scale: float = DEFAULT_UNIT_SCALE
    ) -> "SystemConverter":
        """Build a converter, detecting the source system when 'auto'."""
        if source_system == 'auto':
            source_system = CoordinateSystem.from_up_axis(getattr(scene, 'up_axis', None))
        logger.info(f"Coordinate system: {source_system} -> {target_system}")
        return cls(source_system, target_system, unit_scale)

    @property
    def is_identity(self) -> bool:
        return bool(np.allclose(self._convert, np.eye(4)))

    def convert_matrix(self, matrix: np.ndarray) -> np.ndarray:
        """Re-express a source-space matrix in the target system."""
        matrix = np.asarray(matrix, dtype=np.float64)
        if self.is_identity:
            return matrix.copy()
        return self._convert @ matrix @ self._convert_inv

    def convert_point(self, point: np.ndarray) -> np.ndarray:
        homo = np.append(np.asarray(point, dtype=np.float64), 1.0)
        return (self._convert @ homo)[:3]

    def convert(self, matrix: np.ndarray) -> ConversionResult:
        converted = self.convert_matrix(matrix)

        if not np.all(np.isfinite(converted)):
            return ConversionFailure("matrix has non-finite components")
        if not is_affine(converted):
            return ConversionFailure("matrix is not affine")

        parts = decompose_matrix(converted)
        if parts is None:
            return ConversionFailure("matrix has a null scale and cannot be decomposed")

        translation, rotation, scale = parts
        return LocalTransform(translation=translation, rotation=rotation, scale=scale)

    def __repr__(self) -> str:
        return (
            f"SystemConverter({self.source_system!r} -> {self.target_system!r}, "
            f"unit_scale={self.unit_scale})"
        )
