"""
Core module for skelex.

Contains:
- Constants: Centralized default values and numeric tolerances
- Types: Type aliases and the matrix convention shared by all modules
"""

from .constants import (
    # Numeric constants
    DEFAULT_EPS_NORM,
    DEFAULT_DETERMINANT_EPS,
    DEFAULT_AFFINE_TOLERANCE,
    # Skeleton limits
    MAX_JOINTS,
    NO_PARENT,
    # Coordinate system defaults
    DEFAULT_TARGET_COORDINATE_SYSTEM,
    DEFAULT_SOURCE_COORDINATE_SYSTEM,
    DEFAULT_UNIT_SCALE,
    # Identity values
    IDENTITY_QUATERNION,
    ZERO_TRANSLATION,
    UNIT_SCALE,
)
from .types import (
    Matrix4,
    MatrixLike,
    Vector3,
    Quaternion,
    JointTensor,
    SkeletonDict,
    as_matrix4,
)

__all__ = [
    # Constants
    "DEFAULT_EPS_NORM",
    "DEFAULT_DETERMINANT_EPS",
    "DEFAULT_AFFINE_TOLERANCE",
    "MAX_JOINTS",
    "NO_PARENT",
    "DEFAULT_TARGET_COORDINATE_SYSTEM",
    "DEFAULT_SOURCE_COORDINATE_SYSTEM",
    "DEFAULT_UNIT_SCALE",
    "IDENTITY_QUATERNION",
    "ZERO_TRANSLATION",
    "UNIT_SCALE",
    # Types
    "Matrix4",
    "MatrixLike",
    "Vector3",
    "Quaternion",
    "JointTensor",
    "SkeletonDict",
    "as_matrix4",
]
