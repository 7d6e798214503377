"""
Utility functions for skelex.

Includes numpy matrix helpers, torch quaternion operations and
configuration management.
"""

from .quaternion import (
    normalize_quaternion,
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_to_matrix,
    matrix_to_quaternion,
    identity_quaternion,
)
from .transforms import (
    quaternion_to_rotation_matrix,
    rotation_matrix_to_quaternion,
    compose_matrix,
    decompose_matrix,
    is_affine,
)
from .config import ImportConfig, load_config, save_config

__all__ = [
    # Quaternion operations
    "normalize_quaternion",
    "quaternion_conjugate",
    "quaternion_multiply",
    "quaternion_to_matrix",
    "matrix_to_quaternion",
    "identity_quaternion",
    # Matrix helpers
    "quaternion_to_rotation_matrix",
    "rotation_matrix_to_quaternion",
    "compose_matrix",
    "decompose_matrix",
    "is_affine",
    # Config
    "ImportConfig",
    "load_config",
    "save_config",
]
