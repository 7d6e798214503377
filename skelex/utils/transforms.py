"""
NumPy helpers for 4x4 affine matrices.

Matrices use the column-vector convention (translation in ``M[:3, 3]``)
and quaternions the [w, x, y, z] order, see ``skelex.core.types``.
"""

from typing import Optional, Tuple

import numpy as np

from ..core.constants import DEFAULT_AFFINE_TOLERANCE, DEFAULT_DETERMINANT_EPS
from ..core.types import Matrix4, Quaternion, Vector3


def quaternion_to_rotation_matrix(quaternion: np.ndarray) -> np.ndarray:
    """
    Convert quaternion to a 3x3 rotation matrix.

    Args:
        quaternion: (4,) quaternion [w, x, y, z], normalized internally

    Returns:
        (3, 3) rotation matrix
    """
    q = np.asarray(quaternion, dtype=np.float64)
    q = q / max(np.linalg.norm(q), 1e-12)
    w, x, y, z = q

    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ], dtype=np.float64)


def rotation_matrix_to_quaternion(rotation_matrix: np.ndarray) -> Quaternion:
    """
    Convert an orthonormal 3x3 rotation matrix to a unit quaternion.

    Uses Shepperd's method for robustness near 180 degree rotations.
    The returned quaternion has a non-negative w.

    Args:
        rotation_matrix: (3, 3) rotation matrix

    Returns:
        (4,) quaternion [w, x, y, z]
    """
    r = rotation_matrix
    trace = r[0, 0] + r[1, 1] + r[2, 2]

    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1.0)
        w = 0.25 / s
        x = (r[2, 1] - r[1, 2]) * s
        y = (r[0, 2] - r[2, 0]) * s
        z = (r[1, 0] - r[0, 1]) * s
    elif r[0, 0] > r[1, 1] and r[0, 0] > r[2, 2]:
        s = 2.0 * np.sqrt(1.0 + r[0, 0] - r[1, 1] - r[2, 2])
        w = (r[2, 1] - r[1, 2]) / s
        x = 0.25 * s
        y = (r[0, 1] + r[1, 0]) / s
        z = (r[0, 2] + r[2, 0]) / s
    elif r[1, 1] > r[2, 2]:
        s = 2.0 * np.sqrt(1.0 + r[1, 1] - r[0, 0] - r[2, 2])
        w = (r[0, 2] - r[2, 0]) / s
        x = (r[0, 1] + r[1, 0]) / s
        y = 0.25 * s
        z = (r[1, 2] + r[2, 1]) / s
    else:
        s = 2.0 * np.sqrt(1.0 + r[2, 2] - r[0, 0] - r[1, 1])
        w = (r[1, 0] - r[0, 1]) / s
        x = (r[0, 2] + r[2, 0]) / s
        y = (r[1, 2] + r[2, 1]) / s
        z = 0.25 * s

    quaternion = np.array([w, x, y, z], dtype=np.float64)
    quaternion /= np.linalg.norm(quaternion)
    if quaternion[0] < 0:
        quaternion = -quaternion
    return quaternion


def compose_matrix(
    translation=None,
    rotation=None,
    scale=None
) -> Matrix4:
    """
    Build a 4x4 matrix from translation, rotation and scale (T * R * S).

    Args:
        translation: (3,) translation, zero if None
        rotation: (4,) quaternion [w, x, y, z], identity if None
        scale: (3,) scale, ones if None

    Returns:
        (4, 4) float64 matrix
    """
    matrix = np.eye(4, dtype=np.float64)
    if rotation is not None:
        matrix[:3, :3] = quaternion_to_rotation_matrix(rotation)
    if scale is not None:
        matrix[:3, :3] = matrix[:3, :3] * np.asarray(scale, dtype=np.float64)[np.newaxis, :]
    if translation is not None:
        matrix[:3, 3] = np.asarray(translation, dtype=np.float64)
    return matrix


def is_affine(matrix: np.ndarray, tolerance: float = DEFAULT_AFFINE_TOLERANCE) -> bool:
    """True if the last row of ``matrix`` is [0, 0, 0, 1] within tolerance."""
    return bool(np.allclose(matrix[3], [0.0, 0.0, 0.0, 1.0], atol=tolerance))


def decompose_matrix(
    matrix: np.ndarray,
    determinant_eps: float = DEFAULT_DETERMINANT_EPS
) -> Optional[Tuple[Vector3, Quaternion, Vector3]]:
    """
    Decompose a 4x4 affine matrix into translation, rotation and scale.

    Scale is taken from the column norms of the upper 3x3 block. A negative
    determinant (mirroring) is folded into the x scale. Shear is not
    represented: the rotation is re-orthonormalized through SVD, so a
    sheared input decomposes to its closest rotation.

    Args:
        matrix: (4, 4) affine matrix
        determinant_eps: Absolute determinant below which the matrix is
            considered singular

    Returns:
        (translation (3,), quaternion (4,) [w, x, y, z], scale (3,)), or
        None if the matrix is not finite, not affine or has a null scale
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if not np.all(np.isfinite(matrix)) or not is_affine(matrix):
        return None

    upper = matrix[:3, :3]
    determinant = np.linalg.det(upper)
    if abs(determinant) < determinant_eps:
        return None

    translation = matrix[:3, 3].copy()
    scale = np.linalg.norm(upper, axis=0)
    if determinant < 0:
        scale[0] = -scale[0]

    rotation_matrix = upper / scale[np.newaxis, :]

    # Remove residual shear / numerical drift
    u, _, vt = np.linalg.svd(rotation_matrix)
    rotation_matrix = u @ vt
    if np.linalg.det(rotation_matrix) < 0:
        u[:, -1] = -u[:, -1]
        rotation_matrix = u @ vt

    return translation, rotation_matrix_to_quaternion(rotation_matrix), scale
