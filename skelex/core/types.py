"""
Type aliases and matrix conventions for skelex.

Matrix Convention:
==================

All 4x4 matrices handled by the extraction pipeline are numpy arrays using
the column-vector convention:

    p_world = M @ [x, y, z, 1]

so the translation lives in ``M[:3, 3]`` and transforms compose right to
left. A joint's local bind matrix is therefore

    local = inverse(parent_global_bind) @ global_bind

Quaternions are stored as [w, x, y, z], the same order used by
``skelex.utils.quaternion``.

Runtime tensors built by ``skelex.skeleton.runtime`` follow a joint-major
layout:
    translations: Tensor[J, 3]
    rotations:    Tensor[J, 4]
    scales:       Tensor[J, 3]
    matrices:     Tensor[J, 4, 4]
"""

from typing import Dict, List, Tuple, Union

import numpy as np
import torch


# =============================================================================
# Matrix Type Aliases
# =============================================================================

# 4x4 homogeneous matrix, float64 numpy array
Matrix4 = np.ndarray

# Anything np.asarray can turn into a 4x4 matrix
MatrixLike = Union[np.ndarray, List[List[float]], Tuple[Tuple[float, ...], ...]]

# (3,) translation or scale vector
Vector3 = np.ndarray

# (4,) quaternion [w, x, y, z]
Quaternion = np.ndarray


# =============================================================================
# Runtime Type Aliases
# =============================================================================

# Joint-major tensor, e.g. (J, 4, 4) bind matrices
JointTensor = torch.Tensor

# Serialized skeleton, as produced by Skeleton.to_dict()
SkeletonDict = Dict[str, list]


def as_matrix4(value: MatrixLike, name: str = "matrix") -> Matrix4:
    """
    Convert a matrix-like value to a float64 (4, 4) numpy array.

    Args:
        value: Nested sequence or array with 16 elements
        name: Name for error messages

    Returns:
        (4, 4) float64 array (a copy, never a view of the input)

    Raises:
        ValueError: If the value cannot be reshaped to (4, 4)
    """
    matrix = np.array(value, dtype=np.float64)
    if matrix.shape == (16,):
        matrix = matrix.reshape(4, 4)
    if matrix.shape != (4, 4):
        raise ValueError(f"{name} must have shape (4, 4), got {matrix.shape}")
    return matrix
