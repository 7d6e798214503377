"""
Centralized constants for skelex.

This module defines the default values and numeric tolerances used by the
skeleton extraction pipeline. Using these constants keeps the extractor,
the transform converter and the runtime skeleton in agreement.

Usage:
    from skelex.core.constants import MAX_JOINTS

    def check(num_joints: int, max_joints: int = MAX_JOINTS):
        ...
"""

# =============================================================================
# Numeric Constants
# =============================================================================

# Epsilon for normalization operations
DEFAULT_EPS_NORM: float = 1e-12

# Below this absolute determinant a 4x4 affine matrix is treated as singular
# (null scale) and cannot be decomposed into translation/rotation/scale.
DEFAULT_DETERMINANT_EPS: float = 1e-10

# Tolerance on the last row of an affine matrix ([0, 0, 0, 1])
DEFAULT_AFFINE_TOLERANCE: float = 1e-5


# =============================================================================
# Skeleton Limits
# =============================================================================

# Maximum number of joints a skeleton may hold. Runtime consumers index
# joints with 16 bit signed integers and reserve one bit.
MAX_JOINTS: int = 1024

# Parent index stored for root joints in flattened skeletons
NO_PARENT: int = -1


# =============================================================================
# Coordinate System Defaults
# =============================================================================

# Target convention of every extracted skeleton: Y-up, right-handed
DEFAULT_TARGET_COORDINATE_SYSTEM: str = "opengl"

# Source convention; 'auto' asks the scene provider for its up axis
DEFAULT_SOURCE_COORDINATE_SYSTEM: str = "auto"

# Scene units are multiplied by this factor (1.0 keeps the source unit)
DEFAULT_UNIT_SCALE: float = 1.0


# =============================================================================
# Identity Values
# =============================================================================

# Identity quaternion in [w, x, y, z] order
IDENTITY_QUATERNION = (1.0, 0.0, 0.0, 0.0)

# Identity translation and scale
ZERO_TRANSLATION = (0.0, 0.0, 0.0)
UNIT_SCALE = (1.0, 1.0, 1.0)
