"""
skelex: bind-pose skeleton extraction from hierarchical scenes

Converts a scene tree (nodes with attributes, transforms, skin clusters and
stored bind poses) into a forest of joints, each carrying its bind transform
relative to its parent joint, ready for runtime animation sampling.

Key Features:
- Node selection by attribute family (skeleton, marker, geometry, camera, light)
- Bind transform resolution: skin cluster > stored bind pose > rest pose
- Multi-root joint forests; non-joint nodes are transparent
- Fail-fast extraction: a skeleton is returned complete or not at all
- Axis-system and unit conversion of every joint transform
- Flattened torch tensors (parents, local TRS, bind matrices) for runtimes
- In-memory scene graph and a pyassimp scene adapter

API Design:
- Extraction returns an ExtractionResult (skeleton or error);
  extract_skeleton() raises instead
- Matrices are (4, 4) numpy arrays, column-vector convention
- Quaternions are [w, x, y, z]

Example:
    >>> import skelex
    >>> scene = skelex.scene.load_scene("character.fbx")
    >>> skeleton = skelex.extract_skeleton(scene)
    >>> runtime = skelex.skeleton.RuntimeSkeleton.from_skeleton(skeleton)
    >>> inverse_bind = runtime.inverse_bind_matrices()  # (J, 4, 4)
"""

__version__ = "0.1.0"
__author__ = "skelex Contributors"

from . import core
from . import scene
from . import skeleton
from . import utils

from .skeleton import (
    NodeTypeFilter,
    SkeletonExtractor,
    Skeleton,
    Joint,
    extract,
    extract_skeleton,
)
from .utils import ImportConfig

__all__ = [
    "core",
    "scene",
    "skeleton",
    "utils",
    "NodeTypeFilter",
    "SkeletonExtractor",
    "Skeleton",
    "Joint",
    "extract",
    "extract_skeleton",
    "ImportConfig",
]
