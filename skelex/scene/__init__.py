"""
Scene access for skelex.

Abstract read-only interfaces consumed by the skeleton extractor, an
in-memory implementation of them, and a pyassimp adapter that produces
in-memory scenes from scene files.
"""

from .base import (
    AttributeCategory,
    SceneNode,
    Mesh,
    SkinDeformer,
    Cluster,
    Pose,
    BindPoseStore,
    Scene,
)
from .memory import (
    MemoryNode,
    MemoryMesh,
    MemorySkin,
    MemoryCluster,
    MemoryPose,
    MemoryPoseStore,
    MemoryScene,
    SceneDescriptionError,
    scene_from_dict,
)
from .assimp_scene import (
    SceneLoadError,
    detect_up_axis,
    scene_from_assimp,
    load_scene,
)

__all__ = [
    # Interfaces
    "AttributeCategory",
    "SceneNode",
    "Mesh",
    "SkinDeformer",
    "Cluster",
    "Pose",
    "BindPoseStore",
    "Scene",
    # In-memory scene
    "MemoryNode",
    "MemoryMesh",
    "MemorySkin",
    "MemoryCluster",
    "MemoryPose",
    "MemoryPoseStore",
    "MemoryScene",
    "SceneDescriptionError",
    "scene_from_dict",
    # pyassimp adapter
    "SceneLoadError",
    "detect_up_axis",
    "scene_from_assimp",
    "load_scene",
]
