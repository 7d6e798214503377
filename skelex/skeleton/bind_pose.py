"""
Bind transform resolution.

A joint's global bind transform is taken from the best available source:

1. the transform-link matrix of a skin cluster linked to the node
2. the matrix recorded for the node in the first stored bind pose
   containing it (poses not flagged as bind poses are ignored)
3. the node's currently evaluated global transform (rest pose)

Resolution never fails; it only selects among the three sources.
"""

from enum import Enum
from typing import Optional, Tuple

import numpy as np
import logging

from ..scene.base import BindPoseStore, SceneNode
from .cluster_index import ClusterIndex

logger = logging.getLogger(__name__)


class BindSource(Enum):
    """Source a global bind transform was taken from."""

    CLUSTER = "cluster"
    BIND_POSE = "bind_pose"
    REST_POSE = "rest_pose"


class BindTransformResolver:
    """
    Resolves global bind transforms for scene nodes.

    Args:
        cluster_index: Index built over the whole scene
        pose_store: Store of recorded poses, None if the scene has none
    """

    def __init__(
        self,
        cluster_index: ClusterIndex,
        pose_store: Optional[BindPoseStore] = None
    ):
        self.cluster_index = cluster_index
        self.pose_store = pose_store

    def resolve(self, node: SceneNode) -> np.ndarray:
        """Global bind transform of ``node``, (4, 4)."""
        matrix, _ = self.resolve_with_source(node)
        return matrix

    def resolve_with_source(self, node: SceneNode) -> Tuple[np.ndarray, BindSource]:
        matrix = self.cluster_index.get(node)
        if matrix is not None:
            source = BindSource.CLUSTER
        else:
            matrix = self._find_in_bind_poses(node)
            if matrix is not None:
                source = BindSource.BIND_POSE
            else:
                matrix = np.asarray(node.evaluate_global_transform(), dtype=np.float64)
                source = BindSource.REST_POSE

        logger.debug(f"Bind transform of '{node.name}' from {source.value}")
        return matrix, source

    def _find_in_bind_poses(self, node: SceneNode) -> Optional[np.ndarray]:
        if self.pose_store is None:
            return None
        for pose in self.pose_store.poses():
            if pose is None or not pose.is_bind_pose:
                continue
            matrix = pose.find_node(node)
            if matrix is not None:
                return np.asarray(matrix, dtype=np.float64)
        return None
