"""
Index of skin clusters by linked node.

Built once per extraction by scanning the whole scene tree, independent of
node filtering: any mesh anywhere may carry a skin whose clusters record
the bind-time global transform of the nodes they link to.
"""

from typing import Dict, Iterator, Optional

import numpy as np
import logging

from ..scene.base import SceneNode

logger = logging.getLogger(__name__)


class ClusterIndex:
    """
    Mapping from scene node to its cluster transform-link matrix.

    When several clusters link the same node the first one found wins
    (node pre-order, then skin deformer order, then cluster order).
    """

    def __init__(self, links: Optional[Dict[SceneNode, np.ndarray]] = None):
        self._links: Dict[SceneNode, np.ndarray] = dict(links or {})

    @classmethod
    def build(cls, root: SceneNode) -> "ClusterIndex":
        """
        Scan every mesh below (and including) ``root``.

        Args:
            root: Scene root node

        Returns:
            ClusterIndex, empty if the scene has no skinned mesh
        """
        index = cls()
        cluster_count = 0
        for node in root.iter_depth_first():
            mesh = node.mesh()
            if mesh is None:
                continue
            for skin in mesh.skin_deformers():
                for cluster in skin.clusters():
                    if cluster is None:
                        continue
                    linked = cluster.linked_node()
                    if linked is None:
                        continue
                    cluster_count += 1
                    index._add(linked, cluster.transform_link_matrix())

        logger.debug(
            f"Cluster index: {cluster_count} linked clusters, {len(index)} distinct nodes"
        )
        return index

    def _add(self, node: SceneNode, matrix: np.ndarray) -> None:
        if node in self._links:
            logger.debug(f"Ignoring additional cluster linked to '{node.name}'")
            return
        self._links[node] = np.array(matrix, dtype=np.float64)

    def get(self, node: SceneNode) -> Optional[np.ndarray]:
        matrix = self._links.get(node)
        return None if matrix is None else matrix.copy()

    def __contains__(self, node: SceneNode) -> bool:
        return node in self._links

    def __len__(self) -> int:
        return len(self._links)

    def __iter__(self) -> Iterator[SceneNode]:
        return iter(self._links)
