"""
In-memory scene graph.

A small, dependency-free implementation of the ``skelex.scene.base``
interfaces. It is what the pyassimp adapter converts into, and it can be
built directly from a nested dictionary (for example a JSON scene
description):

    {
        "up_axis": "y",
        "root": {
            "name": "RootNode",
            "children": [
                {
                    "name": "Hips",
                    "attribute": "skeleton",
                    "transform": {"translation": [0, 1, 0]},
                    "children": [...]
                },
                {
                    "name": "Body",
                    "attribute": "mesh",
                    "mesh": {
                        "skins": [
                            {"clusters": [{"link": "Hips", "transform_link": [[...]]}]}
                        ]
                    }
                }
            ]
        },
        "poses": [
            {"name": "BindPose", "is_bind_pose": true, "matrices": {"Hips": [[...]]}}
        ]
    }

Transforms are either a 4x4 matrix (nested lists) or a dict with optional
``translation``, ``rotation`` ([w, x, y, z]) and ``scale`` entries. Node
transforms are local to the parent node. Links and pose entries refer to
nodes by name; with duplicate names the first node in pre-order wins.
"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import logging

from ..core.types import MatrixLike, as_matrix4
from ..utils.transforms import compose_matrix
from .base import (
    AttributeCategory,
    BindPoseStore,
    Cluster,
    Mesh,
    Pose,
    Scene,
    SceneNode,
    SkinDeformer,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class SceneDescriptionError(ValueError):
    """Malformed scene description (bad matrix, unknown link target, ...)."""
    pass


# =============================================================================
# Scene Graph
# =============================================================================

class MemoryNode(SceneNode):
    """
    Scene node holding a local transform relative to its parent node.

    Nodes compare and hash by identity.
    """

    def __init__(
        self,
        name: str,
        attribute_category: Optional[AttributeCategory] = None,
        local_transform: Optional[MatrixLike] = None,
        mesh: Optional["MemoryMesh"] = None
    ):
        self._name = name
        self._attribute_category = attribute_category
        self.local_transform = (
            np.eye(4, dtype=np.float64) if local_transform is None
            else as_matrix4(local_transform, f"transform of '{name}'")
        )
        self._mesh = mesh
        self.parent: Optional["MemoryNode"] = None
        self._children: List["MemoryNode"] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def attribute_category(self) -> Optional[AttributeCategory]:
        return self._attribute_category

    def children(self) -> Sequence["MemoryNode"]:
        return tuple(self._children)

    def mesh(self) -> Optional["MemoryMesh"]:
        return self._mesh

    def set_mesh(self, mesh: Optional["MemoryMesh"]) -> None:
        self._mesh = mesh

    def add_child(self, child: "MemoryNode") -> "MemoryNode":
        """Append ``child`` and return it."""
        if child.parent is not None:
            raise SceneDescriptionError(
                f"Node '{child.name}' already has parent '{child.parent.name}'"
            )
        child.parent = self
        self._children.append(child)
        return child

    def evaluate_global_transform(self) -> np.ndarray:
        matrix = self.local_transform.copy()
        node = self.parent
        while node is not None:
            matrix = node.local_transform @ matrix
            node = node.parent
        return matrix


class MemoryCluster(Cluster):
    def __init__(self, link: Optional[SceneNode], transform_link: Optional[np.ndarray] = None):
        self._link = link
        self._transform_link = (
            np.eye(4, dtype=np.float64) if transform_link is None
            else as_matrix4(transform_link, "cluster transform link")
        )

    def linked_node(self) -> Optional[SceneNode]:
        return self._link

    def transform_link_matrix(self) -> np.ndarray:
        return self._transform_link.copy()


class MemorySkin(SkinDeformer):
    def __init__(self, clusters: Optional[List[Cluster]] = None):
        self._clusters = list(clusters or [])

    def clusters(self) -> Sequence[Cluster]:
        return tuple(self._clusters)


class MemoryMesh(Mesh):
    def __init__(self, skins: Optional[List[SkinDeformer]] = None):
        self._skins = list(skins or [])

    def skin_deformers(self) -> Sequence[SkinDeformer]:
        return tuple(self._skins)


class MemoryPose(Pose):
    """Pose storing matrices keyed by node identity."""

    def __init__(self, name: str = "", is_bind_pose: bool = True):
        self.name = name
        self._is_bind_pose = is_bind_pose
        self._matrices: Dict[SceneNode, np.ndarray] = {}

    @property
    def is_bind_pose(self) -> bool:
        return self._is_bind_pose

    def set_matrix(self, node: SceneNode, matrix) -> None:
        self._matrices[node] = as_matrix4(matrix, f"pose matrix of '{node.name}'")

    def find_node(self, node: SceneNode) -> Optional[np.ndarray]:
        matrix = self._matrices.get(node)
        return None if matrix is None else matrix.copy()

    def __len__(self) -> int:
        return len(self._matrices)


class MemoryPoseStore(BindPoseStore):
    def __init__(self, poses: Optional[List[Pose]] = None):
        self._poses = list(poses or [])

    def poses(self) -> Sequence[Pose]:
        return tuple(self._poses)

    def add_pose(self, pose: Pose) -> Pose:
        self._poses.append(pose)
        return pose


class MemoryScene(Scene):
    def __init__(
        self,
        root: Optional[MemoryNode] = None,
        pose_store: Optional[MemoryPoseStore] = None,
        up_axis: Optional[str] = None
    ):
        self._root = root if root is not None else MemoryNode("RootNode")
        self._pose_store = pose_store if pose_store is not None else MemoryPoseStore()
        self._up_axis = up_axis

    def root_node(self) -> MemoryNode:
        return self._root

    def pose_store(self) -> MemoryPoseStore:
        return self._pose_store

    @property
    def up_axis(self) -> Optional[str]:
        return self._up_axis

    def find_node(self, name: str) -> Optional[MemoryNode]:
        """First node named ``name`` in pre-order, or None."""
        for node in self._root.iter_depth_first():
            if node.name == name:
                return node
        return None


# =============================================================================
# Construction From Dictionaries
# =============================================================================

def _parse_transform(value: Any, where: str) -> np.ndarray:
    if value is None:
        return np.eye(4, dtype=np.float64)
    try:
        if isinstance(value, dict):
            unknown = set(value) - {"translation", "rotation", "scale"}
            if unknown:
                raise SceneDescriptionError(
                    f"Unknown transform keys {sorted(unknown)} in {where}"
                )
            return compose_matrix(
                translation=value.get("translation"),
                rotation=value.get("rotation"),
                scale=value.get("scale"),
            )
        return as_matrix4(value, where)
    except ValueError as e:
        if isinstance(e, SceneDescriptionError):
            raise
        raise SceneDescriptionError(f"Invalid transform in {where}: {e}") from e


def _build_node(node_desc: Dict[str, Any], pending_meshes: List) -> MemoryNode:
    if "name" not in node_desc:
        raise SceneDescriptionError(f"Scene node without a name: {node_desc!r}")
    name = str(node_desc["name"])

    try:
        category = AttributeCategory.parse(node_desc.get("attribute"))
    except ValueError as e:
        raise SceneDescriptionError(f"Node '{name}': {e}") from e

    node = MemoryNode(
        name,
        attribute_category=category,
        local_transform=_parse_transform(node_desc.get("transform"), f"node '{name}'"),
    )
    if "mesh" in node_desc:
        # Cluster links are resolved once the whole tree exists
        pending_meshes.append((node, node_desc["mesh"] or {}))

    for child_desc in node_desc.get("children", []):
        node.add_child(_build_node(child_desc, pending_meshes))
    return node


def scene_from_dict(description: Dict[str, Any]) -> MemoryScene:
    """
    Build a MemoryScene from a nested dictionary description.

    Args:
        description: Scene description, see the module docstring

    Returns:
        MemoryScene

    Raises:
        SceneDescriptionError: If the description is malformed or refers to
            unknown nodes
    """
    if "root" not in description:
        raise SceneDescriptionError("Scene description has no 'root' node")

    pending_meshes: List = []
    root = _build_node(description["root"], pending_meshes)
    scene = MemoryScene(root, up_axis=description.get("up_axis"))

    def lookup(name: Optional[str], where: str) -> Optional[MemoryNode]:
        if name is None:
            return None
        node = scene.find_node(name)
        if node is None:
            raise SceneDescriptionError(f"{where} refers to unknown node '{name}'")
        return node

    for node, mesh_desc in pending_meshes:
        skins = []
        for skin_desc in mesh_desc.get("skins", []):
            clusters = []
            for cluster_desc in skin_desc.get("clusters", []):
                link = lookup(cluster_desc.get("link"), f"Cluster of mesh '{node.name}'")
                transform_link = _parse_transform(
                    cluster_desc.get("transform_link"),
                    f"cluster transform link of mesh '{node.name}'",
                )
                clusters.append(MemoryCluster(link, transform_link))
            skins.append(MemorySkin(clusters))
        node.set_mesh(MemoryMesh(skins))

    for index, pose_desc in enumerate(description.get("poses", [])):
        pose_name = pose_desc.get("name", f"pose_{index}")
        pose = MemoryPose(pose_name, is_bind_pose=bool(pose_desc.get("is_bind_pose", True)))
        for node_name, matrix in pose_desc.get("matrices", {}).items():
            target = lookup(node_name, f"Pose '{pose_name}'")
            pose.set_matrix(target, _parse_transform(matrix, f"pose '{pose_name}'"))
        scene.pose_store().add_pose(pose)

    node_count = sum(1 for _ in root.iter_depth_first())
    logger.debug(
        f"Built scene: {node_count} nodes, {len(pending_meshes)} meshes, "
        f"{len(scene.pose_store().poses())} poses"
    )
    return scene
