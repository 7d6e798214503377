"""
Node type filtering.

Decides which scene nodes become joints, based on the category of the
attribute they carry. Categories are grouped into five joint-worthy
families; every other category is rejected.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional

from ..scene.base import AttributeCategory


class NodeGroup(Enum):
    """Family a node attribute category belongs to."""

    SKELETON = "skeleton"
    MARKER = "marker"
    GEOMETRY = "geometry"
    CAMERA = "camera"
    LIGHT = "light"
    REJECT = "reject"


# Total mapping: every AttributeCategory member appears exactly once.
CATEGORY_GROUPS: Dict[AttributeCategory, NodeGroup] = {
    # Skeleton
    AttributeCategory.SKELETON: NodeGroup.SKELETON,
    # Marker
    AttributeCategory.MARKER: NodeGroup.MARKER,
    # Geometry
    AttributeCategory.MESH: NodeGroup.GEOMETRY,
    AttributeCategory.NURBS: NodeGroup.GEOMETRY,
    AttributeCategory.PATCH: NodeGroup.GEOMETRY,
    AttributeCategory.NURBS_CURVE: NodeGroup.GEOMETRY,
    AttributeCategory.TRIM_NURBS_SURFACE: NodeGroup.GEOMETRY,
    AttributeCategory.BOUNDARY: NodeGroup.GEOMETRY,
    AttributeCategory.NURBS_SURFACE: NodeGroup.GEOMETRY,
    AttributeCategory.SHAPE: NodeGroup.GEOMETRY,
    AttributeCategory.SUBDIV: NodeGroup.GEOMETRY,
    AttributeCategory.LINE: NodeGroup.GEOMETRY,
    # Camera
    AttributeCategory.CAMERA_STEREO: NodeGroup.CAMERA,
    AttributeCategory.CAMERA: NodeGroup.CAMERA,
    # Light
    AttributeCategory.LIGHT: NodeGroup.LIGHT,
    # Others
    AttributeCategory.UNKNOWN: NodeGroup.REJECT,
    AttributeCategory.NULL: NodeGroup.REJECT,
    AttributeCategory.CAMERA_SWITCHER: NodeGroup.REJECT,
    AttributeCategory.OPTICAL_REFERENCE: NodeGroup.REJECT,
    AttributeCategory.OPTICAL_MARKER: NodeGroup.REJECT,
    AttributeCategory.CACHED_EFFECT: NodeGroup.REJECT,
    AttributeCategory.LOD_GROUP: NodeGroup.REJECT,
}


def group_of(category: Optional[AttributeCategory]) -> NodeGroup:
    """Group of ``category``; None (no attribute) is rejected."""
    if category is None:
        return NodeGroup.REJECT
    return CATEGORY_GROUPS[category]


@dataclass(frozen=True)
class NodeTypeFilter:
    """
    Set of node families accepted as joints.

    Attributes:
        any: Accept every node type, overriding the other flags
        skeleton: Accept skeleton nodes
        marker: Accept marker nodes
        geometry: Accept geometry nodes (meshes, nurbs, patches, curves, ...)
        camera: Accept camera nodes
        light: Accept light nodes
    """

    any: bool = False
    skeleton: bool = True
    marker: bool = False
    geometry: bool = False
    camera: bool = False
    light: bool = False

    def accepts(self, category: Optional[AttributeCategory]) -> bool:
        # Early out to accept any node type
        if self.any:
            return True

        group = group_of(category)
        if group is NodeGroup.REJECT:
            return False
        return getattr(self, group.value)

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)

    @classmethod
    def from_dict(cls, flags: Dict[str, Any]) -> "NodeTypeFilter":
        """
        Create a filter from a flag dictionary.

        Raises:
            ValueError: If ``flags`` contains unknown keys
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(flags) - known
        if unknown:
            raise ValueError(f"Unknown node types: {sorted(unknown)}")
        return cls(**{key: bool(value) for key, value in flags.items()})

    @classmethod
    def accept_all(cls) -> "NodeTypeFilter":
        return cls(any=True)
