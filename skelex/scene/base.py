"""
Abstract scene interfaces consumed by the skeleton extractor.

The extractor never loads files itself. Whatever imported the source scene
(an FBX SDK binding, pyassimp, a hand-written description) exposes it through
these read-only views. Node identity is Python object identity: the same
node must always be represented by the same object, so nodes can be used as
dictionary keys and compared with ``is``.

Class Hierarchy:
    SceneNode (abstract)      node view: name, attribute, children, transform
    Mesh (abstract)           skin deformer access for mesh nodes
    SkinDeformer (abstract)   ordered clusters of one skin
    Cluster (abstract)        linked node + transform-link matrix
    Pose (abstract)           one stored pose
    BindPoseStore (abstract)  ordered stored poses
    Scene (abstract)          root node + bind pose store
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterator, List, Optional, Sequence

from ..core.types import Matrix4


class AttributeCategory(Enum):
    """
    Closed set of node attribute kinds a scene node may carry.

    The values mirror the attribute types of common DCC interchange formats.
    Grouping into joint-worthy families is done by
    ``skelex.skeleton.node_filter``.
    """

    UNKNOWN = "unknown"
    NULL = "null"
    MARKER = "marker"
    SKELETON = "skeleton"
    MESH = "mesh"
    NURBS = "nurbs"
    PATCH = "patch"
    CAMERA = "camera"
    CAMERA_STEREO = "camera_stereo"
    CAMERA_SWITCHER = "camera_switcher"
    LIGHT = "light"
    OPTICAL_REFERENCE = "optical_reference"
    OPTICAL_MARKER = "optical_marker"
    NURBS_CURVE = "nurbs_curve"
    TRIM_NURBS_SURFACE = "trim_nurbs_surface"
    BOUNDARY = "boundary"
    NURBS_SURFACE = "nurbs_surface"
    SHAPE = "shape"
    LOD_GROUP = "lod_group"
    SUBDIV = "subdiv"
    CACHED_EFFECT = "cached_effect"
    LINE = "line"

    @classmethod
    def parse(cls, value) -> Optional["AttributeCategory"]:
        """Parse a category from an enum member, its value or its name."""
        if value is None or isinstance(value, cls):
            return value
        key = str(value).strip()
        try:
            return cls(key.lower())
        except ValueError:
            pass
        try:
            return cls[key.upper()]
        except KeyError:
            raise ValueError(f"Unknown attribute category: {value!r}") from None


class SceneNode(ABC):
    """
    Read-only view of one node of the source scene tree.

    Subclasses must implement:
        - name: display name, used as the joint name
        - attribute_category: category of the node attribute, None if the
          node carries no attribute
        - children(): ordered child nodes
        - evaluate_global_transform(): current (rest) global matrix
        - mesh(): mesh attribute, None for non-mesh nodes
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def attribute_category(self) -> Optional[AttributeCategory]:
        pass

    @abstractmethod
    def children(self) -> Sequence["SceneNode"]:
        pass

    @abstractmethod
    def evaluate_global_transform(self) -> Matrix4:
        """
        Evaluate the node's global transform in the source coordinate system.

        Returns:
            (4, 4) matrix, column-vector convention
        """
        pass

    @abstractmethod
    def mesh(self) -> Optional["Mesh"]:
        pass

    def iter_depth_first(self) -> Iterator["SceneNode"]:
        """Iterate this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.children())))

    def __repr__(self) -> str:
        category = self.attribute_category.value if self.attribute_category else "none"
        return f"<{type(self).__name__} '{self.name}' ({category})>"


class Cluster(ABC):
    """Binding of a skin to one influencing node."""

    @abstractmethod
    def linked_node(self) -> Optional[SceneNode]:
        pass

    @abstractmethod
    def transform_link_matrix(self) -> Matrix4:
        """Global matrix of the linked node at bind time, (4, 4)."""
        pass


class SkinDeformer(ABC):
    @abstractmethod
    def clusters(self) -> Sequence[Cluster]:
        pass


class Mesh(ABC):
    @abstractmethod
    def skin_deformers(self) -> Sequence[SkinDeformer]:
        pass


class Pose(ABC):
    """A stored pose: a subset of nodes mapped to recorded matrices."""

    @property
    @abstractmethod
    def is_bind_pose(self) -> bool:
        pass

    @abstractmethod
    def find_node(self, node: SceneNode) -> Optional[Matrix4]:
        """Return the matrix recorded for ``node``, or None if absent."""
        pass


class BindPoseStore(ABC):
    @abstractmethod
    def poses(self) -> Sequence[Pose]:
        pass

    def bind_poses(self) -> List[Pose]:
        """Poses flagged as bind poses, in store order."""
        return [pose for pose in self.poses() if pose is not None and pose.is_bind_pose]


class Scene(ABC):
    """
    A loaded scene: root node plus the store of recorded poses.

    ``up_axis`` lets converters pick the source coordinate system
    automatically; None means unknown.
    """

    @abstractmethod
    def root_node(self) -> SceneNode:
        pass

    @abstractmethod
    def pose_store(self) -> BindPoseStore:
        pass

    @property
    def up_axis(self) -> Optional[str]:
        return None
