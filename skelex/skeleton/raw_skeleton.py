"""
Raw skeleton: the extracted joint forest.

A ``Skeleton`` is an ordered list of root joints, each joint exclusively
owning its ordered children. Sibling order is the scene traversal order.
Once returned by the extractor the forest is meant for read-only use.
"""

from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple
import json
import logging

from ..core.constants import MAX_JOINTS
from ..core.types import SkeletonDict
from .errors import SkeletonValidationError
from .transform import LocalTransform

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Joint:
    """
    Single joint of the raw skeleton.

    Attributes:
        name: Joint name, taken from the scene node name
        transform: Bind transform relative to the parent joint
        children: Owned child joints, in traversal order
    """

    name: str
    transform: LocalTransform = field(default_factory=LocalTransform)
    children: List["Joint"] = field(default_factory=list)

    def add_child(self, child: "Joint") -> "Joint":
        self.children.append(child)
        return child

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0

    def num_joints(self) -> int:
        """Number of joints in the subtree rooted here, self included."""
        return 1 + sum(child.num_joints() for child in self.children)

    def is_equivalent(self, other: "Joint", atol: float = 1e-6) -> bool:
        """Same name, same transform and equivalent children, in order."""
        return (
            self.name == other.name
            and self.transform.allclose(other.transform, atol=atol)
            and len(self.children) == len(other.children)
            and all(a.is_equivalent(b, atol) for a, b in zip(self.children, other.children))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "transform": self.transform.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Joint":
        return cls(
            name=data["name"],
            transform=LocalTransform.from_dict(data.get("transform", {})),
            children=[cls.from_dict(child) for child in data.get("children", [])],
        )

    def __repr__(self) -> str:
        return f"<Joint '{self.name}' ({len(self.children)} children)>"


@dataclass(eq=False)
class Skeleton:
    """
    Forest of joints.

    Attributes:
        roots: Root joints, in traversal order. A scene may hold several
            independent joint chains, hence several roots.
    """

    roots: List[Joint] = field(default_factory=list)

    def add_root(self, joint: Joint) -> Joint:
        self.roots.append(joint)
        return joint

    def num_joints(self) -> int:
        return sum(root.num_joints() for root in self.roots)

    def iter_depth_first(self) -> Iterator[Tuple[Joint, Optional[Joint]]]:
        """Yield (joint, parent) pairs in pre-order; parent is None for roots."""
        stack: List[Tuple[Joint, Optional[Joint]]] = [(root, None) for root in reversed(self.roots)]
        while stack:
            joint, parent = stack.pop()
            yield joint, parent
            stack.extend((child, joint) for child in reversed(joint.children))

    def iter_breadth_first(self) -> Iterator[Tuple[Joint, Optional[Joint]]]:
        """Yield (joint, parent) pairs level by level."""
        queue = deque((root, None) for root in self.roots)
        while queue:
            joint, parent = queue.popleft()
            yield joint, parent
            queue.extend((child, joint) for child in joint.children)

    def joint_names(self) -> List[str]:
        """Joint names in depth-first order."""
        return [joint.name for joint, _ in self.iter_depth_first()]

    def find(self, name: str) -> Optional[Joint]:
        """First joint named ``name`` in depth-first order."""
        for joint, _ in self.iter_depth_first():
            if joint.name == name:
                return joint
        return None

    def parent_of(self, name: str) -> Optional[Joint]:
        for joint, parent in self.iter_depth_first():
            if joint.name == name:
                return parent
        return None

    def validate(
        self,
        max_joints: int = MAX_JOINTS,
        unique_names: bool = False,
        raise_on_error: bool = False
    ) -> bool:
        """
        Check structural limits.

        Args:
            max_joints: Maximum joint count supported by runtime consumers
            unique_names: Also require joint names to be unique
            raise_on_error: Raise instead of returning False

        Returns:
            True if the skeleton is valid

        Raises:
            SkeletonValidationError: If invalid and ``raise_on_error``
        """
        problems = []

        count = self.num_joints()
        if count > max_joints:
            problems.append(f"skeleton has {count} joints, maximum is {max_joints}")

        if unique_names:
            seen = set()
            duplicates = []
            for name in self.joint_names():
                if name in seen and name not in duplicates:
                    duplicates.append(name)
                seen.add(name)
            if duplicates:
                problems.append(f"duplicate joint names: {duplicates}")

        if not problems:
            return True

        message = "Invalid skeleton: " + "; ".join(problems)
        if raise_on_error:
            raise SkeletonValidationError(message)
        logger.error(message)
        return False

    def is_equivalent(self, other: "Skeleton", atol: float = 1e-6) -> bool:
        """Structural comparison: names, ordering and local transforms."""
        return len(self.roots) == len(other.roots) and all(
            a.is_equivalent(b, atol) for a, b in zip(self.roots, other.roots)
        )

    def to_dict(self) -> SkeletonDict:
        """Serialize skeleton to dict for JSON storage."""
        return {"roots": [root.to_dict() for root in self.roots]}

    @classmethod
    def from_dict(cls, data: SkeletonDict) -> "Skeleton":
        return cls(roots=[Joint.from_dict(root) for root in data.get("roots", [])])

    def __repr__(self) -> str:
        return f"<Skeleton {len(self.roots)} roots, {self.num_joints()} joints>"


def save_skeleton(skeleton: Skeleton, filepath: str) -> None:
    """
    Save skeleton to a JSON file.

    Args:
        skeleton: Skeleton to save
        filepath: Output file path
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, 'w') as f:
        json.dump(skeleton.to_dict(), f, indent=2)


def load_skeleton(filepath: str) -> Skeleton:
    """
    Load skeleton from a JSON file written by ``save_skeleton``.

    Args:
        filepath: Path to JSON file

    Returns:
        Skeleton
    """
    filepath = Path(filepath)
    with open(filepath, 'r') as f:
        return Skeleton.from_dict(json.load(f))
