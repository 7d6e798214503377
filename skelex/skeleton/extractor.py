"""
Skeleton extraction.

Walks the scene tree once, depth-first, and builds the joint forest:

- nodes whose attribute category is accepted by the ``NodeTypeFilter``
  become joints, appended to the nearest accepted ancestor joint (or to the
  forest roots)
- each joint's global bind transform comes from the
  ``BindTransformResolver`` and is expressed relative to the parent joint's
  global bind transform
- nodes that are not accepted are transparent: their children are still
  visited, attached to the nearest accepted ancestor, and their own
  transform is not folded into the descendants' local transforms

The traversal reports a tri-state outcome (error / skeleton found / no
skeleton) as a returned value. An error aborts the whole extraction and no
partial forest is ever returned.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
import logging

from ..scene.base import BindPoseStore, Scene, SceneNode
from .bind_pose import BindTransformResolver
from .cluster_index import ClusterIndex
from .errors import (
    ConversionFailedError,
    NoSkeletonFoundError,
    SkeletonExtractionError,
)
from .node_filter import NodeTypeFilter
from .raw_skeleton import Joint, Skeleton
from .transform import ConversionFailure, SystemConverter, TransformConverter

logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================

class TraversalStatus(Enum):
    ERROR = "error"
    SKELETON_FOUND = "skeleton_found"
    NO_SKELETON = "no_skeleton"


@dataclass(frozen=True)
class TraversalResult:
    """Outcome of visiting one subtree."""

    status: TraversalStatus
    error: Optional[SkeletonExtractionError] = None

    @classmethod
    def failed(cls, error: SkeletonExtractionError) -> "TraversalResult":
        return cls(TraversalStatus.ERROR, error)

    @classmethod
    def found(cls, found: bool) -> "TraversalResult":
        return cls(TraversalStatus.SKELETON_FOUND if found else TraversalStatus.NO_SKELETON)

    @property
    def is_error(self) -> bool:
        return self.status is TraversalStatus.ERROR


@dataclass(frozen=True)
class ExtractionResult:
    """
    Either an extracted skeleton or the error that prevented it.

    Attributes:
        skeleton: Complete joint forest, None on failure
        error: ConversionFailedError or NoSkeletonFoundError, None on success
    """

    skeleton: Optional[Skeleton] = None
    error: Optional[SkeletonExtractionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Skeleton:
        """Return the skeleton or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.skeleton


@dataclass(frozen=True)
class _TraversalContext:
    """
    State handed down to a node's children.

    ``parent_global_inv`` is None when the parent joint's global bind
    transform is singular.
    """

    parent: Optional[Joint]
    parent_global_inv: Optional[np.ndarray]

    @classmethod
    def root(cls) -> "_TraversalContext":
        return cls(parent=None, parent_global_inv=np.eye(4, dtype=np.float64))


# =============================================================================
# Extractor
# =============================================================================

class SkeletonExtractor:
    """
    Builds a joint forest from a scene tree.

    Args:
        node_filter: Node types accepted as joints (skeleton nodes only if None)
        converter: Converter applied to every local bind matrix (identity
            axis system and unit if None)
    """

    def __init__(
        self,
        node_filter: Optional[NodeTypeFilter] = None,
        converter: Optional[TransformConverter] = None
    ):
        self.node_filter = node_filter if node_filter is not None else NodeTypeFilter()
        self.converter = converter if converter is not None else SystemConverter()

    def extract_scene(self, scene: Scene) -> ExtractionResult:
        """Extract the skeleton of a whole scene, consulting its pose store."""
        return self.extract(scene.root_node(), scene.pose_store())

    def extract(
        self,
        root: SceneNode,
        pose_store: Optional[BindPoseStore] = None
    ) -> ExtractionResult:
        """
        Extract the joint forest below (and including) ``root``.

        Args:
            root: Scene root node
            pose_store: Recorded poses, consulted when a node has no cluster

        Returns:
            ExtractionResult holding the skeleton, or a ConversionFailedError /
            NoSkeletonFoundError
        """
        resolver = BindTransformResolver(ClusterIndex.build(root), pose_store)
        skeleton = Skeleton()

        result = self._recurse(root, _TraversalContext.root(), resolver, skeleton)

        if result.is_error:
            logger.error("Failed to extract skeleton.")
            return ExtractionResult(error=result.error)
        if result.status is TraversalStatus.NO_SKELETON:
            logger.error("No skeleton found in scene.")
            return ExtractionResult(error=NoSkeletonFoundError())

        logger.info(
            f"Extracted skeleton: {skeleton.num_joints()} joints, {len(skeleton.roots)} roots"
        )
        return ExtractionResult(skeleton=skeleton)

    def _recurse(
        self,
        node: SceneNode,
        context: _TraversalContext,
        resolver: BindTransformResolver,
        skeleton: Skeleton
    ) -> TraversalResult:
        skeleton_found = False

        # Process this node as a new joint if it has a joint compatible attribute.
        category = node.attribute_category
        if category is not None and self.node_filter.accepts(category):
            skeleton_found = True

            joint = Joint(name=node.name)
            if context.parent is not None:
                context.parent.add_child(joint)
            else:
                skeleton.add_root(joint)

            node_global = resolver.resolve(node)

            if context.parent_global_inv is None:
                reason = f"parent joint '{context.parent.name}' has a singular bind transform"
                logger.error(f"Failed to extract skeleton transform for joint \"{joint.name}\": {reason}")
                return TraversalResult.failed(ConversionFailedError(joint.name, reason))

            node_local = context.parent_global_inv @ node_global
            converted = self.converter.convert(node_local)
            if isinstance(converted, ConversionFailure):
                logger.error(
                    f"Failed to extract skeleton transform for joint \"{joint.name}\": {converted.reason}"
                )
                return TraversalResult.failed(ConversionFailedError(joint.name, converted.reason))
            joint.transform = converted

            # This node is the new parent for further recursions.
            try:
                node_global_inv = np.linalg.inv(node_global)
            except np.linalg.LinAlgError:
                node_global_inv = None
            context = _TraversalContext(parent=joint, parent_global_inv=node_global_inv)

        # Iterate node's children, even if this one wasn't processed.
        for child in node.children():
            result = self._recurse(child, context, resolver, skeleton)
            if result.is_error:
                return result
            skeleton_found |= result.status is TraversalStatus.SKELETON_FOUND

        return TraversalResult.found(skeleton_found)


# =============================================================================
# Main Extraction Functions
# =============================================================================

def extract(
    root: SceneNode,
    node_filter: Optional[NodeTypeFilter] = None,
    converter: Optional[TransformConverter] = None,
    pose_store: Optional[BindPoseStore] = None
) -> ExtractionResult:
    """
    Extract a joint forest from a scene tree.

    Args:
        root: Scene root node
        node_filter: Node types accepted as joints
        converter: Transform converter for local bind matrices
        pose_store: Recorded poses of the scene

    Returns:
        ExtractionResult
    """
    return SkeletonExtractor(node_filter, converter).extract(root, pose_store)


def extract_skeleton(
    scene: Scene,
    config=None,
    converter: Optional[TransformConverter] = None
) -> Skeleton:
    """
    Extract and validate the skeleton of a scene.

    Args:
        scene: Scene to extract from
        config: ImportConfig; defaults select skeleton nodes only and detect
            the source coordinate system from the scene
        converter: Overrides the converter built from ``config``

    Returns:
        Skeleton

    Raises:
        ConversionFailedError: If a joint transform cannot be converted
        NoSkeletonFoundError: If no node is accepted as a joint
        SkeletonValidationError: If the skeleton exceeds ``config.max_joints``
    """
    from ..utils.config import ImportConfig

    if config is None:
        config = ImportConfig()
    if converter is None:
        converter = config.make_converter(scene)

    extractor = SkeletonExtractor(config.node_filter(), converter)
    skeleton = extractor.extract_scene(scene).unwrap()
    skeleton.validate(max_joints=config.max_joints, raise_on_error=True)
    return skeleton
