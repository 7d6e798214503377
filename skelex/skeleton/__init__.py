"""
Skeleton extraction for skelex.

Turns a scene tree into a forest of joints carrying local bind transforms:

- NodeTypeFilter: which node attribute categories become joints
- ClusterIndex: skin cluster transform links, indexed by linked node
- BindTransformResolver: cluster > bind pose > rest pose resolution
- SkeletonExtractor: the depth-first forest builder
- Skeleton / Joint: the extracted raw skeleton
- RuntimeSkeleton: flattened torch tensors for runtime consumers
"""

from .errors import (
    SkeletonExtractionError,
    ConversionFailedError,
    NoSkeletonFoundError,
    SkeletonValidationError,
    ConfigError,
)
from .node_filter import (
    NodeGroup,
    NodeTypeFilter,
    CATEGORY_GROUPS,
    group_of,
)
from .transform import (
    LocalTransform,
    ConversionFailure,
    CoordinateSystem,
    TransformConverter,
    SystemConverter,
)
from .cluster_index import ClusterIndex
from .bind_pose import BindSource, BindTransformResolver
from .raw_skeleton import (
    Joint,
    Skeleton,
    save_skeleton,
    load_skeleton,
)
from .extractor import (
    TraversalStatus,
    TraversalResult,
    ExtractionResult,
    SkeletonExtractor,
    extract,
    extract_skeleton,
)
from .runtime import RuntimeSkeleton

__all__ = [
    # Errors
    "SkeletonExtractionError",
    "ConversionFailedError",
    "NoSkeletonFoundError",
    "SkeletonValidationError",
    "ConfigError",
    # Filtering
    "NodeGroup",
    "NodeTypeFilter",
    "CATEGORY_GROUPS",
    "group_of",
    # Transforms
    "LocalTransform",
    "ConversionFailure",
    "CoordinateSystem",
    "TransformConverter",
    "SystemConverter",
    # Bind transform resolution
    "ClusterIndex",
    "BindSource",
    "BindTransformResolver",
    # Raw skeleton
    "Joint",
    "Skeleton",
    "save_skeleton",
    "load_skeleton",
    # Extraction
    "TraversalStatus",
    "TraversalResult",
    "ExtractionResult",
    "SkeletonExtractor",
    "extract",
    "extract_skeleton",
    # Runtime
    "RuntimeSkeleton",
]
