"""
pyassimp scene adapter.

Converts an Assimp scene into a ``MemoryScene`` so it can be fed to the
skeleton extractor. Assimp flattens most DCC attribute types away, so the
attribute category of each node is reconstructed:

- nodes referenced by a mesh bone become SKELETON nodes
- nodes owning meshes become MESH nodes
- nodes named after a scene camera / light become CAMERA / LIGHT nodes
- everything else is a NULL node

Each Assimp mesh with bones becomes one skin deformer whose clusters link
to the bone nodes. Assimp stores the bone offset matrix (mesh space to bone
space at bind time); the cluster transform link is recovered as
``mesh_global @ inverse(offset)``. Assimp has no stored poses, so the pose
store of the adapted scene is empty.

Requires PyAssimp: pip install pyassimp
Also requires Assimp native library: brew install assimp (macOS)
"""

from typing import Dict, List, Optional, Union
from pathlib import Path
import numpy as np
import logging

from .base import AttributeCategory
from .memory import (
    MemoryCluster,
    MemoryMesh,
    MemoryNode,
    MemoryScene,
    MemorySkin,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class SceneLoadError(Exception):
    """Error loading a scene file through pyassimp."""
    pass


# =============================================================================
# Assimp Availability Check
# =============================================================================

def _check_assimp_available() -> bool:
    """Check if pyassimp is available."""
    try:
        import pyassimp  # noqa: F401
        return True
    except ImportError:
        return False


def _get_assimp_install_message() -> str:
    """Get installation instructions for pyassimp."""
    return (
        "PyAssimp is not installed. To load scene files, install it:\n"
        "  pip install pyassimp\n"
        "  brew install assimp  # macOS\n"
        "  apt-get install libassimp-dev  # Ubuntu/Debian"
    )


# =============================================================================
# Conversion
# =============================================================================

def _to_matrix(value) -> np.ndarray:
    # pyassimp matrices are row-major with the translation in the last column
    return np.array(value, dtype=np.float64).reshape(4, 4)


def detect_up_axis(assimp_scene) -> Optional[str]:
    """
    Read the up axis from Assimp scene metadata.

    Returns:
        'y', 'z' or None if the metadata does not say
    """
    metadata = getattr(assimp_scene, 'metadata', None)
    if not metadata:
        return None
    for key, value in metadata.items():
        key_lower = key.lower() if isinstance(key, str) else str(key).lower()
        if 'upaxis' in key_lower and 'sign' not in key_lower:
            if value in (1, 'Y', 'y'):
                return 'y'
            elif value in (2, 'Z', 'z'):
                return 'z'
            logger.warning(f"Unrecognized up axis metadata {key}={value!r}")
    return None


def _named(items) -> set:
    return {item.name for item in (items or []) if getattr(item, 'name', None)}


def scene_from_assimp(assimp_scene) -> MemoryScene:
    """
    Adapt an already loaded Assimp scene.

    Args:
        assimp_scene: Scene returned by ``pyassimp.load``

    Returns:
        MemoryScene mirroring the Assimp node tree
    """
    bone_names = set()
    for mesh in assimp_scene.meshes or []:
        for bone in getattr(mesh, 'bones', None) or []:
            bone_names.add(bone.name)
    camera_names = _named(getattr(assimp_scene, 'cameras', None))
    light_names = _named(getattr(assimp_scene, 'lights', None))

    nodes_by_name: Dict[str, MemoryNode] = {}
    mesh_owners: List = []

    def category_of(assimp_node) -> AttributeCategory:
        name = assimp_node.name
        if name in bone_names:
            return AttributeCategory.SKELETON
        if getattr(assimp_node, 'meshes', None):
            return AttributeCategory.MESH
        if name in camera_names:
            return AttributeCategory.CAMERA
        if name in light_names:
            return AttributeCategory.LIGHT
        return AttributeCategory.NULL

    def convert(assimp_node) -> MemoryNode:
        node = MemoryNode(
            assimp_node.name,
            attribute_category=category_of(assimp_node),
            local_transform=_to_matrix(assimp_node.transformation),
        )
        nodes_by_name.setdefault(node.name, node)
        if getattr(assimp_node, 'meshes', None):
            mesh_owners.append((node, assimp_node.meshes))
        for child in getattr(assimp_node, 'children', None) or []:
            node.add_child(convert(child))
        return node

    root = convert(assimp_scene.rootnode)

    for node, meshes in mesh_owners:
        mesh_global = node.evaluate_global_transform()
        skins = []
        for mesh in meshes:
            clusters = []
            for bone in getattr(mesh, 'bones', None) or []:
                link = nodes_by_name.get(bone.name)
                if link is None:
                    logger.warning(f"Bone '{bone.name}' has no scene node, skipping")
                    continue
                offset = _to_matrix(bone.offsetmatrix)
                try:
                    transform_link = mesh_global @ np.linalg.inv(offset)
                except np.linalg.LinAlgError:
                    logger.warning(f"Bone '{bone.name}' has a singular offset matrix, skipping")
                    continue
                clusters.append(MemoryCluster(link, transform_link))
            if clusters:
                skins.append(MemorySkin(clusters))
        node.set_mesh(MemoryMesh(skins))

    logger.info(
        f"Adapted Assimp scene: {len(nodes_by_name)} named nodes, "
        f"{len(bone_names)} bones, {len(mesh_owners)} mesh nodes"
    )
    return MemoryScene(root, up_axis=detect_up_axis(assimp_scene))


def load_scene(path: Union[str, Path]) -> MemoryScene:
    """
    Load a scene file (FBX, glTF, DAE, ...) through pyassimp.

    Args:
        path: Path to the scene file

    Returns:
        MemoryScene

    Raises:
        FileNotFoundError: If the file doesn't exist
        SceneLoadError: If pyassimp is missing or fails to read the file
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if not _check_assimp_available():
        raise SceneLoadError(_get_assimp_install_message())

    import pyassimp
    from pyassimp.errors import AssimpError

    logger.info(f"Loading scene from: {path}")
    try:
        with pyassimp.load(str(path)) as assimp_scene:
            return scene_from_assimp(assimp_scene)
    except AssimpError as e:
        raise SceneLoadError(f"Failed to load {path}: {e}") from e
