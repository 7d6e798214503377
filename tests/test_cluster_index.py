"""
Tests for the skin cluster index.
"""

import numpy as np

from skelex.scene import (
    AttributeCategory,
    MemoryCluster,
    MemoryMesh,
    MemoryNode,
    MemorySkin,
)
from skelex.skeleton import ClusterIndex

from conftest import skeleton_node, translation


class TestClusterIndex:
    """Test ClusterIndex.build."""

    def test_empty_scene(self):
        """No meshes means an empty index."""
        root = MemoryNode("RootNode")
        root.add_child(skeleton_node("Hips"))

        index = ClusterIndex.build(root)

        assert len(index) == 0

    def test_indexes_linked_nodes(self, skinned_scene):
        root = skinned_scene.root_node()
        spine = skinned_scene.find_node("Spine")
        hips = skinned_scene.find_node("Hips")

        index = ClusterIndex.build(root)

        assert spine in index
        assert hips not in index
        assert np.allclose(index.get(spine), translation(0, 3, 0))
        assert index.get(hips) is None

    def test_first_cluster_wins(self):
        """Later clusters linked to an already indexed node are ignored."""
        root = MemoryNode("RootNode")
        joint = root.add_child(skeleton_node("Joint"))

        first = root.add_child(MemoryNode("First", AttributeCategory.MESH))
        first.set_mesh(MemoryMesh([
            MemorySkin([MemoryCluster(joint, translation(1, 0, 0))]),
            MemorySkin([MemoryCluster(joint, translation(2, 0, 0))]),
        ]))
        second = root.add_child(MemoryNode("Second", AttributeCategory.MESH))
        second.set_mesh(MemoryMesh([MemorySkin([MemoryCluster(joint, translation(3, 0, 0))])]))

        index = ClusterIndex.build(root)

        assert len(index) == 1
        assert np.allclose(index.get(joint), translation(1, 0, 0))

    def test_ignores_unlinked_clusters(self):
        root = MemoryNode("RootNode")
        mesh_node = root.add_child(MemoryNode("Body", AttributeCategory.MESH))
        mesh_node.set_mesh(MemoryMesh([MemorySkin([MemoryCluster(None, translation(1, 0, 0))])]))

        index = ClusterIndex.build(root)

        assert len(index) == 0

    def test_scans_meshes_at_any_depth(self):
        """Meshes nested below rejected nodes are still scanned."""
        root = MemoryNode("RootNode")
        joint = root.add_child(skeleton_node("Joint"))
        group = root.add_child(MemoryNode("Group", AttributeCategory.NULL))
        deep = group.add_child(MemoryNode("Deep", AttributeCategory.LOD_GROUP))
        mesh_node = deep.add_child(MemoryNode("Body", AttributeCategory.MESH))
        mesh_node.set_mesh(MemoryMesh([MemorySkin([MemoryCluster(joint, translation(0, 0, 7))])]))

        index = ClusterIndex.build(root)

        assert list(index) == [joint]

    def test_returned_matrix_is_a_copy(self, skinned_scene):
        spine = skinned_scene.find_node("Spine")
        index = ClusterIndex.build(skinned_scene.root_node())

        matrix = index.get(spine)
        matrix[0, 3] = 100.0

        assert np.allclose(index.get(spine), translation(0, 3, 0))
