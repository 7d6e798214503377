"""
Tests for bind transform resolution priority.
"""

import numpy as np

from skelex.scene import MemoryNode, MemoryPose, MemoryPoseStore
from skelex.skeleton import BindSource, BindTransformResolver, ClusterIndex

from conftest import skeleton_node, translation


def _resolver(scene):
    return BindTransformResolver(ClusterIndex.build(scene.root_node()), scene.pose_store())


class TestBindTransformResolver:
    """Test cluster > bind pose > rest pose resolution."""

    def test_cluster_dominates_bind_pose(self, skinned_scene):
        """Spine has both a cluster and a bind pose entry: cluster wins."""
        resolver = _resolver(skinned_scene)

        matrix, source = resolver.resolve_with_source(skinned_scene.find_node("Spine"))

        assert source is BindSource.CLUSTER
        assert np.allclose(matrix, translation(0, 3, 0))

    def test_bind_pose_dominates_rest_pose(self, skinned_scene):
        resolver = _resolver(skinned_scene)

        matrix, source = resolver.resolve_with_source(skinned_scene.find_node("Hips"))

        assert source is BindSource.BIND_POSE
        assert np.allclose(matrix, translation(0, 1.5, 0))

    def test_rest_pose_fallback(self, skinned_scene):
        """Neck has neither cluster nor pose entry: evaluated global transform."""
        resolver = _resolver(skinned_scene)

        matrix, source = resolver.resolve_with_source(skinned_scene.find_node("Neck"))

        assert source is BindSource.REST_POSE
        assert np.allclose(matrix, translation(0, 3, 0))

    def test_non_bind_poses_are_ignored(self):
        root = MemoryNode("RootNode")
        joint = root.add_child(skeleton_node("Joint", (0, 1, 0)))
        rest_pose = MemoryPose("RestPose", is_bind_pose=False)
        rest_pose.set_matrix(joint, translation(9, 9, 9))

        resolver = BindTransformResolver(ClusterIndex.build(root), MemoryPoseStore([rest_pose]))

        assert np.allclose(resolver.resolve(joint), translation(0, 1, 0))

    def test_first_bind_pose_containing_node_wins(self):
        """Poses are scanned in store order, skipping those without the node."""
        root = MemoryNode("RootNode")
        joint = root.add_child(skeleton_node("Joint"))
        other = root.add_child(skeleton_node("Other"))

        without_joint = MemoryPose("A")
        without_joint.set_matrix(other, translation(5, 0, 0))
        first = MemoryPose("B")
        first.set_matrix(joint, translation(1, 0, 0))
        second = MemoryPose("C")
        second.set_matrix(joint, translation(2, 0, 0))

        store = MemoryPoseStore([without_joint, first, second])
        resolver = BindTransformResolver(ClusterIndex.build(root), store)

        assert np.allclose(resolver.resolve(joint), translation(1, 0, 0))

    def test_without_pose_store(self):
        root = MemoryNode("RootNode")
        joint = root.add_child(skeleton_node("Joint", (0, 0, 2)))

        resolver = BindTransformResolver(ClusterIndex.build(root))

        assert np.allclose(resolver.resolve(joint), translation(0, 0, 2))
