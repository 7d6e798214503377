"""
Tests for the in-memory scene graph.
"""

import numpy as np
import pytest

from skelex.scene import (
    AttributeCategory,
    MemoryNode,
    SceneDescriptionError,
    scene_from_dict,
)
from skelex.skeleton import SkeletonExtractor, NodeTypeFilter

from conftest import translation


class TestAttributeCategory:
    """Test AttributeCategory.parse."""

    def test_parse_value_and_name(self):
        assert AttributeCategory.parse("mesh") is AttributeCategory.MESH
        assert AttributeCategory.parse("CAMERA_STEREO") is AttributeCategory.CAMERA_STEREO
        assert AttributeCategory.parse(AttributeCategory.LIGHT) is AttributeCategory.LIGHT
        assert AttributeCategory.parse(None) is None

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            AttributeCategory.parse("bone")


class TestMemoryNode:
    """Test node hierarchy and transform evaluation."""

    def test_global_transform_composes_ancestors(self):
        root = MemoryNode("Root", local_transform=translation(1, 0, 0))
        child = root.add_child(MemoryNode("Child", local_transform=translation(0, 2, 0)))
        leaf = child.add_child(MemoryNode("Leaf", local_transform=translation(0, 0, 3)))

        assert np.allclose(leaf.evaluate_global_transform(), translation(1, 2, 3))

    def test_single_parent(self):
        a = MemoryNode("A")
        b = MemoryNode("B")
        child = a.add_child(MemoryNode("Child"))

        with pytest.raises(SceneDescriptionError):
            b.add_child(child)

    def test_identity_semantics(self):
        """Nodes with equal names are distinct keys."""
        a = MemoryNode("Same")
        b = MemoryNode("Same")

        assert len({a: 1, b: 2}) == 2

    def test_pre_order_iteration(self):
        root = MemoryNode("Root")
        a = root.add_child(MemoryNode("A"))
        a.add_child(MemoryNode("A1"))
        root.add_child(MemoryNode("B"))

        assert [n.name for n in root.iter_depth_first()] == ["Root", "A", "A1", "B"]


class TestSceneFromDict:
    """Test scene_from_dict."""

    def test_builds_hierarchy(self, scene_description):
        scene = scene_from_dict(scene_description)

        root = scene.root_node()
        assert root.attribute_category is None
        assert [c.name for c in root.children()] == ["Hips", "Body", "Cam"]
        assert scene.find_node("Cam").attribute_category is AttributeCategory.CAMERA
        assert np.allclose(
            scene.find_node("Spine").evaluate_global_transform(), translation(0, 1.5, 0)
        )
        assert scene.up_axis == "y"

    def test_resolves_cluster_links(self, scene_description):
        scene = scene_from_dict(scene_description)

        mesh = scene.find_node("Body").mesh()
        cluster = mesh.skin_deformers()[0].clusters()[0]

        assert cluster.linked_node() is scene.find_node("Spine")
        assert np.allclose(cluster.transform_link_matrix(), translation(0, 2, 0))

    def test_poses(self, scene_description):
        scene = scene_from_dict(scene_description)

        pose = scene.pose_store().bind_poses()[0]

        assert np.allclose(pose.find_node(scene.find_node("Hips")), translation(0, 1.25, 0))
        assert pose.find_node(scene.find_node("Spine")) is None

    def test_extracts(self, scene_description):
        scene = scene_from_dict(scene_description)

        skeleton = SkeletonExtractor(NodeTypeFilter(camera=True)).extract_scene(scene).unwrap()

        assert skeleton.joint_names() == ["Hips", "Spine", "Cam"]
        assert np.allclose(skeleton.find("Hips").transform.translation, [0, 1.25, 0])
        assert np.allclose(skeleton.find("Spine").transform.translation, [0, 0.75, 0])

    def test_matrix_transform(self):
        scene = scene_from_dict({
            "root": {"name": "Root", "transform": translation(4, 5, 6).tolist()}
        })

        assert np.allclose(scene.root_node().local_transform, translation(4, 5, 6))

    def test_missing_root(self):
        with pytest.raises(SceneDescriptionError):
            scene_from_dict({})

    def test_dangling_link(self):
        with pytest.raises(SceneDescriptionError, match="Ghost"):
            scene_from_dict({
                "root": {
                    "name": "Root",
                    "mesh": {"skins": [{"clusters": [{"link": "Ghost"}]}]},
                }
            })

    def test_bad_matrix(self):
        with pytest.raises(SceneDescriptionError):
            scene_from_dict({"root": {"name": "Root", "transform": [[1, 0], [0, 1]]}})

    def test_unknown_attribute(self):
        with pytest.raises(SceneDescriptionError):
            scene_from_dict({"root": {"name": "Root", "attribute": "bone"}})

    def test_unknown_transform_key(self):
        with pytest.raises(SceneDescriptionError):
            scene_from_dict({"root": {"name": "Root", "transform": {"position": [0, 0, 0]}}})
