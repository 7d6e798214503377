"""
Pytest configuration and fixtures for skelex tests.
"""

import numpy as np
import pytest
import torch

from skelex.scene import (
    AttributeCategory,
    MemoryCluster,
    MemoryMesh,
    MemoryNode,
    MemoryPose,
    MemoryScene,
    MemorySkin,
)
from skelex.skeleton import (
    ConversionFailure,
    LocalTransform,
    SystemConverter,
    TransformConverter,
)
from skelex.utils.transforms import compose_matrix


def translation(x, y, z):
    """4x4 pure translation matrix."""
    return compose_matrix(translation=[x, y, z])


def skeleton_node(name, t=(0.0, 0.0, 0.0)):
    return MemoryNode(name, AttributeCategory.SKELETON, translation(*t))


def null_node(name, t=(0.0, 0.0, 0.0)):
    return MemoryNode(name, AttributeCategory.NULL, translation(*t))


class CountingConverter(TransformConverter):
    """Wraps a SystemConverter, failing on the ``fail_at``-th call (1-based)."""

    def __init__(self, fail_at=None):
        self.inner = SystemConverter()
        self.fail_at = fail_at
        self.calls = 0

    def convert(self, matrix):
        self.calls += 1
        if self.fail_at is not None and self.calls == self.fail_at:
            return ConversionFailure("forced failure")
        return self.inner.convert(matrix)


class AlwaysIdentityConverter(TransformConverter):
    """Accepts any matrix, even singular ones."""

    def convert(self, matrix):
        return LocalTransform.identity()


@pytest.fixture
def cpu_device():
    """Force CPU device for consistent testing."""
    return torch.device('cpu')


@pytest.fixture
def identity():
    return np.eye(4)


@pytest.fixture
def chain_scene():
    """
    RootNode (no attribute)
    └── A (skeleton, +y 1)
        └── B (null, +z 5)
            └── C (skeleton, +x 1)
    """
    root = MemoryNode("RootNode")
    a = root.add_child(skeleton_node("A", (0.0, 1.0, 0.0)))
    b = a.add_child(null_node("B", (0.0, 0.0, 5.0)))
    b.add_child(skeleton_node("C", (1.0, 0.0, 0.0)))
    return MemoryScene(root)


@pytest.fixture
def two_root_scene():
    """Two independent joint chains below a null root."""
    root = MemoryNode("RootNode")
    left = root.add_child(skeleton_node("Left", (-1.0, 0.0, 0.0)))
    left.add_child(skeleton_node("LeftTip", (-1.0, 0.0, 0.0)))
    group = root.add_child(null_node("Group", (0.0, 2.0, 0.0)))
    group.add_child(skeleton_node("Right", (1.0, 0.0, 0.0)))
    return MemoryScene(root)


@pytest.fixture
def skinned_scene():
    """
    RootNode
    ├── Hips (skeleton, +y 1)         bind pose: +y 1.5
    │   └── Spine (skeleton, +y 1)    bind pose: +y 2.5, cluster: +y 3
    │       └── Neck (skeleton, +y 1) rest pose only
    └── Body (mesh, skinned to Spine)
    """
    root = MemoryNode("RootNode")
    hips = root.add_child(skeleton_node("Hips", (0.0, 1.0, 0.0)))
    spine = hips.add_child(skeleton_node("Spine", (0.0, 1.0, 0.0)))
    spine.add_child(skeleton_node("Neck", (0.0, 1.0, 0.0)))

    body = root.add_child(MemoryNode("Body", AttributeCategory.MESH))
    body.set_mesh(MemoryMesh([MemorySkin([MemoryCluster(spine, translation(0.0, 3.0, 0.0))])]))

    scene = MemoryScene(root)
    pose = MemoryPose("BindPose", is_bind_pose=True)
    pose.set_matrix(hips, translation(0.0, 1.5, 0.0))
    pose.set_matrix(spine, translation(0.0, 2.5, 0.0))
    scene.pose_store().add_pose(pose)
    return scene


@pytest.fixture
def scene_description():
    """Nested dictionary scene description."""
    return {
        "up_axis": "y",
        "root": {
            "name": "RootNode",
            "children": [
                {
                    "name": "Hips",
                    "attribute": "skeleton",
                    "transform": {"translation": [0, 1, 0]},
                    "children": [
                        {
                            "name": "Spine",
                            "attribute": "SKELETON",
                            "transform": {"translation": [0, 0.5, 0]},
                        }
                    ],
                },
                {
                    "name": "Body",
                    "attribute": "mesh",
                    "mesh": {
                        "skins": [
                            {"clusters": [{"link": "Spine", "transform_link": {"translation": [0, 2, 0]}}]}
                        ]
                    },
                },
                {"name": "Cam", "attribute": "camera"},
            ],
        },
        "poses": [
            {"name": "BindPose", "is_bind_pose": True, "matrices": {"Hips": {"translation": [0, 1.25, 0]}}},
        ],
    }


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
