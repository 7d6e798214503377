"""
Tests for the raw skeleton model.
"""

import numpy as np
import pytest

from skelex.skeleton import (
    Joint,
    LocalTransform,
    Skeleton,
    SkeletonValidationError,
    load_skeleton,
    save_skeleton,
)


@pytest.fixture
def forest():
    """
    Hips ── Spine ── Head
         └─ LeftLeg
    Prop
    """
    hips = Joint("Hips", LocalTransform(translation=[0, 1, 0]))
    spine = hips.add_child(Joint("Spine", LocalTransform(translation=[0, 0.5, 0])))
    spine.add_child(Joint("Head"))
    hips.add_child(Joint("LeftLeg", LocalTransform(scale=[1, 2, 1])))
    return Skeleton([hips, Joint("Prop")])


class TestTraversal:
    """Test joint iteration and lookup."""

    def test_num_joints(self, forest):
        assert forest.num_joints() == 5
        assert forest.roots[0].num_joints() == 4

    def test_depth_first_order(self, forest):
        pairs = [(j.name, p.name if p else None) for j, p in forest.iter_depth_first()]

        assert pairs == [
            ("Hips", None),
            ("Spine", "Hips"),
            ("Head", "Spine"),
            ("LeftLeg", "Hips"),
            ("Prop", None),
        ]

    def test_breadth_first_order(self, forest):
        names = [j.name for j, _ in forest.iter_breadth_first()]

        assert names == ["Hips", "Prop", "Spine", "LeftLeg", "Head"]

    def test_find_and_parent(self, forest):
        assert forest.find("Head").is_leaf
        assert forest.find("Missing") is None
        assert forest.parent_of("LeftLeg").name == "Hips"
        assert forest.parent_of("Prop") is None

    def test_empty_skeleton(self):
        skeleton = Skeleton()

        assert skeleton.num_joints() == 0
        assert list(skeleton.iter_depth_first()) == []


class TestValidation:
    """Test Skeleton.validate."""

    def test_valid(self, forest):
        assert forest.validate()

    def test_too_many_joints(self, forest):
        assert not forest.validate(max_joints=4)

        with pytest.raises(SkeletonValidationError, match="5 joints"):
            forest.validate(max_joints=4, raise_on_error=True)

    def test_duplicate_names(self, forest):
        forest.roots[1].add_child(Joint("Head"))

        assert forest.validate()
        assert not forest.validate(unique_names=True)


class TestSerialization:
    """Test dict and JSON serialization."""

    def test_dict_round_trip(self, forest):
        restored = Skeleton.from_dict(forest.to_dict())

        assert restored.is_equivalent(forest)
        assert np.allclose(restored.find("LeftLeg").transform.scale, [1, 2, 1])

    def test_equivalence_detects_differences(self, forest):
        other = Skeleton.from_dict(forest.to_dict())
        other.find("Head").transform.translation[1] = 3.0

        assert not other.is_equivalent(forest)

    def test_save_and_load(self, forest, tmp_path):
        path = tmp_path / "out" / "skeleton.json"

        save_skeleton(forest, str(path))
        restored = load_skeleton(str(path))

        assert path.exists()
        assert restored.joint_names() == forest.joint_names()
        assert restored.is_equivalent(forest)
