"""
Tests for the pyassimp scene adapter.

Assimp scenes are stood in for by SimpleNamespace objects carrying the
attributes pyassimp exposes, so these tests do not need the native library.
"""

from types import SimpleNamespace
from unittest import mock

import numpy as np
import pytest

from skelex.scene import AttributeCategory, SceneLoadError, load_scene
from skelex.scene.assimp_scene import detect_up_axis, scene_from_assimp
from skelex.skeleton import SkeletonExtractor

from conftest import translation


def assimp_node(name, matrix=None, children=(), meshes=()):
    return SimpleNamespace(
        name=name,
        transformation=(np.eye(4) if matrix is None else matrix).tolist(),
        children=list(children),
        meshes=list(meshes),
    )


@pytest.fixture
def assimp_scene():
    """Two-bone character with one skinned mesh, a camera and a light."""
    # Bone offsets are the inverse bind matrices in mesh space
    mesh = SimpleNamespace(
        name="BodyShape",
        bones=[
            SimpleNamespace(name="Hips", offsetmatrix=translation(0, -1, 0).tolist()),
            SimpleNamespace(name="Spine", offsetmatrix=translation(0, -2.5, 0).tolist()),
        ],
    )
    spine = assimp_node("Spine", translation(0, 1, 0))
    hips = assimp_node("Hips", translation(0, 1, 0), children=[spine])
    armature = assimp_node("Armature", children=[hips])
    body = assimp_node("Body", translation(0, 0.5, 0), meshes=[mesh])
    root = assimp_node(
        "RootNode",
        children=[armature, body, assimp_node("Camera"), assimp_node("Sun")],
    )
    return SimpleNamespace(
        rootnode=root,
        meshes=[mesh],
        cameras=[SimpleNamespace(name="Camera")],
        lights=[SimpleNamespace(name="Sun")],
        metadata={"UpAxis": 1, "UpAxisSign": 1},
    )


class TestSceneFromAssimp:
    """Test scene_from_assimp."""

    def test_categories(self, assimp_scene):
        scene = scene_from_assimp(assimp_scene)

        categories = {
            node.name: node.attribute_category
            for node in scene.root_node().iter_depth_first()
        }
        assert categories == {
            "RootNode": AttributeCategory.NULL,
            "Armature": AttributeCategory.NULL,
            "Hips": AttributeCategory.SKELETON,
            "Spine": AttributeCategory.SKELETON,
            "Body": AttributeCategory.MESH,
            "Camera": AttributeCategory.CAMERA,
            "Sun": AttributeCategory.LIGHT,
        }

    def test_cluster_links(self, assimp_scene):
        scene = scene_from_assimp(assimp_scene)

        clusters = scene.find_node("Body").mesh().skin_deformers()[0].clusters()
        assert [c.linked_node().name for c in clusters] == ["Hips", "Spine"]
        # mesh global (+0.5) composed with the inverse offset
        assert np.allclose(clusters[1].transform_link_matrix(), translation(0, 3.0, 0))

    def test_extracts_bind_pose(self, assimp_scene):
        skeleton = SkeletonExtractor().extract_scene(scene_from_assimp(assimp_scene)).unwrap()

        assert skeleton.joint_names() == ["Hips", "Spine"]
        assert np.allclose(skeleton.find("Hips").transform.translation, [0, 1.5, 0])
        assert np.allclose(skeleton.find("Spine").transform.translation, [0, 1.5, 0])

    def test_missing_bone_node_is_skipped(self, assimp_scene):
        assimp_scene.meshes[0].bones.append(
            SimpleNamespace(name="Ghost", offsetmatrix=np.eye(4).tolist())
        )

        scene = scene_from_assimp(assimp_scene)

        clusters = scene.find_node("Body").mesh().skin_deformers()[0].clusters()
        assert len(clusters) == 2


class TestDetectUpAxis:
    """Test detect_up_axis."""

    @pytest.mark.parametrize("value,expected", [(1, 'y'), (2, 'z'), ('Z', 'z')])
    def test_known_axes(self, value, expected):
        assert detect_up_axis(SimpleNamespace(metadata={"UpAxis": value})) == expected

    def test_no_metadata(self):
        assert detect_up_axis(SimpleNamespace(metadata=None)) is None
        assert detect_up_axis(SimpleNamespace()) is None

    def test_unrecognized_value(self):
        assert detect_up_axis(SimpleNamespace(metadata={"UpAxis": 0})) is None


class TestLoadScene:
    """Test load_scene error handling."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_scene(tmp_path / "missing.fbx")

    def test_assimp_unavailable(self, tmp_path):
        path = tmp_path / "character.fbx"
        path.write_bytes(b"")

        with mock.patch(
            "skelex.scene.assimp_scene._check_assimp_available", return_value=False
        ):
            with pytest.raises(SceneLoadError, match="pip install pyassimp"):
                load_scene(path)
