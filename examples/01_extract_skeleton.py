"""
Example 01: Bind-Pose Skeleton Extraction

Demonstrates:
1. Building a small scene (skeleton nodes, a skinned mesh, a camera, a stored
   bind pose) from a dictionary description, or loading one from a file
2. Extracting the joint forest with its local bind transforms
3. Flattening the skeleton into runtime tensors and checking that the model
   space bind matrices line up with the skin cluster transforms

Usage:
    python examples/01_extract_skeleton.py                  # built-in scene
    python examples/01_extract_skeleton.py character.fbx    # via pyassimp
    python examples/01_extract_skeleton.py character.fbx --any

Output files:
- output/01_skeleton.json - Extracted skeleton
"""

import sys
import logging
from pathlib import Path

import numpy as np
import torch

import skelex
from skelex.scene import load_scene, scene_from_dict
from skelex.skeleton import RuntimeSkeleton, save_skeleton


# =============================================================================
# 1. Configuration
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent
OUTPUT_DIR = PROJECT_ROOT / "output"

DEMO_SCENE = {
    "up_axis": "y",
    "root": {
        "name": "RootNode",
        "children": [
            {
                "name": "Armature",
                "children": [
                    {
                        "name": "Hips",
                        "attribute": "skeleton",
                        "transform": {"translation": [0, 1.0, 0]},
                        "children": [
                            {
                                "name": "Spine",
                                "attribute": "skeleton",
                                "transform": {"translation": [0, 0.25, 0]},
                                "children": [
                                    {
                                        "name": "Head",
                                        "attribute": "skeleton",
                                        "transform": {"translation": [0, 0.5, 0]},
                                    }
                                ],
                            },
                            {
                                "name": "LeftLeg",
                                "attribute": "skeleton",
                                "transform": {
                                    "translation": [0.1, -0.1, 0],
                                    "rotation": [0.0, 0.0, 0.0, 1.0],
                                },
                            },
                        ],
                    }
                ],
            },
            {
                "name": "Body",
                "attribute": "mesh",
                "mesh": {
                    "skins": [
                        {
                            "clusters": [
                                {"link": "Hips", "transform_link": {"translation": [0, 1.0, 0]}},
                                {"link": "Spine", "transform_link": {"translation": [0, 1.3, 0]}},
                            ]
                        }
                    ]
                },
            },
            {"name": "Camera", "attribute": "camera"},
        ],
    },
    "poses": [
        {
            "name": "BindPose",
            "is_bind_pose": True,
            "matrices": {"Head": {"translation": [0, 1.8, 0]}},
        }
    ],
}


# =============================================================================
# 2. Extraction
# =============================================================================

def build_scene(argv):
    """Load the scene named on the command line, or build the demo scene."""
    paths = [arg for arg in argv if not arg.startswith("--")]
    if paths:
        print(f"Loading scene: {paths[0]}")
        return load_scene(paths[0])
    print("Using built-in demo scene")
    return scene_from_dict(DEMO_SCENE)


def print_skeleton(skeleton):
    """Print the joint hierarchy with local translations."""
    depths = {}
    for joint, parent in skeleton.iter_depth_first():
        depth = 0 if parent is None else depths[id(parent)] + 1
        depths[id(joint)] = depth
        t = joint.transform.translation
        print(f"  {'  ' * depth}{joint.name:<16} t=({t[0]:+.3f}, {t[1]:+.3f}, {t[2]:+.3f})")


def main(argv):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("Phase 1: Scene")
    print("=" * 60)
    scene = build_scene(argv)

    config = skelex.ImportConfig()
    if "--any" in argv:
        config = config.update(types={"any": True})

    print("\n" + "=" * 60)
    print("Phase 2: Skeleton Extraction")
    print("=" * 60)
    skeleton = skelex.extract_skeleton(scene, config)
    print(f"Extracted {skeleton.num_joints()} joints in {len(skeleton.roots)} root(s):")
    print_skeleton(skeleton)

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    save_path = OUTPUT_DIR / "01_skeleton.json"
    save_skeleton(skeleton, str(save_path))
    print(f"  Saved: {save_path}")

    print("\n" + "=" * 60)
    print("Phase 3: Runtime Skeleton")
    print("=" * 60)
    runtime = RuntimeSkeleton.from_skeleton(skeleton, dtype=torch.float64)
    print(runtime)
    print(f"  Parents: {runtime.parents.tolist()}")

    model = runtime.model_matrices().numpy()
    for name in runtime.joint_names:
        position = model[runtime.joint_index(name)][:3, 3]
        print(f"  {name:<16} model position = {np.round(position, 3).tolist()}")

    inverse_bind = runtime.inverse_bind_matrices()
    print(f"  Inverse bind matrices: {tuple(inverse_bind.shape)}")


if __name__ == "__main__":
    main(sys.argv[1:])
