"""
Runtime skeleton.

Flattens a raw joint forest into joint-major tensors ready for animation
sampling and skinning:

    joint_names:   List[str]           depth-first order
    parents:       LongTensor[J]       parent index, -1 for roots
    translations:  Tensor[J, 3]        local bind translations
    rotations:     Tensor[J, 4]        local bind quaternions [w, x, y, z]
    scales:        Tensor[J, 3]        local bind scales

Joints are stored depth-first, so a parent index is always smaller than
the index of its children and model-space matrices can be accumulated in
a single forward pass.
"""

from typing import List, Optional

import torch
import logging

from ..core.constants import NO_PARENT
from ..core.types import JointTensor
from ..utils.quaternion import normalize_quaternion, quaternion_to_matrix
from .raw_skeleton import Skeleton

logger = logging.getLogger(__name__)


class RuntimeSkeleton:
    """
    Immutable, flattened skeleton.

    Args:
        joint_names: Joint names, depth-first
        parents: Parent index per joint
        translations: (J, 3) local translations
        rotations: (J, 4) local quaternions [w, x, y, z]
        scales: (J, 3) local scales
    """

    def __init__(
        self,
        joint_names: List[str],
        parents: torch.Tensor,
        translations: torch.Tensor,
        rotations: torch.Tensor,
        scales: torch.Tensor
    ):
        num_joints = len(joint_names)
        for name, tensor, width in (
            ("parents", parents, None),
            ("translations", translations, 3),
            ("rotations", rotations, 4),
            ("scales", scales, 3),
        ):
            expected = (num_joints,) if width is None else (num_joints, width)
            if tuple(tensor.shape) != expected:
                raise ValueError(f"{name} must have shape {expected}, got {tuple(tensor.shape)}")

        for i, parent in enumerate(parents.tolist()):
            if parent != NO_PARENT and not 0 <= parent < i:
                raise ValueError(f"Joint {i} ('{joint_names[i]}') has invalid parent index {parent}")

        self.joint_names = list(joint_names)
        self.parents = parents.long()
        self.translations = translations
        self.rotations = normalize_quaternion(rotations)
        self.scales = scales

    @classmethod
    def from_skeleton(
        cls,
        skeleton: Skeleton,
        dtype: torch.dtype = torch.float32,
        device: Optional[torch.device] = None
    ) -> "RuntimeSkeleton":
        """
        Flatten a raw skeleton, depth-first.

        Args:
            skeleton: Extracted joint forest
            dtype: Floating point dtype of the transform tensors
            device: Torch device

        Returns:
            RuntimeSkeleton
        """
        names = []
        parents = []
        translations = []
        rotations = []
        scales = []
        index_of = {}

        for joint, parent in skeleton.iter_depth_first():
            index_of[id(joint)] = len(names)
            names.append(joint.name)
            parents.append(NO_PARENT if parent is None else index_of[id(parent)])
            translations.append(joint.transform.translation)
            rotations.append(joint.transform.rotation)
            scales.append(joint.transform.scale)

        def stack(rows, width):
            if not rows:
                return torch.zeros(0, width, dtype=dtype, device=device)
            return torch.tensor([list(r) for r in rows], dtype=dtype, device=device)

        runtime = cls(
            joint_names=names,
            parents=torch.tensor(parents, dtype=torch.long, device=device),
            translations=stack(translations, 3),
            rotations=stack(rotations, 4),
            scales=stack(scales, 3),
        )
        logger.debug(f"Flattened skeleton: {runtime.num_joints} joints")
        return runtime

    @property
    def num_joints(self) -> int:
        return len(self.joint_names)

    @property
    def root_indices(self) -> List[int]:
        return [i for i, p in enumerate(self.parents.tolist()) if p == NO_PARENT]

    def joint_index(self, name: str) -> int:
        """Index of the first joint named ``name``."""
        try:
            return self.joint_names.index(name)
        except ValueError:
            raise KeyError(f"No joint named '{name}'") from None

    def local_matrices(self) -> JointTensor:
        """
        Local bind matrices T * R * S.

        Returns:
            (J, 4, 4) matrices
        """
        num_joints = self.num_joints
        matrices = torch.zeros(num_joints, 4, 4, dtype=self.translations.dtype, device=self.translations.device)
        if num_joints == 0:
            return matrices
        matrices[:, :3, :3] = quaternion_to_matrix(self.rotations) * self.scales.unsqueeze(-2)
        matrices[:, :3, 3] = self.translations
        matrices[:, 3, 3] = 1.0
        return matrices

    def model_matrices(self) -> JointTensor:
        """
        Model-space bind matrices: M_model[j] = M_model[parent] @ M_local[j].

        Returns:
            (J, 4, 4) matrices
        """
        local = self.local_matrices()
        model = []
        for j, parent in enumerate(self.parents.tolist()):
            if parent == NO_PARENT:
                model.append(local[j])
            else:
                model.append(model[parent] @ local[j])
        if not model:
            return local
        return torch.stack(model, dim=0)

    def inverse_bind_matrices(self) -> JointTensor:
        """
        Inverse model-space bind matrices, as used by skinning.

        Returns:
            (J, 4, 4) matrices
        """
        return torch.linalg.inv(self.model_matrices())

    def to(self, device: torch.device) -> "RuntimeSkeleton":
        return RuntimeSkeleton(
            self.joint_names,
            self.parents.to(device),
            self.translations.to(device),
            self.rotations.to(device),
            self.scales.to(device),
        )

    def __len__(self) -> int:
        return self.num_joints

    def __repr__(self) -> str:
        return f"<RuntimeSkeleton {self.num_joints} joints, {len(self.root_indices)} roots>"
