"""
Pose post-processing: decoded arrays to model-ready tensors.
"""

from typing import Optional, Union

import torch

from ..core.types import TensorDict
from ..decoding.pose import PoseSequence
from ..utils.config import DecoderConfig
from ..utils.quaternion import quaternion_to_matrix
from .rotation import RotationReconstructor, get_rotation_reconstructor


class PosePostProcessor:
    """
    Applies the interpretation choices left open by the decoder.

    Output keys:
        'quaternions': (F, B, 4) as [w, x, y, z]
        'translations': (F, B, 3) multiplied by ``translation_scale``
        'scales': (F, B, 3)
        'rotation_matrices': (F, B, 3, 3), only with ``with_matrices``
    """

    def __init__(
        self,
        rotation: Union[str, RotationReconstructor] = 'smallest_three',
        translation_scale: float = 1.0,
        with_matrices: bool = False
    ):
        """
        Args:
            rotation: Reconstructor or its registered name
            translation_scale: Factor applied to translations
            with_matrices: Also emit rotation matrices
        """
        if isinstance(rotation, str):
            rotation = get_rotation_reconstructor(rotation)
        self.rotation = rotation
        self.translation_scale = translation_scale
        self.with_matrices = with_matrices

    @classmethod
    def from_config(cls, config: DecoderConfig, **kwargs) -> 'PosePostProcessor':
        return cls(
            rotation=config.rotation_reconstruction,
            translation_scale=config.translation_scale,
            **kwargs
        )

    def __call__(
        self,
        pose: PoseSequence,
        device: Optional[torch.device] = None
    ) -> TensorDict:
        tensors = pose.to_tensors(device)
        outputs = {
            'quaternions': self.rotation(tensors['rotations']),
            'translations': tensors['translations'] * self.translation_scale,
            'scales': tensors['scales'],
        }
        if self.with_matrices:
            outputs['rotation_matrices'] = quaternion_to_matrix(outputs['quaternions'])
        return outputs

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(rotation={self.rotation!r}, "
            f"translation_scale={self.translation_scale})"
        )
