"""
Rotation reconstruction.

Rotations are decoded as the three stored components only. Turning them
into quaternions needs two decisions the format does not record: which
component was dropped and with what sign. Reconstructors make that choice
explicit and swappable.
"""

from typing import Dict, Type

import torch

from ..utils.quaternion import (
    quaternion_from_smallest_three,
    standardize_quaternion,
)


class RotationReconstructor:
    """Maps stored rotation components (..., 3) to quaternions (..., 4)."""

    name: str = 'base'

    def __call__(self, components: torch.Tensor) -> torch.Tensor:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SmallestThreeReconstructor(RotationReconstructor):
    """
    Treat the components as the vector part (x, y, z) of a unit quaternion.

    w = sqrt(1 - |v|^2), taken positive; the result is normalized.
    """

    name = 'smallest_three'

    def __call__(self, components: torch.Tensor) -> torch.Tensor:
        return standardize_quaternion(quaternion_from_smallest_three(components))


class RawRotation(RotationReconstructor):
    """Pass-through: [0, x, y, z], no normalization."""

    name = 'raw'

    def __call__(self, components: torch.Tensor) -> torch.Tensor:
        w = torch.zeros_like(components[..., :1])
        return torch.cat([w, components], dim=-1)


ROTATION_RECONSTRUCTORS: Dict[str, Type[RotationReconstructor]] = {
    SmallestThreeReconstructor.name: SmallestThreeReconstructor,
    RawRotation.name: RawRotation,
}


def get_rotation_reconstructor(name: str = SmallestThreeReconstructor.name) -> RotationReconstructor:
    """
    Create a rotation reconstructor by name.

    Args:
        name: One of ``ROTATION_RECONSTRUCTORS``

    Returns:
        Reconstructor instance
    """
    if name not in ROTATION_RECONSTRUCTORS:
        raise ValueError(
            f"Unknown rotation reconstruction: {name}. "
            f"Supported: {', '.join(sorted(ROTATION_RECONSTRUCTORS))}"
        )
    return ROTATION_RECONSTRUCTORS[name]()
