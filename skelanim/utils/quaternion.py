"""
Quaternion operations for decoded bone rotations.

Quaternions are represented as (w, x, y, z) where w is the scalar part
and (x, y, z) is the vector part. This follows the convention:
    q = w + xi + yj + zk

All operations support batched inputs with shape (..., 4).
"""

from typing import Tuple
import torch
import torch.nn.functional as F

from ..core.constants import DEFAULT_EPS_NORM


def normalize_quaternion(q: torch.Tensor, eps: float = DEFAULT_EPS_NORM) -> torch.Tensor:
    """
    Normalize quaternion to unit length.

    Args:
        q: Quaternion tensor of shape (..., 4) as [w, x, y, z]
        eps: Small constant for numerical stability

    Returns:
        Normalized quaternion of shape (..., 4)
    """
    return F.normalize(q, p=2, dim=-1, eps=eps)


def standardize_quaternion(q: torch.Tensor) -> torch.Tensor:
    """
    Flip quaternions with negative w.

    q and -q represent the same rotation; this picks the w >= 0 half.

    Args:
        q: Quaternion tensor of shape (..., 4) as [w, x, y, z]

    Returns:
        Quaternion of shape (..., 4) with w >= 0
    """
    return torch.where(q[..., :1] < 0, -q, q)


def quaternion_from_smallest_three(
    v: torch.Tensor,
    eps: float = DEFAULT_EPS_NORM
) -> torch.Tensor:
    """
    Rebuild a unit quaternion from its stored vector part.

    The scalar part is implied by the unit-length constraint:
        w = sqrt(max(0, 1 - |v|^2))

    Vectors longer than one (quantization overshoot) get w = 0 and are
    renormalized.

    Args:
        v: Stored components of shape (..., 3) as [x, y, z]
        eps: Small constant for numerical stability

    Returns:
        Unit quaternion of shape (..., 4) as [w, x, y, z] with w >= 0
    """
    w = torch.sqrt(torch.clamp(1.0 - (v * v).sum(dim=-1, keepdim=True), min=0.0))
    return normalize_quaternion(torch.cat([w, v], dim=-1), eps=eps)


def quaternion_to_matrix(q: torch.Tensor) -> torch.Tensor:
    """
    Convert unit quaternion to 3x3 rotation matrix.

    Args:
        q: Unit quaternion of shape (..., 4) as [w, x, y, z]

    Returns:
        Rotation matrix of shape (..., 3, 3)
    """
    # Ensure unit quaternion
    q = normalize_quaternion(q)
    w, x, y, z = q.unbind(dim=-1)

    # Row 1
    r00 = 1 - 2 * (y * y + z * z)
    r01 = 2 * (x * y - z * w)
    r02 = 2 * (x * z + y * w)

    # Row 2
    r10 = 2 * (x * y + z * w)
    r11 = 1 - 2 * (x * x + z * z)
    r12 = 2 * (y * z - x * w)

    # Row 3
    r20 = 2 * (x * z - y * w)
    r21 = 2 * (y * z + x * w)
    r22 = 1 - 2 * (x * x + y * y)

    return torch.stack([
        torch.stack([r00, r01, r02], dim=-1),
        torch.stack([r10, r11, r12], dim=-1),
        torch.stack([r20, r21, r22], dim=-1),
    ], dim=-2)


def quaternion_to_axis_angle(q: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Convert quaternion to axis-angle representation.

    Args:
        q: Unit quaternion of shape (..., 4) as [w, x, y, z]

    Returns:
        axis: Rotation axis of shape (..., 3)
        angle: Rotation angle in radians of shape (...)
    """
    q = normalize_quaternion(q)
    w = q[..., 0]
    xyz = q[..., 1:]

    sin_half_angle = torch.norm(xyz, dim=-1)
    angle = 2 * torch.atan2(sin_half_angle, w)

    # Zero rotation gets a zero axis
    axis = F.normalize(xyz, p=2, dim=-1, eps=DEFAULT_EPS_NORM)

    return axis, angle
