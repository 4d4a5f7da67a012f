"""
Interpretation policies layered on top of the decoder.

- Channel policies: meaning of classification codes other than "animated"
- Rotation reconstructors: stored 3 components to quaternions

The pose post-processor lives in :mod:`skelanim.policy.pose`.
"""

from .channels import (
    ChannelClassPolicy,
    NonAnimatedAsConstant,
    ExplicitCodes,
    CHANNEL_POLICIES,
    get_channel_policy,
)
from .rotation import (
    RotationReconstructor,
    SmallestThreeReconstructor,
    RawRotation,
    ROTATION_RECONSTRUCTORS,
    get_rotation_reconstructor,
)

__all__ = [
    # Channel policies
    "ChannelClassPolicy",
    "NonAnimatedAsConstant",
    "ExplicitCodes",
    "CHANNEL_POLICIES",
    "get_channel_policy",
    # Rotation
    "RotationReconstructor",
    "SmallestThreeReconstructor",
    "RawRotation",
    "ROTATION_RECONSTRUCTORS",
    "get_rotation_reconstructor",
]
