"""
Interpretation of classification codes.

The bitfield stores one 2-bit code per (group, bone) channel. Code 2 always
means "animated" (per-frame quantized samples). What the remaining codes
mean has not been pinned down, so the mapping is a swappable policy:

- ``NonAnimatedAsConstant`` (default): every non-animated channel reads
  its value from the constant table of its group.
- ``ExplicitCodes``: code 1 is constant, codes 0 and 3 are unused and
  fall back to the fill values.

Policies also decide how scale constants are indexed when the scale
constant count equals the bone count (one entry per bone, including the
animated ones) versus the sequential default.
"""

from typing import Dict, Type

from ..core.constants import CODE_ANIMATED
from ..core.types import ChannelClass, TransformGroup


class ChannelClassPolicy:
    """Base policy: maps a raw code to a ChannelClass."""

    name: str = 'base'

    def __init__(self, scale_constants_by_bone: bool = True):
        """
        Args:
            scale_constants_by_bone: Index scale constants by bone when the
                scale constant count equals the bone count
        """
        self.scale_constants_by_bone = scale_constants_by_bone

    def resolve(self, code: int, group: TransformGroup) -> ChannelClass:
        if code == CODE_ANIMATED:
            return ChannelClass.ANIMATED
        return self.resolve_static(code, group)

    def resolve_static(self, code: int, group: TransformGroup) -> ChannelClass:
        raise NotImplementedError

    def index_constants_by_bone(
        self,
        group: TransformGroup,
        constant_count: int,
        bone_count: int
    ) -> bool:
        """Whether constants of ``group`` are addressed by bone index."""
        return (
            self.scale_constants_by_bone
            and group == TransformGroup.SCALE
            and constant_count == bone_count
            and bone_count > 0
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(scale_constants_by_bone={self.scale_constants_by_bone})"


class NonAnimatedAsConstant(ChannelClassPolicy):
    """Every code other than 2 reads from the constant table."""

    name = 'non_animated_as_constant'

    def resolve_static(self, code: int, group: TransformGroup) -> ChannelClass:
        return ChannelClass.CONSTANT


class ExplicitCodes(ChannelClassPolicy):
    """Code 1 is constant; 0 and 3 carry no data."""

    name = 'explicit_codes'

    def resolve_static(self, code: int, group: TransformGroup) -> ChannelClass:
        if code == 1:
            return ChannelClass.CONSTANT
        return ChannelClass.UNUSED


CHANNEL_POLICIES: Dict[str, Type[ChannelClassPolicy]] = {
    NonAnimatedAsConstant.name: NonAnimatedAsConstant,
    ExplicitCodes.name: ExplicitCodes,
}


def get_channel_policy(
    name: str = NonAnimatedAsConstant.name,
    scale_constants_by_bone: bool = True
) -> ChannelClassPolicy:
    """
    Create a classification policy by name.

    Args:
        name: One of ``CHANNEL_POLICIES``
        scale_constants_by_bone: See ChannelClassPolicy

    Returns:
        Policy instance
    """
    if name not in CHANNEL_POLICIES:
        raise ValueError(
            f"Unknown channel policy: {name}. "
            f"Supported: {', '.join(sorted(CHANNEL_POLICIES))}"
        )
    return CHANNEL_POLICIES[name](scale_constants_by_bone=scale_constants_by_bone)
