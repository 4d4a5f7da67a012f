"""
Core module for skelanim.

Contains:
- Constants: Binary layout of the ``*.anim`` container and fill values
- Types: Immutable records produced while decoding
- Errors: Exception hierarchy and non-fatal warning records
"""

from .constants import (
    # Magic values
    ANIM_MAGIC,
    V1_INNER_MAGIC,
    V0_SENTINEL,
    SECTION_SENTINEL,
    # Layout
    OUTER_HEADER_SIZE,
    CONTROL_BLOCK_START,
    V1_DATA_START,
    # Fill values
    FILL_ROTATION,
    FILL_TRANSLATION,
    FILL_SCALE,
)
from .types import (
    TransformGroup,
    ChannelClass,
    OuterHeader,
    AnimationHeader,
    AnimationHeaderV0,
    AnimationHeaderV1,
    Segment,
    AnimatedChannelHeader,
    BoneTransform,
    ChannelRef,
    RestPose,
)
from .errors import (
    ErrorKind,
    AnimFormatError,
    BadMagicError,
    UnsupportedVersionError,
    TruncatedError,
    BadBitfieldError,
    InvalidSegmentError,
    OutOfBoundsError,
    SectionSizeMismatchError,
    DecodeWarning,
)

__all__ = [
    # Constants
    "ANIM_MAGIC",
    "V1_INNER_MAGIC",
    "V0_SENTINEL",
    "SECTION_SENTINEL",
    "OUTER_HEADER_SIZE",
    "CONTROL_BLOCK_START",
    "V1_DATA_START",
    "FILL_ROTATION",
    "FILL_TRANSLATION",
    "FILL_SCALE",
    # Types
    "TransformGroup",
    "ChannelClass",
    "OuterHeader",
    "AnimationHeader",
    "AnimationHeaderV0",
    "AnimationHeaderV1",
    "Segment",
    "AnimatedChannelHeader",
    "BoneTransform",
    "ChannelRef",
    "RestPose",
    # Errors
    "ErrorKind",
    "AnimFormatError",
    "BadMagicError",
    "UnsupportedVersionError",
    "TruncatedError",
    "BadBitfieldError",
    "InvalidSegmentError",
    "OutOfBoundsError",
    "SectionSizeMismatchError",
    "DecodeWarning",
]
