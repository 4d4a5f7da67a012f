"""
Type definitions and shape conventions for skelanim.

This module defines the immutable records produced while decoding an
``*.anim`` buffer. Headers, segments and channel headers are plain
``NamedTuple`` records; per-frame data is stored in flat numpy arrays.

Shape Conventions:
==================

Pose arrays: (F, B, 3)
----------------------
All decoded per-frame arrays use the layout
    - F: Frame index
    - B: Bone index
    - 3: Component (x, y, z)

Rotations are kept as the three stored components. Reconstructing the
implied fourth component is left to :mod:`skelanim.policy.rotation`, which
produces (F, B, 4) quaternions as [w, x, y, z].

Channel order:
    Animated channels are numbered rotation-animated first, then
    translation-animated, then scale-animated, each run in bone order.
    Animated headers, bit widths and bitstream fields all follow that order.
"""

from enum import Enum, IntEnum
from typing import Dict, NamedTuple, Optional, Tuple, Union
import numpy as np
import torch

from .constants import CONTROL_BLOCK_START, DEFAULT_EPS_NORM, V1_DATA_START


# =============================================================================
# Basic Type Aliases
# =============================================================================

Vec3 = Tuple[float, float, float]

# Output dictionary of tensors (same convention as model outputs elsewhere)
TensorDict = Dict[str, torch.Tensor]


# =============================================================================
# Enumerations
# =============================================================================

class TransformGroup(IntEnum):
    """Transform component group of a bone channel."""
    ROTATION = 0
    TRANSLATION = 1
    SCALE = 2


class ChannelClass(Enum):
    """How a (bone, group) channel is stored."""
    UNUSED = 'unused'
    CONSTANT = 'constant'
    ANIMATED = 'animated'


# =============================================================================
# Headers (tagged variant chosen once at parse time)
# =============================================================================

class OuterHeader(NamedTuple):
    """Fixed outer header shared by both format variants."""
    magic: int
    flags: int
    fps: float
    frame_count: int
    bone_field: int
    version: int
    name_offset: int
    name: str


class AnimationHeaderV0(NamedTuple):
    """Uncompressed variant. Detected and flagged, never decoded."""
    outer: OuterHeader

    @property
    def is_compressed(self) -> bool:
        return False

    @property
    def frame_count(self) -> int:
        return self.outer.frame_count

    @property
    def bone_count(self) -> int:
        return self.outer.bone_field


class AnimationHeaderV1(NamedTuple):
    """Compressed variant header and animation-control sub-block."""
    outer: OuterHeader
    data_size: int
    hash: int
    inner_version: int
    bone_count: int
    frame_count: int
    last_frame: int
    fps: float
    segment_count: int
    declared_animated: Tuple[int, int, int, int]  # total, rotation, translation, scale
    constant_counts: Tuple[int, int, int]         # constA, constB, constC
    section_offsets: Tuple[int, int, int, int]
    control_sentinel: int

    @property
    def is_compressed(self) -> bool:
        return True

    @property
    def data_start(self) -> int:
        """Absolute offset every relative offset is measured from."""
        return V1_DATA_START

    @property
    def data_end(self) -> int:
        """Absolute end of the data (data_size counts from 0x60)."""
        return CONTROL_BLOCK_START + self.data_size

    @property
    def region_size(self) -> int:
        """Bytes between data_start and data_end."""
        return self.data_end - V1_DATA_START

    def absolute(self, relative: int) -> int:
        """Convert a data-region offset to an absolute buffer offset."""
        return V1_DATA_START + relative

    @property
    def channel_count(self) -> int:
        """Number of (bone, group) channels."""
        return self.bone_count * 3

    @property
    def bitfield_span(self) -> Tuple[int, int]:
        return self.section_offsets[1], self.section_offsets[2]

    @property
    def constants_span(self) -> Tuple[int, int]:
        return self.section_offsets[2], self.section_offsets[3]

    @property
    def constant_total(self) -> int:
        return sum(self.constant_counts)


AnimationHeader = Union[AnimationHeaderV0, AnimationHeaderV1]


# =============================================================================
# Segments and Channels
# =============================================================================

class Segment(NamedTuple):
    """
    A contiguous frame range with its own body.

    Offsets are relative to the data region; ``frame_end`` is exclusive.
    """
    index: int
    frame_start: int
    frame_end: int
    totals: Tuple[int, int, int]
    data_offset: int
    body_start: int
    body_end: int

    @property
    def frame_count(self) -> int:
        return self.frame_end - self.frame_start

    @property
    def body_size(self) -> int:
        return self.body_end - self.body_start


class AnimatedChannelHeader(NamedTuple):
    """Dequantization domain of one animated channel."""
    base: Vec3
    range: Vec3

    def dequantize(self, quantized: Tuple[int, int, int], bit_width: int) -> Vec3:
        """
        Map quantized codes back into [base, base + range].

        Args:
            quantized: (qx, qy, qz) codes
            bit_width: Bits per component; 0 yields ``base``

        Returns:
            Dequantized (x, y, z)
        """
        if bit_width == 0:
            return tuple(self.base)
        max_q = float((1 << bit_width) - 1)
        return tuple(
            self.base[c] + (quantized[c] / max_q) * self.range[c]
            for c in range(3)
        )


class BoneTransform(NamedTuple):
    """Decoded transform of one bone at one frame."""
    rotation: Vec3        # three stored components, see policy.rotation
    translation: Vec3
    scale: Vec3


class ChannelRef(NamedTuple):
    """Where a (group, bone) channel takes its values from."""
    group: TransformGroup
    bone: int
    channel_class: ChannelClass
    index: Optional[int]  # constant or animated index; None for fill values


# =============================================================================
# Skeleton Rest Pose
# =============================================================================

class RestPose(NamedTuple):
    """
    Per-bone rest transforms from the skeleton a clip is played on.

    Channels that store no values (unused, or constant without a table
    entry) take the rest transform of their bone instead of the fill value.
    Scale always uses the fill value.

    Attributes:
        rotations: (B, 4) unit quaternions as [w, x, y, z]
        translations: (B, 3) positions
    """
    rotations: np.ndarray
    translations: np.ndarray

    @classmethod
    def from_arrays(cls, rotations, translations, xyzw: bool = False) -> 'RestPose':
        """
        Build a rest pose from array-likes.

        Args:
            rotations: (B, 4) quaternions
            translations: (B, 3) positions
            xyzw: Quaternions are stored as [x, y, z, w] (skeleton files do this)

        Raises:
            ValueError: Shapes do not match
        """
        rotations = np.asarray(rotations, dtype=np.float32).reshape(-1, 4)
        translations = np.asarray(translations, dtype=np.float32).reshape(-1, 3)
        if len(rotations) != len(translations):
            raise ValueError(
                f"rest pose has {len(rotations)} rotations but "
                f"{len(translations)} translations"
            )
        if xyzw:
            rotations = rotations[:, [3, 0, 1, 2]]
        return cls(rotations, translations)

    @property
    def bone_count(self) -> int:
        return len(self.rotations)

    def stored_rotations(self) -> np.ndarray:
        """Rotations as three stored components: the vector part with w >= 0."""
        norm = np.linalg.norm(self.rotations, axis=-1, keepdims=True)
        q = self.rotations / np.maximum(norm, DEFAULT_EPS_NORM)
        q = np.where(q[:, :1] < 0, -q, q)
        return q[:, 1:].astype(np.float32)
