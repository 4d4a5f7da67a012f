"""
Centralized constants for skelanim.

This module defines the binary layout of the ``*.anim`` container (magic
values, fixed offsets, record sizes) together with the default values used
when a channel carries no data of its own.

Usage:
    from skelanim.core.constants import ANIM_MAGIC, V1_DATA_START

    if cursor.u32(0) != ANIM_MAGIC:
        ...
"""

# =============================================================================
# Magic Values and Sentinels
# =============================================================================

# Outer container magic (bytes B0 6A B0 6A on disk)
ANIM_MAGIC: int = 0x6AB06AB0

# Magic of the compressed animation-control sub-block
V1_INNER_MAGIC: int = 0xAC11AC11

# Version sentinel at OFFSET_VERSION marking the uncompressed variant
V0_SENTINEL: int = 0xFFFFFFFF

# Terminator after the frame-boundary list and before the section offsets
SECTION_SENTINEL: int = 0xFFFFFFFF


# =============================================================================
# Outer Header (0x00 - 0x5F)
# =============================================================================

OFFSET_MAGIC: int = 0x00
OFFSET_FLAGS: int = 0x04
OFFSET_FPS: int = 0x08
OFFSET_FRAME_COUNT: int = 0x0C
OFFSET_BONE_FIELD: int = 0x10
OFFSET_VERSION: int = 0x48
OFFSET_NAME: int = 0x50

OUTER_HEADER_SIZE: int = 0x60

# Longest animation name read from the name offset
MAX_NAME_LENGTH: int = 128


# =============================================================================
# Animation-Control Sub-Block (V1, starts at 0x60)
# =============================================================================

CONTROL_BLOCK_START: int = 0x60

# Offsets relative to CONTROL_BLOCK_START
CTRL_DATA_SIZE: int = 0x00
CTRL_HASH: int = 0x04
CTRL_MAGIC: int = 0x08
CTRL_VERSION: int = 0x0C
CTRL_BONE_COUNT: int = 0x10
CTRL_LAST_FRAME: int = 0x14
CTRL_FPS: int = 0x18
CTRL_SEGMENT_COUNT: int = 0x20
CTRL_DECLARED_ANIMATED: int = 0x24   # total, then rotation/translation/scale
CTRL_CONSTANT_COUNTS: int = 0x34     # constA, constB, constC
CTRL_SENTINEL: int = 0x40
CTRL_SECTION_OFFSETS: int = 0x44

NUM_SECTION_OFFSETS: int = 4

# Section offsets and segment data offsets are measured from here (the
# position right after the section offsets)
V1_DATA_START: int = CONTROL_BLOCK_START + CTRL_SECTION_OFFSETS + 4 * NUM_SECTION_OFFSETS

# Minimum buffer length for a V1 header
V1_HEADER_SIZE: int = V1_DATA_START

# The declared data size counts from CONTROL_BLOCK_START, so it covers the
# control block itself and is never smaller than this
MIN_DATA_SIZE: int = V1_DATA_START - CONTROL_BLOCK_START

# Upper bounds on header counts, checked before per-frame storage is allocated
MAX_BONE_COUNT: int = 10000
MAX_FRAME_COUNT: int = 1 << 20
MAX_POSE_SAMPLES: int = 1 << 25         # frames x bones


# =============================================================================
# Record Sizes
# =============================================================================

SEGMENT_DESCRIPTOR_SIZE: int = 16       # three running totals + data offset
BITFIELD_WORD_SIZE: int = 4
CODES_PER_WORD: int = 16                # sixteen 2-bit codes per u32
CONSTANT_RECORD_SIZE: int = 12          # 3 x float32
ANIMATED_HEADER_SIZE: int = 24          # base (3 x float32) + range (3 x float32)
INITIAL_VALUE_SIZE: int = 3             # one quantized byte per component

# Classification code marking a per-frame (quantized) channel
CODE_ANIMATED: int = 2

# Widest field the bitstream reader can return
MAX_BIT_WIDTH: int = 32

# Bone count lives in the low half of the outer bone field for V1 files
BONE_FIELD_MASK: int = 0xFFFF


# =============================================================================
# Channel Fill Values
# =============================================================================

# Values used for channels that carry neither constants nor samples.
# A zero rotation vector reconstructs to the identity quaternion.
FILL_ROTATION = (0.0, 0.0, 0.0)
FILL_TRANSLATION = (0.0, 0.0, 0.0)
FILL_SCALE = (1.0, 1.0, 1.0)


# =============================================================================
# Numeric Constants
# =============================================================================

# Small epsilon for normalization operations
DEFAULT_EPS_NORM: float = 1e-12

# Translation factor applied by the reference viewer (stored values are 1/10)
VIEWER_TRANSLATION_SCALE: float = 10.0
