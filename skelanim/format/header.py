"""
Fixed-offset header parsing.

``parse_header`` validates the outer magic, decides once whether the buffer
is the uncompressed (V0) or compressed (V1) variant and returns the matching
tagged header record. Everything downstream dispatches on that record type.

Outer header layout (little-endian):
    0x00  u32  Magic (0x6AB06AB0)
    0x04  u32  Flags
    0x08  f32  FPS
    0x0C  u32  Frame count
    0x10  u32  Bone field (V1: low 16 bits)
    0x48  u32  Version sentinel (0xFFFFFFFF for V0)
    0x50  u32  Name string offset

V1 animation-control sub-block (relative to 0x60):
    +0x00 data size (counted from 0x60), +0x08 magic (0xAC11AC11),
    +0x10 bone count, +0x14 last frame, +0x18 fps, +0x20 segment count,
    +0x24 declared animated counts (total, R, T, S),
    +0x34 constant counts (A, B, C), +0x40 sentinel,
    +0x44 four section offsets relative to the position after themselves
"""

import logging
from typing import List

from ..core.constants import (
    ANIM_MAGIC,
    V1_INNER_MAGIC,
    V0_SENTINEL,
    SECTION_SENTINEL,
    OFFSET_MAGIC,
    OFFSET_FLAGS,
    OFFSET_FPS,
    OFFSET_FRAME_COUNT,
    OFFSET_BONE_FIELD,
    OFFSET_VERSION,
    OFFSET_NAME,
    OUTER_HEADER_SIZE,
    MAX_NAME_LENGTH,
    CONTROL_BLOCK_START,
    CTRL_DATA_SIZE,
    CTRL_HASH,
    CTRL_MAGIC,
    CTRL_VERSION,
    CTRL_BONE_COUNT,
    CTRL_LAST_FRAME,
    CTRL_FPS,
    CTRL_SEGMENT_COUNT,
    CTRL_DECLARED_ANIMATED,
    CTRL_CONSTANT_COUNTS,
    CTRL_SENTINEL,
    CTRL_SECTION_OFFSETS,
    NUM_SECTION_OFFSETS,
    V1_HEADER_SIZE,
    MIN_DATA_SIZE,
    MAX_BONE_COUNT,
    MAX_FRAME_COUNT,
    MAX_POSE_SAMPLES,
    BONE_FIELD_MASK,
)
from ..core.errors import (
    BadMagicError,
    TruncatedError,
    OutOfBoundsError,
    DecodeWarning,
    ErrorKind,
)
from ..core.types import (
    OuterHeader,
    AnimationHeader,
    AnimationHeaderV0,
    AnimationHeaderV1,
)
from .cursor import ByteCursor, Buffer

logger = logging.getLogger(__name__)


def read_name_at(data: Buffer, name_offset: int) -> str:
    """
    Read the NUL-terminated animation name stored at ``name_offset``.

    Returns an empty string when the offset is unset or outside the buffer.
    """
    if name_offset <= 0 or name_offset >= len(data):
        return ''
    raw = bytes(data[name_offset:name_offset + MAX_NAME_LENGTH])
    end = raw.find(b'\x00')
    if end >= 0:
        raw = raw[:end]
    return raw.decode('ascii', errors='replace')


def _parse_outer(cursor: ByteCursor) -> OuterHeader:
    magic = cursor.peek_u32(OFFSET_MAGIC)
    if magic != ANIM_MAGIC:
        raise BadMagicError(
            f"expected magic 0x{ANIM_MAGIC:08X}, found 0x{magic:08X}", offset=OFFSET_MAGIC
        )

    flags = cursor.seek(OFFSET_FLAGS).u32()
    fps = cursor.seek(OFFSET_FPS).f32()
    frame_count = cursor.seek(OFFSET_FRAME_COUNT).u32()
    bone_field = cursor.seek(OFFSET_BONE_FIELD).u32()
    version = cursor.seek(OFFSET_VERSION).u32()
    name_offset = cursor.seek(OFFSET_NAME).u32()

    return OuterHeader(
        magic=magic,
        flags=flags,
        fps=fps,
        frame_count=frame_count,
        bone_field=bone_field,
        version=version,
        name_offset=name_offset,
        name=read_name_at(cursor.data, name_offset),
    )


def _check_counts(header: AnimationHeaderV1) -> None:
    """Reject bone and frame counts no real clip carries."""
    bones = header.bone_count
    frames = header.frame_count
    if bones == 0 or bones > MAX_BONE_COUNT:
        raise OutOfBoundsError(
            f"bone count {bones} outside 1..{MAX_BONE_COUNT}",
            offset=CONTROL_BLOCK_START + CTRL_BONE_COUNT
        )
    if frames == 0 or frames > MAX_FRAME_COUNT:
        raise OutOfBoundsError(
            f"frame count {frames} outside 1..{MAX_FRAME_COUNT}",
            offset=OFFSET_FRAME_COUNT
        )
    if frames * bones > MAX_POSE_SAMPLES:
        raise OutOfBoundsError(
            f"{frames} frames x {bones} bones exceeds {MAX_POSE_SAMPLES} pose samples",
            offset=OFFSET_FRAME_COUNT
        )


def parse_header(data: Buffer) -> AnimationHeader:
    """
    Parse the fixed header of an ``*.anim`` buffer.

    Args:
        data: Complete file contents

    Returns:
        AnimationHeaderV0 for uncompressed files, AnimationHeaderV1 otherwise

    Raises:
        BadMagicError: Outer or inner magic mismatch
        TruncatedError: Buffer shorter than the header or declared data region
        OutOfBoundsError: Section offsets decrease or leave the data region, or
            the bone/frame counts are implausible
    """
    size = len(data)
    if size < OUTER_HEADER_SIZE:
        raise TruncatedError(
            f"buffer holds {size} bytes, outer header needs {OUTER_HEADER_SIZE}",
            offset=size
        )

    cursor = ByteCursor(data, region='header', error_cls=TruncatedError)
    outer = _parse_outer(cursor)

    if outer.version == V0_SENTINEL:
        logger.debug("Detected uncompressed (V0) animation")
        return AnimationHeaderV0(outer=outer)

    if size < V1_HEADER_SIZE:
        raise TruncatedError(
            f"buffer holds {size} bytes, compressed header needs {V1_HEADER_SIZE}",
            offset=size
        )

    ac = CONTROL_BLOCK_START
    inner_magic = cursor.peek_u32(ac + CTRL_MAGIC)
    if inner_magic != V1_INNER_MAGIC:
        raise BadMagicError(
            f"expected control-block magic 0x{V1_INNER_MAGIC:08X}, "
            f"found 0x{inner_magic:08X}",
            offset=ac + CTRL_MAGIC
        )

    data_size = cursor.peek_u32(ac + CTRL_DATA_SIZE)
    declared_animated = tuple(cursor.seek(ac + CTRL_DECLARED_ANIMATED).u32_array(4))
    constant_counts = tuple(cursor.seek(ac + CTRL_CONSTANT_COUNTS).u32_array(3))
    section_offsets = tuple(
        cursor.seek(ac + CTRL_SECTION_OFFSETS).u32_array(NUM_SECTION_OFFSETS)
    )

    header = AnimationHeaderV1(
        outer=outer,
        data_size=data_size,
        hash=cursor.peek_u32(ac + CTRL_HASH),
        inner_version=cursor.peek_u32(ac + CTRL_VERSION),
        bone_count=cursor.peek_u32(ac + CTRL_BONE_COUNT),
        frame_count=outer.frame_count,
        last_frame=cursor.peek_u32(ac + CTRL_LAST_FRAME),
        fps=cursor.seek(ac + CTRL_FPS).f32(),
        segment_count=cursor.peek_u32(ac + CTRL_SEGMENT_COUNT),
        declared_animated=declared_animated,
        constant_counts=constant_counts,
        section_offsets=section_offsets,
        control_sentinel=cursor.peek_u32(ac + CTRL_SENTINEL),
    )

    if data_size < MIN_DATA_SIZE:
        raise OutOfBoundsError(
            f"data size {data_size} is smaller than the control block ({MIN_DATA_SIZE} bytes)",
            offset=ac + CTRL_DATA_SIZE
        )
    if header.data_end > size:
        raise TruncatedError(
            f"data region declares {data_size} bytes from 0x{CONTROL_BLOCK_START:X} "
            f"but buffer holds {size} bytes",
            offset=size
        )

    previous = 0
    for i, offset in enumerate(section_offsets):
        field = ac + CTRL_SECTION_OFFSETS + 4 * i
        if offset < previous:
            raise OutOfBoundsError(
                f"section offset {i} ({offset}) precedes section offset "
                f"{i - 1} ({previous})",
                offset=field
            )
        if offset > header.region_size:
            raise OutOfBoundsError(
                f"section offset {i} ({offset}) lies past the data region "
                f"({header.region_size} bytes)",
                offset=field
            )
        previous = offset

    _check_counts(header)

    logger.debug(
        f"Header: bones={header.bone_count} frames={header.frame_count} "
        f"segments={header.segment_count} sections={section_offsets} size={data_size}"
    )
    return header


def validate_header(header: AnimationHeaderV1) -> List[DecodeWarning]:
    """
    Cross-check redundant header fields.

    None of these disagreements stop decoding; the primary fields
    (outer frame count, control-block bone count) stay authoritative.
    """
    warnings: List[DecodeWarning] = []
    ac = CONTROL_BLOCK_START

    if header.frame_count > 0 and header.last_frame != header.frame_count - 1:
        warnings.append(DecodeWarning(
            ErrorKind.SECTION_SIZE_MISMATCH,
            f"last frame {header.last_frame} does not match frame count "
            f"{header.frame_count}",
            ac + CTRL_LAST_FRAME,
        ))

    outer_bones = header.outer.bone_field & BONE_FIELD_MASK
    if outer_bones != header.bone_count:
        warnings.append(DecodeWarning(
            ErrorKind.SECTION_SIZE_MISMATCH,
            f"outer bone count {outer_bones} does not match control block "
            f"bone count {header.bone_count}",
            OFFSET_BONE_FIELD,
        ))

    if header.control_sentinel != SECTION_SENTINEL:
        warnings.append(DecodeWarning(
            ErrorKind.SECTION_SIZE_MISMATCH,
            f"control-block sentinel is 0x{header.control_sentinel:08X}",
            ac + CTRL_SENTINEL,
        ))

    return warnings


def is_compressed(data: Buffer) -> bool:
    """Return True when ``data`` holds a V1 (compressed) animation."""
    return isinstance(parse_header(data), AnimationHeaderV1)

