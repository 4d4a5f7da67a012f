"""
Animated channel headers.

Section 3 of the data region starts with one 24-byte record per animated
channel: ``base`` (3 x f32) followed by ``range`` (3 x f32). Records follow
the animated channel order (rotation, translation, scale runs).
"""

import logging
from typing import NamedTuple, Tuple

import numpy as np

from ..core.constants import ANIMATED_HEADER_SIZE, CONSTANT_RECORD_SIZE
from ..core.errors import DecodeWarning, ErrorKind
from ..core.types import AnimatedChannelHeader, AnimationHeaderV1
from .cursor import ByteCursor, Buffer

logger = logging.getLogger(__name__)


class AnimatedHeaders(NamedTuple):
    """Dequantization domains as (N, 3) float32 arrays."""
    bases: np.ndarray
    ranges: np.ndarray
    warnings: Tuple[DecodeWarning, ...] = ()

    def __len__(self) -> int:
        return len(self.bases)

    def __getitem__(self, index: int) -> AnimatedChannelHeader:
        return AnimatedChannelHeader(
            base=tuple(float(v) for v in self.bases[index]),
            range=tuple(float(v) for v in self.ranges[index]),
        )


def read_animated_headers(
    data: Buffer,
    header: AnimationHeaderV1,
    count: int
) -> AnimatedHeaders:
    """
    Read ``count`` animated channel headers at section offset 3.

    Args:
        data: Complete file contents
        header: Parsed compressed header
        count: Number of animated channels (from the classification)

    Returns:
        AnimatedHeaders

    Raises:
        OutOfBoundsError: Records extend past the data region
    """
    start = header.section_offsets[3]
    computed = header.section_offsets[2] + header.constant_total * CONSTANT_RECORD_SIZE

    region = ByteCursor(data, header.data_start, header.data_end, 'data region')
    cursor = region.sub(
        header.absolute(start),
        header.absolute(start) + count * ANIMATED_HEADER_SIZE,
        'animated headers'
    )
    records = cursor.f32_array(count * 6).reshape(count, 6)
    bases = np.ascontiguousarray(records[:, :3])
    ranges = np.ascontiguousarray(records[:, 3:])
    bases.setflags(write=False)
    ranges.setflags(write=False)

    warnings = []
    if computed != start:
        warnings.append(DecodeWarning(
            ErrorKind.SECTION_SIZE_MISMATCH,
            f"animated headers start at {start}, constant tables end at {computed}",
            header.absolute(start),
        ))
    for warning in warnings:
        logger.warning(f"Animated headers: {warning}")

    return AnimatedHeaders(bases=bases, ranges=ranges, warnings=tuple(warnings))
