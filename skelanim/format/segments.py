"""
Segment table parsing.

Long animations are split into segments: contiguous frame ranges whose
sample data live in separate bodies. The table sits at the start of the
data region:

    segmentCount >= 2:  segmentCount u32 frame boundaries, u32 sentinel
    always:             segmentCount x 16-byte descriptors
                        [total_0, total_1, total_2, data_offset]

A single-segment file has no boundary list; its one segment spans every
frame. Segment ``i`` covers ``[boundary[i], boundary[i + 1])`` with the
last segment running to the frame count. Its body runs from its data
offset to the next segment's data offset (or to the end of the data
region). The first body starts right after the animated channel headers.
"""

import logging
from typing import List, NamedTuple, Tuple

from ..core.constants import (
    SECTION_SENTINEL,
    SEGMENT_DESCRIPTOR_SIZE,
    ANIMATED_HEADER_SIZE,
    CONTROL_BLOCK_START,
    CTRL_SEGMENT_COUNT,
)
from ..core.errors import (
    InvalidSegmentError,
    OutOfBoundsError,
    DecodeWarning,
    ErrorKind,
)
from ..core.types import AnimationHeaderV1, Segment
from .cursor import ByteCursor, Buffer

logger = logging.getLogger(__name__)


class SegmentTable(NamedTuple):
    """Parsed segment table."""
    segments: Tuple[Segment, ...]
    boundaries: Tuple[int, ...]
    warnings: Tuple[DecodeWarning, ...]

    def __len__(self) -> int:
        return len(self.segments)

    def __getitem__(self, index: int) -> Segment:
        return self.segments[index]

    def __iter__(self):
        return iter(self.segments)

    def segment_for_frame(self, frame: int) -> Segment:
        """Return the segment containing ``frame``."""
        for segment in self.segments:
            if segment.frame_start <= frame < segment.frame_end:
                return segment
        raise IndexError(f"frame {frame} is outside every segment")


def _read_boundaries(
    region: ByteCursor,
    header: AnimationHeaderV1
) -> Tuple[Tuple[int, ...], int]:
    """Read frame boundaries; returns (boundaries, bytes consumed)."""
    count = header.segment_count
    if count < 2:
        return (0,), 0

    region.seek(header.data_start)
    boundaries = region.u32_array(count)
    sentinel_at = region.tell()
    sentinel = region.u32()
    if sentinel != SECTION_SENTINEL:
        raise InvalidSegmentError(
            f"frame boundary list is not terminated (found 0x{sentinel:08X})",
            offset=sentinel_at
        )

    if boundaries[0] != 0:
        raise InvalidSegmentError(
            f"first segment starts at frame {boundaries[0]}, not 0",
            offset=header.data_start
        )
    for i in range(1, count):
        if boundaries[i] < boundaries[i - 1]:
            raise InvalidSegmentError(
                f"frame boundary {i} ({boundaries[i]}) precedes boundary "
                f"{i - 1} ({boundaries[i - 1]})",
                offset=header.data_start + 4 * i
            )
    if boundaries[-1] > header.frame_count:
        raise InvalidSegmentError(
            f"last segment starts at frame {boundaries[-1]} past frame count "
            f"{header.frame_count}",
            offset=header.data_start + 4 * (count - 1)
        )

    return tuple(boundaries), 4 * (count + 1)


def parse_segment_table(
    data: Buffer,
    header: AnimationHeaderV1,
    animated_count: int
) -> SegmentTable:
    """
    Parse frame boundaries and segment descriptors.

    Args:
        data: Complete file contents
        header: Parsed compressed header
        animated_count: Number of animated channels (locates the first body)

    Returns:
        SegmentTable partitioning [0, frame_count)

    Raises:
        InvalidSegmentError: Bad boundaries, missing sentinel, negative bodies
        OutOfBoundsError: Descriptors extend past the data region
    """
    count = header.segment_count
    if count == 0:
        raise InvalidSegmentError(
            "segment count is 0",
            offset=CONTROL_BLOCK_START + CTRL_SEGMENT_COUNT
        )

    warnings: List[DecodeWarning] = []
    region = ByteCursor(data, header.data_start, header.data_end, 'data region')
    off0, off1, _, off3 = header.section_offsets

    boundaries, boundary_bytes = _read_boundaries(region, header)
    if off0 != boundary_bytes:
        warnings.append(DecodeWarning(
            ErrorKind.SECTION_SIZE_MISMATCH,
            f"segment descriptors start at {off0}, boundary list ends at "
            f"{boundary_bytes}",
            header.absolute(off0),
        ))

    expected = count * SEGMENT_DESCRIPTOR_SIZE
    if off1 - off0 != expected:
        warnings.append(DecodeWarning(
            ErrorKind.SECTION_SIZE_MISMATCH,
            f"descriptor section spans {off1 - off0} bytes, {count} "
            f"descriptors need {expected}",
            header.absolute(off0),
        ))

    table = region.sub(
        header.absolute(off0), header.absolute(off0) + expected, 'segment descriptors'
    )
    descriptors = [table.u32_array(4) for _ in range(count)]

    first_body = off3 + animated_count * ANIMATED_HEADER_SIZE
    if descriptors[0][3] != first_body:
        warnings.append(DecodeWarning(
            ErrorKind.SECTION_SIZE_MISMATCH,
            f"first segment declares its body at {descriptors[0][3]}, animated "
            f"headers end at {first_body}",
            header.absolute(off0) + 12,
        ))

    segments = []
    for i, (t0, t1, t2, data_offset) in enumerate(descriptors):
        descriptor_at = header.absolute(off0) + i * SEGMENT_DESCRIPTOR_SIZE
        frame_start = boundaries[i] if count >= 2 else 0
        frame_end = boundaries[i + 1] if i + 1 < count else header.frame_count
        body_start = first_body if i == 0 else data_offset
        body_end = descriptors[i + 1][3] if i + 1 < count else header.region_size

        if data_offset > header.region_size or body_end > header.region_size:
            raise OutOfBoundsError(
                f"segment {i} body [{body_start}, {body_end}) leaves the data "
                f"region ({header.region_size} bytes)",
                offset=descriptor_at + 12
            )
        if body_end < body_start:
            raise InvalidSegmentError(
                f"segment {i} body has negative span [{body_start}, {body_end})",
                offset=descriptor_at + 12
            )

        segments.append(Segment(
            index=i,
            frame_start=frame_start,
            frame_end=frame_end,
            totals=(t0, t1, t2),
            data_offset=data_offset,
            body_start=body_start,
            body_end=body_end,
        ))

    for warning in warnings:
        logger.warning(f"Segment table: {warning}")

    return SegmentTable(
        segments=tuple(segments),
        boundaries=boundaries,
        warnings=tuple(warnings),
    )
