"""
Tests for the segment table.

Segments must partition [0, frame_count) with no gaps or overlaps, and
their bodies must stay inside the data region.
"""

import struct

import pytest

from skelanim.core.constants import ANIMATED_HEADER_SIZE, V1_DATA_START
from skelanim.core.errors import ErrorKind, InvalidSegmentError, OutOfBoundsError
from skelanim.format.header import parse_header
from skelanim.format.segments import parse_segment_table

from conftest import build_anim


def _table(data, animated_count):
    return parse_segment_table(data, parse_header(data), animated_count)


def _two_segments(boundaries, frame_count=4, **kwargs):
    segments = [
        {'frame_start': start, 'bit_widths': [], 'anchors': [], 'stream': b''}
        for start in boundaries
    ]
    return build_anim(frame_count=frame_count, segments=segments, **kwargs)


# =============================================================================
# Well-formed Tables
# =============================================================================

class TestSegmentTable:
    """Tests for parse_segment_table on well-formed tables."""

    def test_single_segment_spans_all_frames(self, two_frame_rotation_anim):
        """One segment covers every frame."""
        table = _table(two_frame_rotation_anim, 1)
        assert len(table) == 1
        assert table[0].frame_start == 0
        assert table[0].frame_end == 2
        assert table.boundaries == (0,)
        assert table.warnings == ()

    def test_first_body_follows_animated_headers(self, two_frame_rotation_anim):
        """Segment 0's body starts right after the animated headers."""
        header = parse_header(two_frame_rotation_anim)
        table = _table(two_frame_rotation_anim, 1)
        assert table[0].body_start == header.section_offsets[3] + ANIMATED_HEADER_SIZE
        assert table[0].body_end == header.region_size
        assert header.absolute(table[0].body_end) == len(two_frame_rotation_anim) - len(b'turn\x00')

    def test_multi_segment_partition(self, multi_segment_anim):
        """Segments partition [0, frame_count) contiguously."""
        table = _table(multi_segment_anim, 2)
        assert table.boundaries == (0, 2)
        assert [(s.frame_start, s.frame_end) for s in table] == [(0, 2), (2, 4)]
        covered = [f for s in table for f in range(s.frame_start, s.frame_end)]
        assert covered == list(range(4))

    def test_bodies_are_contiguous(self, multi_segment_anim):
        """Each body ends where the next begins."""
        table = _table(multi_segment_anim, 2)
        assert table[0].body_end == table[1].body_start == table[1].data_offset
        assert table[0].body_size == table[1].body_size == 17

    def test_segment_for_frame(self, multi_segment_anim):
        """Frames map to the segment holding them."""
        table = _table(multi_segment_anim, 2)
        assert table.segment_for_frame(1).index == 0
        assert table.segment_for_frame(2).index == 1
        with pytest.raises(IndexError):
            table.segment_for_frame(4)

    def test_empty_trailing_segment(self):
        """A boundary equal to frame_count gives an empty last segment."""
        table = _table(_two_segments([0, 4]), 0)
        assert [s.frame_count for s in table] == [4, 0]


# =============================================================================
# Failures
# =============================================================================

class TestSegmentErrors:
    """Tests for InvalidSegment and OutOfBounds conditions."""

    def test_zero_segments(self):
        """segmentCount == 0 is invalid."""
        data = bytearray(build_anim())
        struct.pack_into('<I', data, 0x60 + 0x20, 0)
        with pytest.raises(InvalidSegmentError):
            _table(bytes(data), 0)

    def test_first_boundary_not_zero(self):
        """The first segment must start at frame 0."""
        with pytest.raises(InvalidSegmentError) as info:
            _table(_two_segments([1, 2]), 0)
        assert info.value.offset == V1_DATA_START

    def test_decreasing_boundaries(self):
        """Boundaries must not decrease."""
        data = _two_segments([0, 3, 2])
        with pytest.raises(InvalidSegmentError) as info:
            _table(data, 0)
        assert info.value.kind == ErrorKind.INVALID_SEGMENT
        assert info.value.offset == V1_DATA_START + 8

    def test_boundary_past_frame_count(self):
        """Boundaries cannot exceed the frame count."""
        with pytest.raises(InvalidSegmentError):
            _table(_two_segments([0, 5]), 0)

    def test_missing_sentinel(self):
        """The boundary list must end with the sentinel."""
        with pytest.raises(InvalidSegmentError) as info:
            _table(_two_segments([0, 2], boundary_sentinel=7), 0)
        assert 'terminated' in info.value.message

    def test_negative_body_span(self, multi_segment_anim):
        """A data offset before the previous body start is rejected."""
        header = parse_header(multi_segment_anim)
        data = bytearray(multi_segment_anim)
        second_descriptor = V1_DATA_START + header.section_offsets[0] + 16
        struct.pack_into('<I', data, second_descriptor + 12, 0)
        with pytest.raises(InvalidSegmentError):
            _table(bytes(data), 2)

    def test_body_past_data_region(self, multi_segment_anim):
        """Data offsets past the data region are out of bounds."""
        header = parse_header(multi_segment_anim)
        data = bytearray(multi_segment_anim)
        second_descriptor = V1_DATA_START + header.section_offsets[0] + 16
        struct.pack_into('<I', data, second_descriptor + 12, header.region_size + 4)
        with pytest.raises(OutOfBoundsError):
            _table(bytes(data), 2)


# =============================================================================
# Size Cross-checks
# =============================================================================

class TestSegmentWarnings:
    """Tests for SectionSizeMismatch warnings."""

    def test_first_body_offset_mismatch(self, two_frame_rotation_anim):
        """Counting the wrong number of animated channels is reported."""
        table = _table(two_frame_rotation_anim, 0)
        assert len(table.warnings) == 1
        assert table.warnings[0].kind == ErrorKind.SECTION_SIZE_MISMATCH

    def test_descriptor_span_mismatch(self):
        """Section 1 must start right after the descriptors."""
        data = build_anim(bitfield_padding=4, section_offsets=(0, 20, 24, 24))
        table = _table(data, 0)
        assert any('descriptor section' in w.message for w in table.warnings)
