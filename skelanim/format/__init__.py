"""
Readers for the sections of a compressed ``*.anim`` buffer.

Each reader takes the immutable file buffer plus the parsed header and
returns an immutable record; all reads go through ByteCursor.
"""

from .cursor import ByteCursor
from .bitstream import BitReader
from .header import parse_header, validate_header, is_compressed
from .channels import BitfieldReader, ChannelClassification, classify
from .constant_channels import (
    ConstantChannels,
    read_constant_channels,
    assign_constants,
    static_pose,
)
from .animated_headers import AnimatedHeaders, read_animated_headers
from .segments import SegmentTable, parse_segment_table

__all__ = [
    "ByteCursor",
    "BitReader",
    # Header
    "parse_header",
    "validate_header",
    "is_compressed",
    # Classification
    "BitfieldReader",
    "ChannelClassification",
    "classify",
    # Constants
    "ConstantChannels",
    "read_constant_channels",
    "assign_constants",
    "static_pose",
    # Animated headers
    "AnimatedHeaders",
    "read_animated_headers",
    # Segments
    "SegmentTable",
    "parse_segment_table",
]
