"""
Per-segment frame decoding.

Every segment body is laid out as:

    bit widths       1 byte per animated channel
    initial values   3 bytes per animated channel (kept raw as anchors)
    bitstream        per frame, per animated channel: x, y, z fields of
                     ``bit_width`` bits each, LSB-first, no padding

Samples are dequantized with the channel's base/range and merged with the
static (constant or fill) values into full (F, B, 3) pose arrays.
"""

import logging
from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np

from ..core.constants import MAX_BIT_WIDTH, INITIAL_VALUE_SIZE
from ..core.errors import InvalidSegmentError, OutOfBoundsError
from ..core.types import AnimationHeaderV1, RestPose, Segment
from ..format.animated_headers import AnimatedHeaders
from ..format.bitstream import BitReader
from ..format.channels import ChannelClassification
from ..format.constant_channels import ConstantChannels, static_pose
from ..format.cursor import ByteCursor, Buffer

logger = logging.getLogger(__name__)


class SegmentSamples(NamedTuple):
    """
    Decoded samples of one segment.

    Attributes:
        segment: The segment these samples belong to
        bit_widths: (N,) uint8 bit width per animated channel
        anchors: (N, 3) uint8 initial-value block
        quantized: (Fs, N, 3) uint32 raw codes
        values: (Fs, N, 3) float32 dequantized values
        bits_consumed: Bits read from the bitstream
    """
    segment: Segment
    bit_widths: np.ndarray
    anchors: np.ndarray
    quantized: np.ndarray
    values: np.ndarray
    bits_consumed: int


def dequantize(
    quantized: np.ndarray,
    bit_widths: np.ndarray,
    bases: np.ndarray,
    ranges: np.ndarray
) -> np.ndarray:
    """
    Map quantized codes into ``[base, base + range]``.

    value = base + (q / (2**bw - 1)) * range, and value = base when bw == 0.

    Args:
        quantized: (..., N, 3) codes
        bit_widths: (N,) bit widths
        bases: (N, 3) channel bases
        ranges: (N, 3) channel ranges

    Returns:
        (..., N, 3) float32 values
    """
    widths = np.asarray(bit_widths, dtype=np.int64)
    max_q = (np.left_shift(np.int64(1), widths) - 1).astype(np.float64)[:, None]
    divisor = np.where(max_q > 0, max_q, 1.0)
    fraction = np.where(max_q > 0, quantized.astype(np.float64) / divisor, 0.0)
    values = bases.astype(np.float64) + fraction * ranges.astype(np.float64)
    return values.astype(np.float32)


class FrameDecoder:
    """
    Decodes segment bodies and assembles pose arrays.

    The decoder only reads from the immutable buffer, so independent
    segments can be decoded from several threads at once.
    """

    def __init__(
        self,
        data: Buffer,
        header: AnimationHeaderV1,
        classification: ChannelClassification,
        constants: ConstantChannels,
        animated_headers: AnimatedHeaders,
        rest_pose: Optional[RestPose] = None
    ):
        """
        Args:
            data: Complete file contents
            header: Parsed compressed header
            classification: Channel classification
            constants: Constant tables
            animated_headers: Base/range per animated channel
            rest_pose: Skeleton rest transforms for channels without values
        """
        self.data = data
        self.header = header
        self.classification = classification
        self.animated_headers = animated_headers
        self.animated = classification.animated_channels()
        self.static = static_pose(classification, constants, rest_pose)

        if len(animated_headers) != len(self.animated):
            raise InvalidSegmentError(
                f"{len(self.animated)} animated channels but "
                f"{len(animated_headers)} animated headers",
                offset=header.absolute(header.section_offsets[3])
            )

    @property
    def channel_count(self) -> int:
        return len(self.animated)

    def decode_segment(self, segment: Segment) -> SegmentSamples:
        """
        Decode every frame of one segment.

        Raises:
            InvalidSegmentError: A bit width exceeds 32
            OutOfBoundsError: The body is too small for its frames
        """
        header = self.header
        n = self.channel_count
        body_at = header.absolute(segment.body_start)

        region = ByteCursor(self.data, header.data_start, header.data_end, 'data region')
        body = region.sub(body_at, header.absolute(segment.body_end), f'segment {segment.index} body')

        bit_widths = np.frombuffer(body.read_bytes(n), dtype=np.uint8)
        too_wide = np.flatnonzero(bit_widths > MAX_BIT_WIDTH)
        if len(too_wide):
            channel = int(too_wide[0])
            raise InvalidSegmentError(
                f"segment {segment.index} channel {channel} has bit width "
                f"{bit_widths[channel]} (max {MAX_BIT_WIDTH})",
                offset=body_at + channel
            )

        anchors = np.frombuffer(
            body.read_bytes(n * INITIAL_VALUE_SIZE), dtype=np.uint8
        ).reshape(n, INITIAL_VALUE_SIZE)

        stream_at = body.tell()
        stream = body.read_bytes(body.remaining)
        widths = [int(w) for w in bit_widths]
        needed = sum(widths) * 3 * segment.frame_count
        if needed > len(stream) * 8:
            raise OutOfBoundsError(
                f"segment {segment.index} needs {needed} bits for "
                f"{segment.frame_count} frames, bitstream holds {len(stream) * 8}",
                offset=stream_at + len(stream)
            )

        reader = BitReader(stream)
        quantized = np.zeros((segment.frame_count, n, 3), dtype=np.uint32)
        for frame in range(segment.frame_count):
            for channel, width in enumerate(widths):
                if width:
                    quantized[frame, channel] = reader.read_vec3(width)

        values = dequantize(
            quantized, bit_widths, self.animated_headers.bases, self.animated_headers.ranges
        )
        logger.debug(
            f"Segment {segment.index}: frames [{segment.frame_start}, "
            f"{segment.frame_end}) bits={reader.tell()}/{len(stream) * 8}"
        )
        return SegmentSamples(
            segment=segment,
            bit_widths=bit_widths,
            anchors=anchors,
            quantized=quantized,
            values=values,
            bits_consumed=reader.tell(),
        )

    def assemble(
        self,
        samples: Sequence[SegmentSamples]
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Merge static values with decoded samples.

        Returns:
            (rotations, translations, scales), each (F, B, 3) float32 and
            read-only
        """
        frames = self.header.frame_count
        bones = self.classification.bone_count
        pose = np.empty((3, frames, bones, 3), dtype=np.float32)
        pose[:] = self.static[:, None]

        for segment_samples in samples:
            start = segment_samples.segment.frame_start
            end = segment_samples.segment.frame_end
            for ref in self.animated:
                pose[int(ref.group), start:end, ref.bone] = segment_samples.values[:, ref.index]

        arrays = tuple(np.ascontiguousarray(pose[g]) for g in range(3))
        for array in arrays:
            array.setflags(write=False)
        return arrays
