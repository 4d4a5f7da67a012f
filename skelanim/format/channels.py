"""
Channel classification bitfield.

The bitfield occupies section 1 of the data region. It is a sequence of
u32 words, each packing sixteen 2-bit codes with the least significant pair
first. The first ``bone_count * 3`` codes are split into three equal runs:
rotation codes for every bone, then translation, then scale.
"""

import logging
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from ..core.constants import (
    BITFIELD_WORD_SIZE,
    CODES_PER_WORD,
    CONTROL_BLOCK_START,
    CTRL_DECLARED_ANIMATED,
)
from ..core.errors import BadBitfieldError, DecodeWarning, ErrorKind
from ..core.types import (
    AnimationHeaderV1,
    ChannelClass,
    ChannelRef,
    TransformGroup,
)
from ..policy.channels import ChannelClassPolicy, get_channel_policy
from .cursor import ByteCursor, Buffer

logger = logging.getLogger(__name__)


class BitfieldReader:
    """Reads 2-bit codes packed LSB-pair-first into little-endian u32 words."""

    def __init__(self, words: np.ndarray):
        self.words = np.asarray(words, dtype=np.uint32)

    @classmethod
    def from_cursor(cls, cursor: ByteCursor) -> 'BitfieldReader':
        """Consume the remainder of ``cursor`` as bitfield words."""
        size = cursor.remaining
        if size % BITFIELD_WORD_SIZE != 0:
            raise BadBitfieldError(
                f"bitfield spans {size} bytes, not a whole number of "
                f"{BITFIELD_WORD_SIZE}-byte words",
                offset=cursor.tell()
            )
        raw = cursor.read_bytes(size)
        return cls(np.frombuffer(raw, dtype='<u4'))

    @property
    def capacity(self) -> int:
        """Number of codes the words can hold."""
        return len(self.words) * CODES_PER_WORD

    def codes(self, count: Optional[int] = None) -> np.ndarray:
        """
        Unpack codes in stream order.

        Args:
            count: Number of codes to return (default: all)

        Returns:
            (count,) uint8 array of values in [0, 3]
        """
        shifts = np.arange(CODES_PER_WORD, dtype=np.uint32) * 2
        unpacked = (self.words[:, None] >> shifts[None, :]) & np.uint32(3)
        flat = unpacked.reshape(-1).astype(np.uint8)
        return flat if count is None else flat[:count]


class ChannelClassification(NamedTuple):
    """
    Per-(group, bone) classification.

    ``codes`` holds the raw 2-bit values with shape (3, B) indexed by
    TransformGroup; ``classes`` holds the policy-resolved ChannelClass.
    """
    codes: np.ndarray
    classes: Tuple[Tuple[ChannelClass, ...], ...]
    policy: ChannelClassPolicy
    warnings: Tuple[DecodeWarning, ...] = ()

    @property
    def bone_count(self) -> int:
        return self.codes.shape[1]

    @property
    def channel_classes(self) -> Tuple[ChannelClass, ...]:
        """Flat classes in stream order (rotation run, translation, scale)."""
        return tuple(c for run in self.classes for c in run)

    @property
    def run_lengths(self) -> Tuple[int, int, int]:
        return tuple(len(run) for run in self.classes)

    def group_classes(self, group: TransformGroup) -> Tuple[ChannelClass, ...]:
        return self.classes[int(group)]

    def count(self, group: TransformGroup, channel_class: ChannelClass) -> int:
        return sum(1 for c in self.classes[int(group)] if c == channel_class)

    @property
    def animated_counts(self) -> Tuple[int, int, int]:
        """(rAnimated, tAnimated, sAnimated)."""
        return tuple(self.count(g, ChannelClass.ANIMATED) for g in TransformGroup)

    @property
    def total_animated(self) -> int:
        return sum(self.animated_counts)

    def bones_with(self, group: TransformGroup, channel_class: ChannelClass) -> List[int]:
        return [b for b, c in enumerate(self.classes[int(group)]) if c == channel_class]

    def animated_channels(self) -> List[ChannelRef]:
        """Animated channels in stream order, numbered from 0."""
        refs = []
        for group in TransformGroup:
            for bone in self.bones_with(group, ChannelClass.ANIMATED):
                refs.append(ChannelRef(group, bone, ChannelClass.ANIMATED, len(refs)))
        return refs


def decode_classification(
    codes: np.ndarray,
    bone_count: int,
    policy: ChannelClassPolicy
) -> Tuple[np.ndarray, Tuple[Tuple[ChannelClass, ...], ...]]:
    """Split flat codes into three runs and resolve them with ``policy``."""
    runs = np.asarray(codes[:bone_count * 3], dtype=np.uint8).reshape(3, bone_count)
    classes = tuple(
        tuple(policy.resolve(int(code), group) for code in runs[int(group)])
        for group in TransformGroup
    )
    return runs, classes


def classify(
    data: Buffer,
    header: AnimationHeaderV1,
    policy: Optional[ChannelClassPolicy] = None
) -> ChannelClassification:
    """
    Decode the classification bitfield.

    Args:
        data: Complete file contents
        header: Parsed compressed header
        policy: Code interpretation (default: NonAnimatedAsConstant)

    Returns:
        ChannelClassification with ``bone_count * 3`` channels

    Raises:
        BadBitfieldError: Size is not whole words or too small for every channel
    """
    policy = policy or get_channel_policy()
    start, end = header.bitfield_span
    region = ByteCursor(data, header.data_start, header.data_end, 'data region')
    cursor = region.sub(header.absolute(start), header.absolute(end), 'bitfield')

    reader = BitfieldReader.from_cursor(cursor)
    needed = header.channel_count
    if reader.capacity < needed:
        raise BadBitfieldError(
            f"bitfield holds {reader.capacity} codes, {header.bone_count} bones "
            f"need {needed}",
            offset=header.absolute(start)
        )

    runs, classes = decode_classification(reader.codes(needed), header.bone_count, policy)
    runs.setflags(write=False)
    result = ChannelClassification(codes=runs, classes=classes, policy=policy)

    warnings = []
    declared = header.declared_animated
    found = (result.total_animated,) + result.animated_counts
    if any(declared) and tuple(declared) != found:
        warnings.append(DecodeWarning(
            ErrorKind.SECTION_SIZE_MISMATCH,
            f"header declares animated counts {tuple(declared)} "
            f"(total, R, T, S), bitfield has {found}",
            CONTROL_BLOCK_START + CTRL_DECLARED_ANIMATED,
        ))
    for warning in warnings:
        logger.warning(f"Classification: {warning}")

    logger.debug(
        f"Classified {needed} channels: animated R{found[1]} T{found[2]} S{found[3]}"
    )
    return result._replace(warnings=tuple(warnings))
