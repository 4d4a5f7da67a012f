"""
Constant channel tables.

Section 2 of the data region holds three back-to-back tables of 3-float
vectors: ``constA`` rotation constants, ``constB`` translation constants
and ``constC`` scale constants. Entries are handed out to the
constant-classified bones of each group in bone order. Bones left without
an entry (and unused channels) take the group's fill value, or the
skeleton rest pose when one is supplied.
"""

import logging
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from ..core.constants import (
    CONSTANT_RECORD_SIZE,
    CONTROL_BLOCK_START,
    CTRL_CONSTANT_COUNTS,
    FILL_ROTATION,
    FILL_TRANSLATION,
    FILL_SCALE,
)
from ..core.errors import DecodeWarning, ErrorKind
from ..core.types import (
    AnimationHeaderV1,
    ChannelClass,
    ChannelRef,
    RestPose,
    TransformGroup,
)
from .channels import ChannelClassification
from .cursor import ByteCursor, Buffer

logger = logging.getLogger(__name__)

FILL_VALUES = {
    TransformGroup.ROTATION: FILL_ROTATION,
    TransformGroup.TRANSLATION: FILL_TRANSLATION,
    TransformGroup.SCALE: FILL_SCALE,
}


class ConstantChannels(NamedTuple):
    """Constant vectors per group, each shaped (count, 3) float32."""
    rotation: np.ndarray
    translation: np.ndarray
    scale: np.ndarray
    warnings: Tuple[DecodeWarning, ...] = ()

    def table(self, group: TransformGroup) -> np.ndarray:
        return (self.rotation, self.translation, self.scale)[int(group)]

    @property
    def counts(self) -> Tuple[int, int, int]:
        return len(self.rotation), len(self.translation), len(self.scale)


def assign_constants(
    classification: ChannelClassification,
    constants: ConstantChannels
) -> Tuple[Tuple[ChannelRef, ...], ...]:
    """
    Decide where every non-animated channel takes its value from.

    Args:
        classification: Resolved channel classes
        constants: Constant tables

    Returns:
        Per group, one ChannelRef per bone. ``index`` is the constant table
        row, or None when the fill value applies. Animated channels keep
        ``index=None`` here; their values come from the bitstream.
    """
    policy = classification.policy
    bone_count = classification.bone_count
    refs = []
    for group in TransformGroup:
        table_size = len(constants.table(group))
        by_bone = policy.index_constants_by_bone(group, table_size, bone_count)
        group_refs = []
        next_row = 0
        for bone, channel_class in enumerate(classification.group_classes(group)):
            index = None
            if channel_class == ChannelClass.CONSTANT:
                if by_bone:
                    index = bone
                elif next_row < table_size:
                    index = next_row
                next_row += 1
            group_refs.append(ChannelRef(group, bone, channel_class, index))
        refs.append(tuple(group_refs))
    return tuple(refs)


def static_pose(
    classification: ChannelClassification,
    constants: ConstantChannels,
    rest_pose: Optional[RestPose] = None
) -> np.ndarray:
    """
    Values of every channel that does not change per frame.

    Args:
        classification: Resolved channel classes
        constants: Constant tables
        rest_pose: Skeleton rest transforms. Rotation and translation
            channels without a constant entry take their bone's rest value
            instead of the fill value; bones past ``rest_pose.bone_count``
            keep the fill value.

    Returns:
        (3, B, 3) float32 array indexed by TransformGroup, then bone.
        Animated channels hold their fill value until samples overwrite them.
    """
    bone_count = classification.bone_count
    pose = np.empty((3, bone_count, 3), dtype=np.float32)
    rest = {}
    if rest_pose is not None:
        rest[TransformGroup.ROTATION] = rest_pose.stored_rotations()
        rest[TransformGroup.TRANSLATION] = rest_pose.translations
    for group_refs in assign_constants(classification, constants):
        for ref in group_refs:
            if ref.index is not None:
                pose[int(ref.group), ref.bone] = constants.table(ref.group)[ref.index]
            elif ref.group in rest and ref.bone < len(rest[ref.group]):
                pose[int(ref.group), ref.bone] = rest[ref.group][ref.bone]
            else:
                pose[int(ref.group), ref.bone] = FILL_VALUES[ref.group]
    return pose


def _count_warnings(
    classification: ChannelClassification,
    constants: ConstantChannels
) -> List[DecodeWarning]:
    warnings = []
    policy = classification.policy
    for group, table_size in zip(TransformGroup, constants.counts):
        expected = classification.count(group, ChannelClass.CONSTANT)
        if table_size == expected:
            continue
        if policy.index_constants_by_bone(group, table_size, classification.bone_count):
            continue
        warnings.append(DecodeWarning(
            ErrorKind.SECTION_SIZE_MISMATCH,
            f"{group.name.lower()} has {table_size} constants for {expected} "
            f"constant channels",
            CONTROL_BLOCK_START + CTRL_CONSTANT_COUNTS + 4 * int(group),
        ))
    return warnings


def read_constant_channels(
    data: Buffer,
    header: AnimationHeaderV1,
    classification: Optional[ChannelClassification] = None
) -> ConstantChannels:
    """
    Read the constA/constB/constC tables.

    Args:
        data: Complete file contents
        header: Parsed compressed header
        classification: When given, table sizes are checked against the
            number of constant channels per group

    Returns:
        ConstantChannels

    Raises:
        OutOfBoundsError: Tables extend past the constant section
    """
    start, end = header.constants_span
    const_a, const_b, const_c = header.constant_counts
    expected = header.constant_total * CONSTANT_RECORD_SIZE

    region = ByteCursor(data, header.data_start, header.data_end, 'data region')
    cursor = region.sub(header.absolute(start), header.absolute(end), 'constant tables')

    tables = []
    for count in (const_a, const_b, const_c):
        values = cursor.f32_array(count * 3).reshape(count, 3)
        values.setflags(write=False)
        tables.append(values)
    constants = ConstantChannels(*tables)

    warnings = []
    if end - start != expected:
        warnings.append(DecodeWarning(
            ErrorKind.SECTION_SIZE_MISMATCH,
            f"constant section spans {end - start} bytes, "
            f"{header.constant_total} constants need {expected}",
            header.absolute(start),
        ))
    if classification is not None:
        warnings.extend(_count_warnings(classification, constants))

    for warning in warnings:
        logger.warning(f"Constant channels: {warning}")

    return constants._replace(warnings=tuple(warnings))
