"""
Animation decoder: composes the format readers into ``decode``.

Pipeline for a V1 buffer:
    parse_header -> classify -> read_constant_channels ->
    read_animated_headers -> parse_segment_table ->
    FrameDecoder (per segment) -> PoseSequence

Every failure raises an AnimFormatError subclass tagged with the file name.
Non-fatal findings are collected on the PoseSequence, or raised as
SectionSizeMismatchError when the config is strict.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ..core.constants import OFFSET_VERSION
from ..core.errors import (
    AnimFormatError,
    DecodeWarning,
    UnsupportedVersionError,
)
from ..core.types import AnimationHeaderV0, RestPose
from ..format.animated_headers import read_animated_headers
from ..format.channels import classify
from ..format.constant_channels import read_constant_channels
from ..format.cursor import Buffer
from ..format.header import parse_header, validate_header
from ..format.segments import parse_segment_table
from ..policy.channels import get_channel_policy
from ..utils.config import DecoderConfig
from .frames import FrameDecoder
from .pose import PoseSequence

logger = logging.getLogger(__name__)


class AnimationDecoder:
    """
    Decodes V1 ``*.anim`` buffers into PoseSequence objects.

    A decoder holds only configuration; ``decode`` is pure over its input
    buffer and safe to call from several threads.
    """

    def __init__(self, config: Optional[DecoderConfig] = None):
        """
        Args:
            config: Decoder configuration (default: DecoderConfig())
        """
        self.config = config or DecoderConfig()
        self.policy = get_channel_policy(
            self.config.channel_policy,
            scale_constants_by_bone=self.config.scale_constants_by_bone
        )

    def decode(
        self,
        data: Buffer,
        name: Optional[str] = None,
        rest_pose: Optional[RestPose] = None
    ) -> PoseSequence:
        """
        Decode one animation buffer.

        Args:
            data: Complete file contents
            name: Source name used in errors and logs
            rest_pose: Skeleton rest transforms used for channels that store
                no values (default: fill values)

        Returns:
            PoseSequence

        Raises:
            AnimFormatError: Any structural problem (subclass names the kind)
        """
        try:
            return self._decode(data, name, rest_pose)
        except AnimFormatError as e:
            raise e.with_source(name)

    def _decode(
        self,
        data: Buffer,
        name: Optional[str],
        rest_pose: Optional[RestPose]
    ) -> PoseSequence:
        header = parse_header(data)
        if isinstance(header, AnimationHeaderV0):
            raise UnsupportedVersionError(
                "uncompressed (V0) animations are not decoded", offset=OFFSET_VERSION
            )

        warnings: List[DecodeWarning] = validate_header(header)
        for warning in warnings:
            logger.warning(f"Header: {warning}")

        classification = classify(data, header, self.policy)
        constants = read_constant_channels(data, header, classification)
        animated_headers = read_animated_headers(data, header, classification.total_animated)
        segments = parse_segment_table(data, header, classification.total_animated)
        warnings.extend(classification.warnings)
        warnings.extend(constants.warnings)
        warnings.extend(animated_headers.warnings)
        warnings.extend(segments.warnings)

        if self.config.strict and warnings:
            raise warnings[0].to_error()

        if rest_pose is not None and rest_pose.bone_count != header.bone_count:
            logger.warning(
                f"Rest pose has {rest_pose.bone_count} bones, clip has {header.bone_count}"
            )
        frame_decoder = FrameDecoder(
            data, header, classification, constants, animated_headers, rest_pose
        )
        workers = self.config.segment_workers
        if workers > 1 and len(segments) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                samples = list(pool.map(frame_decoder.decode_segment, segments))
        else:
            samples = [frame_decoder.decode_segment(segment) for segment in segments]

        rotations, translations, scales = frame_decoder.assemble(samples)

        logger.info(
            f"Decoded {name or '<buffer>'}: {header.frame_count} frames, "
            f"{header.bone_count} bones, {len(segments)} segments, "
            f"{classification.total_animated} animated channels, "
            f"{len(warnings)} warnings"
        )
        return PoseSequence(
            rotations=rotations,
            translations=translations,
            scales=scales,
            header=header,
            classification=classification,
            segments=segments,
            bit_widths=tuple(s.bit_widths for s in samples),
            anchors=tuple(s.anchors for s in samples),
            warnings=tuple(warnings),
            name=name or header.outer.name or None,
        )


def decode(
    data: Buffer,
    config: Optional[DecoderConfig] = None,
    name: Optional[str] = None,
    rest_pose: Optional[RestPose] = None
) -> PoseSequence:
    """
    Decode one animation buffer with a throwaway AnimationDecoder.

    Args:
        data: Complete file contents
        config: Decoder configuration
        name: Source name used in errors and logs
        rest_pose: Skeleton rest transforms for channels without values

    Returns:
        PoseSequence
    """
    return AnimationDecoder(config).decode(data, name=name, rest_pose=rest_pose)
