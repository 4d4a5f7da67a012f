"""
Decoding pipeline: frames, single-file orchestration and batches.
"""

from .pose import PoseSequence
from .frames import FrameDecoder, SegmentSamples, dequantize
from .decoder import AnimationDecoder, decode
from .batch import BatchReport, DecodeFailure, decode_batch

__all__ = [
    "PoseSequence",
    "FrameDecoder",
    "SegmentSamples",
    "dequantize",
    "AnimationDecoder",
    "decode",
    "BatchReport",
    "DecodeFailure",
    "decode_batch",
]
