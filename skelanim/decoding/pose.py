"""
Decoded pose sequence.

A PoseSequence is the single artifact of a decode: three read-only
(F, B, 3) float32 arrays plus everything needed to interpret them
(header, classification, segment table, per-segment anchors, warnings).
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import torch

from ..core.errors import DecodeWarning
from ..core.types import AnimationHeaderV1, BoneTransform, TensorDict
from ..format.channels import ChannelClassification
from ..format.segments import SegmentTable


@dataclass(frozen=True, eq=False)
class PoseSequence:
    """
    Per-frame, per-bone transforms.

    Attributes:
        rotations: (F, B, 3) stored rotation components (no implied w)
        translations: (F, B, 3) translations as stored
        scales: (F, B, 3) scales
        header: Compressed header the sequence was decoded from
        classification: Channel classification (raw codes included)
        segments: Segment table
        bit_widths: Per segment, (N,) uint8 bit widths of animated channels
        anchors: Per segment, (N, 3) uint8 initial-value block
        warnings: Non-fatal findings collected while decoding
        name: Source file name, if known
    """
    rotations: np.ndarray
    translations: np.ndarray
    scales: np.ndarray
    header: AnimationHeaderV1
    classification: ChannelClassification
    segments: SegmentTable
    bit_widths: Tuple[np.ndarray, ...] = ()
    anchors: Tuple[np.ndarray, ...] = ()
    warnings: Tuple[DecodeWarning, ...] = ()
    name: Optional[str] = None

    @property
    def frame_count(self) -> int:
        return self.rotations.shape[0]

    @property
    def bone_count(self) -> int:
        return self.rotations.shape[1]

    @property
    def fps(self) -> float:
        return self.header.outer.fps

    @property
    def duration(self) -> float:
        """Clip length in seconds (0 when fps is unset)."""
        if self.fps <= 0:
            return 0.0
        return self.frame_count / self.fps

    def __len__(self) -> int:
        return self.frame_count

    def __getitem__(self, key: Tuple[int, int]) -> BoneTransform:
        frame, bone = key
        return BoneTransform(
            rotation=tuple(float(v) for v in self.rotations[frame, bone]),
            translation=tuple(float(v) for v in self.translations[frame, bone]),
            scale=tuple(float(v) for v in self.scales[frame, bone]),
        )

    def frame(self, index: int) -> List[BoneTransform]:
        """All bone transforms of one frame."""
        return [self[index, bone] for bone in range(self.bone_count)]

    def to_tensors(self, device: torch.device = None) -> TensorDict:
        """
        Convert the pose arrays to tensors.

        Returns:
            Dictionary with 'rotations', 'translations' and 'scales',
            each of shape (F, B, 3)
        """
        tensors = {
            'rotations': torch.from_numpy(self.rotations.copy()),
            'translations': torch.from_numpy(self.translations.copy()),
            'scales': torch.from_numpy(self.scales.copy()),
        }
        if device is not None:
            tensors = {k: v.to(device) for k, v in tensors.items()}
        return tensors

    def equals(self, other: 'PoseSequence') -> bool:
        """Bit-identical comparison of the decoded arrays."""
        return (
            np.array_equal(self.rotations, other.rotations)
            and np.array_equal(self.translations, other.translations)
            and np.array_equal(self.scales, other.scales)
        )
