"""
Torch dataset over a directory of animation clips.

Every clip is decoded once at construction. Clips that fail to decode are
logged and listed in ``failures``; they are not part of the dataset.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import torch
from torch.utils.data import Dataset

from ..decoding.batch import DecodeFailure, decode_batch
from ..decoding.pose import PoseSequence
from ..policy.pose import PosePostProcessor
from ..utils.config import DecoderConfig
from .loader import iter_anim_files

logger = logging.getLogger(__name__)


class AnimationClipDataset(Dataset):
    """
    One sample per decoded clip.

    Samples are dictionaries with the post-processed tensors
    ('quaternions' (F, B, 4), 'translations' (F, B, 3), 'scales' (F, B, 3))
    plus 'name' (path relative to the root directory), 'fps' and
    'frame_count'.
    """

    def __init__(
        self,
        root: Union[str, Path],
        config: Optional[DecoderConfig] = None,
        post_processor: Optional[PosePostProcessor] = None,
        recursive: bool = True,
        device: torch.device = None
    ):
        """
        Args:
            root: Directory holding ``*.anim`` files
            config: Decoder configuration (also used for post-processing)
            post_processor: Overrides the processor built from ``config``
            recursive: Search subdirectories
            device: Device for tensors
        """
        self.root = Path(root)
        self.config = config or DecoderConfig()
        self.post_processor = post_processor or PosePostProcessor.from_config(self.config)
        self.device = device or torch.device('cpu')

        paths = list(iter_anim_files(self.root, recursive=recursive))
        items = [(path.relative_to(self.root).as_posix(), path) for path in paths]
        report = decode_batch(items, self.config)

        self.clips: List[PoseSequence] = list(report.results.values())
        self.names: List[str] = list(report.results.keys())
        self.failures: List[DecodeFailure] = report.failures

        for failure in self.failures:
            logger.warning(f"Skipping clip {failure}")
        logger.info(
            f"Loaded {len(self.clips)} clips from {self.root} "
            f"({len(self.failures)} failed)"
        )

    def __len__(self) -> int:
        return len(self.clips)

    def __getitem__(self, idx: int) -> Dict[str, Any]:
        clip = self.clips[idx]
        sample = self.post_processor(clip, device=self.device)
        sample['name'] = self.names[idx]
        sample['fps'] = clip.fps
        sample['frame_count'] = clip.frame_count
        return sample

    def get_clip(self, name: str) -> PoseSequence:
        """Decoded sequence by its path relative to ``root``."""
        return self.clips[self.names.index(name)]

    def get_bone_counts(self) -> Dict[str, int]:
        return {name: clip.bone_count for name, clip in zip(self.names, self.clips)}
