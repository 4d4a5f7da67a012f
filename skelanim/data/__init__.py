"""
Loading ``*.anim`` files and exposing them as torch datasets.
"""

from .loader import (
    load_anim_file,
    iter_anim_files,
    read_animation_name,
    load_and_decode,
)
from .anim_dataset import AnimationClipDataset

__all__ = [
    "load_anim_file",
    "iter_anim_files",
    "read_animation_name",
    "load_and_decode",
    "AnimationClipDataset",
]
