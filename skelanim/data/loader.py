"""
Reading ``*.anim`` files from disk.

Example:
    >>> from skelanim.data import load_anim_file, load_and_decode
    >>> data = load_anim_file('clips/walk.anim')
    >>> pose = load_and_decode('clips/walk.anim')
"""

import logging
import struct
from pathlib import Path
from typing import Iterator, Optional, Union

from ..core.constants import ANIM_MAGIC, OFFSET_NAME, OUTER_HEADER_SIZE
from ..decoding.decoder import AnimationDecoder
from ..decoding.pose import PoseSequence
from ..format.cursor import Buffer
from ..format.header import read_name_at
from ..utils.config import DecoderConfig

logger = logging.getLogger(__name__)

ANIM_SUFFIX = '.anim'


def load_anim_file(path: Union[str, Path]) -> bytes:
    """
    Read the raw bytes of an animation file.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Animation file not found: {path}")
    data = path.read_bytes()
    logger.debug(f"Read {len(data)} bytes from {path}")
    return data


def iter_anim_files(
    directory: Union[str, Path],
    recursive: bool = True,
    suffix: str = ANIM_SUFFIX
) -> Iterator[Path]:
    """
    Yield animation files under ``directory`` in sorted order.

    Args:
        directory: Root directory
        recursive: Descend into subdirectories
        suffix: File extension to match (case-insensitive)
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")
    candidates = directory.rglob('*') if recursive else directory.glob('*')
    for path in sorted(candidates):
        if path.is_file() and path.suffix.lower() == suffix:
            yield path


def read_animation_name(data: Buffer) -> str:
    """
    Return the embedded animation name, or '' when absent.

    Only the outer header is inspected; the rest of the file is not validated.
    """
    if len(data) < OUTER_HEADER_SIZE:
        return ''
    magic, = struct.unpack_from('<I', data, 0)
    if magic != ANIM_MAGIC:
        return ''
    name_offset, = struct.unpack_from('<I', data, OFFSET_NAME)
    return read_name_at(data, name_offset)


def load_and_decode(
    path: Union[str, Path],
    config: Optional[DecoderConfig] = None
) -> PoseSequence:
    """
    Read and decode one animation file.

    Raises:
        FileNotFoundError: If file doesn't exist
        AnimFormatError: If the file is malformed (tagged with the file name)
    """
    path = Path(path)
    return AnimationDecoder(config).decode(load_anim_file(path), name=path.name)
