"""
skelanim: Decoder for compressed skeletal-animation (``*.anim``) files

Turns the V1 compressed variant of the format into per-frame, per-bone
rotation, translation and scale arrays. The uncompressed V0 variant is
detected and reported as unsupported.

Key Features:
- Bounds-checked section readers with structured, per-file errors
- Swappable interpretation policies for the undocumented parts of the format
- Thread-parallel segment decoding and thread/process batch decoding
- Torch tensors and datasets for downstream use

API Design:
- ``decode(bytes) -> PoseSequence`` is the single entry point for one file
- Every failure is an ``AnimFormatError`` carrying kind, byte offset and file name
- Pose arrays follow the (F, B, 3) shape convention

Example:
    >>> import skelanim
    >>> pose = skelanim.decode(open('walk.anim', 'rb').read(), name='walk.anim')
    >>> pose[0, 3].translation
    >>> outputs = skelanim.PosePostProcessor(translation_scale=10.0)(pose)
    >>> quats = outputs['quaternions']  # (F, B, 4)
"""

__version__ = "0.1.0"
__author__ = "skelanim Contributors"

from . import core
from . import format
from . import policy
from . import decoding
from . import data
from . import utils

from .core.errors import AnimFormatError, ErrorKind, DecodeWarning
from .core.types import RestPose
from .format.header import parse_header
from .format.channels import classify
from .decoding.decoder import AnimationDecoder, decode
from .decoding.batch import decode_batch, BatchReport
from .decoding.pose import PoseSequence
from .policy.pose import PosePostProcessor
from .utils.config import DecoderConfig

__all__ = [
    "core",
    "format",
    "policy",
    "decoding",
    "data",
    "utils",
    # Entry points
    "parse_header",
    "classify",
    "decode",
    "decode_batch",
    "AnimationDecoder",
    "PoseSequence",
    "RestPose",
    "BatchReport",
    "PosePostProcessor",
    "DecoderConfig",
    # Errors
    "AnimFormatError",
    "ErrorKind",
    "DecodeWarning",
]
