"""
Configuration management for skelanim.

Provides the decoder configuration dataclass and JSON helpers.
"""

import json
from dataclasses import dataclass, field, asdict
from typing import Dict, Any
from pathlib import Path


@dataclass
class DecoderConfig:
    """
    Configuration for decoding and post-processing.

    Attributes:
        # Interpretation
        channel_policy: Meaning of non-animated codes
            ('non_animated_as_constant' or 'explicit_codes')
        scale_constants_by_bone: Index scale constants by bone when their
            count equals the bone count
        rotation_reconstruction: 'smallest_three' or 'raw'
        translation_scale: Factor applied to translations by PosePostProcessor

        # Validation
        strict: Turn SectionSizeMismatch warnings into errors

        # Concurrency
        segment_workers: Threads decoding segments of one file (1 = serial)
        batch_workers: Workers for decode_batch (None = executor default)
        batch_executor: 'thread' or 'process'
        show_progress: Show a tqdm progress bar in batch decoding
    """

    # Interpretation
    channel_policy: str = 'non_animated_as_constant'
    scale_constants_by_bone: bool = True
    rotation_reconstruction: str = 'smallest_three'
    translation_scale: float = 1.0

    # Validation
    strict: bool = False

    # Concurrency
    segment_workers: int = 1
    batch_workers: int = None
    batch_executor: str = 'thread'
    show_progress: bool = False

    # Additional fields
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'DecoderConfig':
        """Create config from dictionary."""
        # Extract known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        known_kwargs = {k: v for k, v in config_dict.items() if k in known_fields}
        extra_kwargs = {k: v for k, v in config_dict.items() if k not in known_fields}

        config = cls(**known_kwargs)
        config.extra = {**config.extra, **extra_kwargs}
        return config

    def update(self, **kwargs) -> 'DecoderConfig':
        """Return a new config with updated values."""
        config_dict = self.to_dict()
        config_dict.update(kwargs)
        return DecoderConfig.from_dict(config_dict)


def load_config(filepath: str) -> DecoderConfig:
    """
    Load configuration from JSON file.

    Args:
        filepath: Path to JSON config file

    Returns:
        DecoderConfig object
    """
    filepath = Path(filepath)
    with open(filepath, 'r') as f:
        config_dict = json.load(f)
    return DecoderConfig.from_dict(config_dict)


def save_config(config: DecoderConfig, filepath: str) -> None:
    """
    Save configuration to JSON file.

    Args:
        config: DecoderConfig object to save
        filepath: Output file path
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
