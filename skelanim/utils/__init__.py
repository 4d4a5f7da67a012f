"""
Utility functions for skelanim.

Includes quaternion operations, visualization helpers, and configuration management.
"""

from .quaternion import (
    normalize_quaternion,
    standardize_quaternion,
    quaternion_from_smallest_three,
    quaternion_to_matrix,
    quaternion_to_axis_angle,
)
from .visualization import (
    plot_channel_curves,
    plot_rotation_angles,
    plot_classification,
)
from .config import DecoderConfig, load_config, save_config

__all__ = [
    # Quaternion operations
    "normalize_quaternion",
    "standardize_quaternion",
    "quaternion_from_smallest_three",
    "quaternion_to_matrix",
    "quaternion_to_axis_angle",
    # Visualization
    "plot_channel_curves",
    "plot_rotation_angles",
    "plot_classification",
    # Config
    "DecoderConfig",
    "load_config",
    "save_config",
]
