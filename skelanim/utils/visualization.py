"""
Visualization utilities for decoded animations.

Provides matplotlib helpers for:
- Per-bone channel curves over time
- Channel classification maps
- Rotation angle curves from reconstructed quaternions
"""

import torch
import numpy as np
from typing import Optional, Tuple, Sequence, Union, Any
from dataclasses import dataclass

from .quaternion import quaternion_to_axis_angle


# =============================================================================
# Configuration and Style
# =============================================================================

@dataclass
class PlotStyle:
    """Global plotting style configuration."""
    figsize: Tuple[int, int] = (10, 6)
    dpi: int = 100
    cmap_categorical: str = 'viridis'
    component_colors: Tuple[str, str, str] = ('#E63946', '#2A9D8F', '#457B9D')
    boundary_color: str = '#888888'
    grid_alpha: float = 0.3
    font_size: int = 12


DEFAULT_STYLE = PlotStyle()

GROUP_ATTRIBUTES = ('rotations', 'translations', 'scales')
COMPONENT_LABELS = ('x', 'y', 'z')


def _ensure_matplotlib():
    """Ensure matplotlib is available."""
    try:
        import matplotlib.pyplot as plt
        return plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for visualization. "
            "Install with: pip install matplotlib"
        )


def _ensure_numpy(tensor: Union[torch.Tensor, np.ndarray]) -> np.ndarray:
    """Convert tensor to numpy array."""
    if isinstance(tensor, torch.Tensor):
        return tensor.detach().cpu().numpy()
    return tensor


def _get_axis(plt, ax, style: PlotStyle):
    if ax is None:
        return plt.subplots(1, 1, figsize=style.figsize, dpi=style.dpi)
    return ax.get_figure(), ax


# =============================================================================
# Pose Curves
# =============================================================================

def plot_channel_curves(
    pose: Any,
    bone: int,
    group: str = 'rotations',
    ax: Any = None,
    title: str = None,
    style: PlotStyle = None,
    show_segments: bool = True,
):
    """
    Plot the x/y/z curves of one bone channel over all frames.

    Args:
        pose: Decoded PoseSequence
        bone: Bone index
        group: 'rotations', 'translations' or 'scales'
        ax: Existing matplotlib axis (creates new figure if None)
        title: Plot title
        style: PlotStyle configuration
        show_segments: Draw vertical lines at segment boundaries

    Returns:
        Tuple of (figure, axis) or axis if ax was provided
    """
    if group not in GROUP_ATTRIBUTES:
        raise ValueError(f"group must be one of {GROUP_ATTRIBUTES}, got {group}")

    plt = _ensure_matplotlib()
    style = style or DEFAULT_STYLE
    created_fig = ax is None
    fig, ax = _get_axis(plt, ax, style)

    values = _ensure_numpy(getattr(pose, group))[:, bone]
    frames = np.arange(values.shape[0])
    for c, label in enumerate(COMPONENT_LABELS):
        ax.plot(frames, values[:, c], label=label, color=style.component_colors[c], linewidth=2)

    if show_segments:
        for segment in list(pose.segments)[1:]:
            ax.axvline(segment.frame_start, color=style.boundary_color, linestyle='--', linewidth=1)

    ax.set_xlabel('Frame', fontsize=style.font_size)
    ax.set_ylabel(group[:-1].capitalize(), fontsize=style.font_size)
    title = title or f'{pose.name or "animation"}: bone {bone} {group}'
    ax.set_title(title, fontsize=style.font_size + 2)
    ax.legend(fontsize=style.font_size - 2)
    ax.grid(True, alpha=style.grid_alpha)

    if created_fig:
        return fig, ax
    return ax


def plot_rotation_angles(
    quaternions: Union[torch.Tensor, np.ndarray],
    bones: Optional[Sequence[int]] = None,
    ax: Any = None,
    title: str = 'Rotation angle',
    style: PlotStyle = None,
):
    """
    Plot the rotation angle (degrees) of reconstructed quaternions.

    Args:
        quaternions: (F, B, 4) quaternions as [w, x, y, z]
        bones: Bones to plot (default: all)
        ax: Existing matplotlib axis
        title: Plot title
        style: PlotStyle configuration

    Returns:
        Tuple of (figure, axis) or axis if ax was provided
    """
    plt = _ensure_matplotlib()
    style = style or DEFAULT_STYLE
    created_fig = ax is None
    fig, ax = _get_axis(plt, ax, style)

    if not isinstance(quaternions, torch.Tensor):
        quaternions = torch.as_tensor(quaternions)
    _, angle = quaternion_to_axis_angle(quaternions)
    degrees = _ensure_numpy(torch.rad2deg(angle))

    bones = range(degrees.shape[1]) if bones is None else bones
    for bone in bones:
        ax.plot(degrees[:, bone], label=f'bone {bone}', linewidth=1.5)

    ax.set_xlabel('Frame', fontsize=style.font_size)
    ax.set_ylabel('Angle (deg)', fontsize=style.font_size)
    ax.set_title(title, fontsize=style.font_size + 2)
    ax.legend(fontsize=style.font_size - 2)
    ax.grid(True, alpha=style.grid_alpha)

    if created_fig:
        return fig, ax
    return ax


# =============================================================================
# Classification
# =============================================================================

def plot_classification(
    codes: Union[torch.Tensor, np.ndarray],
    ax: Any = None,
    title: str = 'Channel classification',
    style: PlotStyle = None,
):
    """
    Show raw 2-bit codes as a (group x bone) map.

    Args:
        codes: (3, B) raw codes (``ChannelClassification.codes``)
        ax: Existing matplotlib axis
        title: Plot title
        style: PlotStyle configuration

    Returns:
        Tuple of (figure, axis) or axis if ax was provided
    """
    plt = _ensure_matplotlib()
    style = style or DEFAULT_STYLE
    created_fig = ax is None
    fig, ax = _get_axis(plt, ax, style)

    codes = _ensure_numpy(codes)
    im = ax.imshow(codes, aspect='auto', cmap=style.cmap_categorical, vmin=0, vmax=3, interpolation='nearest')
    ax.set_yticks(range(3))
    ax.set_yticklabels(['rotation', 'translation', 'scale'])
    ax.set_xlabel('Bone', fontsize=style.font_size)
    ax.set_title(title, fontsize=style.font_size + 2)
    plt.colorbar(im, ax=ax, ticks=range(4), label='Code')

    if created_fig:
        return fig, ax
    return ax
