"""
Example 01: Decoding a Directory of Compressed Animations

Demonstrates the batch pipeline:
1. Finding every *.anim file under a directory
2. Decoding them in parallel with a per-file failure report
3. Converting one clip to quaternions and plotting its curves

Usage:
    python examples/01_decode_directory.py [input_dir]

Input files:
- input/animations/**/*.anim (default input directory)

Output files:
- output/01_channel_curves.png - Root bone rotation and translation curves
- output/01_rotation_angles.png - Rotation angle per bone over time
- output/01_classification.png - Channel classification map
"""

import logging
import sys
from pathlib import Path

import matplotlib.pyplot as plt

from skelanim.core.constants import VIEWER_TRANSLATION_SCALE
from skelanim.data import iter_anim_files
from skelanim.decoding import decode_batch
from skelanim.policy.pose import PosePostProcessor
from skelanim.utils import DecoderConfig
from skelanim.utils.visualization import (
    plot_channel_curves,
    plot_classification,
    plot_rotation_angles,
)


# =============================================================================
# 1. Configuration
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent
INPUT_DIR = PROJECT_ROOT / "input/animations"
OUTPUT_DIR = PROJECT_ROOT / "output"

CONFIG = DecoderConfig(
    translation_scale=VIEWER_TRANSLATION_SCALE,
    batch_workers=4,
    show_progress=True,
)


# =============================================================================
# 2. Decoding
# =============================================================================

def decode_directory(input_dir: Path):
    paths = list(iter_anim_files(input_dir))
    print(f"Found {len(paths)} animation files in {input_dir}")

    report = decode_batch(paths, CONFIG)
    print(report.format_report())
    return report


# =============================================================================
# 3. Inspection
# =============================================================================

def plot_clip(pose):
    """Save curves, angles and classification of one decoded clip."""
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    plot_channel_curves(pose, bone=0, group='rotations', ax=axes[0])
    plot_channel_curves(pose, bone=0, group='translations', ax=axes[1])
    fig.tight_layout()
    fig.savefig(OUTPUT_DIR / "01_channel_curves.png")
    plt.close(fig)

    outputs = PosePostProcessor.from_config(CONFIG)(pose)
    bones = range(min(pose.bone_count, 8))
    fig, _ = plot_rotation_angles(outputs['quaternions'], bones=bones, title=f"{pose.name}: rotation angle")
    fig.savefig(OUTPUT_DIR / "01_rotation_angles.png")
    plt.close(fig)

    fig, _ = plot_classification(pose.classification.codes)
    fig.savefig(OUTPUT_DIR / "01_classification.png")
    plt.close(fig)

    print(f"Saved plots for {pose.name} to {OUTPUT_DIR}")


def main():
    """Decode a directory and plot the longest clip."""
    logging.basicConfig(level=logging.INFO)
    input_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else INPUT_DIR

    print("=" * 60)
    print("Decoding Compressed Animations")
    print("=" * 60)

    report = decode_directory(input_dir)
    if not report.results:
        print("Nothing decoded.")
        return

    pose = max(report.results.values(), key=lambda p: p.frame_count)
    print(
        f"Longest clip: {pose.name} ({pose.frame_count} frames, "
        f"{pose.bone_count} bones, {pose.duration:.2f}s, "
        f"{len(pose.warnings)} warnings)"
    )
    plot_clip(pose)


if __name__ == "__main__":
    main()
