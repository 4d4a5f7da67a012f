"""
Pytest configuration and fixtures for skelanim tests.

``build_anim`` assembles synthetic compressed animation buffers so that
every section can be controlled (and broken) from a test.
"""

import struct

import pytest

from skelanim.core.constants import (
    ANIM_MAGIC,
    V1_INNER_MAGIC,
    V0_SENTINEL,
    SECTION_SENTINEL,
    OFFSET_FPS,
    OFFSET_FRAME_COUNT,
    OFFSET_BONE_FIELD,
    OFFSET_VERSION,
    OFFSET_NAME,
    OUTER_HEADER_SIZE,
    CONTROL_BLOCK_START,
    V1_DATA_START,
)


# =============================================================================
# Buffer Builders
# =============================================================================

def pack_bits(fields):
    """Pack (value, width) pairs LSB-first with no padding."""
    value = 0
    pos = 0
    for v, width in fields:
        value |= (v & ((1 << width) - 1)) << pos
        pos += width
    return value.to_bytes((pos + 7) // 8, 'little')


def pack_codes(codes, words=None):
    """Pack 2-bit codes into u32 words, least significant pair first."""
    if words is None:
        words = (len(codes) + 15) // 16
    packed = [0] * words
    for i, code in enumerate(codes):
        if i // 16 < words:
            packed[i // 16] |= (code & 3) << (2 * (i % 16))
    return struct.pack(f'<{words}I', *packed)


def pack_vec3s(vectors):
    return b''.join(struct.pack('<3f', *v) for v in vectors)


def build_anim(
    bone_count=1,
    frame_count=1,
    rotation_codes=None,
    translation_codes=None,
    scale_codes=None,
    rotation_constants=(),
    translation_constants=(),
    scale_constants=(),
    animated_headers=(),
    segments=None,
    fps=30.0,
    name=None,
    magic=ANIM_MAGIC,
    inner_magic=V1_INNER_MAGIC,
    declared_animated=None,
    bitfield_words=None,
    bitfield_padding=0,
    section_offsets=None,
    control_sentinel=SECTION_SENTINEL,
    boundary_sentinel=SECTION_SENTINEL,
    last_frame=None,
):
    """
    Assemble a compressed ``*.anim`` buffer.

    Args:
        rotation_codes / translation_codes / scale_codes: Per-bone 2-bit
            codes (default: 0 for every bone)
        *_constants: Constant tables as lists of 3-tuples
        animated_headers: (base, range) pairs in animated channel order
        segments: List of dicts with 'frame_start', 'bit_widths', 'anchors'
            (list of 3-tuples) and 'stream' (bytes). Default: one segment
            with zero bit widths and an empty stream.
        Remaining arguments override header fields to produce broken files.

    Returns:
        bytes
    """
    zeros = [0] * bone_count
    codes = list(rotation_codes or zeros) + list(translation_codes or zeros) + list(scale_codes or zeros)
    animated = [
        sum(1 for c in run if c == 2)
        for run in (rotation_codes or zeros, translation_codes or zeros, scale_codes or zeros)
    ]
    total_animated = sum(animated)

    if segments is None:
        segments = [{
            'frame_start': 0,
            'bit_widths': [0] * total_animated,
            'anchors': [(0, 0, 0)] * total_animated,
            'stream': b'',
        }]
    segment_count = len(segments)

    # Data region, offsets relative to its start
    boundaries = b''
    if segment_count >= 2:
        boundaries = struct.pack(
            f'<{segment_count}I', *[s['frame_start'] for s in segments]
        ) + struct.pack('<I', boundary_sentinel)
    bitfield = pack_codes(codes, bitfield_words) + b'\x00' * bitfield_padding
    constants = pack_vec3s(rotation_constants) + pack_vec3s(translation_constants) + pack_vec3s(scale_constants)
    headers = b''.join(pack_vec3s([base, rng]) for base, rng in animated_headers)

    off0 = len(boundaries)
    off1 = off0 + 16 * segment_count
    off2 = off1 + len(bitfield)
    off3 = off2 + len(constants)
    first_body = off3 + len(headers)

    bodies = []
    for s in segments:
        anchors = b''.join(bytes(a) for a in s['anchors'])
        bodies.append(bytes(s['bit_widths']) + anchors + s['stream'])

    descriptors = b''
    offset = first_body
    for i, body in enumerate(bodies):
        frame_end = segments[i + 1]['frame_start'] if i + 1 < segment_count else frame_count
        descriptors += struct.pack('<4I', frame_end, i, 0, offset)
        offset += len(body)

    region = boundaries + descriptors + bitfield + constants + headers + b''.join(bodies)
    # Declared size counts from the control block, not from the data start
    data_size = (V1_DATA_START - CONTROL_BLOCK_START) + len(region)

    if section_offsets is None:
        section_offsets = (off0, off1, off2, off3)
    if declared_animated is None:
        declared_animated = (total_animated,) + tuple(animated)
    if last_frame is None:
        last_frame = max(frame_count - 1, 0)

    header = bytearray(V1_DATA_START)
    struct.pack_into('<I', header, 0, magic)
    struct.pack_into('<f', header, OFFSET_FPS, fps)
    struct.pack_into('<I', header, OFFSET_FRAME_COUNT, frame_count)
    struct.pack_into('<I', header, OFFSET_BONE_FIELD, bone_count)
    struct.pack_into('<I', header, OFFSET_VERSION, 0)

    ac = CONTROL_BLOCK_START
    struct.pack_into('<4I', header, ac, data_size, 0x1234ABCD, inner_magic, 1)
    struct.pack_into('<2I', header, ac + 0x10, bone_count, last_frame)
    struct.pack_into('<f', header, ac + 0x18, fps)
    struct.pack_into('<I', header, ac + 0x20, segment_count)
    struct.pack_into('<4I', header, ac + 0x24, *declared_animated)
    struct.pack_into(
        '<3I', header, ac + 0x34,
        len(rotation_constants), len(translation_constants), len(scale_constants)
    )
    struct.pack_into('<I', header, ac + 0x40, control_sentinel)
    struct.pack_into('<4I', header, ac + 0x44, *section_offsets)

    trailer = b''
    if name is not None:
        struct.pack_into('<I', header, OFFSET_NAME, V1_DATA_START + len(region))
        trailer = name.encode('ascii') + b'\x00'

    return bytes(header) + region + trailer


def build_v0_anim(frame_count=2, bone_count=1):
    """Uncompressed header followed by a 10-float record per bone per frame."""
    header = bytearray(OUTER_HEADER_SIZE)
    struct.pack_into('<I', header, 0, ANIM_MAGIC)
    struct.pack_into('<I', header, OFFSET_FRAME_COUNT, frame_count)
    struct.pack_into('<I', header, OFFSET_BONE_FIELD, bone_count)
    struct.pack_into('<I', header, OFFSET_VERSION, V0_SENTINEL)
    return bytes(header) + b'\x00' * (40 * frame_count * bone_count)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def anim_builder():
    """The buffer builder function."""
    return build_anim


@pytest.fixture
def bit_packer():
    """LSB-first field packer for per-frame streams."""
    return pack_bits


@pytest.fixture
def constants_only_anim():
    """One bone, one frame, every channel constant."""
    return build_anim(
        bone_count=1,
        frame_count=1,
        rotation_constants=[(0.1, 0.2, 0.3)],
        translation_constants=[(1.0, 2.0, 3.0)],
        scale_constants=[(2.0, 2.0, 2.0)],
        name='idle',
    )


@pytest.fixture
def two_frame_rotation_anim():
    """One animated rotation channel, 8-bit samples over two frames."""
    return build_anim(
        bone_count=1,
        frame_count=2,
        rotation_codes=[2],
        translation_constants=[(0.5, 0.0, -0.5)],
        scale_constants=[(1.0, 1.0, 1.0)],
        animated_headers=[((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))],
        segments=[{
            'frame_start': 0,
            'bit_widths': [8],
            'anchors': [(0, 0, 0)],
            'stream': bytes([0x00, 0x00, 0x00, 0xFF, 0xFF, 0xFF]),
        }],
        name='turn',
    )


@pytest.fixture
def multi_segment_anim():
    """
    Three bones, four frames in two segments.

    Bone 0 rotation and bone 2 translation are animated; everything else
    is constant.
    """
    headers = [
        ((-1.0, -1.0, -1.0), (2.0, 2.0, 2.0)),   # bone 0 rotation
        ((0.0, 10.0, 0.0), (4.0, 4.0, 4.0)),     # bone 2 translation
    ]

    def segment(frame_start, frames):
        fields = []
        for rot, trans in frames:
            fields += [(v, 8) for v in rot] + [(v, 4) for v in trans]
        return {
            'frame_start': frame_start,
            'bit_widths': [8, 4],
            'anchors': [(1, 2, 3), (4, 5, 6)],
            'stream': pack_bits(fields),
        }

    return build_anim(
        bone_count=3,
        frame_count=4,
        rotation_codes=[2, 0, 0],
        translation_codes=[0, 0, 2],
        rotation_constants=[(0.0, 0.0, 0.0), (0.0, 0.6, 0.0)],
        translation_constants=[(0.0, 1.0, 0.0), (0.0, 2.0, 0.0)],
        scale_constants=[(1.0, 1.0, 1.0)] * 3,
        animated_headers=headers,
        segments=[
            segment(0, [((0, 0, 0), (0, 0, 0)), ((255, 255, 255), (15, 15, 15))]),
            segment(2, [((0, 255, 0), (0, 15, 0)), ((255, 0, 255), (15, 0, 15))]),
        ],
        name='walk',
    )


@pytest.fixture
def anim_dir(tmp_path, constants_only_anim, two_frame_rotation_anim, multi_segment_anim):
    """Directory with three valid clips, one broken clip and a non-anim file."""
    (tmp_path / 'idle.anim').write_bytes(constants_only_anim)
    (tmp_path / 'turn.anim').write_bytes(two_frame_rotation_anim)
    sub = tmp_path / 'locomotion'
    sub.mkdir()
    (sub / 'walk.anim').write_bytes(multi_segment_anim)
    (sub / 'broken.anim').write_bytes(multi_segment_anim[:len(multi_segment_anim) // 2])
    (tmp_path / 'notes.txt').write_text('not an animation')
    return tmp_path


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "scenario: end-to-end decodes of hand-built files"
    )
