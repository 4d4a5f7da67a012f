"""
LSB-first variable-width bit reader for per-frame sample streams.

Bit ``i`` of a value read at bit position ``pos`` is bit ``(pos + i) % 8``
of byte ``(pos + i) // 8``. Fields are packed back to back with no padding.
Reading past the end of the buffer yields zero bits instead of failing, so
callers are expected to know the exact bit length of the stream up front.

Distinct from the classification bitfield reader in
:mod:`skelanim.format.channels`, which walks 2-bit codes inside u32 words.
"""

from typing import Tuple, Union

from ..core.constants import MAX_BIT_WIDTH

Buffer = Union[bytes, bytearray, memoryview]


class BitReader:
    """Sequential reader of unsigned fields up to 32 bits wide."""
    __slots__ = ('data', 'bit_pos', '_size')

    def __init__(self, data: Buffer, bit_offset: int = 0):
        """
        Args:
            data: Byte buffer holding the stream (already sliced to its body)
            bit_offset: Starting bit position
        """
        self.data = data
        self.bit_pos = bit_offset
        self._size = len(data)

    @property
    def bit_length(self) -> int:
        return self._size * 8

    def read(self, n: int) -> int:
        """
        Read an ``n``-bit unsigned integer and advance by ``n`` bits.

        Args:
            n: Field width in bits, 0 <= n <= 32

        Returns:
            The decoded value (0 when ``n == 0``)
        """
        if n < 0 or n > MAX_BIT_WIDTH:
            raise ValueError(f"bit width must be in [0, {MAX_BIT_WIDTH}], got {n}")
        if n == 0:
            return 0

        pos = self.bit_pos
        self.bit_pos = pos + n

        byte_index = pos >> 3
        shift = pos & 7
        # Gather enough whole bytes to cover shift + n bits (at most 5)
        needed = (shift + n + 7) >> 3
        chunk = 0
        for i in range(needed):
            idx = byte_index + i
            if idx < self._size:
                chunk |= self.data[idx] << (8 * i)
        return (chunk >> shift) & ((1 << n) - 1)

    def read_vec3(self, n: int) -> Tuple[int, int, int]:
        """Read three consecutive ``n``-bit fields (x, y, z)."""
        return self.read(n), self.read(n), self.read(n)

    def skip(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"cannot skip a negative bit count ({n})")
        self.bit_pos += n

    def tell(self) -> int:
        return self.bit_pos
