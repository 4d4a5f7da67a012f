"""
Bounds-checked little-endian reader over an immutable byte buffer.

A cursor is a (buffer, position, limit) triple. Every read checks the
limit and raises a structured :class:`~skelanim.core.errors.AnimFormatError`
naming the region and the offending offset instead of returning garbage.
Sub-cursors restrict reads to one section of the file.
"""

import struct
from typing import Tuple, Type, Union

import numpy as np

from ..core.errors import AnimFormatError, OutOfBoundsError

Buffer = Union[bytes, bytearray, memoryview]

_U32 = struct.Struct('<I')
_F32 = struct.Struct('<f')
_VEC3 = struct.Struct('<3f')


class ByteCursor:
    """Sequential reader restricted to ``[start, limit)`` of a buffer."""
    __slots__ = ('data', 'pos', 'start', 'limit', 'region', 'error_cls')

    def __init__(
        self,
        data: Buffer,
        start: int = 0,
        limit: int = None,
        region: str = 'buffer',
        error_cls: Type[AnimFormatError] = OutOfBoundsError
    ):
        """
        Args:
            data: Immutable source buffer
            start: First readable absolute offset
            limit: One past the last readable absolute offset (default: end)
            region: Name used in error messages
            error_cls: Exception raised when a read crosses ``limit``
        """
        self.data = memoryview(data).toreadonly() if not isinstance(data, memoryview) else data
        total = len(self.data)
        self.limit = total if limit is None else limit
        self.start = start
        self.pos = start
        self.region = region
        self.error_cls = error_cls
        if start < 0 or self.limit < start:
            raise OutOfBoundsError(
                f"{region} spans a negative range [{start}, {self.limit})", offset=start
            )
        if self.limit > total:
            raise self.error_cls(
                f"{region} ends at {self.limit} but buffer holds {total} bytes",
                offset=total
            )

    # -------------------------------------------------------------------------
    # Position
    # -------------------------------------------------------------------------

    @property
    def remaining(self) -> int:
        return self.limit - self.pos

    def tell(self) -> int:
        return self.pos

    def seek(self, offset: int) -> 'ByteCursor':
        """Move to an absolute offset inside the region."""
        if offset < self.start or offset > self.limit:
            raise self.error_cls(
                f"seek outside {self.region} [{self.start}, {self.limit})", offset=offset
            )
        self.pos = offset
        return self

    def skip(self, count: int) -> 'ByteCursor':
        self._require(count)
        self.pos += count
        return self

    def sub(self, start: int, limit: int, region: str) -> 'ByteCursor':
        """Cursor over ``[start, limit)``, which must lie inside this region."""
        if start > limit:
            raise OutOfBoundsError(
                f"{region} has negative span ({start} > {limit})", offset=start
            )
        if start < self.start or limit > self.limit:
            raise self.error_cls(
                f"{region} [{start}, {limit}) exceeds {self.region} "
                f"[{self.start}, {self.limit})",
                offset=max(start, min(limit, self.limit))
            )
        return ByteCursor(self.data, start, limit, region, self.error_cls)

    def _require(self, count: int) -> None:
        if count < 0 or self.pos + count > self.limit:
            raise self.error_cls(
                f"read of {count} bytes from {self.region} at {self.pos} "
                f"crosses its end ({self.limit})",
                offset=self.pos
            )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def u8(self) -> int:
        self._require(1)
        value = self.data[self.pos]
        self.pos += 1
        return value

    def u32(self) -> int:
        self._require(4)
        value = _U32.unpack_from(self.data, self.pos)[0]
        self.pos += 4
        return value

    def f32(self) -> float:
        self._require(4)
        value = _F32.unpack_from(self.data, self.pos)[0]
        self.pos += 4
        return value

    def vec3(self) -> Tuple[float, float, float]:
        self._require(12)
        value = _VEC3.unpack_from(self.data, self.pos)
        self.pos += 12
        return value

    def u32_array(self, count: int) -> Tuple[int, ...]:
        self._require(4 * count)
        values = struct.unpack_from(f'<{count}I', self.data, self.pos)
        self.pos += 4 * count
        return values

    def f32_array(self, count: int) -> np.ndarray:
        """Read ``count`` float32 values into a fresh numpy array."""
        self._require(4 * count)
        values = np.frombuffer(self.data, dtype='<f4', count=count, offset=self.pos).copy()
        self.pos += 4 * count
        return values

    def read_bytes(self, count: int) -> bytes:
        self._require(count)
        value = bytes(self.data[self.pos:self.pos + count])
        self.pos += count
        return value

    def peek_u32(self, offset: int) -> int:
        """Read a u32 at an absolute offset without moving."""
        if offset < self.start or offset + 4 > self.limit:
            raise self.error_cls(
                f"u32 at {offset} outside {self.region} [{self.start}, {self.limit})",
                offset=offset
            )
        return _U32.unpack_from(self.data, offset)[0]
