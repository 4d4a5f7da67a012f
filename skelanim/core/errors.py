"""
Error and warning types raised while decoding ``*.anim`` buffers.

Every failure is scoped to a single file: an exception carries the error
kind, the byte offset where decoding stopped and (once known) the name of
the file it came from. Conditions that do not stop decoding are reported as
:class:`DecodeWarning` records attached to the decoded pose sequence.
"""

from enum import Enum
from typing import NamedTuple, Optional


class ErrorKind(str, Enum):
    """Structured error categories reported for a malformed file."""
    BAD_MAGIC = 'BadMagic'
    UNSUPPORTED_VERSION = 'UnsupportedVersion'
    TRUNCATED = 'Truncated'
    BAD_BITFIELD = 'BadBitfield'
    INVALID_SEGMENT = 'InvalidSegment'
    SECTION_SIZE_MISMATCH = 'SectionSizeMismatch'
    OUT_OF_BOUNDS = 'OutOfBounds'


# =============================================================================
# Exceptions
# =============================================================================

class AnimFormatError(Exception):
    """Base exception for ``*.anim`` decoding errors."""

    kind: ErrorKind = ErrorKind.OUT_OF_BOUNDS

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        source: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.source = source

    def with_source(self, source: Optional[str]) -> 'AnimFormatError':
        """Attach the originating file name and return self."""
        if source is not None and self.source is None:
            self.source = source
        return self

    def __reduce__(self):
        return (_rebuild_error, (type(self), self.message, self.offset, self.source))

    def __str__(self) -> str:
        where = f" at 0x{self.offset:X}" if self.offset is not None else ""
        prefix = f"{self.source}: " if self.source else ""
        return f"{prefix}{self.kind.value}{where}: {self.message}"


def _rebuild_error(cls, message, offset, source):
    return cls(message, offset=offset, source=source)


class BadMagicError(AnimFormatError):
    """Outer or inner magic value does not match."""
    kind = ErrorKind.BAD_MAGIC


class UnsupportedVersionError(AnimFormatError):
    """File uses a variant this decoder does not handle (V0)."""
    kind = ErrorKind.UNSUPPORTED_VERSION


class TruncatedError(AnimFormatError):
    """Buffer is shorter than the header or declared data region requires."""
    kind = ErrorKind.TRUNCATED


class BadBitfieldError(AnimFormatError):
    """Classification bitfield has an invalid size."""
    kind = ErrorKind.BAD_BITFIELD


class InvalidSegmentError(AnimFormatError):
    """Segment table or segment body is inconsistent."""
    kind = ErrorKind.INVALID_SEGMENT


class OutOfBoundsError(AnimFormatError):
    """A read or computed span falls outside its enclosing region."""
    kind = ErrorKind.OUT_OF_BOUNDS


class SectionSizeMismatchError(AnimFormatError):
    """Section spans disagree with their contents (strict mode only)."""
    kind = ErrorKind.SECTION_SIZE_MISMATCH


ERROR_CLASSES = {
    cls.kind: cls for cls in (
        BadMagicError,
        UnsupportedVersionError,
        TruncatedError,
        BadBitfieldError,
        InvalidSegmentError,
        OutOfBoundsError,
        SectionSizeMismatchError,
    )
}


# =============================================================================
# Warnings
# =============================================================================

class DecodeWarning(NamedTuple):
    """A non-fatal validation finding."""
    kind: ErrorKind
    message: str
    offset: Optional[int] = None

    def __str__(self) -> str:
        where = f" at 0x{self.offset:X}" if self.offset is not None else ""
        return f"{self.kind.value}{where}: {self.message}"

    def to_error(self) -> AnimFormatError:
        """Escalate this warning into the matching exception."""
        return ERROR_CLASSES[self.kind](self.message, offset=self.offset)
