"""Exception hierarchy shared by the parsing, decoding and rebuild stages.

Every error derives from :class:`AmxError` which itself is a
:class:`ValueError`.  Callers that only care about "the input is broken" can
keep catching ``ValueError`` while tooling that wants to point at the
offending byte range can inspect the structured attributes.
"""

from __future__ import annotations

from typing import Optional, Tuple


class AmxError(ValueError):
    """Base class for malformed input reported by any pipeline stage."""

    def __init__(self, message: str, *, stage: str) -> None:
        super().__init__(message)
        self.stage = stage

    def describe(self) -> str:
        return f"{self.stage}: {self}"


class TruncatedError(AmxError):
    """A read ran past the end of the buffer."""

    def __init__(self, field: str, offset: int, *, stage: str) -> None:
        super().__init__(f"EOF while reading {field} at offset 0x{offset:X}", stage=stage)
        self.field = field
        self.offset = offset


class _MismatchError(AmxError):
    label = "value"
    hexadecimal = False

    def __init__(self, expected: int, actual: int, *, stage: str) -> None:
        if self.hexadecimal:
            detail = f"expected 0x{expected:X}, got 0x{actual:X}"
        else:
            detail = f"expected {expected}, got {actual}"
        super().__init__(f"invalid {self.label}, {detail}", stage=stage)
        self.expected = expected
        self.actual = actual


class InvalidMagicError(_MismatchError):
    label = "magic"
    hexadecimal = True


class IncompatibleVersionError(_MismatchError):
    label = "container version"


class InvalidFileVersionError(_MismatchError):
    label = "file version"


class InvalidVmVersionError(_MismatchError):
    label = "amx version"


class InvalidCellSizeError(AmxError):
    """A section or module declares a cell width the decoder cannot handle."""

    def __init__(self, actual: int, supported: Tuple[int, ...], *, stage: str) -> None:
        expected = " or ".join(str(size) for size in supported)
        super().__init__(f"invalid cell size, expected {expected}, got {actual}", stage=stage)
        self.expected = supported
        self.actual = actual


class TooManySectionsError(AmxError):
    def __init__(self, count: int, limit: int) -> None:
        super().__init__(
            f"container declares {count} sections, at most {limit} are supported",
            stage="container",
        )
        self.count = count
        self.limit = limit


class NoSectionsError(AmxError):
    def __init__(self) -> None:
        super().__init__("container declares zero sections", stage="container")


class SectionIndexError(AmxError, IndexError):
    def __init__(self, index: int, count: int) -> None:
        super().__init__(
            f"section {index} requested but the container holds {count}", stage="container"
        )
        self.index = index
        self.count = count


class CorruptSectionError(AmxError):
    """A section could not be inflated into the declared image size."""

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"section {index} is corrupt: {reason}", stage="section")
        self.index = index
        self.reason = reason


class MalformedSegmentError(AmxError):
    """Header offsets describe an inverted or out-of-buffer range."""

    def __init__(self, name: str, start: int, end: int, total: int) -> None:
        super().__init__(
            f"{name} range [0x{start:X}, 0x{end:X}) is invalid for a buffer of {total} bytes",
            stage="module",
        )
        self.name = name
        self.start = start
        self.end = end
        self.total = total


class InvalidAddressError(AmxError):
    def __init__(self, address: int, limit: int) -> None:
        super().__init__(
            f"constant address 0x{address:X} outside data segment of {limit} bytes",
            stage="module",
        )
        self.address = address
        self.limit = limit


class UnterminatedStringError(AmxError):
    def __init__(self, what: str, offset: int) -> None:
        super().__init__(f"{what} at offset 0x{offset:X} has no terminating zero", stage="module")
        self.what = what
        self.offset = offset


class UnknownOpcodeError(AmxError):
    def __init__(self, opcode: int, offset: int) -> None:
        super().__init__(f"unknown opcode 0x{opcode:X} at code offset 0x{offset:X}", stage="decoder")
        self.opcode = opcode
        self.offset = offset


class CompactEncodingError(AmxError):
    """The code segment is stored in the compact variable-length encoding."""

    def __init__(self, flags: int) -> None:
        super().__init__(
            f"compact-encoded code (flags 0x{flags:04X}) is not supported", stage="decoder"
        )
        self.flags = flags


class MalformedBytecodeError(AmxError):
    """The instruction stream violates a structural invariant."""

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        if offset is not None:
            message = f"{message} (code offset 0x{offset:X})"
        super().__init__(message, stage="reconstruction")
        self.offset = offset


__all__ = [
    "AmxError",
    "TruncatedError",
    "InvalidMagicError",
    "IncompatibleVersionError",
    "InvalidFileVersionError",
    "InvalidVmVersionError",
    "InvalidCellSizeError",
    "TooManySectionsError",
    "NoSectionsError",
    "SectionIndexError",
    "CorruptSectionError",
    "MalformedSegmentError",
    "InvalidAddressError",
    "UnterminatedStringError",
    "UnknownOpcodeError",
    "CompactEncodingError",
    "MalformedBytecodeError",
]
