"""Reader for the multi-variant ``.amxx`` container."""

from __future__ import annotations

import logging
import zlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from .errors import (
    CorruptSectionError,
    IncompatibleVersionError,
    InvalidMagicError,
    NoSectionsError,
    SectionIndexError,
    TooManySectionsError,
    TruncatedError,
)
from .instruction import check_cell_size
from .reader import ByteReader

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from .amx import Module


logger = logging.getLogger(__name__)

AMXX_MAGIC = 0x414D5858
AMXX_VERSION = 768
HEADER_SIZE = 7
SECTION_RECORD_SIZE = 17
MAX_SECTIONS = 2


def is_container(data: bytes) -> bool:
    """Return ``True`` when ``data`` starts with the container magic."""

    return len(data) >= 4 and int.from_bytes(data[:4], "little") == AMXX_MAGIC


@dataclass(frozen=True)
class SectionDescriptor:
    """One embedded module variant as described by the container table."""

    index: int
    cell_size: int
    disk_size: int
    image_size: int
    mem_size: int
    offset: int

    @classmethod
    def parse(cls, data: bytes, index: int) -> "SectionDescriptor":
        reader = ByteReader(
            data, stage="section", offset=HEADER_SIZE + index * SECTION_RECORD_SIZE
        )
        descriptor = cls(
            index=index,
            cell_size=check_cell_size(reader.u8(f"section {index} cell size"), stage="section"),
            disk_size=reader.u32(f"section {index} disk size"),
            image_size=reader.u32(f"section {index} image size"),
            mem_size=reader.u32(f"section {index} memory size"),
            offset=reader.u32(f"section {index} offset"),
        )
        logger.debug("section %d: %s", index, descriptor)
        return descriptor

    @property
    def end(self) -> int:
        return self.offset + self.disk_size

    def unpack(self, data: bytes) -> bytes:
        """Inflate the section payload stored in ``data`` into a module image."""

        total = len(data)
        if not (0 <= self.offset <= self.end <= total):
            raise TruncatedError(f"section {self.index} payload", self.offset, stage="section")

        try:
            image = zlib.decompress(data[self.offset : self.end])
        except zlib.error as exc:
            raise CorruptSectionError(self.index, f"inflate failed: {exc}") from exc

        if len(image) != self.image_size:
            raise CorruptSectionError(
                self.index,
                f"expected {self.image_size} bytes after inflating, got {len(image)}",
            )
        return image

    def load_module(self, data: bytes) -> "Module":
        from .amx import Module  # local import to avoid cycle

        return Module.parse(self.unpack(data), cell_size=self.cell_size)


class Container:
    """Validated view over a container buffer.

    The object keeps a reference to the original bytes; section descriptors
    are decoded lazily because the table may legitimately be followed by
    nothing at all when a caller only wants to sanity-check the header.
    """

    def __init__(self, data: bytes, magic: int, version: int, section_count: int) -> None:
        self.data = data
        self.magic = magic
        self.version = version
        self.section_count = section_count

    @classmethod
    def parse(cls, data: bytes) -> "Container":
        reader = ByteReader(data, stage="container")

        magic = reader.u32("magic")
        if magic != AMXX_MAGIC:
            raise InvalidMagicError(AMXX_MAGIC, magic, stage="container")

        version = reader.u16("version")
        if version != AMXX_VERSION:
            raise IncompatibleVersionError(AMXX_VERSION, version, stage="container")

        section_count = reader.u8("section_count")
        if section_count < 1:
            raise NoSectionsError()
        if section_count > MAX_SECTIONS:
            raise TooManySectionsError(section_count, MAX_SECTIONS)

        logger.debug("container: version=%d sections=%d", version, section_count)
        return cls(data, magic, version, section_count)

    def sections(self) -> List[SectionDescriptor]:
        return [SectionDescriptor.parse(self.data, idx) for idx in range(self.section_count)]

    def section(self, index: int) -> SectionDescriptor:
        if not (0 <= index < self.section_count):
            raise SectionIndexError(index, self.section_count)
        return SectionDescriptor.parse(self.data, index)


__all__ = [
    "AMXX_MAGIC",
    "AMXX_VERSION",
    "Container",
    "SectionDescriptor",
    "is_container",
]
