"""Parser for a single AMX module image."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .errors import (
    CompactEncodingError,
    InvalidAddressError,
    InvalidFileVersionError,
    InvalidMagicError,
    InvalidVmVersionError,
    MalformedSegmentError,
    TruncatedError,
    UnterminatedStringError,
)
from .instruction import DEFAULT_CELL_SIZE, Instruction, InstructionDecoder, check_cell_size
from .opcodes import Opcode, OperandKind
from .reader import ByteReader, read_c_string


logger = logging.getLogger(__name__)

AMX_MAGIC = 0xF1E0
FILE_VERSION = 8
AMX_VERSION = 8
HEADER_SIZE = 56
SYMBOL_RECORD_SIZE = 8
NO_ENTRY_POINT = 0xFFFFFFFF
AMX_FLAG_COMPACT = 0x04

# String constants are stored unpacked, one character per cell.  Modules
# with 8-byte cells were only ever observed through the 32-bit stride, so
# the stride stays fixed until a 64-bit fixture proves otherwise.
CONSTANT_STRIDE = 4

SEGMENT_FIELDS = (
    "cod",
    "dat",
    "hea",
    "stp",
    "cip",
    "publics",
    "natives",
    "libraries",
    "pubvars",
    "tags",
    "nametable",
)


@dataclass(frozen=True)
class SymbolEntry:
    """Entry of the public or native function table."""

    name: str
    address: int


class Native(SymbolEntry):
    pass


class Public(SymbolEntry):
    pass


def synthesize_name(address: int) -> str:
    return f"sub_{address:04x}"


class SymbolTable:
    """Name lookups shared by the listing and the function rebuild.

    When several publics point at the same address the first one in table
    order wins.
    """

    def __init__(self, publics: Sequence[Public] = (), natives: Sequence[Native] = ()) -> None:
        self._publics: Dict[int, Public] = {}
        for public in publics:
            self._publics.setdefault(public.address, public)
        self._natives = list(natives)

    def find_public(self, address: int) -> Optional[Public]:
        return self._publics.get(address)

    def public_name(self, address: int) -> Optional[str]:
        public = self._publics.get(address)
        return public.name if public is not None else None

    def native_name(self, index: int) -> Optional[str]:
        if 0 <= index < len(self._natives):
            return self._natives[index].name
        return None

    def function_name(self, address: int) -> str:
        name = self.public_name(address)
        return name if name is not None else synthesize_name(address)

    def annotate(self, instruction: Instruction) -> Optional[str]:
        """Name the callee of a native call or a direct ``call``."""

        if instruction.spec.kind is OperandKind.NATIVE:
            name = self.native_name(instruction.operands[0])
            return f"{name}()" if name is not None else None
        if instruction.opcode is Opcode.CALL:
            return f"{self.function_name(instruction.operands[0])}()"
        return None


class Module:
    """Decoded AMX header together with the owned module image."""

    def __init__(
        self,
        data: bytes,
        *,
        size: int,
        flags: int,
        defsize: int,
        cod: int,
        dat: int,
        hea: int,
        stp: int,
        cip: int,
        publics: int,
        natives: int,
        libraries: int,
        pubvars: int,
        tags: int,
        nametable: int,
        cell_size: int = DEFAULT_CELL_SIZE,
    ) -> None:
        self.data = bytes(data)
        self.size = size
        self.flags = flags
        self.defsize = defsize
        self.cod = cod
        self.dat = dat
        self.hea = hea
        self.stp = stp
        self.cip = cip
        self.publics_offset = publics
        self.natives_offset = natives
        self.libraries = libraries
        self.pubvars = pubvars
        self.tags = tags
        self.nametable = nametable
        self.cell_size = cell_size

    @classmethod
    def parse(cls, data: bytes, *, cell_size: int = DEFAULT_CELL_SIZE) -> "Module":
        check_cell_size(cell_size, stage="module")
        reader = ByteReader(data, stage="module")

        size = reader.u32("size")
        logger.debug("size: %d", size)

        magic = reader.u16("magic")
        if magic != AMX_MAGIC:
            raise InvalidMagicError(AMX_MAGIC, magic, stage="module")

        file_version = reader.u8("file_version")
        if file_version != FILE_VERSION:
            raise InvalidFileVersionError(FILE_VERSION, file_version, stage="module")

        amx_version = reader.u8("amx_version")
        if amx_version != AMX_VERSION:
            raise InvalidVmVersionError(AMX_VERSION, amx_version, stage="module")

        flags = reader.u16("flags")
        defsize = reader.u16("defsize")
        logger.debug("flags: 0x%X defsize: %d", flags, defsize)

        offsets: Dict[str, int] = {}
        for name in SEGMENT_FIELDS:
            offsets[name] = reader.u32(name)
            logger.debug("%s: 0x%X", name, offsets[name])

        return cls(
            data,
            size=size,
            flags=flags,
            defsize=defsize,
            cell_size=cell_size,
            **offsets,
        )

    # ------------------------------------------------------------------
    # segments
    # ------------------------------------------------------------------
    def _slice(self, name: str, start: int, end: int) -> bytes:
        total = len(self.data)
        if not (0 <= start <= end <= total):
            raise MalformedSegmentError(name, start, end, total)
        return self.data[start:end]

    def code_segment(self) -> bytes:
        return self._slice("code segment", self.cod, self.dat)

    def data_segment(self) -> bytes:
        return self._slice("data segment", self.dat, self.hea)

    @property
    def entry_point(self) -> Optional[int]:
        if self.cip == NO_ENTRY_POINT:
            return None
        return self.cip

    def instructions(self) -> List[Instruction]:
        if self.flags & AMX_FLAG_COMPACT:
            raise CompactEncodingError(self.flags)
        return InstructionDecoder(self.cell_size).decode(self.code_segment())

    # ------------------------------------------------------------------
    # symbol tables
    # ------------------------------------------------------------------
    def natives(self) -> List[Native]:
        return self._read_symbols("native table", self.natives_offset, self.libraries, Native)

    def publics(self) -> List[Public]:
        return self._read_symbols("public table", self.publics_offset, self.natives_offset, Public)

    def _read_symbols(self, table: str, start: int, end: int, entry_type):
        region = self._slice(table, start, end)
        entries = []
        for index, record_start in enumerate(range(0, len(region), SYMBOL_RECORD_SIZE)):
            reader = ByteReader(self.data, stage="module", offset=start + record_start)
            if record_start + SYMBOL_RECORD_SIZE > len(region):
                raise TruncatedError(f"{table} record {index}", reader.offset, stage="module")
            address = reader.u32(f"{table} record {index} address")
            name_offset = reader.u32(f"{table} record {index} name offset")
            raw_name = read_c_string(
                self.data, name_offset, what=f"{table} record {index} name", stage="module"
            )
            entries.append(entry_type(name=raw_name.decode("latin-1"), address=address))
        return entries

    def symbols(self) -> SymbolTable:
        return SymbolTable(self.publics(), self.natives())

    def find_public(self, address: int) -> Optional[Public]:
        return self.symbols().find_public(address)

    def native_name(self, index: int) -> Optional[str]:
        return self.symbols().native_name(index)

    # ------------------------------------------------------------------
    # constants
    # ------------------------------------------------------------------
    def read_constant(self, addr: int) -> bytes:
        """Read an unpacked string constant stored at data address ``addr``."""

        data = self.data_segment()
        if not (0 <= addr < len(data)):
            raise InvalidAddressError(addr, len(data))

        chars = bytearray()
        for position in range(addr, len(data), CONSTANT_STRIDE):
            value = data[position]
            if value == 0:
                return bytes(chars)
            chars.append(value)
        raise UnterminatedStringError("constant", self.dat + addr)

    def describe(self) -> dict:
        summary = {
            "size": self.size,
            "flags": self.flags,
            "defsize": self.defsize,
            "cell_size": self.cell_size,
        }
        for name in SEGMENT_FIELDS:
            summary[name] = getattr(self, _ATTRIBUTE_FOR_FIELD.get(name, name))
        return summary

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Module):
            return NotImplemented
        return self.describe() == other.describe() and self.data == other.data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        fields = ", ".join(f"{key}={value}" for key, value in self.describe().items())
        return f"Module({fields})"


_ATTRIBUTE_FOR_FIELD = {"publics": "publics_offset", "natives": "natives_offset"}


__all__ = [
    "AMX_FLAG_COMPACT",
    "AMX_MAGIC",
    "HEADER_SIZE",
    "Module",
    "Native",
    "Public",
    "SymbolEntry",
    "SymbolTable",
    "NO_ENTRY_POINT",
    "synthesize_name",
]
