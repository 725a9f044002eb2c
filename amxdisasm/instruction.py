"""Decoding of the code segment into :class:`Instruction` records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .errors import InvalidCellSizeError, UnknownOpcodeError
from .opcodes import OPCODE_TABLE, Opcode, OpcodeSpec, OperandKind, lookup
from .reader import ByteReader


DEFAULT_CELL_SIZE = 4
CELL_SIZES = (4, 8)
PROLOG_CELLS = 2


def check_cell_size(cell_size: int, *, stage: str) -> int:
    if cell_size not in CELL_SIZES:
        raise InvalidCellSizeError(cell_size, CELL_SIZES, stage=stage)
    return cell_size


@dataclass(frozen=True)
class Instruction:
    offset: int
    opcode: Opcode
    operands: Tuple[int, ...] = ()

    @property
    def spec(self) -> OpcodeSpec:
        return OPCODE_TABLE[self.opcode]

    @property
    def mnemonic(self) -> str:
        return self.spec.mnemonic

    def format_operands(self) -> str:
        """Return the operand text used by both the listing and the AST."""

        operands = self.operands
        if self.opcode is Opcode.CASETBL:
            count, default = operands
            return f"{count} default 0x{default:04X}"
        if self.opcode is Opcode.CASE:
            value, target = operands
            return f"{value} -> 0x{target:04X}"
        if self.spec.kind is OperandKind.ADDRESS:
            return " ".join(f"0x{value:04X}" for value in operands)
        return " ".join(str(value) for value in operands)

    def format(self) -> str:
        operands = self.format_operands()
        if operands:
            return f"{self.mnemonic} {operands}"
        return self.mnemonic


class InstructionDecoder:
    """Turn a raw code segment into an ordered list of instructions.

    The first two cells of every code segment are reserved by the VM (the
    compiler emits ``halt 0`` there) and are skipped.  Decoding is strict:
    an unknown opcode or an operand that runs past the segment aborts the
    whole pass because every later offset would be misaligned anyway.
    """

    def __init__(self, cell_size: int = DEFAULT_CELL_SIZE) -> None:
        self.cell_size = check_cell_size(cell_size, stage="decoder")

    def decode(self, code: bytes) -> List[Instruction]:
        reader = ByteReader(code, stage="decoder")
        reader.read_bytes(PROLOG_CELLS * self.cell_size, "prolog")

        instructions: List[Instruction] = []
        while not reader.at_end():
            instructions.extend(self._read_from(reader))
        return instructions

    def _read_from(self, reader: ByteReader) -> List[Instruction]:
        offset = reader.offset
        raw = reader.cell(self.cell_size, "opcode", signed=False)
        opcode = lookup(raw)
        if opcode is None:
            raise UnknownOpcodeError(raw, offset)

        spec = OPCODE_TABLE[opcode]
        if spec.variable:
            return self._read_case_table(reader, offset)

        operands = tuple(
            reader.cell(self.cell_size, f"{spec.mnemonic} operand")
            for _ in range(spec.operands)
        )
        return [Instruction(offset, opcode, operands)]

    def _read_case_table(self, reader: ByteReader, offset: int) -> List[Instruction]:
        # every record consumes bytes, so a bogus count ends in TruncatedError
        count = reader.cell(self.cell_size, "casetbl count", signed=False)
        default = reader.cell(self.cell_size, "casetbl default")
        records = [Instruction(offset, Opcode.CASETBL, (count, default))]
        for _ in range(count):
            offset = reader.offset
            value = reader.cell(self.cell_size, "case value")
            target = reader.cell(self.cell_size, "case target")
            records.append(Instruction(offset, Opcode.CASE, (value, target)))
        return records


def read_instructions(code: bytes, cell_size: int = DEFAULT_CELL_SIZE) -> List[Instruction]:
    """Decode ``code`` with a fresh :class:`InstructionDecoder`."""

    return InstructionDecoder(cell_size).decode(code)


__all__ = [
    "CELL_SIZES",
    "DEFAULT_CELL_SIZE",
    "Instruction",
    "InstructionDecoder",
    "check_cell_size",
    "read_instructions",
]
