import pytest

from amxdisasm.errors import InvalidCellSizeError, TruncatedError, UnknownOpcodeError
from amxdisasm.instruction import Instruction, InstructionDecoder, read_instructions
from amxdisasm.opcodes import OPCODE_TABLE, Opcode, lookup

from amx_builders import cells, prolog


def test_prolog_is_skipped_and_offsets_are_segment_relative():
    code = prolog() + cells(Opcode.PROC, Opcode.CONST_PRI, 7, Opcode.RETN)

    instructions = read_instructions(code)

    assert instructions == [
        Instruction(8, Opcode.PROC),
        Instruction(12, Opcode.CONST_PRI, (7,)),
        Instruction(20, Opcode.RETN),
    ]


def test_prolog_only_segment_yields_nothing():
    assert read_instructions(prolog()) == []


def test_segment_shorter_than_prolog_is_truncated():
    with pytest.raises(TruncatedError) as excinfo:
        read_instructions(b"\0" * 6)

    assert excinfo.value.field == "prolog"
    assert excinfo.value.stage == "decoder"


def test_operands_are_signed_cells():
    code = prolog() + cells(Opcode.STACK, -4)

    (instruction,) = read_instructions(code)

    assert instruction.operands == (-4,)
    assert instruction.format() == "stack -4"


def test_unknown_opcode_aborts_decoding():
    code = prolog() + cells(Opcode.PROC, 0x7E, Opcode.RETN)

    with pytest.raises(UnknownOpcodeError) as excinfo:
        read_instructions(code)

    assert excinfo.value.opcode == 0x7E
    assert excinfo.value.offset == 12


def test_synthetic_case_value_is_not_decodable():
    with pytest.raises(UnknownOpcodeError):
        read_instructions(prolog() + cells(Opcode.CASE))


def test_operand_past_segment_end_is_truncated():
    code = prolog() + cells(Opcode.PROC, Opcode.PUSH_C)

    with pytest.raises(TruncatedError, match="push.c operand"):
        read_instructions(code)


def test_partial_opcode_cell_is_truncated():
    with pytest.raises(TruncatedError, match="opcode"):
        read_instructions(prolog() + b"\x2e\x00")


def test_case_table_is_unrolled():
    code = prolog() + cells(
        Opcode.CASETBL, 2, 0x40,
        1, 0x50,
        2, 0x60,
        Opcode.NOP,
    )

    instructions = read_instructions(code)

    assert [i.opcode for i in instructions] == [
        Opcode.CASETBL,
        Opcode.CASE,
        Opcode.CASE,
        Opcode.NOP,
    ]
    assert instructions[0].operands == (2, 0x40)
    assert instructions[1] == Instruction(20, Opcode.CASE, (1, 0x50))
    assert instructions[2] == Instruction(28, Opcode.CASE, (2, 0x60))
    assert instructions[0].format() == "casetbl 2 default 0x0040"
    assert instructions[1].format() == "case 1 -> 0x0050"


def test_case_table_with_missing_records_is_truncated():
    code = prolog() + cells(Opcode.CASETBL, 3, 0x40, 1, 0x50)

    with pytest.raises(TruncatedError, match="case value"):
        read_instructions(code)


def test_eight_byte_cells():
    code = prolog(8) + cells(Opcode.PROC, Opcode.PUSH_C, -1, Opcode.RETN, cell_size=8)

    instructions = InstructionDecoder(cell_size=8).decode(code)

    assert instructions == [
        Instruction(16, Opcode.PROC),
        Instruction(24, Opcode.PUSH_C, (-1,)),
        Instruction(40, Opcode.RETN),
    ]


def test_decoder_rejects_unsupported_cell_size():
    with pytest.raises(InvalidCellSizeError) as excinfo:
        InstructionDecoder(cell_size=2)

    assert excinfo.value.stage == "decoder"


def test_decoding_is_deterministic():
    code = prolog() + cells(Opcode.PROC, Opcode.JUMP, 0x10, Opcode.RETN)
    decoder = InstructionDecoder()

    assert decoder.decode(code) == decoder.decode(code)


def test_address_operands_render_in_hex():
    instruction = Instruction(8, Opcode.JZER, (0x2C,))

    assert instruction.format() == "jzer 0x002C"


def test_opcode_table_covers_every_opcode():
    assert set(OPCODE_TABLE) == set(Opcode)
    assert lookup(0x89) is Opcode.BREAK
    assert lookup(0x7E) is None
    assert Opcode.SYSREQ_C.mnemonic == "sysreq.c"


def test_casetbl_is_the_only_variable_width_opcode():
    variable = [opcode for opcode, spec in OPCODE_TABLE.items() if spec.variable]

    assert variable == [Opcode.CASETBL]
