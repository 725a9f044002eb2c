from __future__ import annotations

import pytest

from amxdisasm.amx import Module, Native, Public
from amxdisasm.ast import ASTBuilder, Function, InstructionNode, Plugin
from amxdisasm.errors import MalformedBytecodeError
from amxdisasm.instruction import Instruction
from amxdisasm.opcodes import FUNCTION_START, Opcode

from amx_builders import two_natives_module


def _stream(*opcodes: Opcode) -> list[Instruction]:
    return [Instruction(8 + 4 * idx, opcode) for idx, opcode in enumerate(opcodes)]


def test_builder_resolves_public_names():
    plugin = ASTBuilder().build(Module.parse(two_natives_module()))

    assert [function.name for function in plugin.functions] == ["func"]
    (function,) = plugin.functions
    assert function.address == 8
    assert function.is_public
    assert [node.instruction.opcode for node in function.body] == [
        Opcode.PUSH_C,
        Opcode.SYSREQ_C,
        Opcode.STACK,
        Opcode.PUSH_C,
        Opcode.SYSREQ_C,
        Opcode.STACK,
        Opcode.ZERO_PRI,
    ]
    assert function.body[1].annotation == "native_one()"
    assert function.body[4].annotation == "native_two()"


def test_builder_synthesizes_names_for_private_functions():
    instructions = _stream(Opcode.PROC, Opcode.RETN, Opcode.PROC, Opcode.RETN)

    plugin = ASTBuilder().build_from_instructions(instructions, [Public("main", 16)])

    assert [(f.name, f.address, f.is_public) for f in plugin.functions] == [
        ("sub_0008", 8, False),
        ("main", 16, True),
    ]


def test_function_count_matches_proc_count():
    instructions = _stream(
        Opcode.PROC, Opcode.ZERO_PRI, Opcode.RETN,
        Opcode.PROC, Opcode.RETN,
        Opcode.PROC, Opcode.INC_PRI, Opcode.BREAK, Opcode.DEC_PRI, Opcode.RETN,
    )

    plugin = ASTBuilder().build_from_instructions(instructions, [])

    starts = sum(1 for i in instructions if i.opcode in FUNCTION_START)
    assert len(plugin.functions) == starts == 3
    assert [len(f.body) for f in plugin.functions] == [1, 0, 2]


def test_multiple_flushes_append_in_order():
    instructions = _stream(
        Opcode.PROC,
        Opcode.CONST_PRI,
        Opcode.BREAK,
        Opcode.PUSH_PRI,
        Opcode.RETN,
    )

    plugin = ASTBuilder().build_from_instructions(instructions, [])

    body = plugin.functions[0].body
    assert [node.instruction.opcode for node in body] == [Opcode.CONST_PRI, Opcode.PUSH_PRI]


def test_every_instruction_attached_at_most_once():
    instructions = _stream(
        Opcode.PROC, Opcode.ZERO_PRI, Opcode.RETN, Opcode.NOP,
        Opcode.PROC, Opcode.INC_PRI, Opcode.RETN, Opcode.DEC_PRI,
    )

    plugin = ASTBuilder().build_from_instructions(instructions, [])

    attached = [node.instruction for f in plugin.functions for node in f.body]
    assert len(attached) == len(set(attached))
    assert [i.opcode for i in attached] == [Opcode.ZERO_PRI, Opcode.INC_PRI]


@pytest.mark.parametrize("terminator", [Opcode.RETN, Opcode.BREAK])
def test_terminator_before_proc_is_malformed(terminator):
    instructions = _stream(Opcode.ZERO_PRI, terminator, Opcode.PROC, Opcode.RETN)

    with pytest.raises(MalformedBytecodeError) as excinfo:
        ASTBuilder().build_from_instructions(instructions, [])

    assert excinfo.value.offset == 12
    assert excinfo.value.stage == "reconstruction"


def test_trailing_code_without_terminator_is_discarded():
    instructions = _stream(Opcode.PROC, Opcode.ZERO_PRI, Opcode.INC_PRI)

    plugin = ASTBuilder().build_from_instructions(instructions, [])

    assert plugin == Plugin(functions=(Function(name="sub_0008", address=8),))


def test_empty_stream_builds_empty_plugin():
    assert ASTBuilder().build_from_instructions([], []) == Plugin()


def test_call_targets_are_annotated():
    instructions = [
        Instruction(8, Opcode.PROC),
        Instruction(12, Opcode.CALL, (0x20,)),
        Instruction(20, Opcode.CALL, (0x40,)),
        Instruction(28, Opcode.SYSREQ_C, (5,)),
        Instruction(36, Opcode.RETN),
    ]

    plugin = ASTBuilder().build_from_instructions(
        instructions, [Public("helper", 0x20)], [Native("print", 0)]
    )

    body = plugin.functions[0].body
    assert body[0] == InstructionNode(instructions[1], "helper()")
    assert body[1].annotation == "sub_0040()"
    assert body[2].annotation is None


def test_first_public_wins_for_duplicate_addresses():
    instructions = _stream(Opcode.PROC, Opcode.RETN)

    plugin = ASTBuilder().build_from_instructions(
        instructions, [Public("first", 8), Public("second", 8)]
    )

    assert plugin.function_named("first") is not None
    assert plugin.function_named("second") is None
