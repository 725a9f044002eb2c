"""Closed opcode set of the AMX Mod X flavoured Pawn VM.

Each opcode occupies one cell in the code segment and is followed by a fixed
number of operand cells.  ``CASETBL`` is the only variable-width entry: a
record count and a default target followed by ``count`` value/target pairs.
``CASE`` never appears in a code segment; the decoder synthesises one per
case-table record so that every jump target shows up as its own instruction.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Optional


class Opcode(enum.IntEnum):
    NONE = 0x00
    LOAD_PRI = 0x01
    LOAD_ALT = 0x02
    LOAD_S_PRI = 0x03
    LOAD_S_ALT = 0x04
    LREF_PRI = 0x05
    LREF_ALT = 0x06
    LREF_S_PRI = 0x07
    LREF_S_ALT = 0x08
    LOAD_I = 0x09
    LODB_I = 0x0A
    CONST_PRI = 0x0B
    CONST_ALT = 0x0C
    ADDR_PRI = 0x0D
    ADDR_ALT = 0x0E
    STOR_PRI = 0x0F
    STOR_ALT = 0x10
    STOR_S_PRI = 0x11
    STOR_S_ALT = 0x12
    SREF_PRI = 0x13
    SREF_ALT = 0x14
    SREF_S_PRI = 0x15
    SREF_S_ALT = 0x16
    STOR_I = 0x17
    STRB_I = 0x18
    LIDX = 0x19
    LIDX_B = 0x1A
    IDXADDR = 0x1B
    IDXADDR_B = 0x1C
    ALIGN_PRI = 0x1D
    ALIGN_ALT = 0x1E
    LCTRL = 0x1F
    SCTRL = 0x20
    MOVE_PRI = 0x21
    MOVE_ALT = 0x22
    XCHG = 0x23
    PUSH_PRI = 0x24
    PUSH_ALT = 0x25
    PUSH_R = 0x26
    PUSH_C = 0x27
    PUSH = 0x28
    PUSH_S = 0x29
    POP_PRI = 0x2A
    POP_ALT = 0x2B
    STACK = 0x2C
    HEAP = 0x2D
    PROC = 0x2E
    RET = 0x2F
    RETN = 0x30
    CALL = 0x31
    CALL_PRI = 0x32
    JUMP = 0x33
    JREL = 0x34
    JZER = 0x35
    JNZ = 0x36
    JEQ = 0x37
    JNEQ = 0x38
    JLESS = 0x39
    JLEQ = 0x3A
    JGRTR = 0x3B
    JGEQ = 0x3C
    JSLESS = 0x3D
    JSLEQ = 0x3E
    JSGRTR = 0x3F
    JSGEQ = 0x40
    SHL = 0x41
    SHR = 0x42
    SSHR = 0x43
    SHL_C_PRI = 0x44
    SHL_C_ALT = 0x45
    SHR_C_PRI = 0x46
    SHR_C_ALT = 0x47
    SMUL = 0x48
    SDIV = 0x49
    SDIV_ALT = 0x4A
    UMUL = 0x4B
    UDIV = 0x4C
    UDIV_ALT = 0x4D
    ADD = 0x4E
    SUB = 0x4F
    SUB_ALT = 0x50
    AND = 0x51
    OR = 0x52
    XOR = 0x53
    NOT = 0x54
    NEG = 0x55
    INVERT = 0x56
    ADD_C = 0x57
    SMUL_C = 0x58
    ZERO_PRI = 0x59
    ZERO_ALT = 0x5A
    ZERO = 0x5B
    ZERO_S = 0x5C
    SIGN_PRI = 0x5D
    SIGN_ALT = 0x5E
    EQ = 0x5F
    NEQ = 0x60
    LESS = 0x61
    LEQ = 0x62
    GRTR = 0x63
    GEQ = 0x64
    SLESS = 0x65
    SLEQ = 0x66
    SGRTR = 0x67
    SGEQ = 0x68
    EQ_C_PRI = 0x69
    EQ_C_ALT = 0x6A
    INC_PRI = 0x6B
    INC_ALT = 0x6C
    INC = 0x6D
    INC_S = 0x6E
    INC_I = 0x6F
    DEC_PRI = 0x70
    DEC_ALT = 0x71
    DEC = 0x72
    DEC_S = 0x73
    DEC_I = 0x74
    MOVS = 0x75
    CMPS = 0x76
    FILL = 0x77
    HALT = 0x78
    BOUNDS = 0x79
    SYSREQ_PRI = 0x7A
    SYSREQ_C = 0x7B
    FILE = 0x7C
    LINE = 0x7D
    SRANGE = 0x7F
    JUMP_PRI = 0x80
    SWITCH = 0x81
    CASETBL = 0x82
    SWAP_PRI = 0x83
    SWAP_ALT = 0x84
    PUSH_ADR = 0x85
    NOP = 0x86
    SYSREQ_D = 0x87
    SYMTAG = 0x88
    BREAK = 0x89

    CASE = 0x1000

    @property
    def mnemonic(self) -> str:
        return OPCODE_TABLE[self].mnemonic


class OperandKind(enum.Enum):
    """How an operand cell should be interpreted when rendered."""

    VALUE = "value"
    ADDRESS = "address"
    NATIVE = "native"


@dataclass(frozen=True)
class OpcodeSpec:
    mnemonic: str
    operands: int = 0
    kind: OperandKind = OperandKind.VALUE
    variable: bool = False


_ADDR = OperandKind.ADDRESS

OPCODE_TABLE: Dict[Opcode, OpcodeSpec] = {
    Opcode.NONE: OpcodeSpec("none"),
    Opcode.LOAD_PRI: OpcodeSpec("load.pri", 1),
    Opcode.LOAD_ALT: OpcodeSpec("load.alt", 1),
    Opcode.LOAD_S_PRI: OpcodeSpec("load.s.pri", 1),
    Opcode.LOAD_S_ALT: OpcodeSpec("load.s.alt", 1),
    Opcode.LREF_PRI: OpcodeSpec("lref.pri", 1),
    Opcode.LREF_ALT: OpcodeSpec("lref.alt", 1),
    Opcode.LREF_S_PRI: OpcodeSpec("lref.s.pri", 1),
    Opcode.LREF_S_ALT: OpcodeSpec("lref.s.alt", 1),
    Opcode.LOAD_I: OpcodeSpec("load.i"),
    Opcode.LODB_I: OpcodeSpec("lodb.i", 1),
    Opcode.CONST_PRI: OpcodeSpec("const.pri", 1),
    Opcode.CONST_ALT: OpcodeSpec("const.alt", 1),
    Opcode.ADDR_PRI: OpcodeSpec("addr.pri", 1),
    Opcode.ADDR_ALT: OpcodeSpec("addr.alt", 1),
    Opcode.STOR_PRI: OpcodeSpec("stor.pri", 1),
    Opcode.STOR_ALT: OpcodeSpec("stor.alt", 1),
    Opcode.STOR_S_PRI: OpcodeSpec("stor.s.pri", 1),
    Opcode.STOR_S_ALT: OpcodeSpec("stor.s.alt", 1),
    Opcode.SREF_PRI: OpcodeSpec("sref.pri", 1),
    Opcode.SREF_ALT: OpcodeSpec("sref.alt", 1),
    Opcode.SREF_S_PRI: OpcodeSpec("sref.s.pri", 1),
    Opcode.SREF_S_ALT: OpcodeSpec("sref.s.alt", 1),
    Opcode.STOR_I: OpcodeSpec("stor.i"),
    Opcode.STRB_I: OpcodeSpec("strb.i", 1),
    Opcode.LIDX: OpcodeSpec("lidx"),
    Opcode.LIDX_B: OpcodeSpec("lidx.b", 1),
    Opcode.IDXADDR: OpcodeSpec("idxaddr"),
    Opcode.IDXADDR_B: OpcodeSpec("idxaddr.b", 1),
    Opcode.ALIGN_PRI: OpcodeSpec("align.pri", 1),
    Opcode.ALIGN_ALT: OpcodeSpec("align.alt", 1),
    Opcode.LCTRL: OpcodeSpec("lctrl", 1),
    Opcode.SCTRL: OpcodeSpec("sctrl", 1),
    Opcode.MOVE_PRI: OpcodeSpec("move.pri"),
    Opcode.MOVE_ALT: OpcodeSpec("move.alt"),
    Opcode.XCHG: OpcodeSpec("xchg"),
    Opcode.PUSH_PRI: OpcodeSpec("push.pri"),
    Opcode.PUSH_ALT: OpcodeSpec("push.alt"),
    Opcode.PUSH_R: OpcodeSpec("push.r", 1),
    Opcode.PUSH_C: OpcodeSpec("push.c", 1),
    Opcode.PUSH: OpcodeSpec("push", 1),
    Opcode.PUSH_S: OpcodeSpec("push.s", 1),
    Opcode.POP_PRI: OpcodeSpec("pop.pri"),
    Opcode.POP_ALT: OpcodeSpec("pop.alt"),
    Opcode.STACK: OpcodeSpec("stack", 1),
    Opcode.HEAP: OpcodeSpec("heap", 1),
    Opcode.PROC: OpcodeSpec("proc"),
    Opcode.RET: OpcodeSpec("ret"),
    Opcode.RETN: OpcodeSpec("retn"),
    Opcode.CALL: OpcodeSpec("call", 1, _ADDR),
    Opcode.CALL_PRI: OpcodeSpec("call.pri"),
    Opcode.JUMP: OpcodeSpec("jump", 1, _ADDR),
    Opcode.JREL: OpcodeSpec("jrel", 1),
    Opcode.JZER: OpcodeSpec("jzer", 1, _ADDR),
    Opcode.JNZ: OpcodeSpec("jnz", 1, _ADDR),
    Opcode.JEQ: OpcodeSpec("jeq", 1, _ADDR),
    Opcode.JNEQ: OpcodeSpec("jneq", 1, _ADDR),
    Opcode.JLESS: OpcodeSpec("jless", 1, _ADDR),
    Opcode.JLEQ: OpcodeSpec("jleq", 1, _ADDR),
    Opcode.JGRTR: OpcodeSpec("jgrtr", 1, _ADDR),
    Opcode.JGEQ: OpcodeSpec("jgeq", 1, _ADDR),
    Opcode.JSLESS: OpcodeSpec("jsless", 1, _ADDR),
    Opcode.JSLEQ: OpcodeSpec("jsleq", 1, _ADDR),
    Opcode.JSGRTR: OpcodeSpec("jsgrtr", 1, _ADDR),
    Opcode.JSGEQ: OpcodeSpec("jsgeq", 1, _ADDR),
    Opcode.SHL: OpcodeSpec("shl"),
    Opcode.SHR: OpcodeSpec("shr"),
    Opcode.SSHR: OpcodeSpec("sshr"),
    Opcode.SHL_C_PRI: OpcodeSpec("shl.c.pri", 1),
    Opcode.SHL_C_ALT: OpcodeSpec("shl.c.alt", 1),
    Opcode.SHR_C_PRI: OpcodeSpec("shr.c.pri", 1),
    Opcode.SHR_C_ALT: OpcodeSpec("shr.c.alt", 1),
    Opcode.SMUL: OpcodeSpec("smul"),
    Opcode.SDIV: OpcodeSpec("sdiv"),
    Opcode.SDIV_ALT: OpcodeSpec("sdiv.alt"),
    Opcode.UMUL: OpcodeSpec("umul"),
    Opcode.UDIV: OpcodeSpec("udiv"),
    Opcode.UDIV_ALT: OpcodeSpec("udiv.alt"),
    Opcode.ADD: OpcodeSpec("add"),
    Opcode.SUB: OpcodeSpec("sub"),
    Opcode.SUB_ALT: OpcodeSpec("sub.alt"),
    Opcode.AND: OpcodeSpec("and"),
    Opcode.OR: OpcodeSpec("or"),
    Opcode.XOR: OpcodeSpec("xor"),
    Opcode.NOT: OpcodeSpec("not"),
    Opcode.NEG: OpcodeSpec("neg"),
    Opcode.INVERT: OpcodeSpec("invert"),
    Opcode.ADD_C: OpcodeSpec("add.c", 1),
    Opcode.SMUL_C: OpcodeSpec("smul.c", 1),
    Opcode.ZERO_PRI: OpcodeSpec("zero.pri"),
    Opcode.ZERO_ALT: OpcodeSpec("zero.alt"),
    Opcode.ZERO: OpcodeSpec("zero", 1),
    Opcode.ZERO_S: OpcodeSpec("zero.s", 1),
    Opcode.SIGN_PRI: OpcodeSpec("sign.pri"),
    Opcode.SIGN_ALT: OpcodeSpec("sign.alt"),
    Opcode.EQ: OpcodeSpec("eq"),
    Opcode.NEQ: OpcodeSpec("neq"),
    Opcode.LESS: OpcodeSpec("less"),
    Opcode.LEQ: OpcodeSpec("leq"),
    Opcode.GRTR: OpcodeSpec("grtr"),
    Opcode.GEQ: OpcodeSpec("geq"),
    Opcode.SLESS: OpcodeSpec("sless"),
    Opcode.SLEQ: OpcodeSpec("sleq"),
    Opcode.SGRTR: OpcodeSpec("sgrtr"),
    Opcode.SGEQ: OpcodeSpec("sgeq"),
    Opcode.EQ_C_PRI: OpcodeSpec("eq.c.pri", 1),
    Opcode.EQ_C_ALT: OpcodeSpec("eq.c.alt", 1),
    Opcode.INC_PRI: OpcodeSpec("inc.pri"),
    Opcode.INC_ALT: OpcodeSpec("inc.alt"),
    Opcode.INC: OpcodeSpec("inc", 1),
    Opcode.INC_S: OpcodeSpec("inc.s", 1),
    Opcode.INC_I: OpcodeSpec("inc.i"),
    Opcode.DEC_PRI: OpcodeSpec("dec.pri"),
    Opcode.DEC_ALT: OpcodeSpec("dec.alt"),
    Opcode.DEC: OpcodeSpec("dec", 1),
    Opcode.DEC_S: OpcodeSpec("dec.s", 1),
    Opcode.DEC_I: OpcodeSpec("dec.i"),
    Opcode.MOVS: OpcodeSpec("movs", 1),
    Opcode.CMPS: OpcodeSpec("cmps", 1),
    Opcode.FILL: OpcodeSpec("fill", 1),
    Opcode.HALT: OpcodeSpec("halt", 1),
    Opcode.BOUNDS: OpcodeSpec("bounds", 1),
    Opcode.SYSREQ_PRI: OpcodeSpec("sysreq.pri"),
    Opcode.SYSREQ_C: OpcodeSpec("sysreq.c", 1, OperandKind.NATIVE),
    Opcode.FILE: OpcodeSpec("file", 1),
    Opcode.LINE: OpcodeSpec("line", 1),
    Opcode.SRANGE: OpcodeSpec("srange", 1),
    Opcode.JUMP_PRI: OpcodeSpec("jump.pri"),
    Opcode.SWITCH: OpcodeSpec("switch", 1, _ADDR),
    Opcode.CASETBL: OpcodeSpec("casetbl", 2, variable=True),
    Opcode.SWAP_PRI: OpcodeSpec("swap.pri"),
    Opcode.SWAP_ALT: OpcodeSpec("swap.alt"),
    Opcode.PUSH_ADR: OpcodeSpec("push.adr", 1),
    Opcode.NOP: OpcodeSpec("nop"),
    Opcode.SYSREQ_D: OpcodeSpec("sysreq.d", 1, _ADDR),
    Opcode.SYMTAG: OpcodeSpec("symtag", 1),
    Opcode.BREAK: OpcodeSpec("break"),
    Opcode.CASE: OpcodeSpec("case", 2, _ADDR),
}

FUNCTION_START = frozenset({Opcode.PROC})
FUNCTION_END = frozenset({Opcode.BREAK, Opcode.RETN})
SYNTHETIC = frozenset({Opcode.CASE})


def lookup(value: int) -> Optional[Opcode]:
    """Resolve a raw opcode cell to an :class:`Opcode` or ``None``."""

    try:
        opcode = Opcode(value)
    except ValueError:
        return None
    if opcode in SYNTHETIC:
        return None
    return opcode


__all__ = [
    "Opcode",
    "OperandKind",
    "OpcodeSpec",
    "OPCODE_TABLE",
    "FUNCTION_START",
    "FUNCTION_END",
    "lookup",
]
