"""Group a flat instruction stream into per-function bodies."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Sequence

from ..amx import Native, Public, SymbolTable
from ..errors import MalformedBytecodeError
from ..instruction import Instruction
from ..opcodes import FUNCTION_END, FUNCTION_START
from .model import Function, InstructionNode, Plugin

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from ..amx import Module


logger = logging.getLogger(__name__)


class _BuilderState(enum.Enum):
    NO_FUNCTION = "no_function"
    IN_FUNCTION = "in_function"


@dataclass
class _FunctionDraft:
    name: str
    address: int
    is_public: bool
    body: List[InstructionNode] = field(default_factory=list)

    def freeze(self) -> Function:
        return Function(
            name=self.name,
            address=self.address,
            is_public=self.is_public,
            body=tuple(self.body),
        )


class ASTBuilder:
    """Rebuild function boundaries from ``proc``/``retn``/``break`` markers.

    The builder is a two-state machine.  ``proc`` opens a function and makes
    it current.  Every other instruction is parked in a pending buffer which
    is flushed into the current function whenever a terminator shows up, so
    a function with several exits is assembled from several flushes.  A
    terminator seen before the first ``proc`` cannot belong anywhere and is
    reported as :class:`~amxdisasm.errors.MalformedBytecodeError`.
    Instructions still pending when the next ``proc`` or the end of the
    stream arrives have no terminator and are dropped.
    """

    def build(self, module: "Module") -> Plugin:
        return self.build_from_instructions(
            module.instructions(), module.publics(), module.natives()
        )

    def build_from_instructions(
        self,
        instructions: Iterable[Instruction],
        publics: Sequence[Public],
        natives: Sequence[Native] = (),
    ) -> Plugin:
        symbols = SymbolTable(publics, natives)

        state = _BuilderState.NO_FUNCTION
        functions: List[_FunctionDraft] = []
        pending: List[Instruction] = []

        for instruction in instructions:
            opcode = instruction.opcode
            if opcode in FUNCTION_START:
                if pending:
                    logger.debug(
                        "dropping %d unterminated instruction(s) before proc at 0x%04X",
                        len(pending),
                        instruction.offset,
                    )
                pending = []
                functions.append(
                    _FunctionDraft(
                        name=symbols.function_name(instruction.offset),
                        address=instruction.offset,
                        is_public=symbols.find_public(instruction.offset) is not None,
                    )
                )
                state = _BuilderState.IN_FUNCTION
                continue

            if opcode in FUNCTION_END:
                if state is _BuilderState.NO_FUNCTION:
                    raise MalformedBytecodeError(
                        f"{instruction.mnemonic} encountered before any proc",
                        instruction.offset,
                    )
                current = functions[-1]
                current.body.extend(InstructionNode(item, symbols.annotate(item)) for item in pending)
                pending = []
                continue

            pending.append(instruction)

        if pending:
            logger.debug("dropping %d trailing instruction(s) without terminator", len(pending))
        return Plugin(functions=tuple(draft.freeze() for draft in functions))

