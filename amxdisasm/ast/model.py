"""Data structures for the reconstructed plugin tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..instruction import Instruction


@dataclass(frozen=True)
class InstructionNode:
    """Single instruction inside a function body."""

    instruction: Instruction
    annotation: Optional[str] = None

    def render(self) -> str:
        from .renderer import ASTRenderer  # local import to avoid cycle

        return ASTRenderer().render(self)


@dataclass(frozen=True)
class Function:
    """Instructions grouped between a ``proc`` and its terminators."""

    name: str
    address: int
    is_public: bool = False
    body: Tuple[InstructionNode, ...] = field(default_factory=tuple)

    def render(self) -> str:
        from .renderer import ASTRenderer  # local import to avoid cycle

        return ASTRenderer().render(self)


@dataclass(frozen=True)
class Plugin:
    """Root of the tree; functions are kept in order of appearance."""

    functions: Tuple[Function, ...] = field(default_factory=tuple)

    def render(self) -> str:
        from .renderer import ASTRenderer  # local import to avoid cycle

        return ASTRenderer().render(self)

    def function_named(self, name: str) -> Optional[Function]:
        for function in self.functions:
            if function.name == name:
                return function
        return None
