"""Public exports for the function reconstruction stage."""

from .builder import ASTBuilder
from .model import Function, InstructionNode, Plugin
from .renderer import ASTRenderer

__all__ = [
    "ASTBuilder",
    "ASTRenderer",
    "Plugin",
    "Function",
    "InstructionNode",
]
