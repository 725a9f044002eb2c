"""Public package exports for the AMX / AMXX disassembler."""

from .amx import Module, Native, Public, SymbolEntry, SymbolTable
from .amxx import Container, SectionDescriptor
from .ast import ASTBuilder, ASTRenderer, Function, InstructionNode, Plugin
from .disassembler import Disassembler
from .errors import AmxError
from .instruction import Instruction, InstructionDecoder, read_instructions
from .knowledge import KnowledgeBase
from .loader import load_module, load_module_bytes
from .opcodes import Opcode

__all__ = [
    "AmxError",
    "Container",
    "SectionDescriptor",
    "Module",
    "Native",
    "Public",
    "SymbolEntry",
    "SymbolTable",
    "Opcode",
    "Instruction",
    "InstructionDecoder",
    "read_instructions",
    "ASTBuilder",
    "ASTRenderer",
    "Plugin",
    "Function",
    "InstructionNode",
    "Disassembler",
    "KnowledgeBase",
    "load_module",
    "load_module_bytes",
]
