"""Flat instruction listing utilities."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from .amx import Module, Native, Public, SymbolTable
from .instruction import Instruction
from .knowledge import KnowledgeBase
from .opcodes import Opcode


class Disassembler:
    """Render a textual listing of a module, one instruction per line."""

    def __init__(self, knowledge: Optional[KnowledgeBase] = None) -> None:
        self.knowledge = knowledge or KnowledgeBase({})

    def generate_listing(
        self,
        module: Module,
        *,
        max_instructions: Optional[int] = None,
    ) -> str:
        natives = module.natives()
        publics = module.publics()
        instructions = module.instructions()

        lines: List[str] = []
        lines.extend(self._render_header(module))
        lines.extend(self._render_symbols(natives, publics))

        symbols = SymbolTable(publics, natives)

        for idx, instruction in enumerate(instructions):
            if max_instructions is not None and idx >= max_instructions:
                lines.append("; ... truncated ...")
                break
            if instruction.opcode is Opcode.PROC:
                lines.append("")
                name = symbols.public_name(instruction.offset)
                if name:
                    lines.append(f"public {name}:")
            lines.append(self._format_instruction(instruction, symbols))
        return "\n".join(lines) + "\n"

    def _render_header(self, module: Module) -> List[str]:
        entry = module.entry_point
        entry_text = "none" if entry is None else f"0x{entry:04X}"
        return [
            f"; amx module cell_size={module.cell_size} flags=0x{module.flags:04X} "
            f"defsize={module.defsize}",
            f"; cod=0x{module.cod:X} dat=0x{module.dat:X} hea=0x{module.hea:X} "
            f"stp=0x{module.stp:X} entry={entry_text}",
            "",
        ]

    def _render_symbols(self, natives: Sequence[Native], publics: Sequence[Public]) -> List[str]:
        lines = [f"; natives ({len(natives)})"]
        for idx, native in enumerate(natives):
            lines.append(f";   [{idx}] {native.name}")
        lines.append(f"; publics ({len(publics)})")
        for public in publics:
            lines.append(f";   0x{public.address:04X} {public.name}")
        return lines

    def _format_instruction(self, instruction: Instruction, symbols: SymbolTable) -> str:
        text = f"{instruction.offset:08X}: {instruction.mnemonic:<12} {instruction.format_operands()}"
        comments: List[str] = []
        callee = symbols.annotate(instruction)
        if callee:
            comments.append(callee)
        info = self.knowledge.lookup(instruction.mnemonic)
        if info and info.summary:
            comments.append(info.summary)
        if comments:
            text = f"{text.rstrip()} ; " + " | ".join(comments)
        return text.rstrip()

    def write_listing(
        self,
        module: Module,
        output_path: Path,
        *,
        max_instructions: Optional[int] = None,
    ) -> None:
        listing = self.generate_listing(module, max_instructions=max_instructions)
        output_path.write_text(listing, "utf-8")
