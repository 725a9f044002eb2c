"""Rendering helpers for the reconstructed plugin tree."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from .model import Function, InstructionNode, Plugin

PLUGIN_HEADER = "// Plugin source approximation starts here\n\n"

Node = Union[Plugin, Function, InstructionNode]


class ASTRenderer:
    """Render the tree into a stable textual format."""

    indent = "    "

    def render(self, node: Node) -> str:
        if isinstance(node, Plugin):
            return self._render_plugin(node)
        if isinstance(node, Function):
            return self._render_function(node)
        if isinstance(node, InstructionNode):
            return self._render_instruction(node)
        raise TypeError(f"unsupported AST node type: {type(node)!r}")

    def write(self, plugin: Plugin, output_path: Path) -> None:
        output_path.write_text(self.render(plugin), "utf-8")

    def _render_plugin(self, plugin: Plugin) -> str:
        parts: List[str] = [PLUGIN_HEADER]
        for function in plugin.functions:
            parts.append(self.render(function))
        return "".join(parts)

    def _render_function(self, function: Function) -> str:
        kind = "public" if function.is_public else "stock"
        lines = [f"{kind} {function.name}() // 0x{function.address:04X}", "{"]
        for node in function.body:
            lines.append(self.indent + self.render(node))
        lines.append("}")
        return "\n".join(lines) + "\n\n"

    def _render_instruction(self, node: InstructionNode) -> str:
        text = node.instruction.format()
        if node.annotation:
            text += f" // {node.annotation}"
        return text
