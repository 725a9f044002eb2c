#!/usr/bin/env python3
"""Command-line interface for the AMX / AMXX plugin disassembler."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from amxdisasm import (
    AmxError,
    ASTBuilder,
    ASTRenderer,
    Disassembler,
    KnowledgeBase,
    load_module,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("input", type=Path, help="Path to an .amxx container or a bare .amx module")
    parser.add_argument(
        "--section",
        type=int,
        default=0,
        help="Container section to unpack (0 is the 32-bit cell variant)",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        choices=(4, 8),
        default=None,
        help="Cell size of a bare .amx module (ignored for containers)",
    )
    parser.add_argument(
        "--listing-out",
        type=Path,
        default=None,
        help="Override the default <input>.asm.txt output path",
    )
    parser.add_argument(
        "--ast-out",
        type=Path,
        default=None,
        help="Override the default <input>.ast.txt output path",
    )
    parser.add_argument(
        "--knowledge-base",
        type=Path,
        default=Path("knowledge/opcode_annotations.json"),
        help="Location of the opcode annotation file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Trace header fields and reconstruction decisions",
    )
    return parser.parse_args()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main() -> int:
    start_time = time.perf_counter()
    args = parse_args()
    configure_logging(args.verbose)

    if not args.input.exists():
        raise SystemExit(f"missing input file: {args.input}")

    knowledge = KnowledgeBase.load(args.knowledge_base)
    try:
        module = load_module(args.input, section=args.section, cell_size=args.cell_size)
        listing_path = args.listing_out or args.input.with_suffix(".asm.txt")
        Disassembler(knowledge).write_listing(module, listing_path)
        plugin = ASTBuilder().build(module)
    except AmxError as exc:
        print(f"error: {exc.describe()}", file=sys.stderr)
        return 1
    print(f"listing written to {listing_path}")

    ast_path = args.ast_out or args.input.with_suffix(".ast.txt")
    ASTRenderer().write(plugin, ast_path)
    print(f"ast written to {ast_path}")

    total_time = time.perf_counter() - start_time
    print(f"total execution time: {total_time:.2f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
