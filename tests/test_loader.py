from pathlib import Path

import pytest

from amxdisasm import load_module, load_module_bytes
from amxdisasm import ASTBuilder
from amxdisasm.errors import AmxError, InvalidCellSizeError, InvalidMagicError
from amxdisasm.opcodes import Opcode

from amx_builders import build_container, build_module, cells, prolog, two_natives_module


def test_bare_module_defaults_to_four_byte_cells():
    module = load_module_bytes(two_natives_module())

    assert module.cell_size == 4
    assert [public.name for public in module.publics()] == ["func"]


def test_bare_module_cell_size_override():
    image = build_module(code=prolog(8) + cells(Opcode.PROC, Opcode.RETN, cell_size=8))

    module = load_module_bytes(image, cell_size=8)

    assert [i.opcode for i in module.instructions()] == [Opcode.PROC, Opcode.RETN]


def test_container_section_selection_uses_descriptor_cell_size():
    wide = build_module(
        code=prolog(8) + cells(Opcode.PROC, Opcode.RETN, cell_size=8),
        publics=[("wide", 16)],
    )
    data = build_container([(4, two_natives_module()), (8, wide)])

    narrow_module = load_module_bytes(data)
    wide_module = load_module_bytes(data, section=1, cell_size=4)

    assert narrow_module.cell_size == 4
    assert wide_module.cell_size == 8
    assert wide_module.publics()[0].name == "wide"


def test_load_module_reads_files(tmp_path: Path):
    path = tmp_path / "plugin.amxx"
    path.write_bytes(build_container([(4, two_natives_module())]))

    module = load_module(path)

    assert module.natives()[1].name == "native_two"


def test_garbage_is_reported_as_module_magic():
    with pytest.raises(InvalidMagicError) as excinfo:
        load_module_bytes(b"\0" * 64)

    assert excinfo.value.stage == "module"


def test_container_with_bad_cell_size_fails_before_decoding():
    data = build_container([(3, two_natives_module())])

    with pytest.raises(InvalidCellSizeError) as excinfo:
        ASTBuilder().build(load_module_bytes(data))

    assert excinfo.value.stage == "section"
    assert excinfo.value.actual == 3


def test_bare_module_rejects_unsupported_cell_size():
    with pytest.raises(AmxError) as excinfo:
        load_module_bytes(two_natives_module(), cell_size=2)

    assert isinstance(excinfo.value, InvalidCellSizeError)
    assert excinfo.value.stage == "module"
