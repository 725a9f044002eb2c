"""Entry points that turn files or raw buffers into :class:`Module` objects."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .amx import Module
from .amxx import Container, is_container
from .instruction import DEFAULT_CELL_SIZE


logger = logging.getLogger(__name__)


def load_module_bytes(
    data: bytes,
    *,
    section: int = 0,
    cell_size: Optional[int] = None,
) -> Module:
    """Parse either an ``.amxx`` container or a bare ``.amx`` image.

    For containers the cell size always comes from the selected section
    descriptor; ``cell_size`` only applies to bare modules.
    """

    if is_container(data):
        container = Container.parse(data)
        descriptor = container.section(section)
        logger.info(
            "unpacking section %d (%d-byte cells) of %d",
            descriptor.index,
            descriptor.cell_size,
            container.section_count,
        )
        return descriptor.load_module(data)
    return Module.parse(data, cell_size=cell_size or DEFAULT_CELL_SIZE)


def load_module(
    path: Path,
    *,
    section: int = 0,
    cell_size: Optional[int] = None,
) -> Module:
    return load_module_bytes(path.read_bytes(), section=section, cell_size=cell_size)
