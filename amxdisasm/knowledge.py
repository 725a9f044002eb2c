"""Optional opcode annotations used to enrich disassembly listings."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class OpcodeInfo:
    """Human-friendly annotation for a single mnemonic.

    Only ``summary`` and ``category`` have a meaning for the listing; any
    other key found in the JSON entry is preserved in ``attributes`` so
    that annotation files can carry reviewer notes without breaking the
    loader.
    """

    mnemonic: str
    summary: Optional[str] = None
    category: Optional[str] = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, mnemonic: str, entry: Mapping[str, Any]) -> "OpcodeInfo":
        attributes = {
            key: value
            for key, value in entry.items()
            if key not in {"name", "mnemonic", "summary", "category"}
        }
        return cls(
            mnemonic=mnemonic,
            summary=entry.get("summary"),
            category=entry.get("category"),
            attributes=attributes,
        )


class KnowledgeBase:
    """Resolve mnemonics such as ``"push.c"`` to :class:`OpcodeInfo` entries."""

    def __init__(self, annotations: Mapping[str, OpcodeInfo]) -> None:
        self._annotations: Dict[str, OpcodeInfo] = {
            key.lower(): info for key, info in annotations.items()
        }

    @classmethod
    def load(cls, path: Path) -> "KnowledgeBase":
        """Load annotations from ``path``; a missing file yields an empty base."""

        resolved = path
        if path.is_dir():
            resolved = path / "opcode_annotations.json"

        if not resolved.exists():
            return cls({})

        data = json.loads(resolved.read_text("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("opcode annotations file must contain a JSON object")

        annotations: Dict[str, OpcodeInfo] = {}
        for key, entry in data.items():
            if not isinstance(entry, Mapping):
                continue
            mnemonic = str(entry.get("mnemonic") or key)
            annotations[mnemonic] = OpcodeInfo.from_json(mnemonic, entry)
        return cls(annotations)

    def lookup(self, mnemonic: str) -> Optional[OpcodeInfo]:
        return self._annotations.get(mnemonic.lower())

    def __len__(self) -> int:
        return len(self._annotations)
