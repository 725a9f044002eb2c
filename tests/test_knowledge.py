import json
from pathlib import Path

import pytest

from amxdisasm import KnowledgeBase


def test_lookup_is_case_insensitive(tmp_path: Path):
    path = tmp_path / "opcode_annotations.json"
    path.write_text(
        json.dumps({"push.c": {"summary": "Push a constant.", "category": "stack", "note": "x"}}),
        "utf-8",
    )

    knowledge = KnowledgeBase.load(path)
    info = knowledge.lookup("PUSH.C")

    assert info is not None
    assert info.summary == "Push a constant."
    assert info.category == "stack"
    assert info.attributes == {"note": "x"}
    assert knowledge.lookup("pop.pri") is None


def test_directory_resolves_default_file(tmp_path: Path):
    (tmp_path / "opcode_annotations.json").write_text(
        json.dumps({"alias": {"mnemonic": "retn", "summary": "Return."}}), "utf-8"
    )

    knowledge = KnowledgeBase.load(tmp_path)

    assert knowledge.lookup("retn").summary == "Return."
    assert len(knowledge) == 1


def test_missing_file_yields_empty_knowledge(tmp_path: Path):
    assert len(KnowledgeBase.load(tmp_path / "missing.json")) == 0


def test_non_object_file_is_rejected(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("[]", "utf-8")

    with pytest.raises(ValueError, match="JSON object"):
        KnowledgeBase.load(path)


def test_bundled_annotations_load():
    path = Path(__file__).resolve().parents[1] / "knowledge" / "opcode_annotations.json"

    knowledge = KnowledgeBase.load(path)

    assert knowledge.lookup("sysreq.c") is not None
