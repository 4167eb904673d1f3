"""Tests for stubsmith.resolve."""

from __future__ import annotations

import json

import pytest

from stubsmith.models import Class, Function, Module, Parameter, ParameterKind, Signature
from stubsmith.resolve import ResolutionError, load_document, resolve


def _module(element_id: str, name: str, *members: str) -> dict:
    return {"type": "module", "id": element_id, "name": name, "members": list(members)}


def _function(element_id: str, name: str, *parameters: dict) -> dict:
    return {
        "type": "function",
        "id": element_id,
        "name": name,
        "signature": {"parameters": list(parameters)},
    }


FRAGMENTS = [
    _function(
        "3",
        "scale",
        {"name": "value", "kind": "POSITIONAL_ONLY", "has_default": False, "annotation": "int"},
        {"name": "args", "kind": "VAR_POSITIONAL"},
        {"name": "strict", "kind": "KEYWORD_ONLY", "has_default": True},
    ),
    {"type": "class", "id": "2", "name": "Gadget"},
    _module("4", "helpers"),
    _module("1", "demo", "2", "3", "4"),
]


def test_resolves_tree_in_member_order() -> None:
    module = resolve(FRAGMENTS)

    assert module == Module(
        name="demo",
        modules=(Module(name="helpers"),),
        classes=(Class(name="Gadget"),),
        functions=(
            Function(
                name="scale",
                signature=Signature(
                    parameters=(
                        Parameter("value", ParameterKind.POSITIONAL_ONLY, False, "int"),
                        Parameter("args", ParameterKind.VAR_POSITIONAL),
                        Parameter("strict", ParameterKind.KEYWORD_ONLY, True),
                    )
                ),
            ),
        ),
    )


def test_load_document_accepts_array() -> None:
    assert load_document(json.dumps(FRAGMENTS)) == FRAGMENTS


def test_load_document_accepts_concatenated_fragments() -> None:
    text = "".join(json.dumps(fragment) for fragment in FRAGMENTS[:2])
    text += "\n  " + json.dumps(FRAGMENTS[2]) + "\n"

    assert load_document(text) == FRAGMENTS[:3]


def test_load_document_empty() -> None:
    assert load_document("  \n") == []


@pytest.mark.parametrize("text", ["[{]", '{"id": "1"} garbage', "[1, 2]", '"text"'])
def test_load_document_rejects_garbage(text: str) -> None:
    with pytest.raises(ResolutionError):
        load_document(text)


def test_duplicate_ids_are_an_error_by_default() -> None:
    fragments = FRAGMENTS + [{"type": "class", "id": "2", "name": "Other"}]

    with pytest.raises(ResolutionError, match="Duplicate element id 2"):
        resolve(fragments)


def test_duplicate_ids_can_be_tolerated() -> None:
    fragments = FRAGMENTS + [{"type": "class", "id": "2", "name": "Other"}]

    module = resolve(fragments, on_duplicate_id="warn")

    assert module.classes == (Class(name="Gadget"),)


def test_unknown_member_reference() -> None:
    with pytest.raises(ResolutionError, match="unknown element 99"):
        resolve([_module("1", "demo", "99")])


def test_root_must_be_unambiguous() -> None:
    with pytest.raises(ResolutionError, match="root module"):
        resolve([_module("1", "a"), _module("2", "b")])


def test_root_can_be_selected_by_name() -> None:
    module = resolve([_module("1", "a"), _module("2", "b")], root="b")
    assert module == Module(name="b")


def test_module_cycle_is_detected() -> None:
    with pytest.raises(ResolutionError, match="contains itself"):
        resolve([_module("1", "a", "2"), _module("2", "b", "1")], root="a")


def test_unknown_parameter_kind() -> None:
    fragments = [_module("1", "m", "2"), _function("2", "f", {"name": "x", "kind": "SOMETIMES"})]

    with pytest.raises(ResolutionError, match="SOMETIMES"):
        resolve(fragments)


def test_malformed_signature_is_rejected() -> None:
    fragments = [
        _module("1", "m", "2"),
        _function(
            "2",
            "f",
            {"name": "a", "kind": "VAR_KEYWORD"},
            {"name": "b", "kind": "VAR_KEYWORD"},
        ),
    ]

    with pytest.raises(ResolutionError, match="invalid signature"):
        resolve(fragments)


def test_unknown_element_type() -> None:
    fragments = [_module("1", "m", "2"), {"type": "constant", "id": "2", "name": "X"}]

    with pytest.raises(ResolutionError, match="constant"):
        resolve(fragments)
