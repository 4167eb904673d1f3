"""Tests for stubsmith.declarations."""

from __future__ import annotations

from pathlib import Path

import pytest

from stubsmith.declarations import (
    DeclarationError,
    ElementDeclaration,
    emit_elements,
    load_declarations,
    parse_declarations,
)
from stubsmith.metadata import ArgumentDescriptor, FragmentEmitter, PythonSignature

DECLARATIONS = """
elements:
  - type: module
    name: maturin_starter
    members: [ExampleClass, simple_args]
  - type: class
    name: ExampleClass
  - type: function
    name: simple_args
    ident: simple_args_impl
    signature:
      positional: [a, b]
      varargs: args
      keyword_only: [c]
    arguments:
      - ty: "Bound<'py, PyAny>"
      - ty: "Option<Bound<'py, PyAny>>"
        option_wrapped_type: "Bound<'py, PyAny>"
        default: "None"
      - ty: "Bound<'py, PyTuple>"
        regular: false
      - ty: "Option<Bound<'py, PyAny>>"
        option_wrapped_type: "Bound<'py, PyAny>"
        default: "None"
"""


def test_load_declarations(tmp_path: Path) -> None:
    path = tmp_path / "elements.yml"
    path.write_text(DECLARATIONS, encoding="utf-8")

    module, class_, function = load_declarations(path)

    assert module == ElementDeclaration(
        type="module",
        name="maturin_starter",
        ident="maturin_starter",
        members=("ExampleClass", "simple_args"),
    )
    assert class_ == ElementDeclaration(type="class", name="ExampleClass", ident="ExampleClass")
    assert function.ident == "simple_args_impl"
    assert function.signature is not None
    assert function.signature.python_signature == PythonSignature(
        positional_parameters=("a", "b"),
        varargs="args",
        keyword_only_parameters=("c",),
    )
    assert function.signature.arguments[1] == ArgumentDescriptor(
        ty="Option<Bound<'py, PyAny>>",
        option_wrapped_type="Bound<'py, PyAny>",
        default="None",
    )
    assert function.signature.arguments[2].regular is False


def test_emit_elements_renders_every_element(tmp_path: Path, emitter: FragmentEmitter) -> None:
    path = tmp_path / "elements.yml"
    path.write_text(DECLARATIONS, encoding="utf-8")

    emitted = emit_elements(load_declarations(path), emitter)

    assert [element.declaration.type for element in emitted] == ["module", "class", "function"]
    assert len({element.static_name for element in emitted}) == 3
    for element in emitted:
        assert f"static {element.static_name}: &'static str" in element.source
    assert emitted[0].source.startswith("#[doc(hidden)]\npub mod maturin_starter {\n")
    assert emitted[1].source.startswith("impl ExampleClass {\n")
    assert emitted[2].source.startswith("#[doc(hidden)]\npub mod simple_args_impl {\n")
    assert emitted[2].source.startswith(emitted[2].id_constant)
    assert "simple_args_impl::_PYO3_INTROSPECTION_ID" in emitted[2].fragment


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"elements": "nope"},
        {"elements": [{"type": "enum", "name": "X"}]},
        {"elements": [{"type": "class"}]},
        {"elements": [{"type": "module", "name": "m", "members": [1]}]},
        {"elements": [{"type": "function", "name": "f", "signature": {"positional": ["a"], "positional_only": 2}}]},
        {"elements": [{"type": "function", "name": "f", "arguments": [{"default": "1"}]}]},
    ],
)
def test_malformed_declarations(data) -> None:
    with pytest.raises(DeclarationError):
        parse_declarations(data)


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "elements.yml"
    path.write_text("elements: [unclosed", encoding="utf-8")

    with pytest.raises(DeclarationError):
        load_declarations(path)


def test_function_without_signature_is_rejected(emitter: FragmentEmitter) -> None:
    declaration = ElementDeclaration(type="function", name="f", ident="f")

    with pytest.raises(DeclarationError, match="no signature"):
        emit_elements([declaration], emitter)


def test_unknown_element_type_is_rejected(emitter: FragmentEmitter) -> None:
    declaration = ElementDeclaration(type="enum", name="Color", ident="Color")

    with pytest.raises(DeclarationError, match="unknown type"):
        emit_elements([declaration], emitter)
