"""Element declarations that drive fragment emission."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

import yaml

from .logging import get_logger
from .metadata.fragments import (
    ArgumentDescriptor,
    FragmentEmitter,
    FunctionSignature,
    PythonSignature,
)

_LOGGER = get_logger("declarations")
_ELEMENT_TYPES = ("module", "class", "function")


class DeclarationError(ValueError):
    """Raised when a declarations file is malformed."""


@dataclass(frozen=True)
class ElementDeclaration:
    type: str
    name: str
    ident: str
    members: Tuple[str, ...] = ()
    signature: Optional[FunctionSignature] = None


@dataclass
class EmittedElement:
    declaration: ElementDeclaration
    id_constant: str
    fragment: str
    static_name: str
    source: str


def load_declarations(path: Path) -> List[ElementDeclaration]:
    """Read a YAML (or JSON) declarations file."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise DeclarationError(f"Failed to parse {path.name}: {exc}") from exc
    return parse_declarations(data or {})


def parse_declarations(data: Any) -> List[ElementDeclaration]:
    if not isinstance(data, dict) or not isinstance(data.get("elements", []), list):
        raise DeclarationError("Declarations must be a mapping with an 'elements' list")
    return [_parse_element(raw, index) for index, raw in enumerate(data.get("elements", []))]


def emit_elements(
    declarations: Sequence[ElementDeclaration], emitter: FragmentEmitter
) -> List[EmittedElement]:
    """Render the id constant and fragment of every declared element."""
    emitted: List[EmittedElement] = []
    for declaration in declarations:
        if declaration.type == "module":
            fragment = emitter.module(declaration.name, declaration.members)
        elif declaration.type == "class":
            fragment = emitter.class_(declaration.ident, declaration.name)
        elif declaration.type == "function":
            if declaration.signature is None:
                raise DeclarationError(f"Function {declaration.name!r} has no signature")
            fragment = emitter.function(declaration.ident, declaration.name, declaration.signature)
        else:
            raise DeclarationError(
                f"Element {declaration.name!r} has unknown type {declaration.type!r}"
            )
        id_constant = emitter.id_constant_for(declaration.type, declaration.ident)
        emitted.append(
            EmittedElement(
                declaration=declaration,
                id_constant=id_constant.source,
                fragment=emitter.render(fragment),
                static_name=fragment.static_name,
                source=emitter.render_element(
                    declaration.type, declaration.ident, id_constant, fragment
                ),
            )
        )
    _LOGGER.info("Emitted %d fragments", len(emitted))
    return emitted


def _parse_element(raw: Any, index: int) -> ElementDeclaration:
    if not isinstance(raw, dict):
        raise DeclarationError(f"Element #{index} must be a mapping")
    element_type = raw.get("type")
    if element_type not in _ELEMENT_TYPES:
        raise DeclarationError(f"Element #{index} has unknown type {element_type!r}")
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise DeclarationError(f"Element #{index} needs a name")
    ident = raw.get("ident") or name
    if not isinstance(ident, str):
        raise DeclarationError(f"Element {name!r} has a non-string ident")

    if element_type == "module":
        return ElementDeclaration(
            type="module",
            name=name,
            ident=ident,
            members=tuple(_as_str_list(raw.get("members"), f"{name}.members")),
        )
    if element_type == "class":
        return ElementDeclaration(type="class", name=name, ident=ident)
    return ElementDeclaration(
        type="function",
        name=name,
        ident=ident,
        signature=FunctionSignature(
            arguments=tuple(_parse_argument(item, name) for item in _as_list(raw.get("arguments"))),
            python_signature=_parse_python_signature(raw.get("signature"), name),
        ),
    )


def _parse_python_signature(raw: Any, function_name: str) -> PythonSignature:
    if raw is None:
        return PythonSignature()
    if not isinstance(raw, dict):
        raise DeclarationError(f"Signature of {function_name!r} must be a mapping")
    positional = _as_str_list(raw.get("positional"), f"{function_name}.positional")
    positional_only = raw.get("positional_only", 0)
    if not isinstance(positional_only, int) or not 0 <= positional_only <= len(positional):
        raise DeclarationError(
            f"{function_name}.positional_only must be between 0 and {len(positional)}"
        )
    return PythonSignature(
        positional_parameters=tuple(positional),
        positional_only_parameters=positional_only,
        varargs=_optional_str(raw.get("varargs"), f"{function_name}.varargs"),
        keyword_only_parameters=tuple(
            _as_str_list(raw.get("keyword_only"), f"{function_name}.keyword_only")
        ),
        kwargs=_optional_str(raw.get("kwargs"), f"{function_name}.kwargs"),
    )


def _parse_argument(raw: Any, function_name: str) -> ArgumentDescriptor:
    if not isinstance(raw, dict):
        raise DeclarationError(f"Arguments of {function_name!r} must be mappings")
    regular = raw.get("regular", True)
    ty = raw.get("ty")
    if not isinstance(ty, str):
        if regular:
            raise DeclarationError(f"Argument of {function_name!r} needs a 'ty'")
        ty = ""
    default = raw.get("default")
    return ArgumentDescriptor(
        ty=ty,
        default=None if default is None else str(default),
        option_wrapped_type=_optional_str(raw.get("option_wrapped_type"), f"{function_name}.option_wrapped_type"),
        from_py_with=_optional_str(raw.get("from_py_with"), f"{function_name}.from_py_with"),
        regular=bool(regular),
    )


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DeclarationError(f"Expected a list, got {value!r}")
    return value


def _as_str_list(value: Any, where: str) -> List[str]:
    items = _as_list(value)
    if not all(isinstance(item, str) for item in items):
        raise DeclarationError(f"{where} must be a list of strings")
    return items


def _optional_str(value: Any, where: str) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    raise DeclarationError(f"{where} must be a string")


__all__ = [
    "DeclarationError",
    "ElementDeclaration",
    "EmittedElement",
    "emit_elements",
    "load_declarations",
    "parse_declarations",
]
