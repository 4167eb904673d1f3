"""Shape of one metadata fragment before it is serialized."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple, Union

from .concat import ConcatenationBuilder

DEFAULT_ID_CONSTANT = "_PYO3_INTROSPECTION_ID"


@dataclass(frozen=True)
class BoolNode:
    value: bool


@dataclass(frozen=True)
class StrNode:
    value: str


@dataclass(frozen=True)
class RefNode:
    """Reference to an element id.

    ``target=None`` names the id of the element currently being emitted;
    otherwise ``target`` is the identifier under which another element
    declares its id constant.
    """

    target: Optional[str] = None


@dataclass(frozen=True)
class ComputedNode:
    """Text produced by ``expression`` when the embedding artifact is built."""

    expression: str


@dataclass(frozen=True)
class ObjectNode:
    entries: Tuple[Tuple[str, "Node"], ...] = ()

    @classmethod
    def of(cls, mapping: Mapping[str, "Node"]) -> "ObjectNode":
        """Build from a mapping, keeping its iteration order."""
        return cls(tuple(mapping.items()))


@dataclass(frozen=True)
class ArrayNode:
    items: Tuple["Node", ...] = ()

    @classmethod
    def of(cls, items: Iterable["Node"]) -> "ArrayNode":
        return cls(tuple(items))


Node = Union[BoolNode, StrNode, RefNode, ComputedNode, ObjectNode, ArrayNode]


def id_access(target: Optional[str], id_constant: str = DEFAULT_ID_CONSTANT) -> str:
    """Return the expression reading the id constant of ``target``."""
    if target is None:
        return id_constant
    return f"{target}::{id_constant}"


def serialize(
    node: Node,
    *,
    id_constant: str = DEFAULT_ID_CONSTANT,
    builder: ConcatenationBuilder | None = None,
) -> ConcatenationBuilder:
    """Render ``node`` as JSON-shaped text into a concatenation builder."""
    content = builder if builder is not None else ConcatenationBuilder()
    _write(node, content, id_constant)
    return content


def _write(node: Node, content: ConcatenationBuilder, id_constant: str) -> None:
    if isinstance(node, BoolNode):
        content.push_str("true" if node.value else "false")
    elif isinstance(node, StrNode):
        content.push_str_to_escape(node.value)
    elif isinstance(node, RefNode):
        content.push_str('"')
        content.push_computed(id_access(node.target, id_constant))
        content.push_str('"')
    elif isinstance(node, ComputedNode):
        content.push_str('"')
        content.push_computed(node.expression)
        content.push_str('"')
    elif isinstance(node, ObjectNode):
        content.push_str("{")
        for index, (key, value) in enumerate(node.entries):
            if index > 0:
                content.push_str(",")
            content.push_str_to_escape(key)
            content.push_str(":")
            _write(value, content, id_constant)
        content.push_str("}")
    elif isinstance(node, ArrayNode):
        content.push_str("[")
        for index, value in enumerate(node.items):
            if index > 0:
                content.push_str(",")
            _write(value, content, id_constant)
        content.push_str("]")
    else:
        raise TypeError(f"Unsupported metadata node: {node!r}")


__all__ = [
    "ArrayNode",
    "BoolNode",
    "ComputedNode",
    "DEFAULT_ID_CONSTANT",
    "Node",
    "ObjectNode",
    "RefNode",
    "StrNode",
    "id_access",
    "serialize",
]
