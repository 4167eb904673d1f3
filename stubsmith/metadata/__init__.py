"""Emission of embeddable introspection metadata."""

from .concat import Computed, ConcatenationBuilder, ControlCharacterError, Literal
from .fragments import (
    ArgumentDescriptor,
    Fragment,
    FragmentEmitter,
    FunctionSignature,
    IdConstant,
    PythonSignature,
    SignatureMismatchError,
    erase_lifetimes,
)
from .ids import IdAllocator, unique_element_id
from .nodes import ArrayNode, BoolNode, ComputedNode, Node, ObjectNode, RefNode, StrNode, serialize
from .renderer import FragmentRenderer, TemplateError

__all__ = [
    "ArgumentDescriptor",
    "ArrayNode",
    "BoolNode",
    "Computed",
    "ComputedNode",
    "ConcatenationBuilder",
    "ControlCharacterError",
    "Fragment",
    "FragmentEmitter",
    "FragmentRenderer",
    "FunctionSignature",
    "IdAllocator",
    "IdConstant",
    "Literal",
    "Node",
    "ObjectNode",
    "PythonSignature",
    "RefNode",
    "SignatureMismatchError",
    "StrNode",
    "TemplateError",
    "erase_lifetimes",
    "serialize",
    "unique_element_id",
]
