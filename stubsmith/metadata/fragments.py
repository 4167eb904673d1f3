"""Builds one embeddable metadata fragment per module, class and function.

Every fragment is a JSON document describing a single element. Fragments
name each other through id constants (``RefNode``) instead of embedding
one another, so they can be emitted in any order and stitched together
after the build.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ..logging import get_logger
from .concat import ConcatenationBuilder
from .ids import IdAllocator, unique_element_id
from .nodes import (
    DEFAULT_ID_CONSTANT,
    ArrayNode,
    BoolNode,
    ComputedNode,
    Node,
    ObjectNode,
    RefNode,
    StrNode,
    serialize,
)
from .renderer import FragmentRenderer

_LOGGER = get_logger("fragments")

_REFERENCE_LIFETIME = re.compile(r"&\s*'[A-Za-z_]\w*\s*")
_LIFETIME = re.compile(r"'(?!_\b)[A-Za-z_]\w*")


class SignatureMismatchError(RuntimeError):
    """Raised when a signature has fewer argument descriptors than parameters."""


@dataclass(frozen=True)
class ArgumentDescriptor:
    """What the binding layer knows about one extracted argument.

    ``regular`` is False for receivers that are not matched to a named
    positional or keyword-only parameter (``*args``/``**kwargs`` holders,
    interpreter tokens); those are skipped when building the signature.
    """

    ty: str
    default: Optional[str] = None
    option_wrapped_type: Optional[str] = None
    from_py_with: Optional[str] = None
    regular: bool = True


@dataclass(frozen=True)
class PythonSignature:
    """The signature as seen from Python."""

    positional_parameters: Tuple[str, ...] = ()
    positional_only_parameters: int = 0
    varargs: Optional[str] = None
    keyword_only_parameters: Tuple[str, ...] = ()
    kwargs: Optional[str] = None


@dataclass(frozen=True)
class FunctionSignature:
    arguments: Tuple[ArgumentDescriptor, ...] = ()
    python_signature: PythonSignature = field(default_factory=PythonSignature)


@dataclass(frozen=True)
class Fragment:
    """A serialized fragment and the name of the constant that stores it."""

    element_id: int
    static_name: str
    node: Node
    content: ConcatenationBuilder

    def expression(self, crate_path: str) -> str:
        return self.content.to_expression(crate_path)


@dataclass(frozen=True)
class IdConstant:
    value: str
    source: str


def erase_lifetimes(ty: str) -> str:
    """Drop reference lifetimes and replace generic lifetime arguments with ``'_``."""
    without_references = _REFERENCE_LIFETIME.sub("&", ty)
    return _LIFETIME.sub("'_", without_references)


class FragmentEmitter:
    """Produces fragments and id constants for introspected elements."""

    def __init__(
        self,
        *,
        crate_path: str = "pyo3",
        renderer: FragmentRenderer | None = None,
        allocator: IdAllocator | None = None,
        fragment_prefix: str = "PYO3_INTROSPECTION_0_",
        id_constant: str = DEFAULT_ID_CONSTANT,
    ) -> None:
        self.crate_path = crate_path
        self.renderer = renderer or FragmentRenderer()
        self.allocator = allocator
        self.fragment_prefix = fragment_prefix
        self.id_constant = id_constant

    # ------------------------------------------------------------------
    # Element fragments

    def module(self, name: str, members: Iterable[str]) -> Fragment:
        node = ObjectNode.of(
            {
                "type": StrNode("module"),
                "id": RefNode(None),
                "name": StrNode(name),
                "members": ArrayNode.of(RefNode(member) for member in members),
            }
        )
        return self._fragment(node, seed=("module", name))

    def class_(self, ident: str, name: str) -> Fragment:
        node = ObjectNode.of(
            {
                "type": StrNode("class"),
                "id": RefNode(ident),
                "name": StrNode(name),
            }
        )
        return self._fragment(node, seed=("class", ident))

    def function(self, ident: str, name: str, signature: FunctionSignature) -> Fragment:
        node = ObjectNode.of(
            {
                "type": StrNode("function"),
                "id": RefNode(ident),
                "name": StrNode(name),
                "signature": self.signature_node(signature, function_name=name),
            }
        )
        return self._fragment(node, seed=("function", ident))

    def id_constant_for(self, element_type: str, ident: str) -> IdConstant:
        """Allocate an id and render the constant that exposes it.

        The constant is declared in the scope that ``RefNode(ident)`` paths
        (``ident::<id constant>``) resolve against.
        """
        value = str(self._next_id((element_type, ident)))
        source = self.renderer.render_id_constant(
            element_type=element_type,
            ident=ident,
            id_constant=self.id_constant,
            value=value,
        )
        return IdConstant(value=value, source=source)

    def render(self, fragment: Fragment) -> str:
        return self.renderer.render_fragment(
            static_name=fragment.static_name,
            expression=fragment.expression(self.crate_path),
        )

    def render_element(
        self, element_type: str, ident: str, id_constant: IdConstant, fragment: Fragment
    ) -> str:
        """Render an element's id constant together with its fragment.

        Module fragments refer to their own id without a path, so a module's
        constant and fragment share a ``pub mod`` scope that also sees the
        module's members.
        """
        body = f"{id_constant.source}\n{self.render(fragment)}"
        if element_type == "module":
            return self.renderer.render_module_scope(ident=ident, body=body)
        return body

    # ------------------------------------------------------------------
    # Signatures

    def signature_node(
        self, signature: FunctionSignature, *, function_name: str = "<function>"
    ) -> ObjectNode:
        descriptors = _regular_arguments(signature.arguments)
        python_signature = signature.python_signature
        parameters: List[Node] = []

        for index, name in enumerate(python_signature.positional_parameters):
            kind = (
                "POSITIONAL_ONLY"
                if index < python_signature.positional_only_parameters
                else "POSITIONAL_OR_KEYWORD"
            )
            descriptor = _next_descriptor(descriptors, function_name)
            parameters.append(self.parameter_node(name, kind, descriptor))

        if python_signature.varargs is not None:
            parameters.append(_variadic_node(python_signature.varargs, "VAR_POSITIONAL"))

        for name in python_signature.keyword_only_parameters:
            descriptor = _next_descriptor(descriptors, function_name)
            parameters.append(self.parameter_node(name, "KEYWORD_ONLY", descriptor))

        if python_signature.kwargs is not None:
            parameters.append(_variadic_node(python_signature.kwargs, "VAR_KEYWORD"))

        return ObjectNode.of({"parameters": ArrayNode.of(parameters)})

    def parameter_node(self, name: str, kind: str, descriptor: ArgumentDescriptor) -> ObjectNode:
        entries: dict[str, Node] = {
            "name": StrNode(name),
            "kind": StrNode(kind),
            "has_default": BoolNode(descriptor.default is not None),
        }
        if descriptor.from_py_with is None:
            entries["annotation"] = ComputedNode(self.annotation_expression(descriptor))
        return ObjectNode.of(entries)

    def annotation_expression(self, descriptor: ArgumentDescriptor) -> str:
        if descriptor.option_wrapped_type is not None:
            inner = ConcatenationBuilder()
            inner.push_computed(self.input_type_expression(descriptor.option_wrapped_type))
            inner.push_str(" | None")
            return inner.to_expression(self.crate_path)
        return self.input_type_expression(descriptor.ty)

    def input_type_expression(self, ty: str) -> str:
        return (
            f"<{erase_lifetimes(ty)} as "
            f"{self.crate_path}::impl_::extract_argument::PyFunctionArgument>::INPUT_TYPE"
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _fragment(self, node: Node, *, seed: object) -> Fragment:
        content = serialize(node, id_constant=self.id_constant)
        element_id = self._next_id(seed)
        static_name = f"{self.fragment_prefix}{element_id}"
        _LOGGER.debug("Emitted fragment %s (%d pieces)", static_name, len(content.pieces))
        return Fragment(element_id=element_id, static_name=static_name, node=node, content=content)

    def _next_id(self, seed: object) -> int:
        if self.allocator is not None:
            return self.allocator.next_id(seed)
        return unique_element_id(seed)


def _regular_arguments(arguments: Sequence[ArgumentDescriptor]) -> Iterator[ArgumentDescriptor]:
    return (argument for argument in arguments if argument.regular)


def _next_descriptor(
    descriptors: Iterator[ArgumentDescriptor], function_name: str
) -> ArgumentDescriptor:
    descriptor = next(descriptors, None)
    if descriptor is None:
        raise SignatureMismatchError(
            f"{function_name}: fewer argument descriptors than parameters in the Python signature"
        )
    return descriptor


def _variadic_node(name: str, kind: str) -> ObjectNode:
    return ObjectNode.of({"name": StrNode(name), "kind": StrNode(kind)})


__all__ = [
    "ArgumentDescriptor",
    "Fragment",
    "FragmentEmitter",
    "FunctionSignature",
    "IdConstant",
    "PythonSignature",
    "SignatureMismatchError",
    "erase_lifetimes",
]
