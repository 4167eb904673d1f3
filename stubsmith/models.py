"""Resolved object model consumed by the stub generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ParameterKind(str, Enum):
    """Calling convention of a parameter, tagged as in the metadata fragments."""

    POSITIONAL_ONLY = "POSITIONAL_ONLY"
    POSITIONAL_OR_KEYWORD = "POSITIONAL_OR_KEYWORD"
    VAR_POSITIONAL = "VAR_POSITIONAL"
    KEYWORD_ONLY = "KEYWORD_ONLY"
    VAR_KEYWORD = "VAR_KEYWORD"

    @property
    def is_variadic(self) -> bool:
        return self in (ParameterKind.VAR_POSITIONAL, ParameterKind.VAR_KEYWORD)


# Parameters must appear in non-decreasing order of this rank.
_KIND_ORDER = {
    ParameterKind.POSITIONAL_ONLY: 0,
    ParameterKind.POSITIONAL_OR_KEYWORD: 1,
    ParameterKind.VAR_POSITIONAL: 2,
    ParameterKind.KEYWORD_ONLY: 3,
    ParameterKind.VAR_KEYWORD: 4,
}


@dataclass(frozen=True)
class Parameter:
    """A single parameter of a function signature."""

    name: str
    kind: ParameterKind
    has_default: bool = False
    annotation: Optional[str] = None


@dataclass(frozen=True)
class Signature:
    """Parameters of a function, in calling order."""

    parameters: Tuple[Parameter, ...] = ()

    def validate(self) -> None:
        """Raise ``ValueError`` when the parameter list is not a valid Python signature."""
        previous = -1
        seen_variadic: set[ParameterKind] = set()
        for parameter in self.parameters:
            rank = _KIND_ORDER[parameter.kind]
            if rank < previous:
                raise ValueError(
                    f"Parameter {parameter.name!r} ({parameter.kind.value}) is out of order"
                )
            if parameter.kind.is_variadic:
                if parameter.kind in seen_variadic:
                    raise ValueError(f"Duplicate {parameter.kind.value} parameter {parameter.name!r}")
                seen_variadic.add(parameter.kind)
            previous = rank


@dataclass(frozen=True)
class Function:
    name: str
    signature: Signature = field(default_factory=Signature)


@dataclass(frozen=True)
class Class:
    name: str


@dataclass(frozen=True)
class Module:
    """A module with its submodules, classes and functions in declaration order."""

    name: str
    modules: Tuple["Module", ...] = ()
    classes: Tuple[Class, ...] = ()
    functions: Tuple[Function, ...] = ()


__all__ = ["Class", "Function", "Module", "Parameter", "ParameterKind", "Signature"]
