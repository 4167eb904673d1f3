"""Resolves recovered metadata fragments into a module tree.

Fragments reference each other by id. They are first indexed by id in a
single pass, then the tree is rebuilt from the root module.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .logging import get_logger
from .models import Class, Function, Module, Parameter, ParameterKind, Signature

_LOGGER = get_logger("resolve")


class ResolutionError(RuntimeError):
    """Raised when recovered metadata cannot be turned into a module tree."""


def load_document(text: str) -> List[Dict[str, Any]]:
    """Parse a JSON array of fragments or a run of concatenated fragment objects."""
    stripped = text.strip()
    if not stripped:
        return []
    if stripped.startswith("["):
        try:
            loaded = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ResolutionError(f"Invalid metadata document: {exc}") from exc
        return _as_fragment_list(loaded)

    decoder = json.JSONDecoder()
    fragments: List[Any] = []
    position = 0
    while position < len(stripped):
        try:
            value, position = decoder.raw_decode(stripped, position)
        except json.JSONDecodeError as exc:
            raise ResolutionError(f"Invalid metadata fragment at offset {position}: {exc}") from exc
        fragments.append(value)
        while position < len(stripped) and stripped[position].isspace():
            position += 1
    return _as_fragment_list(fragments)


def resolve(
    fragments: Iterable[Mapping[str, Any]],
    *,
    root: Optional[str] = None,
    on_duplicate_id: str = "error",
) -> Module:
    """Build the module tree rooted at ``root`` (or the only top-level module)."""
    arena = _index_fragments(fragments, on_duplicate_id)
    root_id = _find_root(arena, root)
    _LOGGER.debug("Resolving %d fragments from root %s", len(arena), root_id)
    return _resolve_module(arena, root_id, ())


def _as_fragment_list(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        raise ResolutionError("Metadata document must be a list of fragments")
    for item in value:
        if not isinstance(item, dict):
            raise ResolutionError(f"Metadata fragment must be an object, got {item!r}")
    return value


def _index_fragments(
    fragments: Iterable[Mapping[str, Any]], on_duplicate_id: str
) -> Dict[str, Mapping[str, Any]]:
    arena: Dict[str, Mapping[str, Any]] = {}
    for fragment in fragments:
        element_id = _require_str(fragment, "id")
        if element_id in arena:
            message = (
                f"Duplicate element id {element_id}: "
                f"{arena[element_id].get('name')!r} and {fragment.get('name')!r}"
            )
            if on_duplicate_id == "warn":
                _LOGGER.warning("%s; keeping the first fragment", message)
                continue
            raise ResolutionError(message)
        arena[element_id] = fragment
    return arena


def _find_root(arena: Mapping[str, Mapping[str, Any]], root: Optional[str]) -> str:
    modules = {key: value for key, value in arena.items() if value.get("type") == "module"}
    if root is not None:
        matches = [key for key, value in modules.items() if value.get("name") == root]
        if len(matches) != 1:
            raise ResolutionError(f"Expected exactly one module named {root!r}, found {len(matches)}")
        return matches[0]

    referenced: Set[str] = set()
    for value in modules.values():
        referenced.update(_members(value))
    candidates = [key for key in modules if key not in referenced]
    if len(candidates) != 1:
        names = sorted(str(modules[key].get("name")) for key in candidates)
        raise ResolutionError(
            f"Cannot pick a root module among {len(candidates)} candidates: {', '.join(names) or 'none'}"
        )
    return candidates[0]


def _resolve_module(
    arena: Mapping[str, Mapping[str, Any]], element_id: str, ancestors: Tuple[str, ...]
) -> Module:
    if element_id in ancestors:
        raise ResolutionError(f"Module {element_id} contains itself")
    fragment = arena[element_id]
    modules: List[Module] = []
    classes: List[Class] = []
    functions: List[Function] = []
    for member_id in _members(fragment):
        member = arena.get(member_id)
        if member is None:
            raise ResolutionError(
                f"Module {fragment.get('name')!r} references unknown element {member_id}"
            )
        member_type = member.get("type")
        if member_type == "module":
            modules.append(_resolve_module(arena, member_id, ancestors + (element_id,)))
        elif member_type == "class":
            classes.append(Class(name=_require_str(member, "name")))
        elif member_type == "function":
            functions.append(_resolve_function(member))
        else:
            raise ResolutionError(f"Unknown element type {member_type!r} for id {member_id}")
    return Module(
        name=_require_str(fragment, "name"),
        modules=tuple(modules),
        classes=tuple(classes),
        functions=tuple(functions),
    )


def _resolve_function(fragment: Mapping[str, Any]) -> Function:
    name = _require_str(fragment, "name")
    signature_data = fragment.get("signature")
    if not isinstance(signature_data, dict):
        raise ResolutionError(f"Function {name!r} has no signature")
    raw_parameters = signature_data.get("parameters")
    if not isinstance(raw_parameters, list):
        raise ResolutionError(f"Function {name!r} has no parameter list")

    parameters = []
    for raw in raw_parameters:
        if not isinstance(raw, dict):
            raise ResolutionError(f"Function {name!r} has a malformed parameter: {raw!r}")
        kind_value = _require_str(raw, "kind")
        try:
            kind = ParameterKind(kind_value)
        except ValueError as exc:
            raise ResolutionError(f"Unknown parameter kind {kind_value!r} in {name!r}") from exc
        annotation = raw.get("annotation")
        parameters.append(
            Parameter(
                name=_require_str(raw, "name"),
                kind=kind,
                has_default=bool(raw.get("has_default", False)),
                annotation=annotation if isinstance(annotation, str) else None,
            )
        )

    signature = Signature(parameters=tuple(parameters))
    try:
        signature.validate()
    except ValueError as exc:
        raise ResolutionError(f"Function {name!r} has an invalid signature: {exc}") from exc
    return Function(name=name, signature=signature)


def _members(fragment: Mapping[str, Any]) -> List[str]:
    members = fragment.get("members", [])
    if not isinstance(members, list) or not all(isinstance(item, str) for item in members):
        raise ResolutionError(f"Module {fragment.get('name')!r} has malformed members")
    return members


def _require_str(fragment: Mapping[str, Any], key: str) -> str:
    value = fragment.get(key)
    if not isinstance(value, str):
        raise ResolutionError(f"Fragment field {key!r} must be a string: {dict(fragment)!r}")
    return value


__all__ = ["ResolutionError", "load_document", "resolve"]
