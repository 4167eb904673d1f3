"""Concatenation of literal text with expressions computed by a later build stage."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, List, Tuple, Union


class ControlCharacterError(ValueError):
    """Raised when text meant for a JSON string literal holds a control character."""


@dataclass(frozen=True)
class Literal:
    """Text known now."""

    text: str


@dataclass(frozen=True)
class Computed:
    """An opaque expression whose value is only known when the artifact is built."""

    expression: str


Piece = Union[Literal, Computed]


class ConcatenationBuilder:
    """Accumulates literal and computed pieces into a minimal concatenation.

    Literal text is buffered and only flushed into a piece right before a
    computed piece is appended (or when the pieces are read), so the
    resulting piece list never holds an empty literal or two adjacent
    literals.
    """

    def __init__(self) -> None:
        self._pieces: List[Piece] = []
        self._current: List[str] = []

    def push_str(self, value: str) -> None:
        """Append literal text as-is."""
        self._current.append(value)

    def push_str_to_escape(self, value: str) -> None:
        """Append ``value`` as a quoted, escaped JSON string."""
        self._current.append('"')
        self._current.append(escape_json_text(value))
        self._current.append('"')

    def push_computed(self, expression: str) -> None:
        """Append an expression that must not be evaluated here."""
        self._flush()
        self._pieces.append(Computed(expression))

    @property
    def pieces(self) -> Tuple[Piece, ...]:
        """Return the pieces including any pending literal text."""
        pieces = list(self._pieces)
        pending = "".join(self._current)
        if pending:
            pieces.append(Literal(pending))
        return tuple(pieces)

    def to_expression(self, crate_path: str) -> str:
        """Render one compile-time concatenation over every piece, in order."""
        rendered = "".join(f"{render_piece(piece)}, " for piece in self.pieces)
        return f"{crate_path}::impl_::concat::const_concat!({rendered})"

    def evaluate(self, resolve: Callable[[str], str]) -> str:
        """Join the pieces, asking ``resolve`` for the value of each computed one."""
        parts = []
        for piece in self.pieces:
            if isinstance(piece, Literal):
                parts.append(piece.text)
            else:
                parts.append(resolve(piece.expression))
        return "".join(parts)

    def _flush(self) -> None:
        if self._current:
            text = "".join(self._current)
            self._current = []
            if text:
                self._pieces.append(Literal(text))


def escape_json_text(value: str) -> str:
    """Escape backslashes and quotes, rejecting code points below 32."""
    escaped = []
    for char in value:
        if char == "\\":
            escaped.append("\\\\")
        elif char == '"':
            escaped.append('\\"')
        elif ord(char) < 32:
            raise ControlCharacterError(
                f"Control character {char!r} is not allowed in metadata text: {value!r}"
            )
        else:
            escaped.append(char)
    return "".join(escaped)


def render_piece(piece: Piece) -> str:
    """Render a piece as an operand of the concat macro."""
    if isinstance(piece, Literal):
        return json.dumps(piece.text, ensure_ascii=False)
    return piece.expression


__all__ = [
    "Computed",
    "ConcatenationBuilder",
    "ControlCharacterError",
    "Literal",
    "Piece",
    "escape_json_text",
    "render_piece",
]
