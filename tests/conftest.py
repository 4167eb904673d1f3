from __future__ import annotations

import pytest

from stubsmith.metadata import FragmentEmitter, IdAllocator
from stubsmith.models import Parameter, ParameterKind


@pytest.fixture
def emitter() -> FragmentEmitter:
    """Provide an emitter with its own id allocator."""
    return FragmentEmitter(allocator=IdAllocator())


@pytest.fixture
def make_parameter():
    """Build parameters with less noise in signature-heavy tests."""

    def _make(
        name: str,
        kind: ParameterKind = ParameterKind.POSITIONAL_OR_KEYWORD,
        *,
        default: bool = False,
        annotation: str | None = None,
    ) -> Parameter:
        return Parameter(name=name, kind=kind, has_default=default, annotation=annotation)

    return _make
