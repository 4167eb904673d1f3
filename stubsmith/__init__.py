"""Introspection metadata emission and type stub generation for compiled extensions."""

from .models import Class, Function, Module, Parameter, ParameterKind, Signature
from .resolve import ResolutionError, load_document, resolve
from .stubs import module_stub_files, write_stub_files

__all__ = [
    "Class",
    "Function",
    "Module",
    "Parameter",
    "ParameterKind",
    "ResolutionError",
    "Signature",
    "load_document",
    "module_stub_files",
    "resolve",
    "write_stub_files",
]
