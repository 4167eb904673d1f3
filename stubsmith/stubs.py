"""Generates type stub files from a resolved module tree."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Dict, List

from .logging import get_logger
from .models import Class, Function, Module, ParameterKind

_LOGGER = get_logger("stubs")


def module_stub_files(module: Module, *, suffix: str = ".pyi") -> Dict[PurePosixPath, str]:
    """Return a mapping of relative stub path to stub text.

    The root module goes to ``__init__``. A submodule without submodules of
    its own is written as a sibling file; any other submodule gets its own
    directory with an ``__init__`` file.
    """
    output: Dict[PurePosixPath, str] = {}
    _add_module_stub_files(module, PurePosixPath(), output, suffix)
    return output


def _add_module_stub_files(
    module: Module,
    module_path: PurePosixPath,
    output: Dict[PurePosixPath, str],
    suffix: str,
) -> None:
    output[module_path / f"__init__{suffix}"] = module_stubs(module)
    for submodule in module.modules:
        if not submodule.modules:
            output[module_path / f"{submodule.name}{suffix}"] = module_stubs(submodule)
        else:
            _add_module_stub_files(submodule, module_path / submodule.name, output, suffix)


def module_stubs(module: Module) -> str:
    """Stub text for the module itself, submodules excluded."""
    elements: List[str] = []
    for class_ in module.classes:
        elements.append(class_stub(class_))
    for function in module.functions:
        elements.append(function_stub(function))
    elements.append("")  # trailing line break
    return "\n".join(elements)


def class_stub(class_: Class) -> str:
    return f"class {class_.name}: ..."


def function_stub(function: Function) -> str:
    positional_only = True
    keyword_only = False
    parameters: List[str] = []
    for parameter in function.signature.parameters:
        if positional_only and parameter.kind is not ParameterKind.POSITIONAL_ONLY:
            if parameters:
                parameters.append("/")
            positional_only = False
        if not keyword_only and parameter.kind is ParameterKind.KEYWORD_ONLY:
            parameters.append("*")
            keyword_only = True

        if parameter.kind is ParameterKind.VAR_POSITIONAL:
            keyword_only = True
            parameters.append(f"*{parameter.name}")
        elif parameter.kind is ParameterKind.VAR_KEYWORD:
            parameters.append(f"**{parameter.name}")
        else:
            rendered = parameter.name
            if parameter.annotation is not None:
                rendered += f": {parameter.annotation}"
            if parameter.has_default:
                rendered += " = ..."
            parameters.append(rendered)

    return f"def {function.name}({', '.join(parameters)}): ..."


def write_stub_files(files: Dict[PurePosixPath, str], output_dir: Path) -> List[Path]:
    """Write generated stubs below ``output_dir`` and return the written paths."""
    written: List[Path] = []
    for relative in sorted(files):
        path = output_dir.joinpath(*relative.parts)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(files[relative], encoding="utf-8")
        written.append(path)
    _LOGGER.info("Wrote %d stub files to %s", len(written), output_dir)
    return written


__all__ = [
    "class_stub",
    "function_stub",
    "module_stub_files",
    "module_stubs",
    "write_stub_files",
]
