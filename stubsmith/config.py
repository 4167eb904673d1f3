"""Configuration loading for stubsmith (.stubsmith.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = ".stubsmith.yml"
DUPLICATE_ID_POLICIES = ("error", "warn")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class EmitConfig:
    """Settings for rendering embeddable metadata fragments."""

    crate_path: str = "pyo3"
    template_pack: str = "rust"
    templates_dir: Optional[Path] = None
    fragment_prefix: str = "PYO3_INTROSPECTION_0_"
    id_constant: str = "_PYO3_INTROSPECTION_ID"


@dataclass
class StubConfig:
    """Where and how stub files are written."""

    output_dir: Path = Path("stubs")
    suffix: str = ".pyi"


@dataclass
class ResolveConfig:
    """Policy applied when resolving recovered metadata into a module tree."""

    root: Optional[str] = None
    on_duplicate_id: str = "error"


@dataclass
class StubsmithConfig:
    """Represents the settings defined in .stubsmith.yml."""

    root: Path
    emit: EmitConfig = field(default_factory=EmitConfig)
    stubs: StubConfig = field(default_factory=StubConfig)
    resolve: ResolveConfig = field(default_factory=ResolveConfig)


def load_config(config_path: Path) -> StubsmithConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return StubsmithConfig(root=root, stubs=StubConfig(output_dir=root / "stubs"))

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    emit = EmitConfig()
    emit_data = _as_dict(data.get("emit"))
    if emit_data:
        emit.crate_path = _as_str(emit_data.get("crate_path")) or emit.crate_path
        emit.template_pack = _as_str(emit_data.get("template_pack")) or emit.template_pack
        templates_dir = _as_str(emit_data.get("templates_dir"))
        emit.templates_dir = root / templates_dir if templates_dir else None
        emit.fragment_prefix = _as_str(emit_data.get("fragment_prefix")) or emit.fragment_prefix
        emit.id_constant = _as_str(emit_data.get("id_constant")) or emit.id_constant

    stubs = StubConfig(output_dir=root / "stubs")
    stubs_data = _as_dict(data.get("stubs"))
    if stubs_data:
        output_dir = _as_str(stubs_data.get("output_dir"))
        if output_dir:
            stubs.output_dir = root / output_dir
        suffix = _as_str(stubs_data.get("suffix"))
        if suffix:
            stubs.suffix = suffix if suffix.startswith(".") else f".{suffix}"

    resolve = ResolveConfig()
    resolve_data = _as_dict(data.get("resolve"))
    if resolve_data:
        resolve.root = _as_str(resolve_data.get("root"))
        policy = _as_str(resolve_data.get("on_duplicate_id"))
        if policy is not None:
            policy = policy.strip().lower()
            if policy not in DUPLICATE_ID_POLICIES:
                raise ConfigError(
                    f"resolve.on_duplicate_id must be one of {', '.join(DUPLICATE_ID_POLICIES)}; got {policy!r}"
                )
            resolve.on_duplicate_id = policy

    return StubsmithConfig(root=root, emit=emit, stubs=stubs, resolve=resolve)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path.name} is not valid UTF-8: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


__all__ = [
    "ConfigError",
    "EmitConfig",
    "ResolveConfig",
    "StubConfig",
    "StubsmithConfig",
    "load_config",
]
