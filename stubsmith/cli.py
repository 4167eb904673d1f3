"""CLI entrypoints for stubsmith commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, StubsmithConfig, load_config
from .declarations import DeclarationError, emit_elements, load_declarations
from .logging import configure_logging, get_logger
from .metadata import (
    ControlCharacterError,
    FragmentEmitter,
    FragmentRenderer,
    SignatureMismatchError,
    TemplateError,
)
from .resolve import ResolutionError, load_document, resolve
from .stubs import module_stub_files, write_stub_files


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Path to .stubsmith.yml or the directory holding it (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stubsmith",
        description="Emit introspection metadata fragments and generate type stubs from them.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records, with timestamps, to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    emit_parser = subparsers.add_parser(
        "emit",
        help="Render metadata fragments for the elements in a declarations file.",
    )
    _add_verbose_option(emit_parser, suppress_default=True)
    _add_config_option(emit_parser)
    emit_parser.add_argument("declarations", type=Path, help="YAML or JSON declarations file.")
    emit_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="File to write the rendered fragments to (defaults to stdout).",
    )

    stubs_parser = subparsers.add_parser(
        "stubs",
        help="Generate stub files from a recovered metadata document.",
    )
    _add_verbose_option(stubs_parser, suppress_default=True)
    _add_config_option(stubs_parser)
    stubs_parser.add_argument("metadata", type=Path, help="JSON metadata recovered from the binary.")
    stubs_parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for the stub files (defaults to stubs.output_dir).",
    )
    stubs_parser.add_argument(
        "--root",
        default=None,
        help="Name of the root module when the document holds several.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for stubsmith commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "emit":
        try:
            output = _run_emit(config, args.declarations)
        except (FileNotFoundError, UnicodeDecodeError) as exc:
            parser.exit(1, f"{exc}\n")
        except (DeclarationError, SignatureMismatchError, ControlCharacterError, TemplateError) as exc:
            parser.exit(1, f"stubsmith emit failed: {exc}\nRun with --verbose for more details.\n")
        if args.output is None:
            sys.stdout.write(output)
        else:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output, encoding="utf-8")
            logger.info("Fragments written to %s", args.output)
    elif args.command == "stubs":
        output_dir = args.output_dir or config.stubs.output_dir
        try:
            written = _run_stubs(config, args.metadata, output_dir, root=args.root)
        except (FileNotFoundError, UnicodeDecodeError) as exc:
            parser.exit(1, f"{exc}\n")
        except ResolutionError as exc:
            parser.exit(1, f"stubsmith stubs failed: {exc}\nRun with --verbose for more details.\n")
        for path in written:
            print(_relativize(path))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_emit(config: StubsmithConfig, declarations_path: Path) -> str:
    declarations = load_declarations(declarations_path)
    emitter = FragmentEmitter(
        crate_path=config.emit.crate_path,
        renderer=FragmentRenderer(
            config.emit.templates_dir, template_pack=config.emit.template_pack
        ),
        fragment_prefix=config.emit.fragment_prefix,
        id_constant=config.emit.id_constant,
    )
    emitted = emit_elements(declarations, emitter)
    return "\n".join(element.source for element in emitted)


def _run_stubs(
    config: StubsmithConfig, metadata_path: Path, output_dir: Path, *, root: str | None
) -> list[Path]:
    fragments = load_document(metadata_path.read_text(encoding="utf-8"))
    module = resolve(
        fragments,
        root=root or config.resolve.root,
        on_duplicate_id=config.resolve.on_duplicate_id,
    )
    files = module_stub_files(module, suffix=config.stubs.suffix)
    return write_stub_files(files, output_dir)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
