"""Command-line interface for dryck-nav."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from lsprotocol.types import Location, Position

from backends import LanguageServerError, start_backend, stop_backend
from parse.reference_tokens import extract_reference
from resolve.orchestrator import DefinitionResolver
from rules.config import ConfigError, NavConfig, load_config
from scan.files import WorkspaceFiles
from utils import path_to_uri, uri_to_path

logger = logging.getLogger(__name__)


class FileBuffer:
    """``TextBuffer`` over a file read once from disk."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lines = path.read_text(encoding="utf-8").splitlines()

    @property
    def uri(self) -> str:
        return path_to_uri(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def read_line(self, index: int) -> str:
        if not 0 <= index < len(self._lines):
            return ""
        return self._lines[index]


def _add_cursor_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="Dialect document")
    parser.add_argument("line", type=int, help="0-based line")
    parser.add_argument("column", type=int, help="0-based column in code points")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dryck-nav")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: config log_level)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser(
        "serve", help="Run the language server on stdio"
    )
    serve_parser.add_argument(
        "--root",
        default=None,
        help="Workspace root when the client does not send one",
    )

    resolve_parser = subparsers.add_parser(
        "resolve", help="Resolve the reference under a cursor"
    )
    _add_cursor_args(resolve_parser)
    resolve_parser.add_argument(
        "--root",
        default=None,
        help="Workspace root (default: the document's directory)",
    )
    resolve_parser.add_argument(
        "--backend",
        default=None,
        choices=["static", "lsp"],
        help="Foreign tooling backend (default: config backend)",
    )

    token_parser = subparsers.add_parser(
        "token", help="Print the reference token under a cursor"
    )
    _add_cursor_args(token_parser)

    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _format_location(location: Location) -> str:
    try:
        target = str(uri_to_path(location.uri))
    except ValueError:
        target = location.uri
    start = location.range.start
    return f"{target}:{start.line + 1}:{start.character + 1}"


async def _resolve(
    config: NavConfig, root: Path, document: FileBuffer, position: Position
) -> list[Location]:
    files = WorkspaceFiles(
        root,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    )
    tooling = await start_backend(config, root, files)
    try:
        resolver = DefinitionResolver(
            files,
            tooling,
            config.base_class.to_ref(),
            extension=config.extension,
        )
        return await resolver.provide_definition(document, position)
    finally:
        await stop_backend(tooling)


def _handle_resolve(args: argparse.Namespace) -> int:
    document_path = Path(args.file).expanduser().resolve()
    root = (
        Path(args.root).expanduser().resolve()
        if args.root is not None
        else document_path.parent
    )
    try:
        config = load_config(root)
        document = FileBuffer(document_path)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        sys.stderr.write(f"error: cannot read {document_path}: {exc}\n")
        return 2

    _configure_logging(args.log_level or config.log_level)
    if args.backend is not None:
        config = config.model_copy(update={"backend": args.backend})

    position = Position(line=args.line, character=args.column)
    try:
        locations = asyncio.run(_resolve(config, root, document, position))
    except LanguageServerError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    for location in locations:
        sys.stdout.write(f"{_format_location(location)}\n")
    return 0 if locations else 1


def _handle_token(args: argparse.Namespace) -> int:
    try:
        document = FileBuffer(Path(args.file).expanduser().resolve())
    except (OSError, UnicodeDecodeError) as exc:
        sys.stderr.write(f"error: cannot read {args.file}: {exc}\n")
        return 2
    token = extract_reference(document.read_line(args.line), args.column)
    if token is None:
        return 1
    sys.stdout.write(f"{token.name}\t{token.form}\t{token.start}\t{token.end}\n")
    return 0


def _handle_serve(args: argparse.Namespace) -> int:
    from server.language_server import serve

    _configure_logging(args.log_level or "WARNING")
    root = Path(args.root).expanduser().resolve() if args.root is not None else None
    serve(root)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "resolve":
        return _handle_resolve(args)

    if args.command == "token":
        return _handle_token(args)

    if args.command == "serve":
        return _handle_serve(args)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
