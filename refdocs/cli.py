"""CLI entrypoints for refdocs commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from .config import ConfigError, RefDocsConfig, load_config
from .export import write_json
from .logging import configure_logging, get_logger
from .models import NamespaceVersionGroup
from .processor import ProcessingError, process
from .provider import ManifestProvider, ProviderError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Log resolver traces for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    _add_verbose_option(parser, suppress_default=suppress_default)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write log records to this file.",
    )


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "source",
        nargs="?",
        default=None,
        help="Manifest file or directory (defaults to source_path from the config).",
    )
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .refdocs.yml or the directory containing it (defaults to current directory).",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Override processor.max_depth for this run.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refdocs",
        description="Resolve API type declarations into a cross-referenced type graph.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    process_parser = subparsers.add_parser(
        "process",
        help="Resolve types and write the graph as JSON.",
    )
    _add_logging_options(process_parser, suppress_default=True)
    _add_source_options(process_parser)
    process_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the JSON export to this file instead of stdout.",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="Print namespace/versions with their root kinds.",
    )
    _add_logging_options(list_parser, suppress_default=True)
    _add_source_options(list_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for refdocs commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=Path(args.log_file) if args.log_file else None,
    )
    logger = get_logger("cli")

    try:
        config = _effective_config(args)
        groups = process(config, ManifestProvider())
    except (ConfigError, ProviderError, ProcessingError) as exc:
        logger.debug("Run aborted", exc_info=True)
        parser.exit(1, f"refdocs {args.command} failed: {exc}\nRun with --verbose for more details.\n")

    if args.command == "process":
        output = Path(args.output) if args.output else None
        text = write_json(groups, output)
        if output is None:
            print(text)
        else:
            print(f"Type graph written to {_relativize(output)}")
    elif args.command == "list":
        for line in _summarise(groups):
            print(line)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _effective_config(args: argparse.Namespace) -> RefDocsConfig:
    config = load_config(Path(args.config))
    if args.source:
        config.source_path = Path(args.source).expanduser().resolve()
    if args.max_depth is not None:
        if args.max_depth < 0:
            raise ConfigError("--max-depth must not be negative")
        config.processor.max_depth = args.max_depth
    return config


def _summarise(groups: List[NamespaceVersionGroup]) -> List[str]:
    lines: List[str] = []
    for group in groups:
        kinds = ", ".join(group.sorted_kinds()) or "(none)"
        lines.append(f"{group.namespace_version}: {len(group.types)} types; kinds: {kinds}")
    if not lines:
        lines.append("No annotated packages found")
    return lines


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
