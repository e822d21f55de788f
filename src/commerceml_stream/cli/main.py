"""Main CLI entry point for the commerceml-stream command-line tool.

Streams CommerceML offers and orders documents into JSON lines, runs ad hoc
collection rules over arbitrary XML and reports engine statistics.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import IO, Any, Callable, Dict, Iterator, List, Optional, Type

from commerceml_stream import __version__
from commerceml_stream.api import parse_file
from commerceml_stream.commerceml import CommerceMLParser, OffersParser, OrdersParser
from commerceml_stream.shared import (
    ConfigValidationError,
    ParserConfig,
    RuleError,
    RunResult,
    StreamParserError,
    configure_logging,
    get_logger,
)
from commerceml_stream.streaming import Rule

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

DOCUMENT_PARSERS: Dict[str, Type[CommerceMLParser]] = {
    "offers": OffersParser,
    "orders": OrdersParser,
}

logger = get_logger(__name__, None, "cli")


def parse_rule_option(value: str) -> Rule:
    """Parse ``NAME=/A/B[:/A/B/C,/A/B/D]`` into a rule.

    Without the ``:`` part the whole subtree is collected; a trailing ``:``
    with nothing after it keeps only the start element.
    """
    name, sep, paths = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(
            f"Invalid rule {value!r}, expected NAME=/START[:/INCLUDE,...]"
        )
    start, sep, include = paths.partition(":")
    includes: Optional[List[str]] = None
    if sep:
        includes = [p for p in include.split(",") if p]
    try:
        return Rule.from_paths(name, start, includes)
    except RuleError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def load_config(path: Optional[Path]) -> ParserConfig:
    """Load a JSON parser configuration file.

    Raises:
        ConfigValidationError: If the file is unreadable or invalid
    """
    if path is None:
        return ParserConfig.default()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigValidationError(f"Cannot read config file {path}: {e}") from e
    return ParserConfig.from_json(text)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="commerceml-stream",
        description="Streaming CommerceML parser with path-based collection rules"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON parser configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for command, parser_cls in DOCUMENT_PARSERS.items():
        doc_parser = subparsers.add_parser(
            command, help=f"Stream CommerceML {command} documents as records"
        )
        doc_parser.add_argument(
            "paths",
            nargs="+",
            type=Path,
            help="XML files to parse"
        )
        doc_parser.add_argument(
            "--format", "-f",
            choices=["json", "text"],
            default="json",
            help="Output format (default: json lines)"
        )
        doc_parser.add_argument(
            "--output", "-o",
            type=Path,
            help="Output file (default: stdout)"
        )
        doc_parser.add_argument(
            "--only",
            action="append",
            choices=list(parser_cls.RULES),
            help="Record kinds to output; repeatable (default: all)"
        )

    scan_parser = subparsers.add_parser("scan", help="Collect raw records with ad hoc rules")
    scan_parser.add_argument("path", type=Path, help="XML file to scan")
    scan_parser.add_argument(
        "--rule", "-r",
        action="append",
        required=True,
        type=parse_rule_option,
        help="Rule as NAME=/START[:/INCLUDE,...]; repeatable"
    )
    scan_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    stats_parser = subparsers.add_parser("stats", help="Report streaming statistics")
    stats_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files to measure"
    )
    stats_parser.add_argument(
        "--rule", "-r",
        action="append",
        default=[],
        type=parse_rule_option,
        help="Rule to activate while measuring; repeatable"
    )
    stats_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format"
    )

    return parser


class _Output:
    """Context manager yielding the output stream for a command."""

    def __init__(self, path: Optional[Path]) -> None:
        self.path = path
        self._stream: Optional[IO[str]] = None

    def __enter__(self) -> IO[str]:
        if self.path is None:
            return sys.stdout
        self._stream = self.path.open("w", encoding="utf-8")
        return self._stream

    def __exit__(self, *exc_info: Any) -> None:
        if self._stream is not None:
            self._stream.close()


def format_record(kind: str, record: Dict[str, Any], format_type: str, file: Path) -> str:
    """Format one mapped or raw record for output."""
    if format_type == "json":
        return json.dumps(
            {"file": str(file), "kind": kind, "record": record}, ensure_ascii=False
        )
    scalars = ", ".join(
        f"{key}={value}" for key, value in record.items()
        if not isinstance(value, (dict, list))
    )
    return f"[{kind}] {scalars}"


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format per-file statistics for output."""
    if format_type == "json":
        return json.dumps(results, indent=2, ensure_ascii=False)

    if not results:
        return "No results to display."

    lines = []
    successful = sum(1 for r in results if r["success"])
    lines.append(f"Processed {len(results)} files, {successful} successful")
    lines.append("-" * 60)

    for result in results:
        status = "OK" if result["success"] else "FAILED"
        metrics = result["metrics"]
        lines.append(f"{status} {result['file']}")
        lines.append(
            f"   Events: {metrics['events_processed']}, "
            f"Elements: {metrics['elements_seen']}, "
            f"Max depth: {metrics['max_depth']}, "
            f"Time: {metrics['processing_time_ms']:.1f}ms"
        )
        for name, count in sorted(metrics["records_emitted"].items()):
            lines.append(f"   {name}: {count} records")
        for diagnostic in result["diagnostics"][:3]:
            lines.append(f"   Error: {diagnostic['message']}")
        lines.append("")

    return "\n".join(lines)


def _subscribe_all(
    parser: CommerceMLParser,
    kinds: List[str],
    write: Callable[[str, Dict[str, Any]], None]
) -> None:
    for kind in kinds:
        method = getattr(parser, f"on_{kind}")
        method(lambda model, kind=kind: write(kind, model.to_dict()))


def cmd_document(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle the offers and orders commands."""
    parser_cls = DOCUMENT_PARSERS[args.command]
    kinds = args.only or list(parser_cls.RULES)
    failures = 0

    with _Output(args.output) as out:
        for path in args.paths:
            parser = parser_cls(config)

            def write(kind: str, record: Dict[str, Any], path: Path = path) -> None:
                print(format_record(kind, record, args.format, path), file=out)

            _subscribe_all(parser, kinds, write)
            try:
                parser.parse(path)
            except (StreamParserError, OSError) as e:
                failures += 1
                logger.error("Failed to parse file", extra={"file": str(path), "error": str(e)})
                print(f"Error: {path}: {e}", file=sys.stderr)

    if args.output:
        print(f"Records written to {args.output}", file=sys.stderr)
    return EXIT_OK if failures == 0 else EXIT_FAILURE


def cmd_scan(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle the scan command."""
    with _Output(args.output) as out:
        def write(name: str, record: Any) -> None:
            print(format_record(name, record.to_dict(), "json", args.path), file=out)

        result = parse_file(args.path, args.rule, config, collect=False, on_record=write)

    for diagnostic in result.diagnostics:
        print(f"Error: {diagnostic.message}", file=sys.stderr)
    return EXIT_OK if result.success else EXIT_FAILURE


def _stats_entry(path: Path, result: RunResult) -> Dict[str, Any]:
    return {
        "file": str(path),
        "success": result.success,
        "metrics": result.metrics.to_dict(),
        "diagnostics": [
            {
                "severity": diag.severity.name,
                "message": diag.message,
                "component": diag.component
            } for diag in result.diagnostics
        ],
    }


def iter_stats(
    paths: List[Path],
    rules: List[Rule],
    config: ParserConfig
) -> Iterator[Dict[str, Any]]:
    """Run the rules over each file in turn, yielding one statistics entry per file."""
    for path in paths:
        result = parse_file(path, rules, config, collect=False)
        yield _stats_entry(path, result)


def cmd_stats(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle the stats command."""
    results = list(iter_stats(args.paths, args.rule, config))
    print(format_results(results, args.format))
    return EXIT_OK if all(r["success"] for r in results) else EXIT_FAILURE


COMMANDS: Dict[str, Callable[[argparse.Namespace, ParserConfig], int]] = {
    "offers": cmd_document,
    "orders": cmd_document,
    "scan": cmd_scan,
    "stats": cmd_stats,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    try:
        config = load_config(args.config)
    except ConfigValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE

    # Set up logging verbosity
    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")
    else:
        configure_logging(config.logging_level)

    try:
        return COMMANDS[args.command](args, config)
    except RuleError as e:
        print(f"Invalid rules: {e}", file=sys.stderr)
        return EXIT_USAGE
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
