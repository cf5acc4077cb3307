"""Main CLI entry point for the xml2csv command-line tool.

Provides commands to convert a record-oriented XML document to delimited
text, list the columns it would produce, and display its element tree.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional

from xml2csv import __version__
from xml2csv.api import ConversionResult, XMLTableConverter
from xml2csv.shared import (
    PRESETS,
    ConfigError,
    ConverterConfig,
    InputReadError,
    StructuralError,
    get_logger,
)
from xml2csv.tools import format_tree

STDIN_MARKER = "-"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_STRUCTURAL = 2
EXIT_INTERRUPTED = 130

logger = get_logger(__name__, None, "cli")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml2csv",
        description="Flatten a record-oriented XML document into delimited text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  xml2csv convert records.xml -o records.csv
  xml2csv convert --preset tab_separated < records.xml
  xml2csv columns records.xml --format json
  xml2csv tree records.xml
        """
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
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

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Options shared by every command
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "input",
        nargs="?",
        default=STDIN_MARKER,
        help="XML file to read ('-' or omitted for stdin)"
    )
    common.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file"
    )
    common.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help="Configuration preset (ignored when --config is given)"
    )
    common.add_argument(
        "--keep-all",
        action="store_true",
        help="Disable the discard heuristic and keep every column"
    )

    # Convert command
    convert_parser = subparsers.add_parser(
        "convert", parents=[common], help="Convert XML to delimited text"
    )
    convert_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    convert_parser.add_argument(
        "--delimiter", "-d",
        help="Field delimiter; '\\t' is accepted for tab"
    )
    convert_parser.add_argument(
        "--profile",
        action="store_true",
        help="Print a per-stage timing and memory report to stderr"
    )

    # Columns command
    columns_parser = subparsers.add_parser(
        "columns", parents=[common], help="List final and discarded columns"
    )
    columns_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format"
    )

    # Tree command
    tree_parser = subparsers.add_parser(
        "tree", parents=[common], help="Print the reconstructed element tree"
    )
    tree_parser.add_argument(
        "--show-columns",
        action="store_true",
        help="Annotate leaves with their column names"
    )

    return parser


def load_config(args: argparse.Namespace) -> ConverterConfig:
    """Build the effective configuration from file, preset and flags.

    Raises:
        ConfigError: The file is unreadable or describes an invalid config
    """
    if args.config:
        try:
            text = args.config.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"cannot read config file {args.config}: {e.strerror or e}") from e
        config = ConverterConfig.from_json(text)
        if args.preset:
            logger.warning(
                "--preset ignored because --config was given",
                extra={"preset": args.preset}
            )
    elif args.preset:
        config = PRESETS[args.preset]()
    else:
        config = ConverterConfig.default()

    overrides: Dict[str, Any] = {}
    if args.keep_all:
        overrides["discard__enabled"] = False
    delimiter = getattr(args, "delimiter", None)
    if delimiter is not None:
        overrides["render__delimiter"] = "\t" if delimiter == "\\t" else delimiter
    if getattr(args, "profile", False):
        overrides["global___enable_performance_profiling"] = True

    return config.override(**overrides) if overrides else config


def configure_logging(args: argparse.Namespace, config: ConverterConfig) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = getattr(logging, config.global_.logging_level)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def stdin_stream() -> BinaryIO:
    return getattr(sys.stdin, "buffer", sys.stdin)


def run_conversion(args: argparse.Namespace, converter: XMLTableConverter) -> ConversionResult:
    if args.input == STDIN_MARKER:
        return converter.convert_stream(stdin_stream())
    return converter.convert_file(Path(args.input))


def report_warnings(result: ConversionResult, quiet: bool) -> None:
    if quiet:
        return
    for message in result.summary()["warnings"]:
        print(f"warning: {message}", file=sys.stderr)


def cmd_convert(args: argparse.Namespace, config: ConverterConfig) -> int:
    """Handle convert command."""
    converter = XMLTableConverter(config)
    result = run_conversion(args, converter)

    if args.output:
        try:
            with args.output.open("w", encoding="utf-8", newline="") as f:
                converter.renderer.write(result.table, f)
        except OSError as e:
            print(f"error: cannot write {args.output}: {e.strerror or e}", file=sys.stderr)
            return EXIT_FAILURE
    else:
        converter.renderer.write(result.table, sys.stdout)

    report_warnings(result, args.quiet)
    if result.profiling is not None and converter.profiler is not None:
        print(converter.profiler.format_report(result.profiling), file=sys.stderr)
    return EXIT_OK


def cmd_columns(args: argparse.Namespace, config: ConverterConfig) -> int:
    """Handle columns command."""
    result = run_conversion(args, XMLTableConverter(config))
    summary = result.summary()

    if args.format == "json":
        print(json.dumps({
            "columns": summary["columns"],
            "discarded_tags": summary["discarded_tags"],
            "discarded_columns": summary["discarded_columns"],
            "collisions": summary["collisions"],
        }, indent=2))
    else:
        print(f"{len(summary['columns'])} columns, "
              f"{len(summary['discarded_columns'])} discarded")
        print("-" * 50)
        for column in summary["columns"]:
            print(column)
        if summary["discarded_tags"]:
            print()
            print("Discarded tags:")
            for name in summary["discarded_tags"]:
                print(f"  {name}")

    report_warnings(result, args.quiet)
    return EXIT_OK


def cmd_tree(args: argparse.Namespace, config: ConverterConfig) -> int:
    """Handle tree command."""
    result = run_conversion(args, XMLTableConverter(config))
    text = format_tree(result.root, show_columns=args.show_columns)
    if text:
        print(text)
    report_warnings(result, args.quiet)
    return EXIT_OK


COMMANDS = {
    "convert": cmd_convert,
    "columns": cmd_columns,
    "tree": cmd_tree,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILURE

    try:
        config = load_config(args)
    except ConfigError as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return EXIT_FAILURE

    configure_logging(args, config)

    try:
        return COMMANDS[args.command](args, config)
    except StructuralError as e:
        print(f"error: malformed input: {e}", file=sys.stderr)
        return EXIT_STRUCTURAL
    except InputReadError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
