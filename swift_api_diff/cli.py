"""CLI interface for swift-api-diff."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import DiffConfig, Options
from .errors import ApiDiffError, ValidationFailed
from .pipeline import compare_packages
from .report import ChangesType

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_BREAKING = 12

DEFAULT_COMMAND = "api-changes-type"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )


def _load_config(args) -> DiffConfig:
    config = DiffConfig.from_yaml(args.config) if args.config else DiffConfig()
    return config.with_overrides(xcode_path=args.xcode_path)


def _emit(output: str, args) -> bool:
    if not args.output:
        print(output)
        return True
    try:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
    except OSError as e:
        print(f"Error: cannot write {args.output}: {e.strerror or e}", file=sys.stderr)
        return False
    return True


def _run_comparison(args, render) -> int:
    """Shared body of both subcommands: compare, render, pick exit code."""
    _configure_logging(args.verbose)
    try:
        config = _load_config(args)
        options = Options(
            old_package_path=args.old_package,
            new_package_path=args.new_package,
            module_name=args.module,
            verbose=args.verbose,
        )
        report = compare_packages(options, config)
        changes_type = report.changes_type(config.additions_are_breaking)

        if args.format == "json":
            output = json.dumps(report.to_dict(config.additions_are_breaking), indent=2)
        else:
            output = render(report, config)
        if not _emit(output, args):
            return EXIT_ERROR

        if args.fail_on == "breaking" and changes_type is ChangesType.BREAKING:
            return EXIT_BREAKING
        return EXIT_OK

    except ValidationFailed as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except ApiDiffError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except Exception as e:
        if args.verbose:
            raise
        print(f"Unexpected error: {e}", file=sys.stderr)
        return EXIT_ERROR


def cmd_changes_type(args):
    """Print `breaking` or `minor`."""
    return _run_comparison(
        args, lambda report, config: report.changes_type(config.additions_are_breaking).value
    )


def cmd_changes_description(args):
    """Print every detected change grouped by category."""
    return _run_comparison(args, lambda report, config: report.format_description())


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-o", "--old-package", "--old-package-path", dest="old_package",
                        type=Path, required=True, help="Old package path")
    common.add_argument("-n", "--new-package", "--new-package-path", dest="new_package",
                        type=Path, required=True, help="New package path")
    common.add_argument("-m", "--module", "--module-name", dest="module",
                        required=True, help="Package module name")
    common.add_argument("--xcode-path", type=Path,
                        help="Xcode.app used for the macOS SDK (default: /Applications/Xcode.app on macOS)")
    common.add_argument("--config", type=Path, metavar="FILE",
                        help="YAML file with toolchain and policy settings")
    common.add_argument("--format", choices=["text", "json"], default="text")
    common.add_argument("--output", type=Path, metavar="FILE", help="Write output to file")
    common.add_argument("--fail-on", choices=["breaking", "none"], default="none",
                        help="Return exit code 12 when the change is breaking")
    common.add_argument("-v", "--verbose", action="store_true",
                        help="Print diagnostic messages and tool output to stderr")
    return common


def create_parser():
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="swift-api-diff",
        description="swift-api-diff — API change detection for autoversioning of Swift packages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Is the new version a breaking change? (default command)
  swift-api-diff -o ./v1 -n ./v2 -m MyLibrary

  # List every detected change
  swift-api-diff api-changes-description -o ./v1 -n ./v2 -m MyLibrary

  # JSON output for CI, failing the job on breaking changes
  swift-api-diff api-changes-type --format json --fail-on breaking -o ./v1 -n ./v2 -m MyLibrary

Exit codes:
  0  = Success
  1  = Build, dump or diff failure
  2  = Invalid options
  12 = Breaking change (with --fail-on breaking)
"""
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", dest="global_verbose", action="store_true",
                        help="Same as the subcommand option, accepted before the subcommand")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    common = _common_options()

    subparsers.add_parser(
        "api-changes-type", parents=[common],
        help="Get majority of api changes: breaking or minor",
    )
    subparsers.add_parser(
        "api-changes-description", parents=[common],
        help="Get api changes description",
    )

    return parser


HANDLERS = {
    "api-changes-type": cmd_changes_type,
    "api-changes-description": cmd_changes_description,
}


def main(argv: Optional[List[str]] = None):
    """Entry point for CLI."""
    argv = list(sys.argv[1:] if argv is None else argv)
    explicit = any(arg in HANDLERS for arg in argv)
    if argv and not explicit and argv[0] not in ("-h", "--help", "--version"):
        argv.insert(0, DEFAULT_COMMAND)

    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE
    args.verbose = args.verbose or args.global_verbose

    return HANDLERS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
