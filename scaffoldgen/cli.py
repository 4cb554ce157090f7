# File: scaffoldgen/cli.py
"""
scaffoldgen - Command-Line Interface
====================================

Thin ``argparse`` front end over ``ScaffoldGenerator``.

Usage examples::

    # Create-mode scaffolding for one table
    scaffoldgen posts

    # Incremental change to an existing table
    scaffoldgen posts_add_view_count --alter

    # Versioned API, custom locations
    scaffoldgen rooms --api-version v2 --input-dir ./schema-csv -o ./out

    # Lint only
    scaffoldgen posts --validate-only

Exit codes:
    0 — success
    1 — validation error
    2 — generation error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, NoReturn, Optional, Sequence, Tuple

from scaffoldgen.descriptors import ArtifactKind
from scaffoldgen.errors import ConfigError
from scaffoldgen.generator import (
    FAILURE_EXPORT,
    FAILURE_GENERATION,
    FAILURE_INPUT,
    FAILURE_VALIDATION,
    DocumentOutcome,
    GenerationReport,
    GenerationRequest,
    ScaffoldGenerator,
    build_config,
)
from scaffoldgen.models import GenerationConfig, GenerationMode

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("scaffoldgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4

_FAILURE_EXIT_CODES: Dict[str, int] = {
    FAILURE_INPUT: EXIT_INPUT_ERROR,
    FAILURE_VALIDATION: EXIT_VALIDATION_ERROR,
    FAILURE_GENERATION: EXIT_GENERATION_ERROR,
    FAILURE_EXPORT: EXIT_EXPORT_ERROR,
}


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``scaffoldgen`` logger.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root_logger: logging.Logger = logging.getLogger("scaffoldgen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    from scaffoldgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="scaffoldgen",
        description=(
            "scaffoldgen — schema-driven API scaffolding.\n\n"
            "Reads per-table CSV schema files, builds a canonical schema "
            "document and derives migration, model, DTO, validator, resource, "
            "service, controller, route, factory and test descriptors."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s posts\n"
            "  %(prog)s posts_add_view_count --alter\n"
            "  %(prog)s rooms --api-version v2 -o ./out\n"
            "  %(prog)s posts --validate-only\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"scaffoldgen v{__version__}",
    )
    parser.add_argument(
        "names",
        nargs="+",
        metavar="NAME",
        help="Input name(s); each is a folder under the input root.",
    )

    # --- Generation ---
    gen_group = parser.add_argument_group("generation")
    gen_group.add_argument(
        "--alter",
        action="store_true",
        default=False,
        help="Treat the inputs as changes to an existing table.",
    )
    gen_group.add_argument(
        "--api-version",
        type=str,
        default=None,
        metavar="vN",
        help="API version segment (overrides the table meta file).",
    )

    # --- Locations ---
    path_group = parser.add_argument_group("locations")
    path_group.add_argument(
        "--input-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Root folder holding one sub-folder of CSV files per name.",
    )
    path_group.add_argument(
        "--schema-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Where the serialized schema documents are written.",
    )
    path_group.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Where rendered artifact descriptors are written.",
    )
    path_group.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="FILE",
        help="YAML file with generation settings.",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Assemble and lint only; derive and write nothing.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the full pipeline but don't write files to disk.",
    )
    mode_group.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=False,
        help="Treat lint warnings as errors.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "input_root": args.input_dir,
        "schema_dir": args.schema_dir,
        "output_dir": args.output,
    }


# ---------------------------------------------------------------------------
# Console messages
# ---------------------------------------------------------------------------


def _print_usage_guidance(config: GenerationConfig) -> None:
    """Expected folder layout, shown when an input folder or file is missing."""
    root: str = config.input_root
    print(
        "\n".join(
            [
                "",
                "Expected folder structure:",
                f"  {root}/{{name}}/",
                "    {name}_table.csv       (optional) table meta",
                "    {name}_columns.csv     (required) column definitions",
                "    {name}_indexes.csv     (optional) composite indexes",
                "    {name}_relations.csv   (optional) model relations",
                "",
                "Examples:",
                "  scaffoldgen posts",
                "  scaffoldgen posts_add_view_count --alter",
                "",
            ]
        ),
        file=sys.stderr,
    )


def _next_steps(doc: DocumentOutcome) -> List[Tuple[str, str]]:
    """Alter runs only migrate; create runs also bring in the model."""
    paths: Dict[str, str] = {entry.kind: entry.path for entry in doc.artifacts}
    steps: List[Tuple[str, str]] = [("migrate", paths[ArtifactKind.MIGRATION.value])]
    if doc.mode == GenerationMode.CREATE.value:
        steps.append(("model", paths[ArtifactKind.MODEL.value]))
    return steps


def _print_success(report: GenerationReport, *, validate_only: bool, dry_run: bool) -> None:
    for doc in report.documents:
        print(f"\n{doc.name} ({doc.table_name}, {doc.mode}"
              f"{', ' + doc.api_version if doc.api_version else ''})")
        print("  Loaded files:")
        for filename, label in doc.loaded_files:
            print(f"    ✓ {filename:<28s} {label}")
        if doc.manual_review:
            print("  Manual review:")
            for item in doc.manual_review:
                print(f"    ⚠ {item}")

    if validate_only or dry_run:
        return

    print("\nNext steps:")
    print(f"  Review the schema documents in {report.schema_directory}")
    if report.manifest is None:
        return
    for doc in report.documents:
        print(f"  {doc.name}:")
        for action, path in _next_steps(doc):
            print(f"    {action:<8s} {path}")
    print(f"  Check {report.output_directory}/manifest.json for the file list")


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point; callable from ``__main__`` or tests.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
    _setup_logging(verbosity)

    try:
        config: GenerationConfig = build_config(args.config, _build_config_overrides(args))
    except ConfigError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    generator: ScaffoldGenerator = ScaffoldGenerator(
        config,
        fail_on_warnings=args.fail_on_warnings,
        validate_only=args.validate_only,
        dry_run=args.dry_run,
    )
    requests: List[GenerationRequest] = [
        GenerationRequest(name=name, alter=args.alter, api_version=args.api_version)
        for name in args.names
    ]

    logger.info("Names:   %s", ", ".join(args.names))
    logger.info("Mode:    %s", "alter" if args.alter else "create")
    logger.info("Input:   %s", config.input_root)

    report: GenerationReport = generator.run(requests)

    if not args.quiet:
        print(report.summary())

    if not report.success:
        exit_code: int = _FAILURE_EXIT_CODES.get(report.failure or "", EXIT_GENERATION_ERROR)
        if exit_code == EXIT_INPUT_ERROR:
            for message in report.error_messages:
                print(f"Error: {message}", file=sys.stderr)
            _print_usage_guidance(config)
        logger.error("Generation failed with exit code %d.", exit_code)
        sys.exit(exit_code)

    if not args.quiet:
        _print_success(report, validate_only=args.validate_only, dry_run=args.dry_run)
    logger.info("Generation completed successfully.")
    sys.exit(EXIT_SUCCESS)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("scaffoldgen.cli loaded.")
