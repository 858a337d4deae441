"""
Definition CLI tool.

This tool runs the versioning pipeline over JSON definition files:
- migrate: Bring a definition to the latest schema version and stamp it
- checksum: Print the checksum of a definition's page
- verify: Check a stored checksum against the page
- plan: Show which migrations a definition would go through
- check-registry: Validate the migration graph

Usage:
    canondef-definitions migrate page.json -o page.latest.json
    canondef-definitions verify page.latest.json
    canondef-definitions check-registry --module myapp.migrations

Invariants:
    - Output files are deterministic (sorted keys, 2-space indent)
    - verify/check-registry failures exit 1; pipeline errors exit 2

How to change safely:
    - Add new commands, don't modify existing ones
    - Keep output format stable for CI parsing
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Optional, Sequence

from ..config import Settings
from ..logging_setup import setup_logging
from ..pipeline import DefinitionPipeline, load_registry_module
from ..versioning.checksum import compute_checksum
from ..versioning.errors import CanonDefError
from ..versioning.types import CanonicalDefinition

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ERROR = 2


class DefinitionCLI:
    """Commands over a configured DefinitionPipeline.

    Example:
        >>> cli = DefinitionCLI(pipeline)
        >>> print(cli.migrate("page.json"))
    """

    def __init__(self, pipeline: DefinitionPipeline) -> None:
        self.pipeline = pipeline

    def migrate(self, path: str) -> str:
        """Run the pipeline over a definition file.

        Returns:
            JSON string of the migrated, checksummed definition
        """
        result = self.pipeline.process_dict(_read_json(path))
        return json.dumps(result, indent=2, sort_keys=True, ensure_ascii=False)

    def checksum(self, path: str) -> str:
        return compute_checksum(_read_definition(path).page)

    def verify(self, path: str) -> bool:
        return self.pipeline.verify(_read_definition(path))

    def plan(self, path: str) -> list[str]:
        """Labels of the migrations the definition would go through."""
        definition = _read_definition(path)
        return [m.label for m in self.pipeline.plan(definition)]

    def check_registry(self) -> list[str]:
        engine = self.pipeline.engine
        return engine.registry.validate_all(engine.latest_version)


def _read_json(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _read_definition(path: str) -> CanonicalDefinition:
    return CanonicalDefinition.from_dict(_read_json(path))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Canonical definition versioning tool")
    parser.add_argument("--module", help="Python module exposing the migration registry")
    parser.add_argument("--latest", help="Override the latest schema version")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate_parser = subparsers.add_parser("migrate", help="Migrate and stamp a definition")
    migrate_parser.add_argument("file", help="Definition JSON file")
    migrate_parser.add_argument("--output", "-o", help="Output file (default: stdout)")

    checksum_parser = subparsers.add_parser("checksum", help="Print the page checksum")
    checksum_parser.add_argument("file", help="Definition JSON file")

    verify_parser = subparsers.add_parser("verify", help="Verify the stored checksum")
    verify_parser.add_argument("file", help="Definition JSON file")

    plan_parser = subparsers.add_parser("plan", help="Show pending migrations")
    plan_parser.add_argument("file", help="Definition JSON file")

    subparsers.add_parser("check-registry", help="Validate the migration graph")

    return parser


def _build_pipeline(args: argparse.Namespace, settings: Settings) -> DefinitionPipeline:
    registry, module_latest = load_registry_module(args.module or settings.registry_module)
    latest = args.latest or module_latest or settings.latest_schema_version
    return DefinitionPipeline(registry, latest)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point for the definition tool."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings()

    setup_logging(
        "DEBUG" if args.verbose else settings.log_level,
        settings.log_format,
    )

    try:
        cli = DefinitionCLI(_build_pipeline(args, settings))

        if args.command == "migrate":
            output = cli.migrate(args.file)
            if args.output:
                with open(args.output, "w", encoding="utf-8") as f:
                    f.write(output + "\n")
                print(f"Definition written to {args.output}", file=sys.stderr)
            else:
                print(output)

        elif args.command == "checksum":
            print(cli.checksum(args.file))

        elif args.command == "verify":
            if cli.verify(args.file):
                print("Checksum OK")
                sys.exit(EXIT_OK)
            print("Checksum MISMATCH")
            sys.exit(EXIT_FAILED)

        elif args.command == "plan":
            steps = cli.plan(args.file)
            if not steps:
                print(f"Already at latest schema version {cli.pipeline.latest_version}")
            else:
                print(f"{len(steps)} migration(s) to {cli.pipeline.latest_version}:")
                for label in steps:
                    print(f"  - {label}")

        elif args.command == "check-registry":
            errors = cli.check_registry()
            if not errors:
                print("Migration registry is valid")
                sys.exit(EXIT_OK)
            print(f"Migration registry validation failed with {len(errors)} error(s):")
            for error in errors:
                print(f"  - {error}")
            sys.exit(EXIT_FAILED)

    except (CanonDefError, OSError, ValueError, TypeError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
