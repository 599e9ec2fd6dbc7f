"""Command-line entry point.

Usage::

    stackgen --schema schema.json --output my-app
    stackgen -s blog.json -o blog --graphql --no-terraform
    python -m stackgen --schema schema.json --admin
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from stackgen.config import GeneratorOptions
from stackgen.errors import GeneratorError
from stackgen.scaffolder import GenerationResult, ProjectGenerator, ResolvedConfig, resolve_features
from stackgen.schema import Schema, load_schema
from stackgen.utils import (
    console,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
)


def build_parser(defaults: GeneratorOptions) -> argparse.ArgumentParser:
    """Build the argument parser with defaults taken from *defaults*."""
    parser = argparse.ArgumentParser(
        prog="stackgen",
        description="Generate a full-stack project (Express + Angular) from a JSON schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  stackgen --schema schema.json --output my-app\n"
            "  stackgen -s blog.json -o blog --graphql --no-terraform\n"
            "\n"
            "Feature flags set in the schema override the command line.\n"
        ),
    )
    parser.add_argument(
        "--schema", "-s",
        default=str(defaults.schema_path),
        help=f"Path to the schema JSON (default: {defaults.schema_path})",
    )
    parser.add_argument(
        "--output", "-o",
        default=str(defaults.output_dir),
        help=f"Output directory, cleared and regenerated (default: {defaults.output_dir})",
    )

    flags = parser.add_argument_group("features")
    for option, dest, label in (
        ("--graphql", "graphql", "GraphQL type definitions and resolvers"),
        ("--docker", "docker", "Dockerfiles and docker-compose.yml"),
        ("--ci", "ci", "GitHub Actions workflow"),
        ("--terraform", "terraform", "AWS Terraform files"),
        ("--admin", "admin_panel", "ngx-admin dashboard"),
    ):
        flags.add_argument(
            option,
            dest=dest,
            action=argparse.BooleanOptionalAction,
            default=getattr(defaults, dest),
            help=f"{label} (default: {'on' if getattr(defaults, dest) else 'off'})",
        )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        default=defaults.quiet,
        help="Suppress progress and summary output",
    )
    return parser


def parse_options(argv: Optional[Sequence[str]] = None) -> GeneratorOptions:
    """Parse *argv* into validated ``GeneratorOptions``."""
    try:
        defaults = GeneratorOptions.from_env()
    except ValueError as exc:
        print_error(str(exc))
        sys.exit(2)

    args = build_parser(defaults).parse_args(argv)
    return GeneratorOptions(
        schema_path=Path(args.schema),
        output_dir=Path(args.output),
        graphql=args.graphql,
        docker=args.docker,
        ci=args.ci,
        terraform=args.terraform,
        admin_panel=args.admin_panel,
        quiet=args.quiet,
    )


def run(options: GeneratorOptions) -> tuple[ProjectGenerator, GenerationResult]:
    """Load, resolve, and generate for *options*.

    The schema is loaded before anything on disk changes, so a bad schema
    path never touches the output directory.
    """
    schema = load_schema(options.schema_path)
    config = resolve_features(schema, options.feature_defaults())
    generator = ProjectGenerator(schema, config, quiet=options.quiet)
    result = asyncio.run(generator.generate(options.output_dir))
    return generator, result


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for ``stackgen`` and ``python -m stackgen``."""
    options = parse_options(argv)
    try:
        generator, result = run(options)
    except GeneratorError as exc:
        print_error(str(exc))
        return 1
    except OSError as exc:
        print_error(f"Filesystem error: {exc}")
        return 1

    if not options.quiet:
        _print_report(generator.schema, generator.config, result)
    return 0


def _print_report(schema: Schema, config: ResolvedConfig, result: GenerationResult) -> None:
    print_summary_table(
        {
            "Project": schema.project_name,
            "Output": str(result.root.resolve()),
            "Entities": str(len(schema.entities)),
            "Files written": str(result.file_count),
            "Features": ", ".join(config.enabled()) or "none",
            "Duration": format_duration(result.duration),
        },
        title="stackgen",
    )
    print_success(f"Project generated at: {result.root.resolve()}")
    console.print()
    console.print("[bold]Next steps:[/bold]")
    console.print(f"  cd {result.root}")
    if config.docker:
        console.print("  docker-compose up --build")
    if config.terraform:
        console.print("  cd terraform && terraform init && terraform apply")
    console.print()


if __name__ == "__main__":
    sys.exit(main())
