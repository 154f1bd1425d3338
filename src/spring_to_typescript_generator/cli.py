"""Command line interface for Spring to TypeScript generation."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from .generator import (
    EndpointError,
    ImportConflictError,
    ImportResolutionError,
    MetadataLoadError,
    SignatureError,
    UnsupportedTypeError,
    WriteError,
    run_generation,
)
from .model_types import GenerationOptions

_GENERATION_ERRORS: tuple[type[RuntimeError], ...] = (
    MetadataLoadError,
    SignatureError,
    EndpointError,
    ImportConflictError,
    ImportResolutionError,
    UnsupportedTypeError,
    WriteError,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="spring-to-typescript-generator",
        description="Generate TypeScript types and API clients from Spring controller metadata",
    )
    parser.add_argument("--input", required=True, help="Path to a class metadata YAML file")
    parser.add_argument("--output", required=True, help="Output directory for generated sources")
    parser.add_argument(
        "--types",
        choices=("typescript", "zod"),
        default="typescript",
        help="Flavour of the generated type declarations",
    )
    parser.add_argument(
        "--api",
        choices=("react-query", "angular"),
        default="react-query",
        help="Flavour of the generated endpoint clients",
    )
    parser.add_argument(
        "--string-dates",
        action="store_true",
        help="Represent date and time values as strings instead of Date objects",
    )
    parser.add_argument(
        "--angular-environment",
        default=GenerationOptions.angular_environment,
        help="Module path of the Angular environment file, relative to the endpoints directory",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    options = GenerationOptions(
        types=args.types,
        api=args.api,
        use_string_as_date=bool(args.string_dates),
        angular_environment=args.angular_environment,
    )

    try:
        result = run_generation(
            input_path=Path(args.input),
            output_dir=Path(args.output),
            options=options,
        )
    except _GENERATION_ERRORS as exc:
        parser.error(str(exc))
        return 2

    for warning in result.warnings:
        print(f"Warning: {warning}")
    print(
        f"Generated {len(result.files)} files for {result.endpoint_count} endpoints "
        f"in {result.output_dir}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
