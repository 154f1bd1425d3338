"""High-level generator orchestration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .context import ResolutionContext
from .endpoint_writers import create_endpoint_writer
from .endpoints import EndpointAssembler, EndpointError
from .imports import ImportConflictError, ImportResolutionError, OutputFile
from .loader import MetadataLoadError, load_metadata_document
from .metadata import ClassPool, MetadataDocument
from .model_types import (
    Endpoint,
    GenerationOptions,
    GenerationResult,
    UnsupportedTypeError,
)
from .resolver import TypeResolver
from .signature import SignatureError
from .type_writers import create_type_writer
from .writer import WriteError, create_output_layout, render_files, write_rendered_files


def run_generation(
    *,
    input_path: Path,
    output_dir: Path,
    options: Optional[GenerationOptions] = None,
) -> GenerationResult:
    """Generate TypeScript types and HTTP client bindings from class metadata.

    Every file is rendered in memory before the output directory is created,
    so a failing run leaves nothing behind.

    Args:
        input_path (Path): Path to the input metadata YAML document.
        output_dir (Path): Directory where generated files are written.
        options (Optional[GenerationOptions]): Output flavour; defaults apply when omitted.

    Returns:
        GenerationResult: Written files, endpoint count and warnings.
    """
    document = load_metadata_document(input_path)
    context, endpoints, files = generate_files(document, options=options)
    rendered = render_files(files)

    create_output_layout(output_dir)
    written = write_rendered_files(output_dir=output_dir, rendered=rendered)
    return GenerationResult(
        output_dir=str(output_dir),
        files=tuple(written),
        endpoint_count=len(endpoints),
        warnings=tuple(context.warnings),
    )


def generate_files(
    document: MetadataDocument,
    *,
    options: Optional[GenerationOptions] = None,
) -> tuple[ResolutionContext, list[Endpoint], list[OutputFile]]:
    """Resolve a metadata document and build every output file without touching disk."""
    context = ResolutionContext(
        class_pool=ClassPool(document.classes),
        options=options if options is not None else GenerationOptions(),
    )
    endpoints = assemble_endpoints(context)

    files = create_type_writer(context).print_all_types()
    files.extend(create_endpoint_writer(context).print_all_endpoints(endpoints))
    return context, endpoints, files


def assemble_endpoints(context: ResolutionContext) -> list[Endpoint]:
    """Assemble the endpoints of every declared class, in declaration order."""
    assembler = EndpointAssembler(context, TypeResolver(context))
    endpoints: list[Endpoint] = []
    for class_info in context.class_pool.declared_classes():
        endpoints.extend(assembler.parse_class(class_info))
    return endpoints


__all__ = [
    "EndpointError",
    "ImportConflictError",
    "ImportResolutionError",
    "MetadataLoadError",
    "SignatureError",
    "UnsupportedTypeError",
    "WriteError",
    "assemble_endpoints",
    "generate_files",
    "run_generation",
]
