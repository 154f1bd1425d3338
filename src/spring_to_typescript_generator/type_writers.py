"""Writers that turn registered named types into one output file each."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from typing import Union

from .codegen_ts import MODEL_SUFFIX, render_named_type
from .context import ResolutionContext
from .imports import OutputFile, record_import
from .model_types import EnumType, NamedType, ObjectType

TYPE_DECLARATIONS_DIR = "types"


def type_location(base_path: str, name: str) -> str:
    """Location of the file declaring the named type ``name``."""
    return posixpath.join(base_path, TYPE_DECLARATIONS_DIR, name)


class TypeScriptWriter:
    """Emit one default-exported interface or enum per named type."""

    def __init__(self, context: ResolutionContext, base_path: str = "") -> None:
        self._context = context
        self._base_path = base_path

    def print_all_types(self) -> list[OutputFile]:
        """Render every registered named type and register its file."""
        return self.print_types(named for _, named in self._context.named_types.items())

    def print_types(self, named_types: Iterable[NamedType]) -> list[OutputFile]:
        """Render the given named types, register their files and resolve imports.

        Files of types referenced from these declarations must already be
        registered, or be part of ``named_types``.
        """
        use_string_as_date = self._context.options.use_string_as_date
        rendered: list[tuple[NamedType, OutputFile]] = []
        for named in named_types:
            output = OutputFile(
                location=type_location(self._base_path, named.name),
                body=render_named_type(named, zod=False, use_string_as_date=use_string_as_date),
            )
            self._context.files[named.name] = output
            rendered.append((named, output))

        for named, output in rendered:
            if isinstance(named, ObjectType):
                for member in named.fields:
                    record_import(output, member.type, self._context)
        return [output for _, output in rendered]


class ZodWriter:
    """Emit zod schemas for validated types and enums, interfaces for the rest."""

    def __init__(self, context: ResolutionContext, base_path: str = "") -> None:
        self._context = context
        self._base_path = base_path

    def print_all_types(self) -> list[OutputFile]:
        """Render every registered named type and register its file."""
        use_string_as_date = self._context.options.use_string_as_date
        validated: list[tuple[NamedType, OutputFile]] = []
        plain: list[NamedType] = []
        for name, named in self._context.named_types.items():
            if not (named.needs_validation or isinstance(named, EnumType)):
                plain.append(named)
                continue
            output = OutputFile(
                location=type_location(self._base_path, name),
                body=render_named_type(named, zod=True, use_string_as_date=use_string_as_date),
            )
            self._context.files[name] = output
            validated.append((named, output))

        files = [output for _, output in validated]
        files.extend(TypeScriptWriter(self._context, self._base_path).print_types(plain))

        for named, output in validated:
            output.add_import("zod", named=("z",))
            if isinstance(named, ObjectType):
                for member in named.fields:
                    record_import(output, member.type, self._context, named_suffix=MODEL_SUFFIX)
        return files


def create_type_writer(
    context: ResolutionContext, base_path: str = ""
) -> Union[TypeScriptWriter, ZodWriter]:
    """Return the type writer selected by the run options."""
    flavour = context.options.types
    if flavour == "typescript":
        return TypeScriptWriter(context, base_path)
    if flavour == "zod":
        return ZodWriter(context, base_path)
    raise ValueError(f"Unknown type writer {flavour!r}")
