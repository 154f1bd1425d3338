"""Generated output files and cross-file import resolution."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from .context import ResolutionContext
from .json_types import MutableJSONObject
from .model_types import (
    ArrayType,
    EnumType,
    MapType,
    NamedType,
    ObjectType,
    PrimitiveType,
    Type,
    UnsupportedTypeError,
)

OUTPUT_SUFFIX = ".ts"


class ImportConflictError(RuntimeError):
    """Raised when one module path would need two different default imports."""


class ImportResolutionError(RuntimeError):
    """Raised when a referenced type has no generated file to import from."""


@dataclass
class ImportRecord:
    """One import statement: a module path with default and named symbols."""

    location: str
    default_import: Optional[str] = None
    named_imports: set[str] = field(default_factory=set)

    def add_default(self, symbol: str, *, importer: str) -> None:
        """Set the default import, failing if a different one is already present."""
        if self.default_import is None:
            self.default_import = symbol
        elif self.default_import != symbol:
            raise ImportConflictError(
                f"Conflicting default import for '{self.location}' in {importer}: "
                f"expected {symbol} but {self.default_import} is already imported"
            )

    def render(self) -> str:
        """Render the record as an import statement."""
        clauses: list[str] = []
        if self.default_import is not None:
            clauses.append(self.default_import)
        if self.named_imports:
            clauses.append("{ " + ", ".join(sorted(self.named_imports)) + " }")
        if not clauses:
            return f"import '{self.location}';\n"
        return f"import {', '.join(clauses)} from '{self.location}';\n"

    def to_dict(self) -> MutableJSONObject:
        """Serialize as ``{modulePath, defaultImport, namedImports}``."""
        return {
            "modulePath": self.location,
            "defaultImport": self.default_import,
            "namedImports": sorted(self.named_imports),
        }


@dataclass(eq=False)
class OutputFile:
    """A generated source file: slash-separated location without suffix, imports and body."""

    location: str
    body: str = ""
    imports: list[ImportRecord] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Relative file path including the output suffix."""
        return self.location + OUTPUT_SUFFIX

    def import_location_for(self, other: OutputFile) -> str:
        """Return the relative module specifier of ``other`` as seen from this file."""
        base_dir = posixpath.dirname(self.location) or "."
        location = posixpath.relpath(other.location, base_dir)
        if "/" not in location:
            location = "./" + location
        return location

    def find_import(self, location: str) -> Optional[ImportRecord]:
        """Return the import record for a module path, if any."""
        for record in self.imports:
            if record.location == location:
                return record
        return None

    def add_import(
        self,
        location: str,
        *,
        default: Optional[str] = None,
        named: Iterable[str] = (),
    ) -> ImportRecord:
        """Create or merge the import record for ``location``."""
        record = self.find_import(location)
        if record is None:
            record = ImportRecord(location=location)
            self.imports.append(record)
        if default is not None:
            record.add_default(default, importer=self.location)
        record.named_imports.update(named)
        return record

    def render(self) -> str:
        """Render imports followed by the body."""
        header = "".join(record.render() for record in self.imports)
        if header:
            header += "\n"
        return header + self.body


def record_import(
    file: OutputFile,
    referenced: Type,
    context: ResolutionContext,
    *,
    named_suffix: Optional[str] = None,
) -> None:
    """Record the imports ``file`` needs to reference ``referenced``.

    Arrays and maps are walked down to the named types they contain. Each named
    type is imported from the file registered for it: as the default import,
    or as the named import ``<Name><named_suffix>`` when a suffix is given.
    References to the file's own type are skipped.

    Args:
        file (OutputFile): File that needs the import.
        referenced (Type): Type used inside ``file``.
        context (ResolutionContext): Run context holding the file registry.
        named_suffix (Optional[str]): Import a suffixed named export instead of the default.

    Raises:
        ImportConflictError: If the module path already has a different default import.
        ImportResolutionError: If a named type has no registered file.
    """
    if isinstance(referenced, PrimitiveType):
        return
    if isinstance(referenced, ArrayType):
        record_import(file, referenced.element, context, named_suffix=named_suffix)
        return
    if isinstance(referenced, MapType):
        record_import(file, referenced.key, context, named_suffix=named_suffix)
        record_import(file, referenced.value, context, named_suffix=named_suffix)
        return
    if isinstance(referenced, (ObjectType, EnumType)):
        _record_named_import(file, referenced, context, named_suffix=named_suffix)
        return
    raise UnsupportedTypeError(f"Unsupported type {referenced!r}")


def _record_named_import(
    file: OutputFile,
    referenced: NamedType,
    context: ResolutionContext,
    *,
    named_suffix: Optional[str],
) -> None:
    target = context.files.get(referenced.name)
    if target is None:
        raise ImportResolutionError(
            f"No generated file registered for type {referenced.name} (needed by {file.location})"
        )
    if target is file:
        return

    location = file.import_location_for(target)
    if named_suffix is None:
        file.add_import(location, default=referenced.name)
    else:
        file.add_import(location, named=(referenced.name + named_suffix,))
