"""Tests for cross-file import resolution."""

from __future__ import annotations

import pytest

from spring_to_typescript_generator.imports import (
    ImportConflictError,
    ImportResolutionError,
    OutputFile,
    record_import,
)
from spring_to_typescript_generator.model_types import (
    ArrayType,
    EnumType,
    MapType,
    ObjectType,
    PrimitiveType,
)
from .fixture_helpers import context_for_classes


def _registered(context_files: dict[str, OutputFile], *names: str) -> dict[str, OutputFile]:
    for name in names:
        context_files[name] = OutputFile(location=f"types/{name}")
    return context_files


def test_import_is_recorded_once_per_pair() -> None:
    """Recording the same reference twice leaves a single import."""
    context = context_for_classes([])
    _registered(context.files, "User")
    endpoint_file = OutputFile(location="endpoints/UserController")
    user = ObjectType("User")

    record_import(endpoint_file, user, context)
    record_import(endpoint_file, ArrayType(user), context)

    assert [record.to_dict() for record in endpoint_file.imports] == [
        {"modulePath": "../types/User", "defaultImport": "User", "namedImports": []}
    ]


def test_sibling_files_use_dot_slash_prefix() -> None:
    """A module path without a separator is made explicitly relative."""
    context = context_for_classes([])
    _registered(context.files, "User", "Role")

    record_import(context.files["User"], EnumType("Role"), context)

    (record,) = context.files["User"].imports
    assert record.location == "./Role"
    assert record.render() == "import Role from './Role';\n"


def test_self_import_is_suppressed() -> None:
    """A type referring to itself needs no import."""
    context = context_for_classes([])
    _registered(context.files, "Node")

    record_import(context.files["Node"], ArrayType(ObjectType("Node")), context)

    assert context.files["Node"].imports == []


def test_maps_import_key_and_value_types() -> None:
    """Both sides of a map are walked; primitives need nothing."""
    context = context_for_classes([])
    _registered(context.files, "Role", "User")
    output = OutputFile(location="endpoints/Admin")

    record_import(output, MapType(EnumType("Role"), ObjectType("User")), context)
    record_import(output, PrimitiveType.DATE, context)

    assert [record.location for record in output.imports] == ["../types/Role", "../types/User"]


def test_conflicting_default_import_is_fatal() -> None:
    """Two different default symbols for one module path cannot be merged."""
    output = OutputFile(location="endpoints/UserController")
    output.add_import("../types/User", default="User")

    with pytest.raises(ImportConflictError):
        output.add_import("../types/User", default="Person")


def test_types_sharing_a_file_conflict_on_default_import() -> None:
    """Two named types registered at one location cannot both be default imports."""
    context = context_for_classes([])
    shared = OutputFile(location="types/User")
    context.files["User"] = shared
    context.files["Person"] = shared
    output = OutputFile(location="endpoints/UserController")

    record_import(output, ObjectType("User"), context)
    with pytest.raises(ImportConflictError):
        record_import(output, ObjectType("Person"), context)


def test_named_imports_are_merged() -> None:
    """Named imports from the same module are unioned and rendered sorted."""
    output = OutputFile(location="endpoints/UserController")
    output.add_import("@tanstack/react-query", named=("useQuery",))
    output.add_import("@tanstack/react-query", named=("useMutation", "useQuery"))

    (record,) = output.imports
    assert record.render() == "import { useMutation, useQuery } from '@tanstack/react-query';\n"


def test_named_suffix_imports_schema_exports() -> None:
    """Zod files import ``<Name>Model`` named exports instead of defaults."""
    context = context_for_classes([])
    _registered(context.files, "Order", "Line")

    record_import(context.files["Order"], ObjectType("Line"), context, named_suffix="Model")

    (record,) = context.files["Order"].imports
    assert record.to_dict() == {
        "modulePath": "./Line",
        "defaultImport": None,
        "namedImports": ["LineModel"],
    }


def test_type_without_file_is_fatal() -> None:
    """Every referenced named type must have a registered file."""
    context = context_for_classes([])
    output = OutputFile(location="endpoints/UserController")

    with pytest.raises(ImportResolutionError, match="User"):
        record_import(output, ObjectType("User"), context)


def test_render_places_imports_before_body() -> None:
    """Rendered files start with their imports and end with the body."""
    output = OutputFile(location="types/User", body="export default interface User {}\n")
    output.add_import("zod", named=("z",))

    assert output.path == "types/User.ts"
    assert output.render() == (
        "import { z } from 'zod';\n\nexport default interface User {}\n"
    )
