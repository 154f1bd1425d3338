"""Resolved type model, endpoint records and generation datatypes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class UnsupportedTypeError(RuntimeError):
    """Raised when a type or validation variant has no handler."""


class PrimitiveType(Enum):
    """Primitive payload kinds; integral and floating widths are collapsed."""

    STRING = "String"
    INT = "Int"
    DOUBLE = "Double"
    BOOLEAN = "Boolean"
    DATE = "Date"
    VOID = "Void"


@dataclass(frozen=True)
class ArrayType:
    """Homogeneous sequence of ``element``."""

    element: Type


@dataclass(frozen=True)
class MapType:
    """String-keyed (or otherwise keyed) record of ``value``."""

    key: Type
    value: Type


@dataclass(eq=False)
class ObjectType:
    """A named object shape.

    Instances compare by identity: the registry hands out exactly one instance
    per name, and fields may point back at the enclosing object.
    """

    name: str
    fields: list[Field] = field(default_factory=list, repr=False)
    needs_validation: bool = False


@dataclass(eq=False)
class EnumType:
    """A named enumeration of string constants."""

    name: str
    values: list[str] = field(default_factory=list)
    needs_validation: bool = False


type NamedType = Union[ObjectType, EnumType]
type Type = Union[PrimitiveType, ArrayType, MapType, ObjectType, EnumType]


@dataclass(frozen=True)
class MinValue:
    """Lower numeric bound."""

    value: int
    message: str


@dataclass(frozen=True)
class MaxValue:
    """Upper numeric bound."""

    value: int
    message: str


@dataclass(frozen=True)
class MinLength:
    """Lower bound on string or collection length."""

    length: int
    message: str


@dataclass(frozen=True)
class MaxLength:
    """Upper bound on string or collection length."""

    length: int
    message: str


@dataclass(frozen=True)
class Regex:
    """Pattern constraint; ``pattern`` is a slash-delimited regex literal."""

    pattern: str
    message: str


@dataclass(frozen=True)
class Email:
    """Well-formed email address constraint."""

    message: str


type Validation = Union[MinValue, MaxValue, MinLength, MaxLength, Regex, Email]


@dataclass(frozen=True)
class Field:
    """A named, typed member of an object shape or an endpoint variable."""

    name: str
    type: Type
    required: bool = True
    validations: tuple[Validation, ...] = ()


class HttpMethod(Enum):
    """HTTP verbs an endpoint can be mapped to."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(eq=False)
class Endpoint:
    """One HTTP operation exposed by a controller method."""

    class_name: str
    method_name: str
    url_template: str
    http_method: HttpMethod
    return_type: Type
    url_args: list[Field] = field(default_factory=list)
    body: Optional[Type] = None
    params: list[Field] = field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        """Return ``Class.method`` for diagnostics."""
        return f"{self.class_name}.{self.method_name}"

    def all_variables(self) -> list[Field]:
        """Return URL args and params, required ones first, then by name."""
        variables = [*self.url_args, *self.params]
        return sorted(variables, key=lambda item: (not item.required, item.name))


@dataclass(eq=False)
class PagedEndpoint(Endpoint):
    """A GET endpoint whose results are fetched page by page."""

    page_variable: Optional[Field] = None
    page_size_variable: Optional[Field] = None


@dataclass(frozen=True)
class GenerationOptions:
    """User-selected output flavour for one generation run."""

    types: str = "typescript"
    api: str = "react-query"
    use_string_as_date: bool = False
    angular_environment: str = "../../../environments/environment"


@dataclass(frozen=True)
class GenerationResult:
    """Generation output metadata."""

    output_dir: str
    files: tuple[str, ...]
    endpoint_count: int
    warnings: tuple[str, ...]
