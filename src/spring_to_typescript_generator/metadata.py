"""Class metadata supplied by the upstream metadata source."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

OBJECT_CLASS = "java.lang.Object"

_FLAG_ADAPTER: TypeAdapter[bool] = TypeAdapter(bool)


class AnnotationInfo(BaseModel):
    """An annotation attached to a class, field, method or parameter."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    values: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Return an annotation attribute value or ``default``."""
        return self.values.get(key, default)

    def flag(self, key: str, default: bool) -> bool:
        """Return a boolean attribute; quoted ``"true"``/``"false"`` values are coerced.

        Raises:
            pydantic.ValidationError: If the value is not a recognisable boolean.
        """
        raw = self.values.get(key)
        if raw is None:
            return default
        return _FLAG_ADAPTER.validate_python(raw)

    def string_list(self, key: str = "value") -> list[str]:
        """Return a string-or-list attribute as a list of strings."""
        raw = self.values.get(key)
        if raw is None:
            return []
        if isinstance(raw, str):
            return [raw]
        return [str(item) for item in raw]


class _Annotated(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    annotations: tuple[AnnotationInfo, ...] = ()

    def annotation(self, name: str) -> Optional[AnnotationInfo]:
        """Return the first annotation with the given simple name."""
        for candidate in self.annotations:
            if candidate.name == name:
                return candidate
        return None

    def has_annotation(self, name: str) -> bool:
        """Return whether an annotation with the given simple name is present."""
        return self.annotation(name) is not None


class FieldInfo(_Annotated):
    """A declared field of a class."""

    name: str
    type_name: str = Field(alias="type")
    signature: Optional[str] = None
    static: bool = False


class ParameterInfo(_Annotated):
    """A declared method parameter."""

    name: str
    type_name: str = Field(alias="type")


class MethodInfo(_Annotated):
    """A declared method with its erased descriptor and optional generic signature."""

    name: str
    descriptor: str
    signature: Optional[str] = None
    return_type: str
    parameters: tuple[ParameterInfo, ...] = ()


class ClassInfo(_Annotated):
    """Structural metadata for one class or enum."""

    name: str
    kind: Literal["class", "enum"] = "class"
    superclass: Optional[str] = None
    fields: tuple[FieldInfo, ...] = ()
    constants: tuple[str, ...] = ()
    methods: tuple[MethodInfo, ...] = ()

    @property
    def simple_name(self) -> str:
        """Return the unqualified class name (nested classes keep their own name)."""
        return simple_name(self.name)

    @property
    def is_enum(self) -> bool:
        """Return whether the class is an enumeration."""
        return self.kind == "enum"


class MetadataDocument(BaseModel):
    """Root of a metadata source document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    classes: tuple[ClassInfo, ...] = ()


def normalize_class_name(path: str) -> str:
    """Convert a slash-delimited class path into a dotted qualified name."""
    return path.strip().replace("/", ".")


def simple_name(qualified_name: str) -> str:
    """Return the last segment of a dotted or slash path, dropping outer classes."""
    tail = normalize_class_name(qualified_name).rsplit(".", maxsplit=1)[-1]
    return tail.rsplit("$", maxsplit=1)[-1]


_PLATFORM_CLASS_NAMES: tuple[str, ...] = (
    "boolean",
    "byte",
    "char",
    "double",
    "float",
    "int",
    "long",
    "short",
    "void",
    "java.lang.Boolean",
    "java.lang.Byte",
    "java.lang.Character",
    "java.lang.Double",
    "java.lang.Float",
    "java.lang.Integer",
    "java.lang.Iterable",
    "java.lang.Long",
    OBJECT_CLASS,
    "java.lang.Short",
    "java.lang.String",
    "java.lang.Void",
    "java.math.BigDecimal",
    "java.math.BigInteger",
    "java.time.Instant",
    "java.time.LocalDate",
    "java.time.LocalDateTime",
    "java.time.OffsetDateTime",
    "java.time.ZonedDateTime",
    "java.util.ArrayList",
    "java.util.Collection",
    "java.util.Date",
    "java.util.HashMap",
    "java.util.HashSet",
    "java.util.LinkedHashMap",
    "java.util.LinkedHashSet",
    "java.util.LinkedList",
    "java.util.List",
    "java.util.Map",
    "java.util.Optional",
    "java.util.Set",
    "java.util.TreeMap",
    "java.util.TreeSet",
    "java.util.UUID",
    "reactor.core.publisher.Flux",
    "reactor.core.publisher.Mono",
    "org.springframework.web.server.ServerWebExchange",
    "org.springframework.web.server.WebSession",
    "jakarta.servlet.http.HttpServletRequest",
    "jakarta.servlet.http.HttpServletResponse",
)


class ClassPool:
    """Lookup of class metadata by qualified name.

    The pool always knows the platform classes the resolver recognizes; classes
    from a metadata document are layered on top and may override them.
    """

    def __init__(self, classes: Iterable[ClassInfo] = ()) -> None:
        self._platform: dict[str, ClassInfo] = {
            name: ClassInfo(name=name) for name in _PLATFORM_CLASS_NAMES
        }
        self._declared: dict[str, ClassInfo] = {}
        for class_info in classes:
            self.register(class_info)

    def register(self, class_info: ClassInfo) -> None:
        """Add or replace a declared class."""
        self._declared[normalize_class_name(class_info.name)] = class_info

    def get(self, path: str) -> Optional[ClassInfo]:
        """Return metadata for a dotted or slash path, or ``None`` when unknown."""
        name = normalize_class_name(path)
        declared = self._declared.get(name)
        if declared is not None:
            return declared
        return self._platform.get(name)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not None

    def declared_classes(self) -> Iterator[ClassInfo]:
        """Iterate declared (non-platform) classes in registration order."""
        return iter(self._declared.values())
