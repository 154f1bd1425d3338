"""Resolution of descriptors and class metadata into the type model."""

from __future__ import annotations

from typing import Optional, Union

from .context import ResolutionContext
from .metadata import (
    OBJECT_CLASS,
    ClassInfo,
    FieldInfo,
    MethodInfo,
    ParameterInfo,
    normalize_class_name,
    simple_name,
)
from .model_types import (
    ArrayType,
    Email,
    EnumType,
    Field,
    MapType,
    MaxLength,
    MaxValue,
    MinLength,
    MinValue,
    ObjectType,
    PrimitiveType,
    Regex,
    Type,
    UnsupportedTypeError,
    Validation,
)
from .signature import (
    ArrayOf,
    ClassRef,
    Intermediate,
    PrimitiveRef,
    SignatureParser,
    split_method_signature,
)

OPTIONAL_WRAPPERS: frozenset[str] = frozenset({"java.util.Optional"})
NESTED_WRAPPERS: frozenset[str] = OPTIONAL_WRAPPERS | {"reactor.core.publisher.Mono"}
COLLECTION_TYPES: frozenset[str] = frozenset(
    {
        "java.lang.Iterable",
        "java.util.ArrayList",
        "java.util.Collection",
        "java.util.HashSet",
        "java.util.LinkedHashSet",
        "java.util.LinkedList",
        "java.util.List",
        "java.util.Set",
        "java.util.TreeSet",
        "reactor.core.publisher.Flux",
    }
)
MAP_TYPES: frozenset[str] = frozenset(
    {"java.util.HashMap", "java.util.LinkedHashMap", "java.util.Map", "java.util.TreeMap"}
)

_PRIMITIVE_CLASSES: dict[str, PrimitiveType] = {
    "java.lang.String": PrimitiveType.STRING,
    "java.lang.Character": PrimitiveType.STRING,
    "java.util.UUID": PrimitiveType.STRING,
    "char": PrimitiveType.STRING,
    "boolean": PrimitiveType.BOOLEAN,
    "java.lang.Boolean": PrimitiveType.BOOLEAN,
    "void": PrimitiveType.VOID,
    "java.lang.Void": PrimitiveType.VOID,
}
for _name in (
    "int",
    "long",
    "short",
    "byte",
    "java.lang.Integer",
    "java.lang.Long",
    "java.lang.Short",
    "java.lang.Byte",
    "java.math.BigInteger",
):
    _PRIMITIVE_CLASSES[_name] = PrimitiveType.INT
for _name in ("float", "double", "java.lang.Float", "java.lang.Double", "java.math.BigDecimal"):
    _PRIMITIVE_CLASSES[_name] = PrimitiveType.DOUBLE
for _name in (
    "java.util.Date",
    "java.time.Instant",
    "java.time.LocalDate",
    "java.time.LocalDateTime",
    "java.time.OffsetDateTime",
    "java.time.ZonedDateTime",
):
    _PRIMITIVE_CLASSES[_name] = PrimitiveType.DATE

_NOT_BLANK_PATTERN = r"/^(?!\s*$).+/"


class TypeResolver:
    """Turn descriptors, fields and methods into ``Type`` values.

    Named types go through the context's registry, so resolving the same
    class twice yields the same instance and self-references terminate.
    """

    def __init__(self, context: ResolutionContext) -> None:
        self._context = context
        self._parser = SignatureParser(context.class_pool, warn=context.warn)
        # Objects whose own fields are still being populated, by id.
        self._populating: set[int] = set()
        # (child, parent) inheritance appends waiting on an incomplete parent.
        self._deferred: list[tuple[ObjectType, ObjectType]] = []

    @property
    def parser(self) -> SignatureParser:
        """Signature parser bound to this run's class pool."""
        return self._parser

    def resolve(self, node: Intermediate) -> Type:
        """Resolve one parsed intermediate node."""
        if isinstance(node, ArrayOf):
            return ArrayType(self.resolve(node.element))
        if isinstance(node, PrimitiveRef):
            return self._resolve_class(node.kind, None)
        if isinstance(node, ClassRef):
            return self._resolve_class_ref(node)
        raise UnsupportedTypeError(f"Unsupported intermediate node {node!r}")

    def resolve_signature(self, signature: str) -> Type:
        """Parse and resolve a descriptor holding exactly one type."""
        return self.resolve(self._parser.parse_single(signature))

    def resolve_class_name(self, name: str) -> Type:
        """Resolve a raw, non-generic declared type such as ``long`` or ``a.B[]``."""
        stripped = name.strip()
        if stripped.endswith("[]"):
            return ArrayType(self.resolve_class_name(stripped[:-2]))
        qualified_name = normalize_class_name(stripped)
        class_info = self._context.class_pool.get(qualified_name)
        if class_info is None and qualified_name not in _PRIMITIVE_CLASSES:
            self._context.warn(f"Could not load class {qualified_name}")
        return self._resolve_class_ref(ClassRef(qualified_name, class_info))

    def resolve_field(self, field_info: FieldInfo) -> Type:
        """Resolve the declared type of a field."""
        resolved, _ = self._resolve_declared(field_info.signature, field_info.type_name)
        return resolved

    def resolve_method(self, method: MethodInfo) -> Type:
        """Resolve the declared return type of a method."""
        if method.signature is not None:
            _, return_descriptor = split_method_signature(method.signature)
            return self.resolve_signature(return_descriptor)
        return self.resolve_class_name(method.return_type)

    def resolve_field_info(self, field_info: FieldInfo) -> Field:
        """Build a ``Field`` with requiredness and validations from field metadata."""
        resolved, optional_wrapper = self._resolve_declared(
            field_info.signature, field_info.type_name
        )
        required = not (optional_wrapper or field_info.has_annotation("Nullable"))
        return Field(
            name=field_info.name,
            type=resolved,
            required=required,
            validations=tuple(validations_for(field_info)),
        )

    def _resolve_declared(self, signature: Optional[str], type_name: str) -> tuple[Type, bool]:
        if signature is not None:
            node = self._parser.parse_single(signature)
            optional_wrapper = (
                isinstance(node, ClassRef) and node.qualified_name in OPTIONAL_WRAPPERS
            )
            return self.resolve(node), optional_wrapper
        optional_wrapper = normalize_class_name(type_name) in OPTIONAL_WRAPPERS
        return self.resolve_class_name(type_name), optional_wrapper

    def _resolve_class_ref(self, ref: ClassRef) -> Type:
        name = ref.qualified_name
        if name in NESTED_WRAPPERS:
            return self._resolve_generic_arg(ref, 0)
        if name in COLLECTION_TYPES:
            return ArrayType(self._resolve_generic_arg(ref, 0))
        if name in MAP_TYPES:
            return MapType(self._resolve_generic_arg(ref, 0), self._resolve_generic_arg(ref, 1))
        return self._resolve_class(name, ref.class_info)

    def _resolve_generic_arg(self, ref: ClassRef, index: int) -> Type:
        if index < len(ref.generic_args):
            return self.resolve(ref.generic_args[index])
        # Raw use of a generic container: the argument erases to the root type.
        return self._resolve_class(OBJECT_CLASS, self._context.class_pool.get(OBJECT_CLASS))

    def _resolve_class(self, qualified_name: str, class_info: Optional[ClassInfo]) -> Type:
        primitive = _PRIMITIVE_CLASSES.get(qualified_name)
        if primitive is not None:
            return primitive
        return self._resolve_named(qualified_name, class_info)

    def _resolve_named(self, qualified_name: str, class_info: Optional[ClassInfo]) -> Type:
        registry = self._context.named_types
        name = simple_name(qualified_name)
        if class_info is not None and class_info.is_enum:
            named, created = registry.get_or_create(name, EnumType)
        else:
            named, created = registry.get_or_create(name, ObjectType)
        if not created or class_info is None:
            return named

        if isinstance(named, EnumType):
            named.values.extend(class_info.constants)
            return named

        outermost = not self._populating
        self._populating.add(id(named))
        try:
            self._populate_object(named, class_info)
        finally:
            self._populating.discard(id(named))
            if outermost:
                deferred, self._deferred = self._deferred, []
        if outermost:
            _append_inherited(deferred)
        return named

    def _populate_object(self, named: ObjectType, class_info: ClassInfo) -> None:
        for field_info in class_info.fields:
            if field_info.static or field_info.has_annotation("JsonIgnore"):
                continue
            named.fields.append(self.resolve_field_info(field_info))

        superclass = class_info.superclass
        if not superclass or normalize_class_name(superclass) == OBJECT_CLASS:
            return
        parent = self.resolve_class_name(superclass)
        if not isinstance(parent, ObjectType):
            self._context.warn(
                f"Superclass {superclass} of {class_info.name} is not an object type"
            )
            return
        if self._is_incomplete(parent):
            self._deferred.append((named, parent))
        else:
            named.fields.extend(parent.fields)

    def _is_incomplete(self, named: ObjectType) -> bool:
        return id(named) in self._populating or any(
            child is named for child, _ in self._deferred
        )


def _append_inherited(deferred: list[tuple[ObjectType, ObjectType]]) -> None:
    """Append parent fields to children, finishing each parent's own chain first."""
    pending = list(deferred)
    while pending:
        waiting = {id(child) for child, _ in pending}
        ready = [pair for pair in pending if id(pair[1]) not in waiting]
        if not ready:
            raise UnsupportedTypeError(
                "Cyclic superclass chain through "
                + ", ".join(sorted(child.name for child, _ in pending))
            )
        for child, parent in ready:
            child.fields.extend(parent.fields)
        pending = [pair for pair in pending if pair not in ready]


def validations_for(annotated: Union[FieldInfo, ParameterInfo]) -> list[Validation]:
    """Translate constraint annotations into validation rules, in declaration order."""
    validations: list[Validation] = []
    for annotation in annotated.annotations:
        if annotation.name == "Min":
            value = int(annotation.get("value", 0))
            message = annotation.get("message", f"must be greater than or equal to {value}")
            validations.append(MinValue(value, message))
        elif annotation.name == "Max":
            value = int(annotation.get("value", 0))
            message = annotation.get("message", f"must be less than or equal to {value}")
            validations.append(MaxValue(value, message))
        elif annotation.name == "Size":
            minimum = annotation.get("min")
            maximum = annotation.get("max")
            message = annotation.get(
                "message",
                f"size must be between {minimum if minimum is not None else 0} "
                f"and {maximum if maximum is not None else 2147483647}",
            )
            if minimum is not None:
                validations.append(MinLength(int(minimum), message))
            if maximum is not None:
                validations.append(MaxLength(int(maximum), message))
        elif annotation.name == "NotBlank":
            message = annotation.get("message", "must not be blank")
            validations.append(Regex(_NOT_BLANK_PATTERN, message))
        elif annotation.name == "Pattern":
            regexp = str(annotation.get("regexp", ""))
            message = annotation.get("message", f'must match "{regexp}"')
            validations.append(Regex(f"/{regexp}/", message))
        elif annotation.name == "Email":
            message = annotation.get("message", "must be a well-formed email address")
            validations.append(Email(message))
    return validations


def mark_needs_validation(root: Type) -> None:
    """Flag every object and enum reachable from ``root`` as needing validation."""
    visited: set[int] = set()
    pending: list[Type] = [root]
    while pending:
        current = pending.pop()
        if isinstance(current, PrimitiveType):
            continue
        if isinstance(current, ArrayType):
            pending.append(current.element)
        elif isinstance(current, MapType):
            pending.extend((current.key, current.value))
        elif isinstance(current, (ObjectType, EnumType)):
            if id(current) in visited:
                continue
            visited.add(id(current))
            current.needs_validation = True
            if isinstance(current, ObjectType):
                pending.extend(field.type for field in current.fields)
        else:
            raise UnsupportedTypeError(f"Unsupported type {current!r}")
