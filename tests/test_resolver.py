"""Tests for type resolution, the named type registry and validation marking."""

from __future__ import annotations

from spring_to_typescript_generator.metadata import FieldInfo
from spring_to_typescript_generator.model_types import (
    ArrayType,
    Email,
    EnumType,
    MapType,
    MaxLength,
    MinLength,
    MinValue,
    ObjectType,
    PrimitiveType,
    Regex,
)
from spring_to_typescript_generator.registry import NamedTypeRegistry
from spring_to_typescript_generator.resolver import (
    TypeResolver,
    mark_needs_validation,
    validations_for,
)
from .fixture_helpers import context_for_classes, context_for_fixture

_USER_CLASSES = [
    {
        "name": "com.example.User",
        "fields": [
            {"name": "id", "type": "java.lang.Long"},
            {"name": "name", "type": "java.lang.String"},
        ],
    },
    {
        "name": "com.example.Admin",
        "superclass": "com.example.User",
        "fields": [{"name": "role", "type": "com.example.Role"}],
    },
    {"name": "com.example.Role", "kind": "enum", "constants": ["OWNER", "EDITOR"]},
]


def test_registry_registers_before_population() -> None:
    """``get_or_create`` returns the same entry on every later call."""
    registry = NamedTypeRegistry()
    first, created = registry.get_or_create("User", ObjectType)
    second, created_again = registry.get_or_create("User", ObjectType)
    assert created is True
    assert created_again is False
    assert first is second
    assert registry.names() == ["User"]
    assert "User" in registry
    assert len(registry) == 1


def test_optional_wrapper_is_erased() -> None:
    """``Optional<Integer>`` resolves to the integer primitive."""
    resolver = TypeResolver(context_for_classes([]))
    assert resolver.resolve_signature("Ljava/util/Optional<Ljava/lang/Integer;>;") is PrimitiveType.INT


def test_async_wrappers_resolve_to_value_or_array() -> None:
    """``Mono<T>`` erases to ``T``; ``Flux<T>`` becomes an array of ``T``."""
    resolver = TypeResolver(context_for_classes([]))
    assert resolver.resolve_signature("Lreactor/core/publisher/Mono<Ljava/lang/String;>;") is (
        PrimitiveType.STRING
    )
    assert resolver.resolve_signature("Lreactor/core/publisher/Flux<Ljava/lang/Double;>;") == (
        ArrayType(PrimitiveType.DOUBLE)
    )


def test_nested_collections_resolve_to_nested_arrays() -> None:
    """``List<List<String>>`` resolves to an array of string arrays."""
    resolver = TypeResolver(context_for_classes([]))
    resolved = resolver.resolve_signature(
        "Ljava/util/List<Ljava/util/List<Ljava/lang/String;>;>;"
    )
    assert resolved == ArrayType(ArrayType(PrimitiveType.STRING))


def test_list_of_optional_long_is_array_of_int() -> None:
    """Wrappers inside collections are erased too."""
    resolver = TypeResolver(context_for_classes([]))
    resolved = resolver.resolve_signature(
        "Ljava/util/List<Ljava/util/Optional<Ljava/lang/Long;>;>;"
    )
    assert resolved == ArrayType(PrimitiveType.INT)


def test_map_resolution_registers_value_type_once() -> None:
    """Resolving a map twice reuses the registered value type."""
    context = context_for_classes(_USER_CLASSES)
    resolver = TypeResolver(context)
    descriptor = "Ljava/util/Map<Ljava/lang/String;Lcom/example/User;>;"

    first = resolver.resolve_signature(descriptor)
    second = resolver.resolve_signature(descriptor)

    assert isinstance(first, MapType) and isinstance(second, MapType)
    assert first.key is PrimitiveType.STRING
    assert first.value is second.value
    assert context.named_types.names() == ["User"]


def test_self_referential_type_terminates() -> None:
    """A type whose fields refer back to itself resolves to one shared instance."""
    context = context_for_classes(
        [
            {
                "name": "com.example.Node",
                "fields": [
                    {"name": "parent", "type": "com.example.Node"},
                    {
                        "name": "children",
                        "type": "java.util.List",
                        "signature": "Ljava/util/List<Lcom/example/Node;>;",
                    },
                ],
            }
        ]
    )
    node = TypeResolver(context).resolve_class_name("com.example.Node")

    assert isinstance(node, ObjectType)
    parent, children = node.fields
    assert parent.type is node
    assert children.type == ArrayType(node)
    assert len(context.named_types) == 1


def test_superclass_fields_follow_own_fields() -> None:
    """``Admin extends User`` resolves to ``[role, id, name]``."""
    context = context_for_classes(_USER_CLASSES)
    admin = TypeResolver(context).resolve_class_name("com.example.Admin")

    assert isinstance(admin, ObjectType)
    assert [member.name for member in admin.fields] == ["role", "id", "name"]
    role = admin.fields[0].type
    assert isinstance(role, EnumType)
    assert role.values == ["OWNER", "EDITOR"]


def test_inherited_fields_do_not_depend_on_resolution_order() -> None:
    """A subclass reached while its superclass is being populated still gets every inherited field."""
    classes = [
        {
            "name": "com.example.BaseEntity",
            "fields": [
                {"name": "id", "type": "java.lang.Long"},
                {"name": "createdBy", "type": "com.example.User"},
            ],
        },
        {
            "name": "com.example.User",
            "superclass": "com.example.BaseEntity",
            "fields": [{"name": "name", "type": "java.lang.String"}],
        },
        {"name": "com.example.Order", "superclass": "com.example.BaseEntity"},
    ]
    for first, second in (("Order", "User"), ("User", "Order")):
        resolver = TypeResolver(context_for_classes(classes))
        resolved = {
            name: resolver.resolve_class_name(f"com.example.{name}") for name in (first, second)
        }
        user, order = resolved["User"], resolved["Order"]
        assert isinstance(user, ObjectType) and isinstance(order, ObjectType)
        assert [member.name for member in user.fields] == ["name", "id", "createdBy"]
        assert [member.name for member in order.fields] == ["id", "createdBy"]
        assert user.fields[2].type is user


def test_ignored_and_static_fields_are_skipped() -> None:
    """``JsonIgnore`` and static fields never reach the object shape."""
    context = context_for_fixture("users_api.yaml")
    user = TypeResolver(context).resolve_class_name("com.example.model.User")

    assert isinstance(user, ObjectType)
    names = [member.name for member in user.fields]
    assert names == ["name", "email", "roles", "manager", "id"]


def test_nullable_and_optional_fields_are_not_required() -> None:
    """Requiredness comes from ``Nullable`` or an outer optional wrapper."""
    context = context_for_fixture("users_api.yaml")
    user = TypeResolver(context).resolve_class_name("com.example.model.User")

    assert isinstance(user, ObjectType)
    required = {member.name: member.required for member in user.fields}
    assert required == {
        "name": True,
        "email": False,
        "roles": True,
        "manager": False,
        "id": True,
    }
    manager = next(member for member in user.fields if member.name == "manager")
    assert manager.type is user


def test_unresolved_class_degrades_to_empty_object() -> None:
    """An unknown class becomes an empty object and produces a warning."""
    context = context_for_classes([])
    resolved = TypeResolver(context).resolve_signature("Lcom/example/Missing;")

    assert isinstance(resolved, ObjectType)
    assert resolved.name == "Missing"
    assert resolved.fields == []
    assert context.warnings == ["Could not load class com.example.Missing"]


def test_raw_types_resolve_without_signature() -> None:
    """Declared types without a generic signature still resolve."""
    context = context_for_classes([])
    resolver = TypeResolver(context)

    assert resolver.resolve_class_name("long") is PrimitiveType.INT
    assert resolver.resolve_class_name("java.time.LocalDate") is PrimitiveType.DATE
    assert resolver.resolve_class_name("java.lang.String[]") == ArrayType(PrimitiveType.STRING)
    raw_list = resolver.resolve_class_name("java.util.List")
    assert isinstance(raw_list, ArrayType)
    assert isinstance(raw_list.element, ObjectType)
    assert raw_list.element.name == "Object"
    assert context.warnings == []


def test_resolution_is_deterministic() -> None:
    """Two independent runs register the same names in the same order."""
    first = context_for_fixture("users_api.yaml")
    second = context_for_fixture("users_api.yaml")
    TypeResolver(first).resolve_class_name("com.example.model.User")
    TypeResolver(second).resolve_class_name("com.example.model.User")
    assert first.named_types.names() == second.named_types.names() == ["User", "Role", "BaseEntity"]


def test_validations_use_declared_or_default_messages() -> None:
    """Constraint annotations become validation rules in declaration order."""
    field_info = FieldInfo.model_validate(
        {
            "name": "code",
            "type": "java.lang.String",
            "annotations": [
                {"name": "Size", "values": {"min": 2, "max": 8}},
                "NotBlank",
                {"name": "Pattern", "values": {"regexp": "[A-Z]+", "message": "upper case only"}},
                "Email",
                {"name": "Min", "values": {"value": 3}},
            ],
        }
    )
    assert validations_for(field_info) == [
        MinLength(2, "size must be between 2 and 8"),
        MaxLength(8, "size must be between 2 and 8"),
        Regex(r"/^(?!\s*$).+/", "must not be blank"),
        Regex("/[A-Z]+/", "upper case only"),
        Email("must be a well-formed email address"),
        MinValue(3, "must be greater than or equal to 3"),
    ]


def test_mark_needs_validation_floods_reachable_types() -> None:
    """Marking reaches objects and enums through fields, arrays and maps only."""
    context = context_for_classes(
        [
            {
                "name": "com.example.Order",
                "fields": [
                    {
                        "name": "lines",
                        "type": "java.util.List",
                        "signature": "Ljava/util/List<Lcom/example/Line;>;",
                    },
                    {"name": "self", "type": "com.example.Order"},
                ],
            },
            {
                "name": "com.example.Line",
                "fields": [
                    {
                        "name": "notes",
                        "type": "java.util.Map",
                        "signature": "Ljava/util/Map<Ljava/lang/String;Lcom/example/Status;>;",
                    }
                ],
            },
            {"name": "com.example.Status", "kind": "enum", "constants": ["OPEN"]},
            {"name": "com.example.Unrelated"},
        ]
    )
    resolver = TypeResolver(context)
    order = resolver.resolve_class_name("com.example.Order")
    unrelated = resolver.resolve_class_name("com.example.Unrelated")

    mark_needs_validation(ArrayType(order))
    mark_needs_validation(order)

    flagged = {name for name, named in context.named_types.items() if named.needs_validation}
    assert flagged == {"Order", "Line", "Status"}
    assert isinstance(unrelated, ObjectType)
    assert unrelated.needs_validation is False
