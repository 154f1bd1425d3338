"""TypeScript and zod source rendering for the resolved type model."""

from __future__ import annotations

from typing import Optional

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
    NamedType,
    ObjectType,
    PrimitiveType,
    Regex,
    Type,
    UnsupportedTypeError,
    Validation,
)
from .naming import property_key, string_literal

MODEL_SUFFIX = "Model"

_TS_PRIMITIVES: dict[PrimitiveType, str] = {
    PrimitiveType.STRING: "string",
    PrimitiveType.INT: "number",
    PrimitiveType.DOUBLE: "number",
    PrimitiveType.BOOLEAN: "boolean",
    PrimitiveType.VOID: "void",
}

_ZOD_PRIMITIVES: dict[PrimitiveType, str] = {
    PrimitiveType.STRING: "z.string()",
    PrimitiveType.INT: "z.number().int()",
    PrimitiveType.DOUBLE: "z.number()",
    PrimitiveType.BOOLEAN: "z.boolean()",
    PrimitiveType.VOID: "z.void()",
}


def print_type(t: Type, *, use_string_as_date: bool = False) -> str:
    """Render a type as a TypeScript type expression.

    Args:
        t (Type): Type to render.
        use_string_as_date (bool): Render dates as ``string`` instead of ``Date``.

    Returns:
        str: TypeScript type expression.
    """
    if isinstance(t, (ObjectType, EnumType)):
        return t.name
    if isinstance(t, ArrayType):
        return print_type(t.element, use_string_as_date=use_string_as_date) + "[]"
    if isinstance(t, MapType):
        key = print_type(t.key, use_string_as_date=use_string_as_date)
        value = print_type(t.value, use_string_as_date=use_string_as_date)
        return f"Record<{key}, {value}>"
    if isinstance(t, PrimitiveType):
        if t is PrimitiveType.DATE:
            return "string" if use_string_as_date else "Date"
        return _TS_PRIMITIVES[t]
    raise UnsupportedTypeError(f"Unsupported type: {t!r}")


def print_zod_type(
    t: Type,
    *,
    use_string_as_date: bool = False,
    enclosing: Optional[str] = None,
) -> str:
    """Render a type as a zod schema expression.

    Named types refer to their ``<Name>Model`` export; a reference to the
    enclosing model is wrapped in ``z.lazy``.
    """
    if isinstance(t, (ObjectType, EnumType)):
        model = t.name + MODEL_SUFFIX
        if t.name == enclosing:
            return f"z.lazy((): z.ZodTypeAny => {model})"
        return model
    if isinstance(t, ArrayType):
        element = print_zod_type(
            t.element, use_string_as_date=use_string_as_date, enclosing=enclosing
        )
        return f"{element}.array()"
    if isinstance(t, MapType):
        key = print_zod_type(t.key, use_string_as_date=use_string_as_date, enclosing=enclosing)
        value = print_zod_type(t.value, use_string_as_date=use_string_as_date, enclosing=enclosing)
        return f"z.record({key}, {value})"
    if isinstance(t, PrimitiveType):
        if t is PrimitiveType.DATE:
            return "z.string()" if use_string_as_date else "z.coerce.date()"
        return _ZOD_PRIMITIVES[t]
    raise UnsupportedTypeError(f"Unsupported type: {t!r}")


def print_validation(validation: Validation) -> str:
    """Render a validation rule as a chained zod call."""
    if isinstance(validation, MinValue):
        return f".min({validation.value}, {_message_option(validation.message)})"
    if isinstance(validation, MaxValue):
        return f".max({validation.value}, {_message_option(validation.message)})"
    if isinstance(validation, MinLength):
        return f".min({validation.length}, {_message_option(validation.message)})"
    if isinstance(validation, MaxLength):
        return f".max({validation.length}, {_message_option(validation.message)})"
    if isinstance(validation, Regex):
        return f".regex({validation.pattern}, {_message_option(validation.message)})"
    if isinstance(validation, Email):
        return f".email({_message_option(validation.message)})"
    raise UnsupportedTypeError(f"Validation {validation!r} is not supported by the zod writer")


def render_interface(obj: ObjectType, *, use_string_as_date: bool = False) -> str:
    """Render an object type as a default-exported interface."""
    lines = [f"export default interface {obj.name} {{"]
    for member in obj.fields:
        optional = "" if member.required else "?"
        annotation = print_type(member.type, use_string_as_date=use_string_as_date)
        lines.append(f"  {property_key(member.name)}{optional}: {annotation};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_enum(enum: EnumType) -> str:
    """Render an enum type as a string enum with a default export."""
    lines = [f"enum {enum.name} {{"]
    lines.extend(f"  {value} = '{value}'," for value in enum.values)
    lines.append("}")
    lines.append(f"export default {enum.name};")
    return "\n".join(lines) + "\n"


def render_zod_object(obj: ObjectType, *, use_string_as_date: bool = False) -> str:
    """Render an object type as a zod schema plus its inferred default type."""
    lines = [f"export const {obj.name}{MODEL_SUFFIX} = z.object({{"]
    for member in obj.fields:
        lines.append(
            f"  {property_key(member.name)}: "
            f"{_zod_field(member, enclosing=obj.name, use_string_as_date=use_string_as_date)},"
        )
    lines.append("});")
    lines.append("")
    lines.extend(_inferred_default(obj.name))
    return "\n".join(lines) + "\n"


def render_zod_enum(enum: EnumType) -> str:
    """Render an enum type as a zod enum plus its inferred default type."""
    lines = [f"export const {enum.name}{MODEL_SUFFIX} = z.enum(["]
    lines.extend(f"  '{value}'," for value in enum.values)
    lines.append("]);")
    lines.append("")
    lines.extend(_inferred_default(enum.name))
    return "\n".join(lines) + "\n"


def render_named_type(named: NamedType, *, zod: bool, use_string_as_date: bool = False) -> str:
    """Render a named type in either the plain TypeScript or the zod flavour."""
    if isinstance(named, ObjectType):
        if zod:
            return render_zod_object(named, use_string_as_date=use_string_as_date)
        return render_interface(named, use_string_as_date=use_string_as_date)
    if isinstance(named, EnumType):
        return render_zod_enum(named) if zod else render_enum(named)
    raise UnsupportedTypeError(f"Unsupported named type: {named!r}")


def _zod_field(member: Field, *, enclosing: str, use_string_as_date: bool) -> str:
    expression = print_zod_type(
        member.type, use_string_as_date=use_string_as_date, enclosing=enclosing
    )
    expression += "".join(print_validation(validation) for validation in member.validations)
    if not member.required:
        expression += ".optional().nullable()"
    return expression


def _inferred_default(name: str) -> list[str]:
    return [
        f"type {name} = z.infer<typeof {name}{MODEL_SUFFIX}>;",
        f"export default {name};",
    ]


def _message_option(message: str) -> str:
    return "{ message: " + string_literal(message) + " }"
