"""Naming helpers for generated TypeScript identifiers, files and URLs."""

from __future__ import annotations

import json
import re

from .model_types import Endpoint

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][0-9A-Za-z_$]*$")
_IDENTIFIER_SANITIZE_RE = re.compile(r"[^0-9a-zA-Z_$]+")
_UPPER_RE = re.compile(r"(?<!^)(?=[A-Z])")

_RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "arguments",
        "await",
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "enum",
        "eval",
        "export",
        "extends",
        "function",
        "if",
        "implements",
        "import",
        "in",
        "instanceof",
        "interface",
        "let",
        "new",
        "package",
        "private",
        "protected",
        "public",
        "return",
        "static",
        "super",
        "switch",
        "this",
        "throw",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
        "yield",
    }
)


def sanitize_identifier(raw: str) -> str:
    """Convert arbitrary text into a usable TypeScript variable name."""
    text = _IDENTIFIER_SANITIZE_RE.sub("_", raw).strip("_") or "value"
    if text[0].isdigit():
        text = f"_{text}"
    if text in _RESERVED_WORDS:
        text = f"{text}_"
    return text


def property_key(name: str) -> str:
    """Return an object-literal key, quoting names that are not identifiers."""
    if _IDENTIFIER_RE.match(name):
        return name
    return json.dumps(name)


def string_literal(value: str) -> str:
    """Return a double-quoted TypeScript string literal."""
    return json.dumps(value)


def kebab_case(name: str) -> str:
    """Convert ``PascalCase`` into ``pascal-case``."""
    return _UPPER_RE.sub("-", name).lower()


def service_class_name(controller_name: str) -> str:
    """Name of the client service generated for a controller class."""
    return controller_name.replace("Controller", "Service")


def service_file_name(controller_name: str) -> str:
    """File stem of the client service generated for a controller class."""
    return kebab_case(controller_name.replace("Controller", ".service"))


def query_key(endpoint: Endpoint) -> str:
    """Cache key shared by every query generated for ``endpoint``."""
    return f"{endpoint.class_name}_{endpoint.method_name}"


def url_expression(endpoint: Endpoint) -> str:
    """Render the endpoint URL, interpolating path variables when present."""
    url = endpoint.url_template
    if not endpoint.url_args:
        return f"'{url}'"
    for url_arg in endpoint.url_args:
        url = url.replace("{" + url_arg.name + "}", "${" + sanitize_identifier(url_arg.name) + "}")
    return f"`{url}`"
