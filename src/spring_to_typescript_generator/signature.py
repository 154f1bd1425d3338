"""Recursive-descent parser for compact generic type descriptors.

A descriptor is a run of tokens:

* a single-letter primitive code (``J`` for long, ``Z`` for boolean, ...);
* ``[`` followed by exactly one token, for an array of that token;
* ``L`` markers, a slash or dotted class path, optional ``<`` generic
  arguments ``>`` and a terminating ``;``.

The parser never mutates its input. Every step takes a ``_Cursor`` and returns
the parsed node together with a new cursor positioned after it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional, Union

from .metadata import OBJECT_CLASS, ClassInfo, ClassPool, normalize_class_name

_PRIMITIVE_CODES: dict[str, str] = {
    "B": "byte",
    "C": "char",
    "D": "double",
    "F": "float",
    "I": "int",
    "J": "long",
    "S": "short",
    "V": "void",
    "Z": "boolean",
}

_CLOSE = ">;"


class SignatureError(RuntimeError):
    """Raised when a descriptor is structurally malformed."""


@dataclass(frozen=True)
class PrimitiveRef:
    """A primitive descriptor code, e.g. ``long`` for ``J``."""

    kind: str


@dataclass(frozen=True)
class ClassRef:
    """A possibly-parameterized class reference.

    ``class_info`` is ``None`` when the class could not be found in the pool.
    """

    qualified_name: str
    class_info: Optional[ClassInfo]
    generic_args: tuple[Intermediate, ...] = field(default=())


@dataclass(frozen=True)
class ArrayOf:
    """An array of ``element``."""

    element: Intermediate


type Intermediate = Union[PrimitiveRef, ClassRef, ArrayOf]


@dataclass(frozen=True)
class _Cursor:
    source: str
    position: int = 0

    @property
    def remaining(self) -> str:
        return self.source[self.position :]

    def at_end(self) -> bool:
        return not self.remaining.strip()

    def startswith(self, prefix: str) -> bool:
        return self.source.startswith(prefix, self.position)

    def find(self, needle: str) -> int:
        return self.source.find(needle, self.position)

    def advance(self, count: int = 1) -> _Cursor:
        return _Cursor(self.source, self.position + count)

    def move_to(self, position: int) -> _Cursor:
        return _Cursor(self.source, position)


class SignatureParser:
    """Parse descriptors into intermediate nodes, looking classes up in a pool."""

    def __init__(
        self,
        class_pool: ClassPool,
        warn: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._class_pool = class_pool
        self._warn = warn

    def parse(self, signature: str) -> list[Intermediate]:
        """Parse a whole descriptor into its sequence of top-level nodes.

        Args:
            signature (str): Descriptor text, e.g. ``Ljava/util/List<J>;``.

        Returns:
            list[Intermediate]: One node per top-level token.

        Raises:
            SignatureError: If the descriptor is malformed.
        """
        nodes, _ = self._parse_sequence(_Cursor(signature), level=0)
        return nodes

    def parse_single(self, signature: str) -> Intermediate:
        """Parse a descriptor that must contain exactly one top-level type."""
        nodes = self.parse(signature)
        if len(nodes) != 1:
            raise SignatureError(
                f"Expected exactly one type in descriptor {signature!r}, found {len(nodes)}"
            )
        return nodes[0]

    def _parse_sequence(self, cursor: _Cursor, *, level: int) -> tuple[list[Intermediate], _Cursor]:
        nodes: list[Intermediate] = []
        while not cursor.at_end() and not cursor.startswith(_CLOSE):
            node, cursor = self._parse_token(cursor, level=level)
            nodes.append(node)

        if cursor.startswith(_CLOSE):
            if level == 0:
                raise SignatureError(
                    f"Misaligned '>' at position {cursor.position} in {cursor.source!r}"
                )
            return nodes, cursor.advance(len(_CLOSE))

        if level > 0:
            raise SignatureError(f"Unterminated generic argument list in {cursor.source!r}")
        return nodes, cursor

    def _parse_token(self, cursor: _Cursor, *, level: int) -> tuple[Intermediate, _Cursor]:
        head = cursor.remaining[:1]
        primitive = _PRIMITIVE_CODES.get(head)
        if primitive is not None:
            return PrimitiveRef(primitive), cursor.advance()

        if head == "[":
            element, cursor = self._parse_token(cursor.advance(), level=level)
            return ArrayOf(element), cursor

        if head == "*":
            return self._class_ref(OBJECT_CLASS), cursor.advance()

        if head in ("+", "-"):
            return self._parse_token(cursor.advance(), level=level)

        return self._parse_class(cursor, level=level)

    def _parse_class(self, cursor: _Cursor, *, level: int) -> tuple[ClassRef, _Cursor]:
        while cursor.startswith("L"):
            cursor = cursor.advance()

        next_break = cursor.find(";")
        if next_break == -1:
            raise SignatureError(f"Found no terminating ';' in {cursor.remaining!r}")

        next_subtype = cursor.find("<")
        if next_subtype == -1 or next_break < next_subtype:
            path = cursor.source[cursor.position : next_break]
            return self._class_ref(path), cursor.move_to(next_break + 1)

        path = cursor.source[cursor.position : next_subtype]
        args, cursor = self._parse_sequence(cursor.move_to(next_subtype + 1), level=level + 1)
        return self._class_ref(path, tuple(args)), cursor

    def _class_ref(self, path: str, generic_args: tuple[Intermediate, ...] = ()) -> ClassRef:
        name = normalize_class_name(path)
        class_info = self._class_pool.get(name)
        if class_info is None:
            if self._warn is not None:
                self._warn(f"Could not load class {name}")
        return ClassRef(qualified_name=name, class_info=class_info, generic_args=generic_args)


def split_method_signature(signature: str) -> tuple[str, str]:
    """Split a method descriptor into its argument list and return type.

    A leading formal type-parameter section such as ``<T:Ljava/lang/Object;>``
    is discarded.

    Args:
        signature (str): Method descriptor, e.g. ``(JLjava/lang/String;)V``.

    Returns:
        tuple[str, str]: The argument descriptors and the return descriptor.
    """
    open_index = signature.find("(")
    close_index = signature.find(")", open_index + 1)
    if open_index == -1 or close_index == -1:
        raise SignatureError(f"Not a method descriptor: {signature!r}")
    return signature[open_index + 1 : close_index], signature[close_index + 1 :]
