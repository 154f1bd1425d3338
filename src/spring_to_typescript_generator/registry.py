"""Run-wide registry of named types keyed by simple name."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Optional, TypeVar

from .model_types import NamedType

_N = TypeVar("_N", bound=NamedType)


class NamedTypeRegistry:
    """Deduplicate object and enum types by simple name.

    Entries are only ever added. ``get_or_create`` registers a new, still empty
    type before the caller populates it, so a type that refers back to itself
    while being populated finds the in-progress entry instead of recursing.
    """

    def __init__(self) -> None:
        self._types: dict[str, NamedType] = {}

    def get_or_create(self, name: str, factory: Callable[[str], _N]) -> tuple[NamedType, bool]:
        """Return the entry for ``name``, creating it with ``factory`` if absent.

        Args:
            name (str): Simple type name.
            factory (Callable[[str], NamedType]): Builds an empty named type.

        Returns:
            tuple[NamedType, bool]: The registered entry and whether it was created now.
        """
        existing = self._types.get(name)
        if existing is not None:
            return existing, False
        created = factory(name)
        self._types[name] = created
        return created, True

    def get(self, name: str) -> Optional[NamedType]:
        """Return the entry for ``name`` if registered."""
        return self._types.get(name)

    def __getitem__(self, name: str) -> NamedType:
        return self._types[name]

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def items(self) -> Iterator[tuple[str, NamedType]]:
        """Iterate ``(name, type)`` pairs in registration order."""
        return iter(list(self._types.items()))

    def names(self) -> list[str]:
        """Return registered names in registration order."""
        return list(self._types)
