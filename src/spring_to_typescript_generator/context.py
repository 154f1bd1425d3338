"""Shared state for one generation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .metadata import ClassPool
from .model_types import GenerationOptions
from .registry import NamedTypeRegistry

if TYPE_CHECKING:
    from .imports import OutputFile


@dataclass
class ResolutionContext:
    """Registry, file registry and diagnostics owned by a single run.

    Both registries only grow. The named-type registry is filled during
    resolution; the file registry is filled by type writers before any
    import is recorded.
    """

    class_pool: ClassPool
    options: GenerationOptions = field(default_factory=GenerationOptions)
    named_types: NamedTypeRegistry = field(default_factory=NamedTypeRegistry)
    files: dict[str, OutputFile] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        """Record a recoverable diagnostic once."""
        if message not in self.warnings:
            self.warnings.append(message)
