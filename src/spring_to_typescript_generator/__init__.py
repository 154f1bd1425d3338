"""Spring controller metadata to TypeScript generator package."""

from __future__ import annotations

from .cli import main
from .generator import generate_files, run_generation
from .model_types import GenerationOptions, GenerationResult

__all__ = ["GenerationOptions", "GenerationResult", "generate_files", "main", "run_generation"]
