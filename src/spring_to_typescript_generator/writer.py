"""Filesystem writers for generated TypeScript sources."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .imports import OutputFile


class WriteError(RuntimeError):
    """Raised when output files cannot be written."""


def create_output_layout(output_dir: Path) -> Path:
    """Create the output directory.

    Args:
        output_dir (Path): Root output directory to create.

    Returns:
        Path: The created directory.
    """
    if output_dir.exists():
        raise WriteError(f"Output directory already exists: {output_dir}")

    try:
        output_dir.mkdir(parents=True, exist_ok=False)
    except OSError as exc:
        raise WriteError(f"Failed to create output directory {output_dir}: {exc}") from exc
    return output_dir


def write_rendered_files(*, output_dir: Path, rendered: Iterable[tuple[str, str]]) -> list[str]:
    """Write already rendered ``(relative path, source)`` pairs below ``output_dir``.

    Args:
        output_dir (Path): Existing root output directory.
        rendered (Iterable[tuple[str, str]]): Relative slash paths and file contents.

    Returns:
        list[str]: Relative paths written, in order.
    """
    written: list[str] = []
    for relative_path, source in rendered:
        path = output_dir.joinpath(*relative_path.split("/"))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(f"Failed to create directory {path.parent}: {exc}") from exc
        _write_file(path, source)
        written.append(relative_path)
    return written


def render_files(files: Iterable[OutputFile]) -> list[tuple[str, str]]:
    """Render output files in memory, rejecting two files at the same path."""
    rendered: list[tuple[str, str]] = []
    seen: set[str] = set()
    for output in files:
        if output.path in seen:
            raise WriteError(f"Two generated files share the path {output.path}")
        seen.add(output.path)
        rendered.append((output.path, output.render()))
    return rendered


def _write_file(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Failed to write file {path}: {exc}") from exc
