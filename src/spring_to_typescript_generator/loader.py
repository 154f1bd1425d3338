"""Metadata document loading and basic validation."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from .json_types import JSONValue
from .metadata import MetadataDocument


class MetadataLoadError(RuntimeError):
    """Raised when a source metadata document cannot be loaded."""


def load_metadata_document(path: Path) -> MetadataDocument:
    """Load and validate a class metadata document from YAML."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except OSError as exc:
        raise MetadataLoadError(f"Failed to read metadata file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise MetadataLoadError(f"Failed to parse YAML in {path}: {exc}") from exc

    return parse_metadata_document(payload, source=str(path))


def parse_metadata_document(payload: JSONValue, *, source: str = "<memory>") -> MetadataDocument:
    """Validate an already-deserialized metadata payload."""
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise MetadataLoadError(
            f"Metadata document must deserialize to a mapping, got {type(payload)!r}"
        )

    try:
        document = MetadataDocument.model_validate(payload)
    except ValidationError as exc:
        raise MetadataLoadError(f"Metadata validation failed for {source}: {exc}") from exc

    _ensure_unique_class_names(document, source=source)
    return document


def _ensure_unique_class_names(document: MetadataDocument, *, source: str) -> None:
    seen: set[str] = set()
    for class_info in document.classes:
        if class_info.name in seen:
            raise MetadataLoadError(f"Duplicate class {class_info.name!r} in {source}")
        seen.add(class_info.name)
