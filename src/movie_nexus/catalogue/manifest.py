from __future__ import annotations

from pathlib import Path

from pydantic import TypeAdapter

from movie_nexus.models.catalogue import CatalogueItem
from movie_nexus.util.assertx import ValidationError
from movie_nexus.util.io import write_bytes

_CATALOGUE_ADAPTER: TypeAdapter[tuple[CatalogueItem, ...]] = TypeAdapter(
    tuple[CatalogueItem, ...]
)


def serialize_manifest(catalogue: tuple[CatalogueItem, ...], indent: int | None = None) -> bytes:
    """Render the catalogue as the JSON document served at ``/``."""
    try:
        return _CATALOGUE_ADAPTER.dump_json(catalogue, by_alias=True, indent=indent)
    except ValueError as exc:
        raise ValidationError(f"Catalogue cannot be serialized: {exc}") from exc


def write_manifest(path: Path, manifest: bytes) -> None:
    write_bytes(path, manifest)
